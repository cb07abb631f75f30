"""Liveness and readiness probes.

``/health`` and ``/health/live`` never touch the database. ``/health/ready``
runs ``SELECT 1`` and answers 503 when that fails.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auction import __version__
from auction.api.deps import get_db

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.utcnow().isoformat()


def check_database(db: Session) -> Dict[str, Any]:
    """Round-trip a trivial query and report the dialect and latency."""
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
    return {
        "status": "healthy",
        "dialect": db.get_bind().dialect.name,
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }


@router.get("/health")
async def health_check():
    """Application is up; reports the running version."""
    return {"status": "healthy", "version": __version__, "timestamp": _now()}


@router.get("/health/live")
async def liveness_probe():
    return {"status": "alive", "timestamp": _now()}


@router.get("/health/ready")
async def readiness_probe(db: Session = Depends(get_db)):
    """Ready once the database answers; 503 with the failing checks otherwise."""
    checks = {"database": check_database(db)}
    failed = [name for name, result in checks.items() if result["status"] != "healthy"]

    body: Dict[str, Any] = {
        "status": "not_ready" if failed else "ready",
        "checks": checks,
        "timestamp": _now(),
    }
    if failed:
        body["failed"] = failed
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE if failed else status.HTTP_200_OK,
        content=body,
    )
