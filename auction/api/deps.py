from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from auction.core.approval import ApprovalService, TransitionTable
from auction.core.config import get_settings
from auction.db.repositories import PageRequest
from auction.db.session import SessionLocal
from auction.services.bidding import BiddingService


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_transition_table() -> TransitionTable:
    """Transition table from settings, validated once.

    Raises:
        InvalidArgumentError: If ``APPROVAL_TRANSITIONS`` names an unknown state
    """
    return TransitionTable.from_settings(get_settings())


def get_approval_service(
    db: Session = Depends(get_db),
    transitions: TransitionTable = Depends(get_transition_table),
) -> ApprovalService:
    """Approval service bound to the request's session and configured transitions."""
    return ApprovalService(db, transitions=transitions)


def get_bidding_service(db: Session = Depends(get_db)) -> BiddingService:
    return BiddingService(db)


def page_request(page: int, per_page: int) -> PageRequest:
    """Clamp ``per_page`` to the configured maximum."""
    settings = get_settings()
    return PageRequest(page=page, per_page=min(per_page, settings.max_page_size))
