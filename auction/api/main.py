from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auction import __version__
from auction.core.config import get_settings
from auction.core.logger import configure_from_settings
from auction.api.routers import approvals, auctions, health, jewelry, users
from auction.api.middleware.request_log import RequestLogMiddleware
from auction.api.deps import get_transition_table
from auction.db.session import init_db

settings = get_settings()
configure_from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # a bad APPROVAL_TRANSITIONS value stops startup here
    get_transition_table()
    init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Online jewelry auction platform",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware
app.add_middleware(RequestLogMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(users.router, prefix="/api")
app.include_router(jewelry.router, prefix="/api")
app.include_router(approvals.router, prefix="/api")
app.include_router(auctions.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
