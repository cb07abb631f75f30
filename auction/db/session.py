"""Engine, session factory and unit of work."""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from auction.core.config import get_settings
from auction.db.base import Base

settings = get_settings()

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def unit_of_work(db: Optional[Session] = None) -> Iterator[Session]:
    """
    Scope one all-or-nothing transaction.

    Commits when the block exits normally and rolls back on any exception,
    which is re-raised. A session created here is also closed on exit; a
    session passed in stays open for the caller.

    Usage::

        with unit_of_work() as db:
            ApprovalService(db).confirm(request_id, responder_id)
    """
    owned = db is None
    if owned:
        db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        if owned:
            db.close()


def init_db(bind=None) -> None:
    """Create all tables."""
    import auction.db.models  # noqa: F401 - registers models on Base

    Base.metadata.create_all(bind=bind or engine)
