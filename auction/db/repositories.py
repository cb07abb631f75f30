"""Store classes over the SQLAlchemy session.

Each repository resolves entities by id and persists them; the approval
repository also carries the paged predicate queries used by the workflow.
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import and_
from sqlalchemy.orm import Query, Session

from auction.core.enums import RequestApprovalState, Role
from auction.db.models import (
    ApprovalHistory,
    Auction,
    AuctionHistory,
    Jewelry,
    RequestApproval,
    User,
)

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """1-based page index and page size."""
    page: int = 1
    per_page: int = 20

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.per_page < 1:
            raise ValueError("per_page must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        return (self.total + self.per_page - 1) // self.per_page if self.per_page > 0 else 0


def paginate(query: Query, page: PageRequest) -> Page:
    total = query.count()
    items = query.offset(page.offset).limit(page.limit).all()
    return Page(items=items, total=total, page=page.page, per_page=page.per_page)


class Repository(Generic[T]):
    """get/save by primary key for one model."""

    model: Type[T]

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: int) -> Optional[T]:
        return self.db.get(self.model, entity_id)

    def save(self, entity: T) -> T:
        self.db.add(entity)
        self.db.flush()
        return entity


class UserRepository(Repository[User]):
    model = User

    def list_by_role(self, role: Role, page: PageRequest) -> Page:
        query = self.db.query(User).filter(User.role == role.value).order_by(User.id.asc())
        return paginate(query, page)


class JewelryRepository(Repository[Jewelry]):
    model = Jewelry

    def list(self, page: PageRequest, *, state: Optional[str] = None) -> Page:
        query = self.db.query(Jewelry)
        if state:
            query = query.filter(Jewelry.state == state)
        return paginate(query.order_by(Jewelry.created_at.desc(), Jewelry.id.desc()), page)


class RequestApprovalRepository(Repository[RequestApproval]):
    model = RequestApproval

    def _newest_first(self, query: Query) -> Query:
        return query.order_by(RequestApproval.id.desc())

    def list_by_sender_role(self, role: Role, page: PageRequest) -> Page:
        """Requests whose sender has ``role``."""
        query = self.db.query(RequestApproval).join(
            User, RequestApproval.sender_id == User.id
        ).filter(User.role == role.value)
        return paginate(self._newest_first(query), page)

    def list_by_user(self, user_id: int, page: PageRequest) -> Page:
        """Requests sent by ``user_id``."""
        query = self.db.query(RequestApproval).filter(RequestApproval.sender_id == user_id)
        return paginate(self._newest_first(query), page)

    def history(self, request_id: int) -> List[ApprovalHistory]:
        return self.db.query(ApprovalHistory).filter(
            ApprovalHistory.request_id == request_id
        ).order_by(ApprovalHistory.id.asc()).all()

    def list_passed(self, page: PageRequest) -> Page:
        """Requests that are approved and confirmed."""
        query = self.db.query(RequestApproval).filter(
            and_(
                RequestApproval.state == RequestApprovalState.APPROVED.value,
                RequestApproval.confirm.is_(True),
            )
        )
        return paginate(self._newest_first(query), page)

    def has_passed(self, jewelry_id: int) -> bool:
        """Whether any request for ``jewelry_id`` is approved and confirmed."""
        return self.db.query(RequestApproval.id).filter(
            RequestApproval.jewelry_id == jewelry_id,
            RequestApproval.state == RequestApprovalState.APPROVED.value,
            RequestApproval.confirm.is_(True),
        ).first() is not None


class AuctionRepository(Repository[Auction]):
    model = Auction


class AuctionHistoryRepository(Repository[AuctionHistory]):
    model = AuctionHistory

    def _newest_first(self, query: Query) -> Query:
        return query.order_by(AuctionHistory.time.desc(), AuctionHistory.id.desc())

    def list_by_auction(self, auction_id: int, page: PageRequest) -> Page:
        query = self.db.query(AuctionHistory).filter(AuctionHistory.auction_id == auction_id)
        return paginate(self._newest_first(query), page)

    def list_by_user(self, user_id: int, page: PageRequest) -> Page:
        query = self.db.query(AuctionHistory).filter(AuctionHistory.user_id == user_id)
        return paginate(self._newest_first(query), page)

    def highest(self, auction_id: int) -> Optional[AuctionHistory]:
        return self.db.query(AuctionHistory).filter(
            AuctionHistory.auction_id == auction_id
        ).order_by(AuctionHistory.price_given.desc(), AuctionHistory.id.asc()).first()
