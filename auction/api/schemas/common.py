"""Common schemas for the auction API."""

from typing import Generic, TypeVar, List
from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response wrapper."""
    items: List[T]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def from_page(cls, page, item_model) -> "PaginatedResponse":
        """Build from a repository ``Page``, validating each ORM item with ``item_model``."""
        return cls(
            items=[item_model.model_validate(item) for item in page.items],
            total=page.total,
            page=page.page,
            per_page=page.per_page,
            pages=page.pages,
        )
