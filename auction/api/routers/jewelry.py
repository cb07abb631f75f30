"""Jewelry listing API endpoints."""

from typing import Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auction.api.deps import get_db, page_request
from auction.api.schemas.common import PaginatedResponse
from auction.core.enums import JewelryState
from auction.db.models import Jewelry
from auction.db.repositories import JewelryRepository, UserRepository
from auction.db.session import unit_of_work

router = APIRouter(prefix="/jewelries", tags=["jewelries"])


# Schemas
class JewelryCreate(BaseModel):
    owner_id: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    material: Optional[str] = None
    brand: Optional[str] = None
    weight: Optional[float] = Field(None, gt=0)
    price: float = Field(..., ge=0)


class JewelryResponse(BaseModel):
    id: int
    owner_id: Optional[int]
    name: str
    description: Optional[str]
    material: Optional[str]
    brand: Optional[str]
    weight: Optional[float]
    price: float
    state: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


JewelryPage = PaginatedResponse[JewelryResponse]


# Endpoints
@router.post("", response_model=JewelryResponse, status_code=status.HTTP_201_CREATED)
async def create_jewelry(
    body: JewelryCreate,
    db: Session = Depends(get_db),
):
    """List a new jewelry item."""
    if UserRepository(db).get(body.owner_id) is None:
        raise HTTPException(status_code=404, detail="Owner not found")

    with unit_of_work(db):
        jewelry = JewelryRepository(db).save(Jewelry(
            state=JewelryState.ACTIVE.value,
            **body.model_dump(),
        ))
    return JewelryResponse.model_validate(jewelry)


@router.get("", response_model=JewelryPage)
async def list_jewelries(
    db: Session = Depends(get_db),
    state: Optional[JewelryState] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List jewelry, newest first."""
    result = JewelryRepository(db).list(
        page_request(page, per_page),
        state=state.value if state else None,
    )
    return JewelryPage.from_page(result, JewelryResponse)


@router.get("/{jewelry_id}", response_model=JewelryResponse)
async def get_jewelry(
    jewelry_id: int,
    db: Session = Depends(get_db),
):
    """Get a specific jewelry item."""
    jewelry = JewelryRepository(db).get(jewelry_id)
    if not jewelry:
        raise HTTPException(status_code=404, detail="Jewelry not found")
    return JewelryResponse.model_validate(jewelry)
