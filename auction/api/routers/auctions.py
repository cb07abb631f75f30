"""Auction and bidding history API endpoints."""

from typing import Optional
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auction.api.deps import get_db, get_bidding_service, page_request
from auction.api.errors import http_error
from auction.api.schemas.common import PaginatedResponse
from auction.core.enums import AuctionState
from auction.core.exceptions import AuctionError
from auction.db.session import unit_of_work
from auction.services.bidding import BiddingService

router = APIRouter(prefix="/auctions", tags=["auctions"])


# Schemas
class AuctionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    jewelry_id: int
    first_price: float = Field(..., ge=0)
    minimum_increment: float = Field(0.0, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    state: AuctionState = AuctionState.WAITING


class AuctionStateChange(BaseModel):
    state: AuctionState


class AuctionResponse(BaseModel):
    id: int
    name: str
    jewelry_id: int
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    first_price: float
    minimum_increment: float
    last_price: Optional[float]
    state: str

    class Config:
        from_attributes = True


class BidCreate(BaseModel):
    user_id: int
    price_given: float = Field(..., gt=0)
    time: Optional[datetime] = None


class BidResponse(BaseModel):
    id: int
    user_id: Optional[int]
    auction_id: Optional[int]
    price_given: float
    time: datetime

    class Config:
        from_attributes = True


BidPage = PaginatedResponse[BidResponse]


# Endpoints
@router.post("", response_model=AuctionResponse, status_code=status.HTTP_201_CREATED)
async def create_auction(
    body: AuctionCreate,
    db: Session = Depends(get_db),
    service: BiddingService = Depends(get_bidding_service),
):
    """Open an auction for a jewelry item whose approval has passed."""
    try:
        with unit_of_work(db):
            auction = service.open_auction(
                body.jewelry_id,
                name=body.name,
                first_price=body.first_price,
                minimum_increment=body.minimum_increment,
                start_date=body.start_date,
                end_date=body.end_date,
                state=body.state,
            )
    except AuctionError as e:
        raise http_error(e)
    return AuctionResponse.model_validate(auction)


@router.get("/bids/user/{user_id}", response_model=BidPage)
async def list_user_bids(
    user_id: int,
    service: BiddingService = Depends(get_bidding_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List a user's bids, newest first."""
    result = service.list_by_user(user_id, page_request(page, per_page))
    return BidPage.from_page(result, BidResponse)


@router.get("/{auction_id}", response_model=AuctionResponse)
async def get_auction(
    auction_id: int,
    service: BiddingService = Depends(get_bidding_service),
):
    """Get a specific auction."""
    try:
        auction = service.get_auction(auction_id)
    except AuctionError as e:
        raise http_error(e)
    return AuctionResponse.model_validate(auction)


@router.put("/{auction_id}/state", response_model=AuctionResponse)
async def set_auction_state(
    auction_id: int,
    body: AuctionStateChange,
    db: Session = Depends(get_db),
    service: BiddingService = Depends(get_bidding_service),
):
    """Open, finish or cancel an auction. Finished and cancelled auctions stay closed."""
    try:
        with unit_of_work(db):
            auction = service.set_auction_state(auction_id, body.state)
    except AuctionError as e:
        raise http_error(e)
    return AuctionResponse.model_validate(auction)


@router.post("/{auction_id}/bids", response_model=BidResponse, status_code=status.HTTP_201_CREATED)
async def place_bid(
    auction_id: int,
    body: BidCreate,
    db: Session = Depends(get_db),
    service: BiddingService = Depends(get_bidding_service),
):
    """Place a bid on a running auction."""
    try:
        with unit_of_work(db):
            bid = service.record_bid(body.user_id, auction_id, body.price_given, body.time)
    except AuctionError as e:
        raise http_error(e)
    return BidResponse.model_validate(bid)


@router.get("/{auction_id}/bids", response_model=BidPage)
async def list_auction_bids(
    auction_id: int,
    service: BiddingService = Depends(get_bidding_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List bids on an auction, newest first."""
    try:
        result = service.list_by_auction(auction_id, page_request(page, per_page))
    except AuctionError as e:
        raise http_error(e)
    return BidPage.from_page(result, BidResponse)


@router.get("/{auction_id}/bids/highest", response_model=Optional[BidResponse])
async def get_highest_bid(
    auction_id: int,
    service: BiddingService = Depends(get_bidding_service),
):
    """Get the highest bid on an auction, or null when there is none."""
    try:
        bid = service.highest_bid(auction_id)
    except AuctionError as e:
        raise http_error(e)
    return BidResponse.model_validate(bid) if bid else None
