"""Bidding service.

Opens auctions for approved jewelry, records bids as auction history entries
and answers the bid history queries.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from auction.core.enums import AuctionState, JewelryState
from auction.core.exceptions import InvalidArgumentError, NotFoundError
from auction.db.models import Auction, AuctionHistory
from auction.db.repositories import (
    AuctionHistoryRepository,
    AuctionRepository,
    JewelryRepository,
    Page,
    PageRequest,
    RequestApprovalRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

# An auction in one of these states never changes state again
CLOSED_STATES = {AuctionState.FINISHED, AuctionState.CANCELLED}


class BiddingService:
    """
    Service for auction bids.

    Handles:
    - Opening auctions for jewelry whose approval has passed
    - Auction state changes; finished and cancelled auctions stay closed
    - Validating and recording bids
    - Keeping the auction's last price current
    - Paged bid history per auction and per user
    """

    def __init__(self, db: Session):
        self.db = db
        self.auctions = AuctionRepository(db)
        self.bids = AuctionHistoryRepository(db)
        self.users = UserRepository(db)
        self.jewelries = JewelryRepository(db)
        self.requests = RequestApprovalRepository(db)

    def get_auction(self, auction_id: int) -> Auction:
        auction = self.auctions.get(auction_id)
        if auction is None:
            raise NotFoundError("Auction", auction_id)
        return auction

    def open_auction(
        self,
        jewelry_id: int,
        *,
        name: str,
        first_price: float,
        minimum_increment: float = 0.0,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        state: AuctionState = AuctionState.WAITING,
    ) -> Auction:
        """
        Put a jewelry item up for auction and move it to AUCTION.

        Raises:
            NotFoundError: If the jewelry does not exist
            InvalidArgumentError: If the jewelry is hidden, already at auction,
                or has no approved and confirmed approval request
        """
        jewelry = self.jewelries.get(jewelry_id)
        if jewelry is None:
            raise NotFoundError("Jewelry", jewelry_id)
        if jewelry.state == JewelryState.HIDDEN.value:
            raise InvalidArgumentError(f"Jewelry {jewelry_id} is hidden and cannot be auctioned")
        if jewelry.state == JewelryState.AUCTION.value:
            raise InvalidArgumentError(f"Jewelry {jewelry_id} is already at auction")
        if not self.requests.has_passed(jewelry_id):
            raise InvalidArgumentError(f"Jewelry {jewelry_id} has no passed approval request")

        jewelry.state = JewelryState.AUCTION.value
        auction = self.auctions.save(Auction(
            name=name,
            jewelry=jewelry,
            first_price=first_price,
            minimum_increment=minimum_increment,
            start_date=start_date,
            end_date=end_date,
            state=AuctionState(state).value,
        ))

        logger.info(f"Auction {auction.id} opened for jewelry {jewelry_id}")
        return auction

    def set_auction_state(self, auction_id: int, state: AuctionState) -> Auction:
        """
        Move an auction to ``state``.

        Raises:
            NotFoundError: If the auction does not exist
            InvalidArgumentError: If the auction is finished or cancelled
        """
        auction = self.get_auction(auction_id)
        target = AuctionState(state)
        current = AuctionState(auction.state)
        if current in CLOSED_STATES and target != current:
            raise InvalidArgumentError(
                f"Auction {auction_id} is {current.value} and cannot move to {target.value}"
            )

        auction.state = target.value
        self.auctions.save(auction)
        logger.info(f"Auction {auction_id} set to {target.value}")
        return auction

    def minimum_bid(self, auction: Auction) -> float:
        """Lowest price the next bid may offer."""
        if auction.last_price is None:
            return auction.first_price
        return auction.last_price + (auction.minimum_increment or 0.0)

    def record_bid(
        self,
        user_id: int,
        auction_id: int,
        price_given: float,
        time: Optional[datetime] = None,
    ) -> AuctionHistory:
        """
        Place a bid.

        Raises:
            NotFoundError: If the user or auction does not exist
            InvalidArgumentError: If the auction is not running or the price is too low
        """
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        auction = self.get_auction(auction_id)

        if auction.state != AuctionState.ONGOING.value:
            raise InvalidArgumentError(
                f"Auction {auction_id} is {auction.state}, bids are not accepted"
            )

        minimum = self.minimum_bid(auction)
        if price_given < minimum:
            raise InvalidArgumentError(
                f"Bid of {price_given} is below the minimum of {minimum} for auction {auction_id}"
            )

        bid = AuctionHistory(
            price_given=price_given,
            time=time or datetime.utcnow(),
            user=user,
            auction=auction,
        )
        auction.last_price = price_given
        self.bids.save(bid)

        logger.info(f"User {user_id} bid {price_given} on auction {auction_id}")
        return bid

    def list_by_auction(self, auction_id: int, page: PageRequest) -> Page:
        self.get_auction(auction_id)
        return self.bids.list_by_auction(auction_id, page)

    def list_by_user(self, user_id: int, page: PageRequest) -> Page:
        return self.bids.list_by_user(user_id, page)

    def highest_bid(self, auction_id: int) -> Optional[AuctionHistory]:
        self.get_auction(auction_id)
        return self.bids.highest(auction_id)
