"""Tests for the bidding service."""

import pytest
from datetime import datetime, timedelta

from auction.core.enums import AuctionState, JewelryState, RequestApprovalState
from auction.core.exceptions import InvalidArgumentError, NotFoundError
from auction.db.models import AuctionHistory
from auction.db.repositories import PageRequest
from auction.services.bidding import BiddingService

from tests.factories import create_auction, create_jewelry, create_request_approval, create_user


@pytest.fixture
def service(db_session):
    return BiddingService(db_session)


@pytest.fixture
def bidder(db_session):
    return create_user(db_session)


class TestOpenAuction:

    def _approved_jewelry(self, db_session):
        jewelry = create_jewelry(db_session)
        create_request_approval(
            db_session, jewelry=jewelry, state=RequestApprovalState.APPROVED, confirm=True,
        )
        return jewelry

    def test_opens_for_passed_jewelry(self, service, db_session):
        jewelry = self._approved_jewelry(db_session)

        auction = service.open_auction(jewelry.id, name="Rings", first_price=50.0)

        assert auction.id is not None
        assert auction.state == AuctionState.WAITING.value
        assert jewelry.state == JewelryState.AUCTION.value

    @pytest.mark.parametrize("state,confirm", [
        (RequestApprovalState.ACTIVE, True),
        (RequestApprovalState.APPROVED, False),
        (RequestApprovalState.REJECTED, True),
    ])
    def test_requires_passed_approval(self, service, db_session, state, confirm):
        jewelry = create_jewelry(db_session)
        create_request_approval(db_session, jewelry=jewelry, state=state, confirm=confirm)

        with pytest.raises(InvalidArgumentError, match="no passed approval"):
            service.open_auction(jewelry.id, name="Rings", first_price=50.0)
        assert jewelry.state == JewelryState.ACTIVE.value

    def test_rejects_jewelry_already_at_auction(self, service, db_session):
        jewelry = self._approved_jewelry(db_session)
        service.open_auction(jewelry.id, name="Rings", first_price=50.0)

        with pytest.raises(InvalidArgumentError, match="already at auction"):
            service.open_auction(jewelry.id, name="Rings again", first_price=50.0)

    def test_rejects_hidden_jewelry(self, service, db_session):
        jewelry = self._approved_jewelry(db_session)
        jewelry.state = JewelryState.HIDDEN.value

        with pytest.raises(InvalidArgumentError, match="hidden"):
            service.open_auction(jewelry.id, name="Rings", first_price=50.0)

    def test_unknown_jewelry(self, service):
        with pytest.raises(NotFoundError, match="Jewelry 808"):
            service.open_auction(808, name="Rings", first_price=50.0)


class TestAuctionState:

    def test_open_and_finish(self, service, db_session):
        auction = create_auction(db_session, state=AuctionState.WAITING)

        service.set_auction_state(auction.id, AuctionState.ONGOING)
        assert auction.state == "ONGOING"
        service.set_auction_state(auction.id, AuctionState.FINISHED)
        assert auction.state == "FINISHED"

    @pytest.mark.parametrize("closed", [AuctionState.FINISHED, AuctionState.CANCELLED])
    @pytest.mark.parametrize("target", [AuctionState.WAITING, AuctionState.ONGOING])
    def test_closed_auction_cannot_reopen(self, service, db_session, closed, target):
        auction = create_auction(db_session, state=closed)

        with pytest.raises(InvalidArgumentError):
            service.set_auction_state(auction.id, target)
        assert auction.state == closed.value

    def test_finished_cannot_become_cancelled(self, service, db_session):
        auction = create_auction(db_session, state=AuctionState.FINISHED)
        with pytest.raises(InvalidArgumentError):
            service.set_auction_state(auction.id, AuctionState.CANCELLED)

    def test_unknown_auction(self, service):
        with pytest.raises(NotFoundError):
            service.set_auction_state(99, AuctionState.ONGOING)


class TestRecordBid:

    def test_first_bid_at_opening_price(self, service, db_session, bidder):
        auction = create_auction(db_session, first_price=100.0, minimum_increment=10.0)
        at = datetime(2024, 6, 1, 18, 0)

        bid = service.record_bid(bidder.id, auction.id, 100.0, at)

        assert bid.id is not None
        assert bid.user_id == bidder.id
        assert bid.auction_id == auction.id
        assert bid.time == at
        assert auction.last_price == 100.0

    def test_minimum_increment(self, service, db_session, bidder):
        auction = create_auction(db_session, first_price=100.0, minimum_increment=10.0)
        service.record_bid(bidder.id, auction.id, 100.0)

        assert service.minimum_bid(auction) == 110.0
        with pytest.raises(InvalidArgumentError):
            service.record_bid(bidder.id, auction.id, 105.0)
        service.record_bid(bidder.id, auction.id, 110.0)
        assert auction.last_price == 110.0

    def test_below_opening_price(self, service, db_session, bidder):
        auction = create_auction(db_session, first_price=100.0)
        with pytest.raises(InvalidArgumentError):
            service.record_bid(bidder.id, auction.id, 99.0)
        assert auction.last_price is None
        assert db_session.query(AuctionHistory).count() == 0

    @pytest.mark.parametrize("state", [AuctionState.WAITING, AuctionState.FINISHED, AuctionState.CANCELLED])
    def test_auction_not_running(self, service, db_session, bidder, state):
        auction = create_auction(db_session, state=state)
        with pytest.raises(InvalidArgumentError, match=state.value):
            service.record_bid(bidder.id, auction.id, 1000.0)

    def test_unknown_user(self, service, db_session):
        auction = create_auction(db_session)
        with pytest.raises(NotFoundError, match="User 404"):
            service.record_bid(404, auction.id, 1000.0)

    def test_unknown_auction(self, service, bidder):
        with pytest.raises(NotFoundError, match="Auction 404"):
            service.record_bid(bidder.id, 404, 1000.0)


class TestBidQueries:

    def test_list_by_auction_newest_first(self, service, db_session, bidder):
        auction = create_auction(db_session, first_price=10.0, minimum_increment=1.0)
        start = datetime(2024, 6, 1, 12, 0)
        bids = [
            service.record_bid(bidder.id, auction.id, 10.0 + i, start + timedelta(minutes=i))
            for i in range(3)
        ]

        page = service.list_by_auction(auction.id, PageRequest())
        assert [b.id for b in page.items] == [bids[2].id, bids[1].id, bids[0].id]

    def test_list_by_user(self, service, db_session, bidder):
        other = create_user(db_session)
        auction = create_auction(db_session, first_price=10.0, minimum_increment=1.0)
        mine = service.record_bid(bidder.id, auction.id, 10.0)
        service.record_bid(other.id, auction.id, 20.0)

        page = service.list_by_user(bidder.id, PageRequest())
        assert [b.id for b in page.items] == [mine.id]

    def test_highest_bid(self, service, db_session, bidder):
        auction = create_auction(db_session, first_price=10.0, minimum_increment=5.0)
        assert service.highest_bid(auction.id) is None

        service.record_bid(bidder.id, auction.id, 10.0)
        top = service.record_bid(bidder.id, auction.id, 40.0)
        assert service.highest_bid(auction.id).id == top.id

    def test_queries_on_unknown_auction(self, service):
        with pytest.raises(NotFoundError):
            service.list_by_auction(77, PageRequest())
        with pytest.raises(NotFoundError):
            service.highest_bid(77)
