"""Auction and bidding history models."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship

from auction.core.enums import AuctionState
from auction.db.base import Base


class Auction(Base):
    __tablename__ = "auctions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    jewelry_id = Column(Integer, ForeignKey("jewelries.id"), nullable=False, index=True)

    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    first_price = Column(Float, nullable=False)
    minimum_increment = Column(Float, nullable=False, default=0.0)
    last_price = Column(Float, nullable=True)  # Highest bid so far

    state = Column(String(20), nullable=False, default=AuctionState.WAITING.value, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    jewelry = relationship("Jewelry", back_populates="auctions")
    bids = relationship("AuctionHistory", back_populates="auction", order_by="AuctionHistory.id")

    def __repr__(self) -> str:
        return f"<Auction {self.name} [{self.state}]>"


class AuctionHistory(Base):
    """A single bid placed on an auction."""
    __tablename__ = "auction_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    price_given = Column(Float, nullable=False)
    time = Column(DateTime, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    auction_id = Column(Integer, ForeignKey("auctions.id"), nullable=True, index=True)

    user = relationship("User", back_populates="bids")
    auction = relationship("Auction", back_populates="bids")

    def __repr__(self) -> str:
        return f"<AuctionHistory {self.price_given} on auction {self.auction_id}>"
