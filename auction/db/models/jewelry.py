"""Jewelry database model.

Represents an item a member offers for auction.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text
from sqlalchemy.orm import relationship

from auction.core.enums import JewelryState
from auction.db.base import Base


class Jewelry(Base):
    __tablename__ = "jewelries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    material = Column(String(100), nullable=True)  # gold, silver, platinum, etc.
    brand = Column(String(100), nullable=True)
    weight = Column(Float, nullable=True)  # grams

    # Price asked by the owner; copied into approval requests as desired price
    price = Column(Float, nullable=False)
    state = Column(String(20), nullable=False, default=JewelryState.ACTIVE.value, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="jewelries")
    auctions = relationship("Auction", back_populates="jewelry")

    def __repr__(self) -> str:
        return f"<Jewelry {self.name} ({self.state})>"
