"""Database models for the auction backend."""

from auction.db.models.user import User
from auction.db.models.jewelry import Jewelry
from auction.db.models.approval import RequestApproval, ApprovalHistory
from auction.db.models.auction import Auction, AuctionHistory

__all__ = [
    "User",
    "Jewelry",
    "RequestApproval",
    "ApprovalHistory",
    "Auction",
    "AuctionHistory",
]
