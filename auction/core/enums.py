"""Enumerations shared by models, services and the API."""

from enum import Enum


class Role(str, Enum):
    """User roles. Approval requests move from MEMBER to STAFF to MANAGER."""

    MEMBER = "MEMBER"
    STAFF = "STAFF"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class RequestApprovalState(str, Enum):
    """States in the jewelry approval workflow."""

    ACTIVE = "ACTIVE"        # Awaiting a response
    APPROVED = "APPROVED"    # Accepted by the responder
    REJECTED = "REJECTED"    # Declined by the responder


class JewelryState(str, Enum):
    ACTIVE = "ACTIVE"      # Listed by its owner, not yet at auction
    AUCTION = "AUCTION"    # Attached to an auction
    HIDDEN = "HIDDEN"      # Withdrawn, e.g. after a cancelled approval request


class AuctionState(str, Enum):
    WAITING = "WAITING"
    ONGOING = "ONGOING"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"
