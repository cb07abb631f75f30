"""Typed exceptions for the auction backend.

Every error carries a machine-readable ``code`` so API layers can map it
without parsing messages.

    AuctionError
    +-- NotFoundError
    +-- InvalidArgumentError
    +-- TransitionError
"""

from typing import Any


class AuctionError(Exception):
    """Base class for all domain errors."""

    code: str = "AUCTION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AuctionError):
    """Raised when a referenced entity id does not resolve."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidArgumentError(AuctionError):
    """Raised when an input value is not acceptable (unknown state, low bid)."""

    code = "INVALID_ARGUMENT"


class TransitionError(AuctionError):
    """Raised when the configured transition table forbids a state change."""

    code = "ILLEGAL_TRANSITION"

    def __init__(self, from_state, to_state):
        super().__init__(
            f"Cannot move approval request from {from_state.value} to {to_state.value}"
        )
        self.from_state = from_state
        self.to_state = to_state
