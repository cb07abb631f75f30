"""Approval workflow module.

Implements the jewelry request approval state machine and its service.
"""

from .states import RequestApprovalState, TransitionRule, TransitionTable, parse_state
from .machine import Actor, ApprovalStateMachine, responder_fields
from .service import ApprovalService

__all__ = [
    "RequestApprovalState",
    "TransitionRule",
    "TransitionTable",
    "parse_state",
    "Actor",
    "ApprovalStateMachine",
    "responder_fields",
    "ApprovalService",
]
