"""Approval state machine implementation.

Computes the field updates for responder-driven changes (state change and
confirmation) without touching persistence. The service applies the returned
updates to the stored record.
"""

from datetime import datetime
from typing import Any, Dict, NamedTuple, Optional, Union

from auction.core.enums import Role

from .states import RequestApprovalState, TransitionTable, parse_state


class Actor(NamedTuple):
    """The user acting on a request, with the role as an explicit value."""
    user_id: int
    role: Role


def responder_fields(actor: Actor, at: datetime) -> Dict[str, Any]:
    """
    Audit fields stamped by every responder-driven mutation.

    A STAFF actor is also recorded as the request's staff member.
    """
    fields: Dict[str, Any] = {
        "responder_id": actor.user_id,
        "response_time": at,
    }
    if actor.role == Role.STAFF:
        fields["staff_id"] = actor.user_id
    return fields


class ApprovalStateMachine:
    """
    State machine for a single approval request.

    Tracks the categorical state plus the orthogonal confirm flag, validates
    state changes against a transition table and keeps a transition history
    for the caller to persist.
    """

    def __init__(
        self,
        entity_id: Optional[int],
        current_state: RequestApprovalState,
        *,
        confirmed: bool = False,
        transitions: Optional[TransitionTable] = None,
    ):
        """
        Initialize the state machine.

        Args:
            entity_id: ID of the approval request
            current_state: Current approval state
            confirmed: Current value of the confirm flag
            transitions: Allowed edges; unrestricted when omitted
        """
        self.entity_id = entity_id
        self._state = current_state
        self._confirmed = confirmed
        self.transitions = transitions or TransitionTable()
        self._history: list[Dict[str, Any]] = []

    @property
    def state(self) -> RequestApprovalState:
        return self._state

    @property
    def confirmed(self) -> bool:
        return self._confirmed

    def can_move_to(self, target: RequestApprovalState) -> bool:
        return self.transitions.allows(self._state, target)

    def set_state(
        self,
        target: Union[str, RequestApprovalState],
        actor: Actor,
        *,
        at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Move to ``target`` on behalf of ``actor``.

        Returns:
            Field updates for the stored record. ``confirm`` is always reset.

        Raises:
            InvalidArgumentError: If ``target`` is not a known state
            TransitionError: If the transition table forbids the edge
        """
        to_state = parse_state(target)
        self.transitions.check(self._state, to_state)
        at = at or datetime.utcnow()

        from_state = self._state
        self._state = to_state
        self._confirmed = False

        updates = responder_fields(actor, at)
        updates["state"] = to_state.value
        updates["confirm"] = False

        self._record("set_state", from_state, to_state, actor, at)
        return updates

    def confirm(self, actor: Actor, *, at: Optional[datetime] = None) -> Dict[str, Any]:
        """Set the confirm flag on behalf of ``actor``. The state is unchanged."""
        at = at or datetime.utcnow()
        self._confirmed = True

        updates = responder_fields(actor, at)
        updates["confirm"] = True

        self._record("confirm", self._state, self._state, actor, at)
        return updates

    def get_history(self) -> list[Dict[str, Any]]:
        """Transitions performed through this machine, oldest first."""
        return self._history.copy()

    def _record(
        self,
        action: str,
        from_state: RequestApprovalState,
        to_state: RequestApprovalState,
        actor: Actor,
        at: datetime,
    ) -> None:
        self._history.append({
            "request_id": self.entity_id,
            "action": action,
            "from_state": from_state.value,
            "to_state": to_state.value,
            "user_id": actor.user_id,
            "timestamp": at,
        })
