"""Approval request states and the configurable transition table.

State Machine Diagram (when a table is configured, e.g.):

    ┌──────────┐
    │  ACTIVE  │ ← Initial state (every new request)
    └────┬─────┘
         │
         ├─────────────────────┐
         │                     │
    ┌────▼─────┐         ┌─────▼────┐
    │ APPROVED │         │ REJECTED │
    └──────────┘         └──────────┘

The ``confirm`` flag is orthogonal to the state: it is cleared on every
state change and set independently by the confirm operation.

No edges are enforced unless a table is configured; any known state may
then be set from any state.
"""

from typing import Dict, Iterable, Mapping, NamedTuple, Optional, Set, Union

from auction.core.enums import RequestApprovalState
from auction.core.exceptions import InvalidArgumentError, TransitionError

INITIAL_STATE = RequestApprovalState.ACTIVE


class TransitionRule(NamedTuple):
    """One allowed state change."""
    from_state: RequestApprovalState
    to_state: RequestApprovalState


def parse_state(value: Union[str, RequestApprovalState]) -> RequestApprovalState:
    """Resolve an exact state name, raising InvalidArgumentError for anything else."""
    if isinstance(value, RequestApprovalState):
        return value
    try:
        return RequestApprovalState(value)
    except ValueError:
        raise InvalidArgumentError(f"Unknown request approval state: {value!r}") from None


class TransitionTable:
    """
    Allowed state changes for approval requests.

    Built from a mapping of state name to the state names it may move to.
    An unrestricted table (``edges=None``) accepts every edge.
    """

    def __init__(self, edges: Optional[Mapping[str, Iterable[str]]] = None):
        self._rules: Optional[Dict[RequestApprovalState, Set[RequestApprovalState]]] = None
        if edges is not None:
            self._rules = {}
            for rule in build_rules(edges):
                self._rules.setdefault(rule.from_state, set()).add(rule.to_state)

    @property
    def restricted(self) -> bool:
        return self._rules is not None

    def allows(self, from_state: RequestApprovalState, to_state: RequestApprovalState) -> bool:
        if self._rules is None:
            return True
        return to_state in self._rules.get(from_state, set())

    def targets(self, from_state: RequestApprovalState) -> Set[RequestApprovalState]:
        """States reachable in one step from ``from_state``."""
        if self._rules is None:
            return set(RequestApprovalState)
        return set(self._rules.get(from_state, set()))

    def check(self, from_state: RequestApprovalState, to_state: RequestApprovalState) -> None:
        if not self.allows(from_state, to_state):
            raise TransitionError(from_state, to_state)

    @classmethod
    def from_settings(cls, settings) -> "TransitionTable":
        return cls(settings.approval_transitions)


def build_rules(edges: Mapping[str, Iterable[str]]) -> list[TransitionRule]:
    """Expand a state -> targets mapping into rules, validating every name."""
    rules = []
    for source, targets in edges.items():
        from_state = parse_state(source)
        for target in targets:
            rules.append(TransitionRule(from_state, parse_state(target)))
    return rules
