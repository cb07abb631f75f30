"""Approval service for the jewelry approval workflow.

Resolves the referenced users, jewelry and requests through the stores,
delegates field computation to the state machine and persists the result.
Transactions are scoped by the caller (see ``auction.db.session.unit_of_work``).
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from auction.core.enums import JewelryState, Role
from auction.core.exceptions import NotFoundError
from auction.db.models import ApprovalHistory, Jewelry, RequestApproval, User
from auction.db.repositories import (
    JewelryRepository,
    Page,
    PageRequest,
    RequestApprovalRepository,
    UserRepository,
)

from .machine import Actor, ApprovalStateMachine
from .states import INITIAL_STATE, TransitionTable, RequestApprovalState

logger = logging.getLogger(__name__)


class ApprovalService:
    """
    High-level service for jewelry approval requests.

    Handles:
    - Creating requests from members, staff and managers
    - State changes and confirmation by responders
    - Cancellation, which hides the jewelry
    - Paged queries and audit history
    """

    def __init__(self, db: Session, *, transitions: Optional[TransitionTable] = None):
        """
        Initialize the approval service.

        Args:
            db: Database session
            transitions: Allowed state edges; unrestricted when omitted
        """
        self.db = db
        self.requests = RequestApprovalRepository(db)
        self.users = UserRepository(db)
        self.jewelries = JewelryRepository(db)
        self.transitions = transitions or TransitionTable()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_request_by_id(self, request_id: int) -> RequestApproval:
        request = self.requests.get(request_id)
        if request is None:
            raise NotFoundError("Request approval", request_id)
        return request

    def _get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def _get_jewelry(self, jewelry_id: int) -> Jewelry:
        jewelry = self.jewelries.get(jewelry_id)
        if jewelry is None:
            raise NotFoundError("Jewelry", jewelry_id)
        return jewelry

    # ------------------------------------------------------------------
    # Responder actions
    # ------------------------------------------------------------------

    def set_state(self, request_id: int, responder_id: int, state: str) -> RequestApproval:
        """
        Move a request to ``state`` on behalf of a responder.

        Clears the confirm flag and stamps responder and response time. A
        STAFF responder is also recorded as the request's staff member.

        Raises:
            NotFoundError: If the request or responder does not exist
            InvalidArgumentError: If ``state`` is not a known state
            TransitionError: If the configured transition table forbids it
        """
        request = self.get_request_by_id(request_id)
        responder = self._get_user(responder_id)

        machine = self._machine_for(request)
        updates = machine.set_state(state, _actor(responder))
        self._apply(request, updates)
        self._record_history(machine)
        self.requests.save(request)

        logger.info(
            f"Request approval {request_id} set to {request.state} by user {responder_id}"
        )
        return request

    def confirm(self, request_id: int, responder_id: int) -> RequestApproval:
        """Confirm a request. Its state is left unchanged."""
        request = self.get_request_by_id(request_id)
        responder = self._get_user(responder_id)

        machine = self._machine_for(request)
        updates = machine.confirm(_actor(responder))
        self._apply(request, updates)
        self._record_history(machine)
        self.requests.save(request)

        logger.info(f"Request approval {request_id} confirmed by user {responder_id}")
        return request

    def cancel(self, request_id: int, note: Optional[str]) -> RequestApproval:
        """
        Cancel a request: hide its jewelry and keep the note.

        The approval state and confirm flag are not modified.
        """
        request = self.get_request_by_id(request_id)

        jewelry = request.jewelry
        jewelry.state = JewelryState.HIDDEN.value
        request.jewelry = jewelry
        request.note = note

        self.db.add(ApprovalHistory(
            request_id=request.id,
            action="cancel",
            from_state=request.state,
            to_state=request.state,
            note=note,
        ))
        self.requests.save(request)

        logger.info(f"Request approval {request_id} cancelled, jewelry {jewelry.id} hidden")
        return request

    # ------------------------------------------------------------------
    # Origination
    # ------------------------------------------------------------------

    def create_from_user(
        self,
        sender_id: int,
        jewelry_id: int,
        request_time: Optional[datetime] = None,
    ) -> RequestApproval:
        """First request for a jewelry item, raised by its owner."""
        sender = self._get_user(sender_id)
        jewelry = self._get_jewelry(jewelry_id)

        request = self._new_request(
            sender=sender,
            jewelry=jewelry,
            request_time=request_time,
            desired_price=jewelry.price,
        )
        logger.info(
            f"Request approval {request.id} created by user {sender_id} for jewelry {jewelry_id}"
        )
        return request

    def create_from_staff(
        self,
        sender_id: int,
        request_approval_id: int,
        request_time: Optional[datetime] = None,
        valuation: Optional[float] = None,
    ) -> RequestApproval:
        """Escalation by a staff member, carrying their valuation."""
        sender = self._get_user(sender_id)
        prior = self.get_request_by_id(request_approval_id)

        request = self._new_request(
            sender=sender,
            jewelry=prior.jewelry,
            request_time=request_time,
            desired_price=prior.jewelry.price,
            valuation=valuation,
            staff=sender,
            parent=prior,
        )
        logger.info(
            f"Request approval {request.id} escalated from {prior.id} by staff {sender_id}"
        )
        return request

    def create_from_manager(
        self,
        sender_id: int,
        request_approval_id: int,
        request_time: Optional[datetime] = None,
    ) -> RequestApproval:
        """Escalation by a manager on behalf of the staff member who raised ``request_approval_id``."""
        sender = self._get_user(sender_id)
        prior = self.get_request_by_id(request_approval_id)

        request = self._new_request(
            sender=sender,
            jewelry=prior.jewelry,
            request_time=request_time,
            desired_price=prior.desired_price,
            valuation=prior.valuation,
            staff=prior.sender,
            parent=prior,
        )
        logger.info(
            f"Request approval {request.id} escalated from {prior.id} by manager {sender_id}"
        )
        return request

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_by_sender_role(self, role: Role, page: PageRequest) -> Page:
        return self.requests.list_by_sender_role(Role(role), page)

    def list_by_user(self, user_id: int, page: PageRequest) -> Page:
        return self.requests.list_by_user(user_id, page)

    def list_passed(self, page: PageRequest) -> Page:
        return self.requests.list_passed(page)

    def get_history(self, request_id: int) -> List[ApprovalHistory]:
        self.get_request_by_id(request_id)
        return self.requests.history(request_id)

    def get_lineage(self, request_id: int) -> List[RequestApproval]:
        """Escalation chain from the root request to ``request_id``."""
        chain = [self.get_request_by_id(request_id)]
        while chain[-1].parent_id is not None:
            chain.append(self.get_request_by_id(chain[-1].parent_id))
        chain.reverse()
        return chain

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _machine_for(self, request: RequestApproval) -> ApprovalStateMachine:
        return ApprovalStateMachine(
            entity_id=request.id,
            current_state=RequestApprovalState(request.state),
            confirmed=bool(request.confirm),
            transitions=self.transitions,
        )

    def _apply(self, request: RequestApproval, updates: dict) -> None:
        for field, value in updates.items():
            setattr(request, field, value)

    def _record_history(self, machine: ApprovalStateMachine) -> None:
        for record in machine.get_history():
            self.db.add(ApprovalHistory(
                request_id=record["request_id"],
                action=record["action"],
                from_state=record["from_state"],
                to_state=record["to_state"],
                user_id=record["user_id"],
                created_at=record["timestamp"],
            ))

    def _new_request(
        self,
        *,
        sender: User,
        jewelry: Jewelry,
        request_time: Optional[datetime],
        desired_price: Optional[float],
        valuation: Optional[float] = None,
        staff: Optional[User] = None,
        parent: Optional[RequestApproval] = None,
    ) -> RequestApproval:
        request = RequestApproval(
            state=INITIAL_STATE.value,
            confirm=False,
            sender=sender,
            staff=staff,
            jewelry=jewelry,
            request_time=request_time or datetime.utcnow(),
            desired_price=desired_price,
            valuation=valuation,
            parent_id=parent.id if parent else None,
        )
        self.requests.save(request)

        self.db.add(ApprovalHistory(
            request_id=request.id,
            action="create",
            from_state=None,
            to_state=INITIAL_STATE.value,
            user_id=sender.id,
        ))
        self.db.flush()
        return request


def _actor(user: User) -> Actor:
    return Actor(user_id=user.id, role=Role(user.role))
