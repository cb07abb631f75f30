"""Approval workflow database models.

Stores approval requests for jewelry and their audit history.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Float, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship

from auction.db.base import Base


class RequestApproval(Base):
    """
    One step of the jewelry approval workflow.

    A member raises the first request, staff escalate with a valuation and a
    manager escalates again. Each escalation is a new row pointing at its
    predecessor through ``parent_id``.
    """
    __tablename__ = "request_approvals"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Workflow state
    state = Column(String(20), nullable=False, default="ACTIVE", index=True)
    confirm = Column(Boolean, nullable=False, default=False, index=True)

    # Participants
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    responder_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timing
    request_time = Column(DateTime, nullable=True)
    response_time = Column(DateTime, nullable=True)

    # Pricing
    desired_price = Column(Float, nullable=True)
    valuation = Column(Float, nullable=True)

    jewelry_id = Column(Integer, ForeignKey("jewelries.id"), nullable=False, index=True)
    note = Column(Text, nullable=True)

    # Lineage: the request this one escalates. Set once at creation.
    parent_id = Column(Integer, ForeignKey("request_approvals.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    staff = relationship("User", foreign_keys=[staff_id])
    responder = relationship("User", foreign_keys=[responder_id])
    jewelry = relationship("Jewelry")
    parent = relationship("RequestApproval", remote_side=[id])
    history = relationship("ApprovalHistory", back_populates="request", order_by="ApprovalHistory.id")

    def __repr__(self) -> str:
        return f"<RequestApproval {self.id} jewelry={self.jewelry_id} [{self.state}]>"


class ApprovalHistory(Base):
    """
    Records every mutation of an approval request.

    Provides an audit trail of the approval workflow.
    """
    __tablename__ = "approval_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(Integer, ForeignKey("request_approvals.id", ondelete="CASCADE"), nullable=False, index=True)

    # create, set_state, confirm, cancel
    action = Column(String(20), nullable=False)
    from_state = Column(String(20), nullable=True)
    to_state = Column(String(20), nullable=False)

    # Actor
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    request = relationship("RequestApproval", back_populates="history")
    user = relationship("User")

    def __repr__(self) -> str:
        return f"<ApprovalHistory {self.action} {self.from_state} -> {self.to_state}>"
