"""Request approval workflow API endpoints."""

from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auction.api.deps import get_db, get_approval_service, page_request
from auction.api.errors import http_error
from auction.api.schemas.common import PaginatedResponse
from auction.core.approval import ApprovalService
from auction.core.enums import Role
from auction.core.exceptions import AuctionError
from auction.db.session import unit_of_work

router = APIRouter(prefix="/request-approvals", tags=["request-approvals"])


# Schemas
class RequestApprovalResponse(BaseModel):
    id: int
    state: str
    confirm: bool
    sender_id: int
    staff_id: Optional[int]
    responder_id: Optional[int]
    jewelry_id: int
    parent_id: Optional[int]
    request_time: Optional[datetime]
    response_time: Optional[datetime]
    desired_price: Optional[float]
    valuation: Optional[float]
    note: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ApprovalHistoryResponse(BaseModel):
    id: int
    action: str
    from_state: Optional[str]
    to_state: str
    user_id: Optional[int]
    note: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class UserRequestApproval(BaseModel):
    sender_id: int
    jewelry_id: int
    request_time: Optional[datetime] = None


class StaffRequestApproval(BaseModel):
    sender_id: int
    request_approval_id: int
    request_time: Optional[datetime] = None
    valuation: Optional[float] = Field(None, ge=0)


class ManagerRequestApproval(BaseModel):
    sender_id: int
    request_approval_id: int
    request_time: Optional[datetime] = None


class CancelRequestApproval(BaseModel):
    request_id: int
    note: Optional[str] = None


class StateChange(BaseModel):
    responder_id: int
    state: str


class Confirmation(BaseModel):
    responder_id: int


ApprovalPage = PaginatedResponse[RequestApprovalResponse]


# Endpoints
@router.get("/passed", response_model=ApprovalPage)
async def list_passed_requests(
    service: ApprovalService = Depends(get_approval_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List requests that are approved and confirmed."""
    result = service.list_passed(page_request(page, per_page))
    return ApprovalPage.from_page(result, RequestApprovalResponse)


@router.get("/sender/{role}", response_model=ApprovalPage)
async def list_requests_by_sender_role(
    role: Role,
    service: ApprovalService = Depends(get_approval_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List requests raised by users with the given role."""
    result = service.list_by_sender_role(role, page_request(page, per_page))
    return ApprovalPage.from_page(result, RequestApprovalResponse)


@router.get("/user/{user_id}", response_model=ApprovalPage)
async def list_requests_by_user(
    user_id: int,
    service: ApprovalService = Depends(get_approval_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List requests sent by a user."""
    result = service.list_by_user(user_id, page_request(page, per_page))
    return ApprovalPage.from_page(result, RequestApprovalResponse)


@router.post("/user", response_model=RequestApprovalResponse, status_code=status.HTTP_201_CREATED)
async def request_from_user(
    body: UserRequestApproval,
    db: Session = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """A member asks for their jewelry to be approved for auction."""
    try:
        with unit_of_work(db):
            request = service.create_from_user(body.sender_id, body.jewelry_id, body.request_time)
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)


@router.post("/staff", response_model=RequestApprovalResponse, status_code=status.HTTP_201_CREATED)
async def request_from_staff(
    body: StaffRequestApproval,
    db: Session = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """A staff member escalates a request with their valuation."""
    try:
        with unit_of_work(db):
            request = service.create_from_staff(
                body.sender_id, body.request_approval_id, body.request_time, body.valuation
            )
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)


@router.post("/manager", response_model=RequestApprovalResponse, status_code=status.HTTP_201_CREATED)
async def request_from_manager(
    body: ManagerRequestApproval,
    db: Session = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """A manager escalates a staff request."""
    try:
        with unit_of_work(db):
            request = service.create_from_manager(
                body.sender_id, body.request_approval_id, body.request_time
            )
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)


@router.put("/cancel", response_model=RequestApprovalResponse)
async def cancel_request(
    body: CancelRequestApproval,
    db: Session = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """Cancel a request and hide its jewelry."""
    try:
        with unit_of_work(db):
            request = service.cancel(body.request_id, body.note)
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)


@router.get("/{request_id}", response_model=RequestApprovalResponse)
async def get_request(
    request_id: int,
    service: ApprovalService = Depends(get_approval_service),
):
    """Get a specific approval request."""
    try:
        request = service.get_request_by_id(request_id)
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)


@router.get("/{request_id}/history", response_model=List[ApprovalHistoryResponse])
async def get_request_history(
    request_id: int,
    service: ApprovalService = Depends(get_approval_service),
):
    """Get the audit trail of an approval request."""
    try:
        history = service.get_history(request_id)
    except AuctionError as e:
        raise http_error(e)
    return [ApprovalHistoryResponse.model_validate(h) for h in history]


@router.get("/{request_id}/lineage", response_model=List[RequestApprovalResponse])
async def get_request_lineage(
    request_id: int,
    service: ApprovalService = Depends(get_approval_service),
):
    """Get the escalation chain ending at this request, oldest first."""
    try:
        chain = service.get_lineage(request_id)
    except AuctionError as e:
        raise http_error(e)
    return [RequestApprovalResponse.model_validate(r) for r in chain]


@router.put("/{request_id}/state", response_model=RequestApprovalResponse)
async def set_request_state(
    request_id: int,
    body: StateChange,
    db: Session = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """Change the state of a request. Clears its confirmation."""
    try:
        with unit_of_work(db):
            request = service.set_state(request_id, body.responder_id, body.state)
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)


@router.put("/{request_id}/confirm", response_model=RequestApprovalResponse)
async def confirm_request(
    request_id: int,
    body: Confirmation,
    db: Session = Depends(get_db),
    service: ApprovalService = Depends(get_approval_service),
):
    """Confirm a request without changing its state."""
    try:
        with unit_of_work(db):
            request = service.confirm(request_id, body.responder_id)
    except AuctionError as e:
        raise http_error(e)
    return RequestApprovalResponse.model_validate(request)
