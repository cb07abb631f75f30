"""User management API endpoints."""

from typing import Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm import Session

from auction.api.deps import get_db, page_request
from auction.api.schemas.common import PaginatedResponse
from auction.core.enums import Role
from auction.db.models import User
from auction.db.repositories import UserRepository
from auction.db.session import unit_of_work

router = APIRouter(prefix="/users", tags=["users"])


# Schemas
class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    full_name: Optional[str] = None
    role: Role = Role.MEMBER


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str]
    role: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


UserPage = PaginatedResponse[UserResponse]


# Endpoints
@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
):
    """Create a user."""
    existing = db.query(User).filter(
        or_(User.username == body.username, User.email == body.email)
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="Username or email already registered")

    with unit_of_work(db):
        user = UserRepository(db).save(User(
            username=body.username,
            email=body.email,
            full_name=body.full_name,
            role=body.role.value,
        ))
    return UserResponse.model_validate(user)


@router.get("", response_model=UserPage)
async def list_users(
    role: Role = Role.MEMBER,
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
):
    """List users with a role."""
    result = UserRepository(db).list_by_role(role, page_request(page, per_page))
    return UserPage.from_page(result, UserResponse)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
):
    """Get a specific user."""
    user = UserRepository(db).get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)
