"""
User Routes - Account directory.

Endpoints:
- POST /users: Create an account with the default quota (admins)
- GET /users: List accounts (admins)
- GET /users/{id}: One account (self, or admins)
- PUT /users/{id}/status: Block, suspend or reactivate (admins)
- DELETE /users/{id}: Remove an account (admins)
"""
from typing import List

from fastapi import APIRouter, Depends

from datameq.allocation.permissions import require_admin
from datameq.allocation.types import UserAccount
from datameq.api.deps import get_current_user, get_service
from datameq.core.logging_config import get_logger
from datameq.models.allocation import (
    ErrorResponse,
    UserCreateRequest,
    UserResponse,
    UserStatusRequest,
)
from datameq.services.allocation_service import AllocationService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        403: {"model": ErrorResponse, "description": "Not allowed"},
        404: {"model": ErrorResponse, "description": "User not found"},
    }
)


@router.post("", response_model=UserResponse, status_code=201, summary="Create user")
def create_user(
    request: UserCreateRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> UserResponse:
    created = service.users.create_user(
        user,
        name=request.name,
        role=request.role,
        email=request.email,
        user_id=request.user_id,
    )
    return UserResponse.from_account(created)


@router.get("", response_model=List[UserResponse], summary="List users")
def list_users(
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> List[UserResponse]:
    require_admin(user, "list users")
    return [UserResponse.from_account(u) for u in service.users.list_users()]


@router.get("/{user_id}", response_model=UserResponse, summary="Get user")
def get_user(
    user_id: str,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> UserResponse:
    if user.id != user_id:
        require_admin(user, "view other accounts")
    return UserResponse.from_account(service.users.get_user(user_id))


@router.put("/{user_id}/status", response_model=UserResponse, summary="Change account status")
def set_status(
    user_id: str,
    request: UserStatusRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> UserResponse:
    updated = service.users.set_status(user, user_id, request.status)
    return UserResponse.from_account(updated)


@router.delete("/{user_id}", status_code=204, summary="Delete user")
def delete_user(
    user_id: str,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> None:
    service.users.delete_user(user, user_id)
