"""
Quota Routes - View and administer per-user quotas.

Endpoints:
- GET /quota/{user_id}: Snapshot (own quota, or any quota for admins)
- PUT /quota/{user_id}: Set daily_limit / max_per_request (admins)
- POST /quota/{user_id}/reset: Zero usage counters (admins)
"""
from fastapi import APIRouter, Depends

from datameq.allocation.types import UserAccount
from datameq.api.deps import get_current_user, get_service
from datameq.models.allocation import ErrorResponse, QuotaResponse, QuotaUpdateRequest
from datameq.services.allocation_service import AllocationService

router = APIRouter(
    prefix="/quota",
    tags=["Quota"],
    responses={
        403: {"model": ErrorResponse, "description": "Not allowed"},
        404: {"model": ErrorResponse, "description": "User not found"},
    }
)


@router.get("/{user_id}", response_model=QuotaResponse, summary="Quota snapshot")
def get_quota(
    user_id: str,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> QuotaResponse:
    return QuotaResponse(user_id=user_id, **service.get_quota(user, user_id))


@router.put("/{user_id}", response_model=QuotaResponse, summary="Set quota limits")
def set_quota(
    user_id: str,
    request: QuotaUpdateRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> QuotaResponse:
    record = service.set_quota(user, user_id, request.daily_limit, request.max_per_request)
    return QuotaResponse.from_record(user_id, record)


@router.post("/{user_id}/reset", response_model=QuotaResponse, summary="Reset usage")
def reset_quota(
    user_id: str,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> QuotaResponse:
    record = service.reset_quota(user, user_id)
    return QuotaResponse.from_record(user_id, record)
