"""
Settings Routes - Global lock and contribution switch.

Endpoints:
- GET /settings: Current settings
- PUT /settings/lock: Lock or unlock allocation for non-admins (admins)
- PUT /settings/contribution: Allow non-admins to add data (admins)
"""
from fastapi import APIRouter, Depends

from datameq.allocation.types import UserAccount
from datameq.api.deps import get_current_user, get_service
from datameq.models.allocation import ErrorResponse, SettingsResponse, ToggleRequest
from datameq.services.allocation_service import AllocationService

router = APIRouter(
    prefix="/settings",
    tags=["Settings"],
    responses={403: {"model": ErrorResponse, "description": "Not allowed"}}
)


@router.get("", response_model=SettingsResponse, summary="System settings")
def get_settings_view(service: AllocationService = Depends(get_service)) -> SettingsResponse:
    return SettingsResponse.from_settings(service.get_system_settings())


@router.put("/lock", response_model=SettingsResponse, summary="Lock or unlock allocation")
def set_lock(
    request: ToggleRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> SettingsResponse:
    return SettingsResponse.from_settings(service.set_system_lock(user, request.enabled))


@router.put("/contribution", response_model=SettingsResponse, summary="Allow user contribution")
def set_contribution(
    request: ToggleRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> SettingsResponse:
    return SettingsResponse.from_settings(service.set_allow_contribution(user, request.enabled))
