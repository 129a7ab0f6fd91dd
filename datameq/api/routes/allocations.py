"""
Allocation Routes - Draw lines from the pools.

POST /allocations runs one allocation for the calling user. Refusals map
to distinct status codes so clients can react to each:

- 400 invalid_request: bad counts
- 403 account_inactive: blocked or suspended account
- 409 inventory_changed: another user consumed the lines first; the body
  carries the current pool lengths under "available"
- 413 request_too_large: above the per-request cap
- 423 system_locked: an administrator paused allocation
- 429 quota_exceeded: not enough allowance left
"""
from typing import List

from fastapi import APIRouter, Depends

from datameq.allocation.types import InsertSpec, UserAccount
from datameq.api.deps import get_current_user, get_service
from datameq.core.logging_config import get_logger
from datameq.models.allocation import (
    AllocateRequest,
    AllocationResponse,
    ErrorResponse,
    PresetModel,
)
from datameq.services.allocation_service import AllocationService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/allocations",
    tags=["Allocations"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        403: {"model": ErrorResponse, "description": "Account inactive"},
        409: {"model": ErrorResponse, "description": "Inventory changed concurrently"},
        413: {"model": ErrorResponse, "description": "Request too large"},
        423: {"model": ErrorResponse, "description": "System locked"},
        429: {"model": ErrorResponse, "description": "Quota exceeded"},
    }
)


@router.post(
    "",
    response_model=AllocationResponse,
    summary="Allocate lines",
    description="""
    Draw `count1` lines from data1 and `count2` from data2, merge in the
    inserts and return the composed text. Lines are handed out once;
    usage is charged only when the draw succeeds.
    """
)
def allocate(
    request: AllocateRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> AllocationResponse:
    inserts = [InsertSpec(position=i.position, text=i.text) for i in request.inserts]
    result = service.allocate(
        user,
        request.count1,
        request.count2,
        inserts=inserts,
        presets=request.presets,
        preset_positions=request.preset_positions,
    )
    return AllocationResponse.from_result(result)


@router.get(
    "/presets",
    response_model=List[PresetModel],
    summary="Insert presets"
)
def list_presets(service: AllocationService = Depends(get_service)) -> List[PresetModel]:
    return [PresetModel(**preset) for preset in service.list_presets()]
