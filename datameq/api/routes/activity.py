"""
Activity Routes - The shared allocation log (most recent first).
"""
from fastapi import APIRouter, Depends

from datameq.api.deps import get_service
from datameq.models.allocation import ActivityEntryModel, ActivityResponse
from datameq.services.allocation_service import AllocationService

router = APIRouter(prefix="/activity", tags=["Activity"])


@router.get(
    "",
    response_model=ActivityResponse,
    summary="Recent allocations",
    description="The retained allocation log, newest first. Not paginated."
)
def recent_activity(service: AllocationService = Depends(get_service)) -> ActivityResponse:
    entries = [ActivityEntryModel.from_entry(e) for e in service.get_recent_activity()]
    return ActivityResponse(entries=entries, count=len(entries))
