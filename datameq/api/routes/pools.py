"""
Pool Routes - Inspect, fill and clear the two line pools.

Endpoints:
- GET /pools: Current length of data1 and data2
- POST /pools/{pool}/lines: Append lines (admins, or anyone while contribution is on)
- DELETE /pools/{pool}: Empty a pool (admins)
"""
from fastapi import APIRouter, Depends, Query

from datameq.allocation.types import UserAccount
from datameq.api.deps import get_current_user, get_service
from datameq.core.logging_config import get_logger
from datameq.models.allocation import (
    ClearResponse,
    ErrorResponse,
    IngestRequest,
    IngestResponse,
    PoolStatusResponse,
)
from datameq.services.allocation_service import AllocationService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/pools",
    tags=["Pools"],
    responses={
        400: {"model": ErrorResponse, "description": "Unknown pool"},
        403: {"model": ErrorResponse, "description": "Not allowed"},
    }
)


@router.get(
    "",
    response_model=PoolStatusResponse,
    summary="Pool lengths",
    description="Lengths of both pools. Served from a short-lived cache unless fresh=true."
)
def pool_status(
    fresh: bool = Query(default=False, description="Bypass the cached view"),
    service: AllocationService = Depends(get_service),
) -> PoolStatusResponse:
    lengths = service.get_pool_status(cached=not fresh)
    return PoolStatusResponse(data1=lengths["data1"], data2=lengths["data2"])


@router.post(
    "/{pool}/lines",
    response_model=IngestResponse,
    summary="Add lines to a pool"
)
def ingest_lines(
    pool: str,
    request: IngestRequest,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> IngestResponse:
    added = service.ingest_lines(user, pool, request.text)
    return IngestResponse(pool=pool, added=added, length=service.get_pool_length(pool))


@router.delete(
    "/{pool}",
    response_model=ClearResponse,
    summary="Clear a pool"
)
def clear_pool(
    pool: str,
    user: UserAccount = Depends(get_current_user),
    service: AllocationService = Depends(get_service),
) -> ClearResponse:
    removed = service.clear_pool(user, pool)
    return ClearResponse(pool=pool, removed=removed)
