"""
Health Check Routes - Liveness and readiness endpoints.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from datameq import __version__
from datameq.api.deps import get_service
from datameq.core.logging_config import get_logger
from datameq.models.allocation import HealthResponse
from datameq.services.allocation_service import AllocationService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Returns 200 OK while the API process is running."
)
async def health_check() -> HealthResponse:
    logger.debug("Health check requested")
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check endpoint",
    description="Returns 200 when the storage backend is reachable, 503 otherwise.",
    responses={503: {"model": HealthResponse}}
)
def readiness_check(service: AllocationService = Depends(get_service)):
    """
    Verify the storage backend answers.
    """
    logger.debug("Readiness check requested")
    healthy = service.check_health()
    response = HealthResponse(
        status="ready" if healthy else "unavailable",
        version=__version__,
        backend=service.backend.name,
    )
    if not healthy:
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response
