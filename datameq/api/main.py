"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
It handles:
1. Application initialization
2. Router registration
3. Middleware configuration (audit & security headers)
4. Exception handlers (DataMeqError hierarchy)
5. Startup/shutdown events

Run with: uvicorn datameq.api.main:app --reload
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from datameq import __version__
from datameq.api.routes import (
    activity_router,
    allocations_router,
    health_router,
    pools_router,
    quota_router,
    settings_router,
    users_router,
)
from datameq.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from datameq.core.config import get_settings
from datameq.core.exceptions import DataMeqError
from datameq.core.logging_config import get_logger, setup_logging
from datameq.services.allocation_service import get_allocation_service

# Initialize logging before anything else
settings = get_settings()
setup_logging(settings.log_level, settings.log_dir, settings.app_name)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: build the service, make sure the administrator exists
    - Shutdown: release the storage backend
    """
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
    logger.info(f"Persistent storage: {settings.storage_persistent}")
    logger.info(f"Activity log cap: {settings.activity_log_cap}")
    logger.info(f"Audit Logging: {settings.enable_audit_logging}")

    service = get_allocation_service()
    service.users.seed_defaults()

    yield  # Application runs here

    logger.info(f"Shutting down {settings.app_name}")
    service.backend.close()


app = FastAPI(
    title="DataMeq Allocation API",
    description="""
    Hands out lines from two shared pools under per-user quotas.

    ## Features

    - **Exclusive allocation**: a line is delivered to at most one user
    - **Quotas**: daily allowance and per-request cap per user
    - **Inserts**: literal lines and presets placed at output positions
    - **Activity log**: the most recent allocations, newest first
    - **Administration**: lock, contribution switch, pool and user management

    Identify the caller with the `X-User-Id` header.
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ============================================================
# Middleware Configuration (Order matters!)
# ============================================================

app.add_middleware(SecurityHeadersMiddleware)

if settings.enable_audit_logging:
    app.add_middleware(AuditMiddleware)
    logger.info("Audit logging middleware enabled")

if settings.is_development():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.warning("CORS configured for development (all origins allowed)")


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(DataMeqError)
async def datameq_exception_handler(request: Request, exc: DataMeqError):
    """
    Handle all domain exceptions.

    InventoryChangedConcurrently adds the current pool lengths under
    "available" through its own to_dict().
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions globally.

    Detailed error information is only included in development mode.
    """
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "details": str(exc) if settings.is_development() else None,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    )


# ============================================================
# Routers
# ============================================================

app.include_router(health_router)
app.include_router(pools_router)
app.include_router(allocations_router)
app.include_router(quota_router)
app.include_router(activity_router)
app.include_router(settings_router)
app.include_router(users_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "DataMeq Allocation API",
        "version": __version__,
        "documentation": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "datameq.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development()
    )
