"""
Models module - Pydantic schemas for the HTTP layer.

Request models validate input, response models format output. Domain
types live in datameq.allocation.types.
"""
from datameq.models.allocation import (
    ActivityEntryModel,
    ActivityResponse,
    AllocateRequest,
    AllocationResponse,
    ClearResponse,
    ErrorResponse,
    HealthResponse,
    IngestRequest,
    IngestResponse,
    InsertSpecModel,
    PoolStatusResponse,
    PresetModel,
    QuotaResponse,
    QuotaUpdateRequest,
    SettingsResponse,
    ToggleRequest,
    UserCreateRequest,
    UserResponse,
    UserStatusRequest,
)

__all__ = [
    "ActivityEntryModel",
    "ActivityResponse",
    "AllocateRequest",
    "AllocationResponse",
    "ClearResponse",
    "ErrorResponse",
    "HealthResponse",
    "IngestRequest",
    "IngestResponse",
    "InsertSpecModel",
    "PoolStatusResponse",
    "PresetModel",
    "QuotaResponse",
    "QuotaUpdateRequest",
    "SettingsResponse",
    "ToggleRequest",
    "UserCreateRequest",
    "UserResponse",
    "UserStatusRequest",
]
