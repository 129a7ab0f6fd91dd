"""
Request and Response models for the allocation API.

These Pydantic models define the contract between client and server.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from datameq.allocation.types import (
    AllocationResult,
    LogEntry,
    QuotaRecord,
    SystemSettings,
    UserAccount,
    UserRole,
    UserStatus,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Pools
# ============================================================

class PoolStatusResponse(BaseModel):
    """Current size of both pools."""
    data1: int
    data2: int
    timestamp: datetime = Field(default_factory=_utcnow)


class IngestRequest(BaseModel):
    text: str = Field(
        ...,
        max_length=5_000_000,
        description="Raw text; one pool line per non-blank line",
        examples=["alice@example.com\nbob@example.com"]
    )


class IngestResponse(BaseModel):
    pool: str
    added: int
    length: int


class ClearResponse(BaseModel):
    pool: str
    removed: int


# ============================================================
# Allocation
# ============================================================

class InsertSpecModel(BaseModel):
    position: int = Field(..., description="1-based output position; <= 0 is ignored")
    text: str = Field(..., max_length=2000)


class AllocateRequest(BaseModel):
    """
    Request model for POST /allocations.

    Attributes:
        count1: Lines to draw from data1
        count2: Lines to draw from data2
        inserts: Literal lines placed at output positions
        presets: Text for the labelled preset slots ({label: text})
        preset_positions: Positions for presets without a fixed slot
    """
    count1: int = Field(default=0, description="Lines to draw from data1")
    count2: int = Field(default=0, description="Lines to draw from data2")
    inserts: List[InsertSpecModel] = Field(default_factory=list)
    presets: Dict[str, str] = Field(default_factory=dict)
    preset_positions: Dict[str, int] = Field(default_factory=dict)


class AllocationResponse(BaseModel):
    """Composed output of one allocation."""
    text: str
    count1_drawn: int
    count2_drawn: int
    inserted: int
    total: int
    log_id: str
    timestamp: datetime

    @classmethod
    def from_result(cls, result: AllocationResult) -> "AllocationResponse":
        return cls(
            text=result.text,
            count1_drawn=result.count1_drawn,
            count2_drawn=result.count2_drawn,
            inserted=result.inserted,
            total=result.total,
            log_id=result.log_entry.id,
            timestamp=result.log_entry.timestamp,
        )


class PresetModel(BaseModel):
    label: str
    position: Optional[int] = None
    fixed: bool


# ============================================================
# Activity
# ============================================================

class ActivityEntryModel(BaseModel):
    id: str
    user_id: str
    user_name: str
    count1: int
    count2: int
    total_generated: int
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "ActivityEntryModel":
        return cls(**entry.to_dict())


class ActivityResponse(BaseModel):
    entries: List[ActivityEntryModel]
    count: int


# ============================================================
# Quota
# ============================================================

class QuotaUpdateRequest(BaseModel):
    daily_limit: int = Field(..., description="-1 for unlimited")
    max_per_request: int = Field(..., description="Positive cap per request")


class QuotaResponse(BaseModel):
    user_id: str
    daily_limit: int
    max_per_request: int
    used: int
    used_pool1: int
    used_pool2: int
    unlimited: bool
    remaining: Optional[int] = None
    percent_used: Optional[float] = None

    @classmethod
    def from_record(cls, user_id: str, record: QuotaRecord) -> "QuotaResponse":
        return cls(user_id=user_id, **record.to_dict())


# ============================================================
# Settings
# ============================================================

class ToggleRequest(BaseModel):
    enabled: bool


class SettingsResponse(BaseModel):
    locked: bool
    allow_contribution: bool

    @classmethod
    def from_settings(cls, settings: SystemSettings) -> "SettingsResponse":
        return cls(locked=settings.locked, allow_contribution=settings.allow_contribution)


# ============================================================
# Users
# ============================================================

class UserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(default="", max_length=320)
    role: UserRole = UserRole.USER
    user_id: Optional[str] = Field(default=None, description="Generated when omitted")


class UserStatusRequest(BaseModel):
    status: UserStatus


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    status: UserStatus
    quota: QuotaResponse
    created_at: datetime

    @classmethod
    def from_account(cls, user: UserAccount) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status,
            quota=QuotaResponse.from_record(user.id, user.quota),
            created_at=user.created_at,
        )


# ============================================================
# Health & errors
# ============================================================

class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(default="healthy")
    version: str
    backend: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None
    available: Optional[Dict[str, int]] = None
    timestamp: datetime = Field(default_factory=_utcnow)
