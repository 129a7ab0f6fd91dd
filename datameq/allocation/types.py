"""
Allocation data structures.

Plain dataclasses shared by the allocation components and the storage
backends:
- UserAccount / QuotaRecord: who is asking and how much they may take
- SystemSettings: the global lock and contribution switch
- InsertSpec: a caller-supplied line placed at a 1-based output position
- LogEntry: one audit record per successful allocation
- AllocationResult: what a caller gets back
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

UNLIMITED = -1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"
    SUSPENDED = "suspended"


@dataclass
class QuotaRecord:
    """
    Per-user consumption counters and limits.

    Attributes:
        daily_limit: Lines the user may draw before a reset (-1 = unlimited)
        max_per_request: Cap on a single allocation's total count
        used: Lines drawn since the last reset
        used_pool1: Share of `used` drawn from data1
        used_pool2: Share of `used` drawn from data2

    `used` always equals `used_pool1 + used_pool2`.
    """
    daily_limit: int = 100
    max_per_request: int = 500
    used: int = 0
    used_pool1: int = 0
    used_pool2: int = 0

    @property
    def unlimited(self) -> bool:
        return self.daily_limit == UNLIMITED

    @property
    def remaining(self) -> Optional[int]:
        """Lines left before the limit, or None when unlimited."""
        if self.unlimited:
            return None
        return max(0, self.daily_limit - self.used)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "daily_limit": self.daily_limit,
            "max_per_request": self.max_per_request,
            "used": self.used,
            "used_pool1": self.used_pool1,
            "used_pool2": self.used_pool2,
            "unlimited": self.unlimited,
            "remaining": self.remaining,
        }


@dataclass
class UserAccount:
    """A user record as consumed by the allocation core."""
    id: str
    name: str
    role: UserRole = UserRole.USER
    email: str = ""
    status: UserStatus = UserStatus.ACTIVE
    quota: QuotaRecord = field(default_factory=QuotaRecord)
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def copy(self) -> "UserAccount":
        """Detached copy, so callers never share mutable state with a backend."""
        return replace(self, quota=replace(self.quota))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
            "quota": self.quota.to_dict(),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class SystemSettings:
    locked: bool = False
    allow_contribution: bool = False


@dataclass(frozen=True)
class InsertSpec:
    """
    A literal line to place in the composed output.

    position k means "before the line that would otherwise be the k-th line";
    len(combined) + 1 means "append at the end".
    """
    position: int
    text: str


@dataclass
class LogEntry:
    """
    Audit record for one successful allocation.

    Attributes:
        id: Unique entry id ("meq-<hex>")
        user_id: Who allocated
        user_name: Display name at allocation time
        count1: Lines drawn from data1
        count2: Lines drawn from data2
        total_generated: Lines in the composed output (drawn + inserted)
        timestamp: When the allocation committed (UTC)
    """
    user_id: str
    user_name: str
    count1: int
    count2: int
    total_generated: int
    id: str = field(default_factory=lambda: f"meq-{uuid.uuid4().hex}")
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "count1": self.count1,
            "count2": self.count2,
            "total_generated": self.total_generated,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class AllocationResult:
    """
    Outcome of a successful allocation.

    Attributes:
        lines: Composed output, one entry per line
        count1_drawn: Lines taken from data1
        count2_drawn: Lines taken from data2
        log_entry: The audit record appended for this allocation
    """
    lines: List[str]
    count1_drawn: int
    count2_drawn: int
    log_entry: LogEntry

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def total(self) -> int:
        return len(self.lines)

    @property
    def inserted(self) -> int:
        return self.total - self.count1_drawn - self.count2_drawn
