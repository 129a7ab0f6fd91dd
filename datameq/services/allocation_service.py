"""
Allocation Service - The operations the UI and API layers call.

Wires the allocation components to one storage backend and applies the
role rules that sit at the service boundary:
- ingest: administrators always, others only when contribution is allowed
- clear pool, set quota, reset quota, lock: administrators only
- allocate: everyone (the ledger decides)

It also owns the PoolView: an InventoryChangedConcurrently refusal
refreshes the cached pool lengths before the error reaches the caller.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from datameq.allocation.activity import ActivityLog
from datameq.allocation.allocator import Allocator
from datameq.allocation.control import SystemControl
from datameq.allocation.permissions import require_admin
from datameq.allocation.pool import PoolStore
from datameq.allocation.pool_view import PoolView
from datameq.allocation.presets import PRESETS, build_preset_inserts
from datameq.allocation.quota import QuotaLedger
from datameq.allocation.types import (
    AllocationResult,
    InsertSpec,
    LogEntry,
    QuotaRecord,
    SystemSettings,
    UserAccount,
)
from datameq.core.config import Settings, get_settings
from datameq.core.exceptions import InventoryChangedConcurrently, PermissionDenied
from datameq.core.logging_config import get_logger
from datameq.services.user_service import UserDirectory
from datameq.storage import get_backend
from datameq.storage.base import StorageBackend

logger = get_logger(__name__)


class AllocationService:
    """
    Facade over pools, quotas, activity and system settings.

    Example:
        >>> service = AllocationService(InMemoryBackend())
        >>> admin = service.users.seed_defaults()
        >>> service.ingest_lines(admin, "data1", "a@x.com\\nb@x.com")
        2
        >>> service.allocate(admin, 1, 0).text
        'a@x.com'
    """

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.backend = backend or get_backend()

        self.control = SystemControl(self.backend)
        self.pools = PoolStore(self.backend)
        self.ledger = QuotaLedger(self.backend, self.control)
        self.activity = ActivityLog(self.backend, cap=self.settings.activity_log_cap)
        self.allocator = Allocator(self.pools, self.ledger, self.activity)
        self.users = UserDirectory(self.backend, self.settings)
        self.pool_view = PoolView(
            self.pools.lengths,
            max_age=self.settings.pool_view_max_age_seconds
        )

        logger.info(f"AllocationService initialized (backend={self.backend.name})")

    # ---------------------------------------------------------------
    # Pools
    # ---------------------------------------------------------------

    def ingest_lines(self, actor: UserAccount, pool: str, text: str) -> int:
        """
        Append the non-blank lines of `text` to `pool`.

        Raises:
            PermissionDenied: non-admin while contribution is disabled
        """
        if not actor.is_admin and not self.control.settings().allow_contribution:
            raise PermissionDenied("add data while contribution is disabled")
        added = self.pools.ingest(pool, text)
        self.pool_view.invalidate()
        return added

    def clear_pool(self, actor: UserAccount, pool: str) -> int:
        require_admin(actor, "clear pools")
        removed = self.pools.clear(pool)
        self.pool_view.invalidate()
        return removed

    def get_pool_length(self, pool: str) -> int:
        """Authoritative length of one pool."""
        return self.pools.length(pool)

    def get_pool_status(self, cached: bool = True) -> Dict[str, int]:
        """Lengths of both pools, from the view unless `cached` is False."""
        if cached:
            return self.pool_view.lengths()
        return self.pool_view.refresh()

    # ---------------------------------------------------------------
    # Allocation
    # ---------------------------------------------------------------

    def allocate(
        self,
        user: UserAccount,
        count1: int,
        count2: int,
        inserts: Optional[Iterable[InsertSpec]] = None,
        presets: Optional[Mapping[str, str]] = None,
        preset_positions: Optional[Mapping[str, int]] = None
    ) -> AllocationResult:
        """
        Run one allocation for `user`.

        `presets` ({label: text}) are expanded to fixed-position inserts and
        placed after the explicit `inserts`.
        """
        all_inserts = list(inserts or [])
        if presets:
            all_inserts.extend(self.build_preset_inserts(presets, preset_positions))

        try:
            result = self.allocator.allocate(user, count1, count2, all_inserts)
        except InventoryChangedConcurrently as e:
            self.pool_view.refresh(e.available)
            raise

        self.pool_view.invalidate()
        return result

    def list_presets(self) -> List[Dict[str, Any]]:
        return [
            {"label": preset.label, "position": preset.position, "fixed": preset.is_fixed}
            for preset in PRESETS
        ]

    def build_preset_inserts(
        self,
        texts: Mapping[str, str],
        positions: Optional[Mapping[str, int]] = None
    ) -> List[InsertSpec]:
        """Expand {label: text} into InsertSpecs (see allocation.presets)."""
        return build_preset_inserts(texts, positions)

    # ---------------------------------------------------------------
    # Quota
    # ---------------------------------------------------------------

    def set_quota(
        self,
        actor: UserAccount,
        user_id: str,
        daily_limit: int,
        max_per_request: int
    ) -> QuotaRecord:
        require_admin(actor, "change quotas")
        return self.ledger.set_limits(user_id, daily_limit, max_per_request)

    def reset_quota(self, actor: UserAccount, user_id: str) -> QuotaRecord:
        require_admin(actor, "reset usage")
        return self.ledger.reset(user_id)

    def get_quota(self, actor: UserAccount, user_id: str) -> Dict[str, Any]:
        """Quota snapshot; users may read their own, admins anyone's."""
        if actor.id != user_id:
            require_admin(actor, "view other users' quotas")
        return self.ledger.snapshot(user_id)

    # ---------------------------------------------------------------
    # Activity & settings
    # ---------------------------------------------------------------

    def get_recent_activity(self) -> List[LogEntry]:
        return self.activity.recent()

    def get_system_settings(self) -> SystemSettings:
        return self.control.settings()

    def set_system_lock(self, actor: UserAccount, locked: bool) -> SystemSettings:
        return self.control.set_lock(actor, locked)

    def set_allow_contribution(self, actor: UserAccount, allowed: bool) -> SystemSettings:
        return self.control.set_allow_contribution(actor, allowed)

    def check_health(self) -> bool:
        return self.backend.check_health()


# Singleton instance
_allocation_service: Optional[AllocationService] = None


def get_allocation_service() -> AllocationService:
    """Get or create the global AllocationService."""
    global _allocation_service
    if _allocation_service is None:
        _allocation_service = AllocationService()
    return _allocation_service


def reset_allocation_service() -> None:
    """Reset the global AllocationService (useful for testing)."""
    global _allocation_service
    _allocation_service = None
