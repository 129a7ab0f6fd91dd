"""
Allocation Package - The Data Meq allocation core.

- pool.py        : PoolStore, FIFO line inventories
- quota.py       : QuotaLedger, per-user limits and usage
- allocator.py   : Allocator, the atomic draw-compose-charge-log sequence
- compositor.py  : positional insert merging
- activity.py    : ActivityLog, bounded newest-first audit trail
- control.py     : SystemControl, global lock and contribution switch
- pool_view.py   : PoolView, cached pool lengths for display
- presets.py     : fixed insert slots

Components are imported from their modules directly; the package root
re-exports only the data types and the compositor.
"""
from datameq.allocation.types import (
    UNLIMITED,
    AllocationResult,
    InsertSpec,
    LogEntry,
    QuotaRecord,
    SystemSettings,
    UserAccount,
    UserRole,
    UserStatus,
)
from datameq.allocation.compositor import compose

__all__ = [
    "UNLIMITED",
    "AllocationResult",
    "InsertSpec",
    "LogEntry",
    "QuotaRecord",
    "SystemSettings",
    "UserAccount",
    "UserRole",
    "UserStatus",
    "compose",
]
