"""
Activity Log - Bounded, newest-first record of allocations.
"""
from typing import List

from datameq.allocation.types import LogEntry, UserAccount
from datameq.core.logging_config import LoggerMixin
from datameq.storage.base import StorageBackend

DEFAULT_CAP = 100


class ActivityLog(LoggerMixin):
    """
    Append-only log of allocation events, capped at `cap` entries.

    Entries from different users interleave in commit order; no global
    request order is implied.
    """

    def __init__(self, backend: StorageBackend, cap: int = DEFAULT_CAP):
        if cap < 1:
            raise ValueError("Activity log cap must be at least 1")
        self.backend = backend
        self.cap = cap

    def append(self, entry: LogEntry) -> LogEntry:
        self.backend.append_activity(entry, self.cap)
        return entry

    def record(self, user: UserAccount, count1: int, count2: int, total_generated: int) -> LogEntry:
        """Build and append the entry for one allocation."""
        entry = LogEntry(
            user_id=user.id,
            user_name=user.name,
            count1=count1,
            count2=count2,
            total_generated=total_generated,
        )
        self.append(entry)
        self.logger.info(
            f"ALLOCATION {entry.id}: user={user.id} data1={count1} data2={count2} "
            f"total={total_generated}"
        )
        return entry

    def recent(self) -> List[LogEntry]:
        """Every retained entry, newest first."""
        return self.backend.recent_activity()
