"""
Storage Backend - The authoritative store behind the allocation core.

The core never holds pools, quotas or logs itself. It calls a
StorageBackend, which owns the data and provides the few transactional
primitives the core needs:

- take_prefixes(): check-length-then-slice across one or more pools as a
  single unit (all pools succeed or none change), optionally charging one
  user's quota in the same unit
- update_quota(): read-modify-write of one user's QuotaRecord, serialized
  per user id
- user_lock(): a per-user critical section spanning a whole allocation
- append_activity(): bounded, newest-first log append

Two implementations exist: InMemoryBackend (single process) and
DatabaseBackend (SQLAlchemy).
"""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable, Dict, List, Optional

from datameq.allocation.types import LogEntry, QuotaRecord, SystemSettings, UserAccount


class StorageBackend(ABC):
    """Abstract authoritative store for pools, users, settings and logs."""

    name: str = "abstract"

    # ---------------------------------------------------------------
    # Pools
    # ---------------------------------------------------------------

    @abstractmethod
    def pool_length(self, pool: str) -> int:
        """Number of lines currently in `pool`."""

    @abstractmethod
    def append_lines(self, pool: str, lines: List[str]) -> int:
        """Append `lines` to the end of `pool`. Returns the new length."""

    @abstractmethod
    def clear_pool(self, pool: str) -> int:
        """Remove every line from `pool`. Returns how many were removed."""

    @abstractmethod
    def take_prefixes(
        self,
        counts: Dict[str, int],
        user_id: Optional[str] = None,
        charge: Optional[Callable[[QuotaRecord], None]] = None
    ) -> Dict[str, List[str]]:
        """
        Atomically remove the first `n` lines of each named pool.

        Every pool length is checked before anything is removed. If any
        pool is short, nothing changes and InventoryChangedConcurrently is
        raised with the lengths observed inside the critical section.

        With `charge`, the stored QuotaRecord of `user_id` is read, passed
        to `charge` and written back in the same unit as the take. If
        `charge` raises, nothing is removed and nothing is charged.
        """

    # ---------------------------------------------------------------
    # Users & quotas
    # ---------------------------------------------------------------

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserAccount]:
        """Return a detached copy of the user, or None."""

    @abstractmethod
    def list_users(self) -> List[UserAccount]:
        """All users, in creation order."""

    @abstractmethod
    def save_user(self, user: UserAccount) -> None:
        """Insert or replace a user record (including its quota)."""

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """Remove a user. Returns False when the id was unknown."""

    @abstractmethod
    def update_quota(
        self,
        user_id: str,
        mutate: Callable[[QuotaRecord], None]
    ) -> QuotaRecord:
        """
        Apply `mutate` to the stored QuotaRecord under the user's lock.

        Returns a copy of the updated record. Raises UserNotFound if the id
        is unknown.
        """

    @abstractmethod
    def user_lock(self, user_id: str) -> AbstractContextManager:
        """Re-entrant per-user critical section."""

    # ---------------------------------------------------------------
    # System settings
    # ---------------------------------------------------------------

    @abstractmethod
    def load_system_settings(self) -> SystemSettings:
        """Current global settings (defaults when never saved)."""

    @abstractmethod
    def update_system_settings(
        self,
        mutate: Callable[[SystemSettings], None]
    ) -> SystemSettings:
        """Read-modify-write the global settings. Returns the new settings."""

    # ---------------------------------------------------------------
    # Activity log
    # ---------------------------------------------------------------

    @abstractmethod
    def append_activity(self, entry: LogEntry, cap: int) -> None:
        """Prepend `entry`, keeping at most `cap` entries (oldest dropped)."""

    @abstractmethod
    def recent_activity(self) -> List[LogEntry]:
        """Retained entries, newest first."""

    # ---------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------

    def check_health(self) -> bool:
        """True when the store is reachable."""
        return True

    def close(self) -> None:
        """Release any held resources."""
