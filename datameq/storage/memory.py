"""
In-Memory Backend - Single-process authoritative store.

Keeps pools as deques, users as QuotaRecord-bearing dataclasses and the
activity log as a bounded list. All access is serialized through
LockRegistry locks, so concurrent request threads in one process see a
single consistent store.

Architecture note:
State is lost on restart and not shared between processes. Set
STORAGE_PERSISTENT=true to use the database backend instead.
"""
from collections import deque
from contextlib import AbstractContextManager, nullcontext
from dataclasses import replace
from typing import Callable, Deque, Dict, List, Optional

from datameq.allocation.types import LogEntry, QuotaRecord, SystemSettings, UserAccount
from datameq.core.exceptions import InventoryChangedConcurrently, UserNotFound
from datameq.core.logging_config import get_logger
from datameq.core.validators import POOL_NAMES
from datameq.storage.base import StorageBackend
from datameq.storage.locks import LockRegistry

logger = get_logger(__name__)


class InMemoryBackend(StorageBackend):
    """
    Thread-safe in-process store.

    Example:
        >>> backend = InMemoryBackend()
        >>> backend.append_lines("data1", ["a", "b", "c"])
        3
        >>> backend.take_prefixes({"data1": 2})
        {'data1': ['a', 'b']}
    """

    name = "memory"

    def __init__(self):
        self.locks = LockRegistry()
        self._pools: Dict[str, Deque[str]] = {pool: deque() for pool in POOL_NAMES}
        self._users: Dict[str, UserAccount] = {}
        self._settings = SystemSettings()
        self._activity: List[LogEntry] = []

        logger.info("InMemoryBackend initialized")

    # ---------------------------------------------------------------
    # Pools
    # ---------------------------------------------------------------

    def pool_length(self, pool: str) -> int:
        with self.locks.pool(pool):
            return len(self._pools[pool])

    def append_lines(self, pool: str, lines: List[str]) -> int:
        with self.locks.pool(pool):
            self._pools[pool].extend(lines)
            return len(self._pools[pool])

    def clear_pool(self, pool: str) -> int:
        with self.locks.pool(pool):
            removed = len(self._pools[pool])
            self._pools[pool].clear()
            return removed

    def take_prefixes(
        self,
        counts: Dict[str, int],
        user_id: Optional[str] = None,
        charge: Optional[Callable[[QuotaRecord], None]] = None
    ) -> Dict[str, List[str]]:
        user_scope = self.locks.user(user_id) if charge is not None else nullcontext()
        with user_scope, self.locks.pools_locked(counts):
            charged = None
            if charge is not None:
                user = self._users.get(user_id)
                if user is None:
                    raise UserNotFound(user_id)
                charged = replace(user.quota)
                charge(charged)

            available = {pool: len(self._pools[pool]) for pool in counts}
            if any(counts[pool] > available[pool] for pool in counts):
                raise InventoryChangedConcurrently(requested=counts, available=available)

            taken: Dict[str, List[str]] = {}
            for pool, n in counts.items():
                lines = self._pools[pool]
                taken[pool] = [lines.popleft() for _ in range(n)]
            if charged is not None:
                user.quota = charged
            return taken

    # ---------------------------------------------------------------
    # Users & quotas
    # ---------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[UserAccount]:
        with self.locks.user(user_id):
            user = self._users.get(user_id)
            return user.copy() if user else None

    def list_users(self) -> List[UserAccount]:
        # dict preserves insertion (creation) order
        return [user.copy() for user in list(self._users.values())]

    def save_user(self, user: UserAccount) -> None:
        with self.locks.user(user.id):
            self._users[user.id] = user.copy()

    def delete_user(self, user_id: str) -> bool:
        with self.locks.user(user_id):
            removed = self._users.pop(user_id, None) is not None
        if removed:
            self.locks.forget_user(user_id)
        return removed

    def update_quota(
        self,
        user_id: str,
        mutate: Callable[[QuotaRecord], None]
    ) -> QuotaRecord:
        with self.locks.user(user_id):
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFound(user_id)
            mutate(user.quota)
            return QuotaRecord(**vars(user.quota))

    def user_lock(self, user_id: str) -> AbstractContextManager:
        return self.locks.user(user_id)

    # ---------------------------------------------------------------
    # System settings
    # ---------------------------------------------------------------

    def load_system_settings(self) -> SystemSettings:
        with self.locks.settings:
            return SystemSettings(**vars(self._settings))

    def update_system_settings(
        self,
        mutate: Callable[[SystemSettings], None]
    ) -> SystemSettings:
        with self.locks.settings:
            mutate(self._settings)
            return SystemSettings(**vars(self._settings))

    # ---------------------------------------------------------------
    # Activity log
    # ---------------------------------------------------------------

    def append_activity(self, entry: LogEntry, cap: int) -> None:
        with self.locks.activity:
            self._activity.insert(0, entry)
            del self._activity[cap:]

    def recent_activity(self) -> List[LogEntry]:
        with self.locks.activity:
            return list(self._activity)
