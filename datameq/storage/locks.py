"""
Lock registry shared by the storage backends.

Pools each get their own lock. Users get a lock created lazily on first
use. Multi-pool operations must go through pools_locked(), which acquires
in sorted order so overlapping requests can never deadlock.
"""
import threading
from contextlib import ExitStack, contextmanager
from typing import Dict, Iterable, Iterator

from datameq.core.validators import POOL_NAMES


class LockRegistry:
    """Named re-entrant locks for pools and users."""

    def __init__(self):
        self._pool_locks: Dict[str, threading.RLock] = {
            pool: threading.RLock() for pool in POOL_NAMES
        }
        self._user_locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self.activity = threading.RLock()
        self.settings = threading.RLock()

    def pool(self, pool: str) -> threading.RLock:
        return self._pool_locks[pool]

    @contextmanager
    def pools_locked(self, pools: Iterable[str]) -> Iterator[None]:
        """Hold every named pool lock, acquired in sorted order."""
        with ExitStack() as stack:
            for name in sorted(set(pools)):
                stack.enter_context(self._pool_locks[name])
            yield

    def user(self, user_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._user_locks[user_id] = lock
            return lock

    def forget_user(self, user_id: str) -> None:
        with self._registry_lock:
            self._user_locks.pop(user_id, None)
