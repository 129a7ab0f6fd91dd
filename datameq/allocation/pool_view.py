"""
Pool View - Read-only cached pool lengths for display.

Sessions poll pool sizes far more often than they allocate. The view
serves cached lengths and reconciles against the authoritative store
when it is older than `max_age` seconds or has been invalidated. The
allocation path never reads from it.
"""
import threading
import time
from typing import Callable, Dict, Optional

from datameq.core.logging_config import get_logger

logger = get_logger(__name__)


class PoolView:
    """
    Cached {pool: length} mapping.

    Example:
        >>> view = PoolView(pools.lengths, max_age=0.5)
        >>> view.lengths()
        {'data1': 100, 'data2': 50}
        >>> view.invalidate()   # next read goes to the store
    """

    def __init__(
        self,
        loader: Callable[[], Dict[str, int]],
        max_age: float = 0.5,
        clock: Callable[[], float] = time.monotonic
    ):
        self._loader = loader
        self.max_age = max_age
        self._clock = clock
        self._lengths: Optional[Dict[str, int]] = None
        self._loaded_at = 0.0
        self._stale = True
        self._lock = threading.Lock()

    @property
    def is_stale(self) -> bool:
        with self._lock:
            return self._stale or self._clock() - self._loaded_at > self.max_age

    def lengths(self) -> Dict[str, int]:
        """Cached lengths, reconciled first when stale."""
        if self.is_stale:
            return self.refresh()
        with self._lock:
            return dict(self._lengths or {})

    def refresh(self, observed: Optional[Dict[str, int]] = None) -> Dict[str, int]:
        """
        Replace the cached lengths.

        Args:
            observed: Lengths already read from the store (for example the
                      `available` map of InventoryChangedConcurrently). When
                      omitted the loader is called.
        """
        lengths = dict(observed) if observed is not None else self._loader()
        with self._lock:
            if observed is not None and self._lengths:
                # Partial observation: keep cached values for pools not observed
                merged = dict(self._lengths)
                merged.update(lengths)
                lengths = merged
            self._lengths = lengths
            self._loaded_at = self._clock()
            self._stale = False
        logger.debug(f"Pool view refreshed: {lengths}")
        return dict(lengths)

    def invalidate(self) -> None:
        with self._lock:
            self._stale = True
