"""
Storage Package - Authoritative store for pools, quotas, settings and logs.

## In-memory (default)
- Single process, lost on restart
- Good for development/testing

## Persistent (SQLAlchemy)
- Shared by every process pointed at the same database
- Survives restarts

Use `get_backend()` to get the backend selected by STORAGE_PERSISTENT.

Example:
    >>> from datameq.storage import get_backend
    >>> backend = get_backend()
    >>> backend.pool_length("data1")
    0
"""
from typing import Optional

from datameq.core.config import get_settings
from datameq.core.logging_config import get_logger
from datameq.storage.base import StorageBackend
from datameq.storage.memory import InMemoryBackend
from datameq.storage.persistent import DatabaseBackend

logger = get_logger(__name__)

_backend: Optional[StorageBackend] = None


def get_backend() -> StorageBackend:
    """
    Get or create the global backend.

    Returns:
        - DatabaseBackend if STORAGE_PERSISTENT=true
        - InMemoryBackend otherwise
    """
    global _backend
    if _backend is None:
        settings = get_settings()
        if settings.storage_persistent:
            _backend = DatabaseBackend()
        else:
            _backend = InMemoryBackend()
        logger.info(f"Storage backend selected: {_backend.name}")
    return _backend


def reset_backend() -> None:
    """Close and forget the global backend (useful for testing)."""
    global _backend
    if _backend is not None:
        _backend.close()
    _backend = None


__all__ = [
    "StorageBackend",
    "InMemoryBackend",
    "DatabaseBackend",
    "get_backend",
    "reset_backend",
]
