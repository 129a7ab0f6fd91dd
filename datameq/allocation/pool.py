"""
Pool Store - The two consumable line inventories (data1, data2).

Lines are appended at the back by ingestion and consumed strictly from
the front by allocation. The actual storage and its atomic take live in
the StorageBackend; this class adds text parsing, pool-name validation
and logging.
"""
from typing import Callable, Dict, List, Optional

from datameq.allocation.types import QuotaRecord
from datameq.core.exceptions import InvalidRequest
from datameq.core.logging_config import LoggerMixin
from datameq.core.validators import POOL_NAMES, split_lines, validate_pool_name
from datameq.storage.base import StorageBackend


class PoolStore(LoggerMixin):
    """
    FIFO inventory of text lines.

    Example:
        >>> pools = PoolStore(InMemoryBackend())
        >>> pools.ingest("data1", "a@x.com\\n\\n b@x.com ")
        2
        >>> pools.take_prefix("data1", 1)
        ['a@x.com']
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def ingest(self, pool: str, raw_text: str) -> int:
        """
        Append the non-blank, trimmed lines of `raw_text` to `pool`.

        Returns:
            Number of lines added
        """
        validate_pool_name(pool)
        lines = split_lines(raw_text)
        if not lines:
            self.logger.debug(f"Ingest into {pool}: no usable lines")
            return 0
        new_length = self.backend.append_lines(pool, lines)
        self.logger.info(f"Ingested {len(lines)} lines into {pool} (now {new_length})")
        return len(lines)

    def clear(self, pool: str) -> int:
        """Empty `pool`. Returns the number of lines discarded."""
        validate_pool_name(pool)
        removed = self.backend.clear_pool(pool)
        self.logger.warning(f"Cleared {pool}: {removed} lines discarded")
        return removed

    def length(self, pool: str) -> int:
        validate_pool_name(pool)
        return self.backend.pool_length(pool)

    def lengths(self) -> Dict[str, int]:
        return {pool: self.backend.pool_length(pool) for pool in POOL_NAMES}

    def take_prefix(self, pool: str, n: int) -> List[str]:
        """
        Remove and return the first `n` lines of `pool`.

        Raises:
            InvalidRequest: If n is negative
            InventoryChangedConcurrently: If the pool holds fewer than n lines
        """
        return self.take_many({pool: n})[pool]

    def take_many(
        self,
        counts: Dict[str, int],
        user_id: Optional[str] = None,
        charge: Optional[Callable[[QuotaRecord], None]] = None
    ) -> Dict[str, List[str]]:
        """
        Take a prefix from several pools as one transaction.

        Either every pool gives up exactly its requested count or none is
        touched. `charge` (see QuotaLedger.commit) is applied to `user_id`'s
        quota in the same transaction.
        """
        for pool, n in counts.items():
            validate_pool_name(pool)
            if n < 0:
                raise InvalidRequest("Counts cannot be negative.", field="count")
        taken = self.backend.take_prefixes(counts, user_id=user_id, charge=charge)
        self.logger.debug(
            "Took " + ", ".join(f"{len(lines)} from {pool}" for pool, lines in taken.items())
        )
        return taken
