"""
Allocator - Draw lines from both pools for one user.

One allocation runs these gates in order:
1. Validate counts (InvalidRequest)
2. Quota ledger check: lock, per-request cap, remaining allowance
3. In one backend transaction: re-check the remaining allowance against
   the stored record, check both pool lengths, take both prefixes and
   charge the quota (non-administrators only)
4. Combine: data1 lines first, then data2 lines
5. Compose with the inserts
6. Append the activity log entry
7. Return the result

Steps 1-3 change nothing when they fail. Once step 3 succeeds the rest
always runs. For non-administrators the whole sequence runs under the
user's lock (user lock first, then pool locks).
"""
from typing import Iterable, Optional

from datameq.allocation.activity import ActivityLog
from datameq.allocation.compositor import compose
from datameq.allocation.permissions import ensure_active, is_exempt_from_quota
from datameq.allocation.pool import PoolStore
from datameq.allocation.quota import QuotaLedger
from datameq.allocation.types import AllocationResult, InsertSpec, UserAccount
from datameq.core.exceptions import InventoryChangedConcurrently
from datameq.core.logging_config import LoggerMixin
from datameq.core.validators import validate_counts


class Allocator(LoggerMixin):
    """
    Coordinates pools, quota, composition and logging for one request.

    Example:
        >>> allocator = Allocator(pools, ledger, activity)
        >>> result = allocator.allocate(alice, 10, 5, [InsertSpec(1, "hello")])
        >>> result.total
        16
    """

    def __init__(self, pools: PoolStore, ledger: QuotaLedger, activity: ActivityLog):
        self.pools = pools
        self.ledger = ledger
        self.activity = activity

    def allocate(
        self,
        user: UserAccount,
        count1: int,
        count2: int,
        inserts: Optional[Iterable[InsertSpec]] = None
    ) -> AllocationResult:
        """
        Allocate `count1` lines from data1 and `count2` from data2.

        Raises:
            InvalidRequest: Negative counts or nothing requested
            AccountInactive: Blocked or suspended non-admin account
            SystemLocked / RequestTooLarge / QuotaExceeded: Ledger refusals
            InventoryChangedConcurrently: A pool ran short at take time
        """
        validate_counts(count1, count2)
        ensure_active(user)
        inserts = list(inserts or [])

        exempt = is_exempt_from_quota(user)

        with self.ledger.hold(user):
            self.ledger.check_and_reserve(user, count1 + count2)

            try:
                taken = self.pools.take_many(
                    {"data1": count1, "data2": count2},
                    user_id=user.id,
                    charge=None if exempt else self.ledger.commit(user, count1, count2),
                )
            except InventoryChangedConcurrently as e:
                self.logger.warning(
                    f"Inventory changed under {user.id}: requested={e.requested} available={e.available}"
                )
                raise

            picks1, picks2 = taken["data1"], taken["data2"]
            if not exempt:
                self.logger.debug(f"Charged {user.id}: +{len(picks1)}/+{len(picks2)}")

            lines = compose(picks1 + picks2, inserts)
            entry = self.activity.record(user, len(picks1), len(picks2), len(lines))

        return AllocationResult(
            lines=lines,
            count1_drawn=len(picks1),
            count2_drawn=len(picks2),
            log_entry=entry,
        )
