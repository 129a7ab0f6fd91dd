"""
Quota Ledger - Per-user consumption counters and limits.

Checks run against the stored QuotaRecord, never against the caller's
copy of the user, so a stale session cannot slip past its limit. Usage is
charged by the backend in the same unit as the pool take, and every
counter update is a read-modify-write serialized per user id.
"""
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Dict, Optional

from datameq.allocation.control import SystemControl
from datameq.allocation.permissions import is_exempt_from_quota
from datameq.allocation.types import QuotaRecord, UserAccount
from datameq.core.exceptions import QuotaExceeded, RequestTooLarge, SystemLocked, UserNotFound
from datameq.core.logging_config import LoggerMixin
from datameq.core.validators import validate_limits
from datameq.storage.base import StorageBackend


class QuotaLedger(LoggerMixin):
    """
    Enforces and records per-user allocation quotas.

    Example:
        >>> ledger = QuotaLedger(backend, SystemControl(backend))
        >>> ledger.check_and_reserve(alice, 15)   # raises on refusal
        >>> backend.update_quota(alice.id, ledger.commit(alice, 10, 5)).used
        15
    """

    def __init__(self, backend: StorageBackend, control: SystemControl):
        self.backend = backend
        self.control = control

    def hold(self, user: UserAccount) -> ContextManager:
        """
        Critical section for one user's check-then-take sequence.

        Overlapping requests from the same user (two tabs) are serialized so
        they cannot both pass the check and jointly overrun the limit.
        Exempt users are not charged and need no lock.
        """
        if is_exempt_from_quota(user):
            return nullcontext()
        return self.backend.user_lock(user.id)

    def current(self, user_id: str) -> QuotaRecord:
        user = self.backend.get_user(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user.quota

    def check_and_reserve(self, user: UserAccount, requested_total: int) -> Optional[QuotaRecord]:
        """
        Decide whether `user` may draw `requested_total` lines now.

        Does not change any counter. Administrators always pass.

        Returns:
            The stored QuotaRecord the decision was made on (None for admins)

        Raises:
            SystemLocked: The global lock is on
            RequestTooLarge: requested_total exceeds max_per_request
            QuotaExceeded: requested_total exceeds the remaining allowance
        """
        if is_exempt_from_quota(user):
            return None

        if self.control.is_locked():
            self.logger.warning(f"Refused {user.id}: system locked")
            raise SystemLocked()

        record = self.current(user.id)

        if requested_total > record.max_per_request:
            self.logger.warning(
                f"Refused {user.id}: {requested_total} > max_per_request {record.max_per_request}"
            )
            raise RequestTooLarge(requested_total, record.max_per_request)

        if not record.unlimited and requested_total > record.daily_limit - record.used:
            remaining = max(0, record.daily_limit - record.used)
            self.logger.warning(
                f"Refused {user.id}: {requested_total} requested, {remaining} remaining"
            )
            raise QuotaExceeded(requested_total, remaining)

        return record

    def commit(self, user: UserAccount, count1: int, count2: int) -> Callable[[QuotaRecord], None]:
        """
        The commit step for drawing `count1` + `count2` lines, as a mutation.

        The backend applies it to the stored record in the same unit as the
        pool take (see StorageBackend.take_prefixes). The daily limit is
        checked again against that record, which another process may have
        charged since check_and_reserve() ran; QuotaExceeded there cancels
        the take.
        """
        total = count1 + count2

        def apply(record: QuotaRecord) -> None:
            if not record.unlimited and total > record.daily_limit - record.used:
                remaining = max(0, record.daily_limit - record.used)
                self.logger.warning(
                    f"Refused {user.id} at take: {total} requested, {remaining} remaining"
                )
                raise QuotaExceeded(total, remaining)
            record.used += total
            record.used_pool1 += count1
            record.used_pool2 += count2

        return apply

    def reset(self, user_id: str) -> QuotaRecord:
        """Zero every usage counter of `user_id`."""
        def zero(record: QuotaRecord) -> None:
            record.used = 0
            record.used_pool1 = 0
            record.used_pool2 = 0

        record = self.backend.update_quota(user_id, zero)
        self.logger.info(f"Usage reset for {user_id}")
        return record

    def set_limits(self, user_id: str, daily_limit: int, max_per_request: int) -> QuotaRecord:
        """
        Replace the limit configuration of `user_id`.

        daily_limit = -1 means unlimited. Usage counters are left as they are.
        """
        validate_limits(daily_limit, max_per_request)

        def configure(record: QuotaRecord) -> None:
            record.daily_limit = daily_limit
            record.max_per_request = max_per_request

        record = self.backend.update_quota(user_id, configure)
        self.logger.info(
            f"Limits for {user_id}: daily_limit={daily_limit}, max_per_request={max_per_request}"
        )
        return record

    def snapshot(self, user_id: str) -> Dict[str, Any]:
        """
        Quota summary for display: counters, remaining allowance, percent used.
        """
        record = self.current(user_id)
        info = record.to_dict()
        if record.unlimited or record.daily_limit == 0:
            info["percent_used"] = 0.0 if record.unlimited else 100.0
        else:
            info["percent_used"] = round(min(100.0, record.used / record.daily_limit * 100), 1)
        return info
