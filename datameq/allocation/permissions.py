"""
Role capability checks.

The allocation code asks these predicates instead of comparing roles at
each call site.
"""
from datameq.allocation.types import UserAccount, UserStatus
from datameq.core.exceptions import AccountInactive, PermissionDenied


def is_exempt_from_quota(user: UserAccount) -> bool:
    """Administrators bypass the lock, the per-request cap and the quota."""
    return user.is_admin


def require_admin(user: UserAccount, action: str) -> None:
    if not user.is_admin:
        raise PermissionDenied(action)


def ensure_active(user: UserAccount) -> None:
    """Blocked or suspended accounts may not allocate (administrators excepted)."""
    if user.status != UserStatus.ACTIVE and not user.is_admin:
        raise AccountInactive(user.id, user.status.value)
