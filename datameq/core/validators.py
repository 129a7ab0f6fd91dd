"""
Input Validators - Sanitization and validation utilities.

Shared checks for pool names, ingested text, user ids and quota limits.
Validation failures raise InvalidRequest so every caller reports them the
same way.
"""
import re
from typing import List

from datameq.allocation.types import UNLIMITED
from datameq.core.exceptions import InvalidRequest
from datameq.core.logging_config import get_logger

logger = get_logger(__name__)

POOL_NAMES = ("data1", "data2")

_USER_ID_REGEX = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@-]{0,63}$")


def validate_pool_name(pool: str) -> str:
    """
    Ensure `pool` names one of the two allocatable pools.

    Returns:
        The pool name, unchanged
    """
    if pool not in POOL_NAMES:
        raise InvalidRequest(
            f"Unknown pool: {pool!r}. Must be one of: {', '.join(POOL_NAMES)}",
            field="pool"
        )
    return pool


def split_lines(raw_text: str) -> List[str]:
    """
    Split raw text into pool lines.

    Lines are split on "\\n" and trimmed (which also drops a trailing "\\r");
    blank lines are dropped. Null bytes are removed first.

    Example:
        >>> split_lines("a@x.com\\r\\n\\n  b@x.com  \\n")
        ['a@x.com', 'b@x.com']
    """
    if not raw_text:
        return []
    cleaned = raw_text.replace("\x00", "")
    return [line.strip() for line in cleaned.split("\n") if line.strip()]


def validate_user_id(user_id: str) -> str:
    if not user_id or not _USER_ID_REGEX.match(user_id):
        raise InvalidRequest(
            "Invalid user id (1-64 chars: letters, digits, '_', '.', '@', '-')",
            field="user_id"
        )
    return user_id


def validate_counts(count1: int, count2: int) -> None:
    """
    Reject negative counts and empty requests.

    Raises:
        InvalidRequest: If either count is negative or both are zero
    """
    if count1 < 0 or count2 < 0:
        raise InvalidRequest("Counts cannot be negative.", field="count")
    if count1 == 0 and count2 == 0:
        raise InvalidRequest("Nothing requested: pick at least one line.", field="count")


def validate_limits(daily_limit: int, max_per_request: int) -> None:
    """
    Check a quota configuration.

    daily_limit is -1 (unlimited) or non-negative; max_per_request is positive.
    """
    if daily_limit < UNLIMITED:
        raise InvalidRequest(
            "daily_limit must be -1 (unlimited) or a non-negative integer",
            field="daily_limit"
        )
    if max_per_request < 1:
        raise InvalidRequest(
            "max_per_request must be a positive integer",
            field="max_per_request"
        )
