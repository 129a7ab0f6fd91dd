"""
Custom Exceptions - Allocation error taxonomy.

Every failure the allocation core can report is a DataMeqError subclass
carrying an HTTP status code and a stable error code. The API layer renders
them with to_dict(); nothing here is fatal, and none of them leave partial
state behind.
"""
from typing import Dict, Optional


class DataMeqError(Exception):
    """
    Base exception for all allocation service errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class InvalidRequest(DataMeqError):
    """Raised for malformed requests: bad counts, unknown pools, bad limits."""
    status_code = 400
    error_code = "invalid_request"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class PermissionDenied(DataMeqError):
    """Raised when a non-administrator calls an administrator operation."""
    status_code = 403
    error_code = "permission_denied"

    def __init__(self, action: str):
        super().__init__(
            message=f"Only administrators may {action}.",
            details=f"action={action}"
        )
        self.action = action


class AccountInactive(DataMeqError):
    """Raised when a blocked or suspended account tries to allocate."""
    status_code = 403
    error_code = "account_inactive"

    def __init__(self, user_id: str, status: str):
        super().__init__(
            message=f"This account is {status}. Contact an administrator.",
            details=f"user_id={user_id} status={status}"
        )
        self.user_id = user_id
        self.status = status


class UserNotFound(DataMeqError):
    """Raised when a user id does not resolve to an account."""
    status_code = 404
    error_code = "user_not_found"

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            details=f"user_id={user_id}"
        )
        self.user_id = user_id


class SystemLocked(DataMeqError):
    """Raised when a non-administrator allocates while the system lock is on."""
    status_code = 423
    error_code = "system_locked"

    def __init__(self):
        super().__init__(
            message="System is currently locked by an administrator. Try again once it is unlocked."
        )


class RequestTooLarge(DataMeqError):
    """Raised when one request asks for more lines than the user's per-request cap."""
    status_code = 413
    error_code = "request_too_large"

    def __init__(self, requested: int, max_per_request: int):
        super().__init__(
            message=(
                f"Request too large: {requested} lines requested, "
                f"at most {max_per_request} per request. Reduce the request size."
            ),
            details=f"requested={requested} max_per_request={max_per_request}"
        )
        self.requested = requested
        self.max_per_request = max_per_request


class QuotaExceeded(DataMeqError):
    """Raised when a request would take the user past their daily limit."""
    status_code = 429
    error_code = "quota_exceeded"

    def __init__(self, requested: int, remaining: int):
        super().__init__(
            message=f"Quota exceeded! You can only generate {remaining} more lines.",
            details=f"requested={requested} remaining={remaining}"
        )
        self.requested = requested
        self.remaining = remaining


class InventoryChangedConcurrently(DataMeqError):
    """
    Raised when a pool holds fewer lines than requested at take time.

    `available` carries the authoritative pool lengths observed inside the
    critical section so the caller can refresh its cached view.
    """
    status_code = 409
    error_code = "inventory_changed"

    def __init__(self, requested: Dict[str, int], available: Dict[str, int]):
        short = ", ".join(
            f"{pool}: {available.get(pool, 0)} left, {count} requested"
            for pool, count in sorted(requested.items())
            if count > available.get(pool, 0)
        )
        super().__init__(
            message=(
                "Data was consumed by another user. "
                "Refresh the pool counts and resubmit."
            ),
            details=short or None
        )
        self.requested = dict(requested)
        self.available = dict(available)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["available"] = self.available
        return payload


class StoreUnavailable(DataMeqError):
    """Raised when the backing store cannot be reached or fails a transaction."""
    status_code = 503
    error_code = "store_unavailable"

    def __init__(self, message: str = "Storage backend unavailable"):
        super().__init__(message)
