"""
Shared route dependencies.

The caller is identified by the X-User-Id header and resolved through the
user directory. Verifying that the caller really is that user belongs to
whatever sits in front of this API.
"""
from fastapi import Depends, Header

from datameq.allocation.types import UserAccount
from datameq.core.exceptions import InvalidRequest
from datameq.services.allocation_service import AllocationService, get_allocation_service


def get_service() -> AllocationService:
    return get_allocation_service()


def get_current_user(
    x_user_id: str = Header(default="", alias="X-User-Id"),
    service: AllocationService = Depends(get_service),
) -> UserAccount:
    """Resolve the calling user; fresh from the store on every request."""
    if not x_user_id:
        raise InvalidRequest("Missing X-User-Id header", field="X-User-Id")
    return service.users.get_user(x_user_id)
