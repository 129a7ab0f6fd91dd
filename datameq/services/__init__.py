"""
Services module - Business logic and orchestration.

Services contain the application logic:
- No HTTP concerns (those belong in api/)
- No storage details (those belong in storage/)
- Apply role rules and wire allocation components together
"""
from datameq.services.allocation_service import (
    AllocationService,
    get_allocation_service,
    reset_allocation_service,
)
from datameq.services.user_service import UserDirectory

__all__ = [
    "AllocationService",
    "UserDirectory",
    "get_allocation_service",
    "reset_allocation_service",
]
