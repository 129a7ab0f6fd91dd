"""
API Routes module - Endpoint definitions.

Each file defines routes for one area:
- health.py      : Health check endpoints
- pools.py       : Pool inspection, ingestion and clearing
- allocations.py : Allocation and insert presets
- quota.py       : Per-user quota administration
- activity.py    : Shared allocation log
- settings.py    : Global lock and contribution switch
- users.py       : Account directory
"""
from datameq.api.routes.activity import router as activity_router
from datameq.api.routes.allocations import router as allocations_router
from datameq.api.routes.health import router as health_router
from datameq.api.routes.pools import router as pools_router
from datameq.api.routes.quota import router as quota_router
from datameq.api.routes.settings import router as settings_router
from datameq.api.routes.users import router as users_router

__all__ = [
    "activity_router",
    "allocations_router",
    "health_router",
    "pools_router",
    "quota_router",
    "settings_router",
    "users_router",
]
