import os
import tempfile
from pathlib import Path

import pytest

# Environment must be in place before datameq.core.config is read
os.environ["APP_ENV"] = "testing"
os.environ["STORAGE_PERSISTENT"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="datameq-logs-")
os.environ["ADMIN_USER_ID"] = "admin-1"
os.environ["DEFAULT_DAILY_LIMIT"] = "100"
os.environ["DEFAULT_MAX_PER_REQUEST"] = "500"
os.environ["ACTIVITY_LOG_CAP"] = "100"

from datameq.allocation.types import UserRole  # noqa: E402
from datameq.core.config import get_settings  # noqa: E402
from datameq.database.connection import DatabaseConnection  # noqa: E402
from datameq.services import allocation_service as allocation_module  # noqa: E402
from datameq.services.allocation_service import AllocationService  # noqa: E402
from datameq.storage.memory import InMemoryBackend  # noqa: E402
from datameq.storage.persistent import DatabaseBackend  # noqa: E402


@pytest.fixture
def settings():
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def service(backend, settings):
    return AllocationService(backend, settings)


@pytest.fixture
def admin(service):
    """The seeded administrator (unlimited quota)."""
    return service.users.seed_defaults()


@pytest.fixture
def alice(service, admin):
    """A regular user with the default quota."""
    return service.users.create_user(admin, name="Alice Johnson", user_id="alice")


@pytest.fixture
def bob(service, admin):
    return service.users.create_user(admin, name="Bob Smith", user_id="bob")


@pytest.fixture
def moderator(service, admin):
    return service.users.create_user(
        admin, name="Mia Moderator", role=UserRole.MODERATOR, user_id="mia"
    )


@pytest.fixture
def fill_pools(service, admin):
    """Factory: put n1 lines into data1 and n2 into data2 (a1.., b1..)."""
    def fill(n1: int, n2: int) -> None:
        if n1:
            service.ingest_lines(admin, "data1", "\n".join(f"a{i}" for i in range(1, n1 + 1)))
        if n2:
            service.ingest_lines(admin, "data2", "\n".join(f"b{i}" for i in range(1, n2 + 1)))
    return fill


@pytest.fixture
def sqlite_backend(tmp_path: Path):
    """DatabaseBackend on a throwaway SQLite file."""
    db = DatabaseConnection(f"sqlite:///{tmp_path / 'datameq.db'}")
    store = DatabaseBackend(db)
    yield store
    store.close()


@pytest.fixture
def client(service, admin):
    """TestClient bound to the `service` fixture through the service singleton."""
    from fastapi.testclient import TestClient

    from datameq.api.main import app

    allocation_module._allocation_service = service
    with TestClient(app) as test_client:
        yield test_client
    allocation_module.reset_allocation_service()
