"""
Tests for the user directory and the service-level role rules.
"""
import pytest

from datameq.allocation.types import UserRole, UserStatus
from datameq.core.exceptions import InvalidRequest, PermissionDenied, UserNotFound


def test_seed_is_idempotent(service):
    first = service.users.seed_defaults()
    second = service.users.seed_defaults()
    assert first.id == second.id == "admin-1"
    assert first.is_admin
    assert first.quota.unlimited
    assert len(service.users.list_users()) == 1


def test_new_user_gets_default_quota(alice):
    assert alice.role == UserRole.USER
    assert alice.status == UserStatus.ACTIVE
    assert (alice.quota.daily_limit, alice.quota.max_per_request, alice.quota.used) == (100, 500, 0)


def test_generated_ids_are_unique(service, admin):
    ids = {service.users.create_user(admin, name=f"U{i}").id for i in range(5)}
    assert len(ids) == 5
    assert all(user_id.startswith("user-") for user_id in ids)


def test_duplicate_id_rejected(service, admin, alice):
    with pytest.raises(InvalidRequest):
        service.users.create_user(admin, name="Other Alice", user_id="alice")


def test_blank_name_rejected(service, admin):
    with pytest.raises(InvalidRequest):
        service.users.create_user(admin, name="   ")


def test_only_admin_creates_users(service, alice):
    with pytest.raises(PermissionDenied):
        service.users.create_user(alice, name="Mallory")


def test_admin_cannot_delete_self(service, admin):
    with pytest.raises(InvalidRequest):
        service.users.delete_user(admin, admin.id)


def test_delete_unknown_user(service, admin):
    with pytest.raises(UserNotFound):
        service.users.delete_user(admin, "ghost")


def test_user_cannot_change_quota_or_clear(service, alice, bob):
    with pytest.raises(PermissionDenied):
        service.set_quota(alice, "alice", -1, 1000)
    with pytest.raises(PermissionDenied):
        service.reset_quota(alice, "alice")
    with pytest.raises(PermissionDenied):
        service.clear_pool(alice, "data1")
    with pytest.raises(PermissionDenied):
        service.get_quota(alice, "bob")


def test_ingest_requires_contribution_for_users(service, admin, alice):
    with pytest.raises(PermissionDenied):
        service.ingest_lines(alice, "data1", "x")

    service.set_allow_contribution(admin, True)
    assert service.ingest_lines(alice, "data1", "x\ny") == 2
    assert service.get_system_settings().allow_contribution is True
