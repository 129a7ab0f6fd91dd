"""
Tests for QuotaLedger.
"""
import pytest

from datameq.core.exceptions import (
    InvalidRequest,
    QuotaExceeded,
    RequestTooLarge,
    SystemLocked,
    UserNotFound,
)


@pytest.fixture
def ledger(service):
    return service.ledger


def commit(ledger, user, count1, count2):
    """Apply the ledger's commit step directly to the stored record."""
    return ledger.backend.update_quota(user.id, ledger.commit(user, count1, count2))


def test_check_does_not_charge(ledger, alice):
    ledger.check_and_reserve(alice, 10)
    assert ledger.current("alice").used == 0


def test_commit_charges_both_pools(ledger, alice):
    record = commit(ledger, alice, 10, 5)
    assert (record.used, record.used_pool1, record.used_pool2) == (15, 10, 5)
    assert ledger.current("alice").used == 15


def test_commit_rechecks_stored_limit(ledger, alice):
    ledger.set_limits("alice", 10, 10)
    ledger.check_and_reserve(alice, 10)

    # Another request for the same user lands between check and commit
    commit(ledger, alice, 10, 0)

    with pytest.raises(QuotaExceeded) as exc_info:
        commit(ledger, alice, 10, 0)
    assert exc_info.value.remaining == 0
    assert ledger.current("alice").used == 10


def test_commit_up_to_the_limit_is_allowed(ledger, alice):
    ledger.set_limits("alice", 10, 10)
    commit(ledger, alice, 4, 6)
    assert ledger.current("alice").used == 10


def test_quota_exceeded_reports_remaining(ledger, alice):
    ledger.set_limits("alice", 20, 15)
    commit(ledger, alice, 10, 5)
    with pytest.raises(QuotaExceeded) as exc_info:
        ledger.check_and_reserve(alice, 10)
    assert exc_info.value.remaining == 5
    assert "5 more lines" in exc_info.value.message


def test_exactly_remaining_is_allowed(ledger, alice):
    ledger.set_limits("alice", 20, 20)
    commit(ledger, alice, 15, 0)
    ledger.check_and_reserve(alice, 5)


def test_request_too_large_checked_before_quota(ledger, alice):
    ledger.set_limits("alice", 5, 3)
    with pytest.raises(RequestTooLarge) as exc_info:
        ledger.check_and_reserve(alice, 4)
    assert exc_info.value.max_per_request == 3


def test_lock_refuses_before_limits(ledger, service, admin, alice):
    service.set_system_lock(admin, True)
    with pytest.raises(SystemLocked):
        ledger.check_and_reserve(alice, 1)


def test_unlimited_user_never_exceeds(ledger, alice):
    ledger.set_limits("alice", -1, 1000)
    commit(ledger, alice, 900, 0)
    ledger.check_and_reserve(alice, 1000)


def test_zero_limit_refuses_everything(ledger, alice):
    ledger.set_limits("alice", 0, 10)
    with pytest.raises(QuotaExceeded) as exc_info:
        ledger.check_and_reserve(alice, 1)
    assert exc_info.value.remaining == 0


def test_admin_bypasses_lock_and_limits(ledger, service, admin):
    service.set_system_lock(admin, True)
    assert ledger.check_and_reserve(admin, 10_000) is None


def test_check_reads_stored_record_not_caller_copy(ledger, alice):
    stale = alice.copy()
    ledger.set_limits("alice", 10, 10)
    commit(ledger, alice, 10, 0)
    with pytest.raises(QuotaExceeded):
        ledger.check_and_reserve(stale, 1)


def test_reset_zeroes_counters_keeps_limits(ledger, alice):
    ledger.set_limits("alice", 50, 25)
    commit(ledger, alice, 4, 6)
    record = ledger.reset("alice")
    assert (record.used, record.used_pool1, record.used_pool2) == (0, 0, 0)
    assert (record.daily_limit, record.max_per_request) == (50, 25)


@pytest.mark.parametrize("daily_limit,max_per_request", [(-2, 10), (10, 0)])
def test_set_limits_validation(ledger, alice, daily_limit, max_per_request):
    with pytest.raises(InvalidRequest):
        ledger.set_limits("alice", daily_limit, max_per_request)


def test_unknown_user(ledger):
    with pytest.raises(UserNotFound):
        ledger.current("nobody")


def test_snapshot_percent_used(ledger, alice):
    ledger.set_limits("alice", 40, 40)
    commit(ledger, alice, 10, 0)
    snapshot = ledger.snapshot("alice")
    assert snapshot["remaining"] == 30
    assert snapshot["percent_used"] == 25.0


def test_snapshot_unlimited(ledger, admin):
    snapshot = ledger.snapshot(admin.id)
    assert snapshot["unlimited"] is True
    assert snapshot["remaining"] is None
    assert snapshot["percent_used"] == 0.0
