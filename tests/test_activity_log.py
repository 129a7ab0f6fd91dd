"""
Tests for the bounded activity log.
"""
import pytest

from datameq.allocation.activity import ActivityLog
from datameq.allocation.types import LogEntry
from datameq.core.exceptions import InventoryChangedConcurrently


def test_capped_at_100_newest_first(service, admin, fill_pools):
    fill_pools(150, 0)
    ids = [service.allocate(admin, 1, 0).log_entry.id for _ in range(150)]

    entries = service.get_recent_activity()
    assert [e.id for e in entries] == list(reversed(ids[-100:]))
    assert entries[0].timestamp >= entries[-1].timestamp


def test_entries_are_newest_first(backend):
    log = ActivityLog(backend, cap=3)
    for i in range(5):
        log.append(LogEntry(user_id=f"u{i}", user_name=f"User {i}", count1=i, count2=0, total_generated=i))

    assert [e.user_id for e in log.recent()] == ["u4", "u3", "u2"]


def test_refused_allocation_is_not_logged(service, alice):
    with pytest.raises(InventoryChangedConcurrently):
        service.allocate(alice, 1, 0)
    assert service.get_recent_activity() == []


def test_cap_must_be_positive(backend):
    with pytest.raises(ValueError):
        ActivityLog(backend, cap=0)


def test_entry_fields(service, alice, fill_pools):
    fill_pools(4, 4)
    result = service.allocate(alice, 2, 3)
    entry = service.get_recent_activity()[0]
    assert entry.id == result.log_entry.id
    assert entry.id.startswith("meq-")
    assert entry.to_dict()["user_name"] == "Alice Johnson"
    assert (entry.count1, entry.count2, entry.total_generated) == (2, 3, 5)
