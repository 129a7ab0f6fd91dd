"""
Tests for PoolStore and the in-memory backend's atomic take.
"""
import pytest

from datameq.allocation.pool import PoolStore
from datameq.core.exceptions import InvalidRequest, InventoryChangedConcurrently, QuotaExceeded


@pytest.fixture
def pools(backend):
    return PoolStore(backend)


def test_ingest_trims_and_drops_blank_lines(pools):
    added = pools.ingest("data1", "  a@x.com \r\n\n\t\nb@x.com\n")
    assert added == 2
    assert pools.take_prefix("data1", 2) == ["a@x.com", "b@x.com"]


def test_ingest_only_blank_adds_nothing(pools):
    assert pools.ingest("data2", "\n  \n") == 0
    assert pools.length("data2") == 0


def test_ingest_appends_at_back(pools):
    pools.ingest("data1", "a\nb")
    pools.ingest("data1", "c")
    assert pools.take_prefix("data1", 3) == ["a", "b", "c"]


def test_take_prefix_is_fifo(pools):
    pools.ingest("data1", "a\nb\nc")
    assert pools.take_prefix("data1", 2) == ["a", "b"]
    assert pools.take_prefix("data1", 1) == ["c"]
    assert pools.length("data1") == 0


def test_take_zero_returns_empty(pools):
    pools.ingest("data1", "a")
    assert pools.take_prefix("data1", 0) == []
    assert pools.length("data1") == 1


def test_take_more_than_available_changes_nothing(pools):
    pools.ingest("data1", "a\nb")
    with pytest.raises(InventoryChangedConcurrently) as exc_info:
        pools.take_prefix("data1", 3)
    assert exc_info.value.available == {"data1": 2}
    assert pools.take_prefix("data1", 2) == ["a", "b"]


def test_take_many_is_all_or_nothing(pools):
    pools.ingest("data1", "\n".join(f"a{i}" for i in range(10)))
    pools.ingest("data2", "\n".join(f"b{i}" for i in range(8)))

    with pytest.raises(InventoryChangedConcurrently) as exc_info:
        pools.take_many({"data1": 5, "data2": 10})

    assert exc_info.value.available == {"data1": 10, "data2": 8}
    assert pools.lengths() == {"data1": 10, "data2": 8}


def test_negative_take_rejected(pools):
    with pytest.raises(InvalidRequest):
        pools.take_prefix("data1", -1)


def test_unknown_pool_rejected(pools):
    with pytest.raises(InvalidRequest) as exc_info:
        pools.ingest("data3", "a")
    assert exc_info.value.field == "pool"


def test_clear_reports_removed(pools):
    pools.ingest("data2", "a\nb\nc")
    assert pools.clear("data2") == 3
    assert pools.length("data2") == 0


def test_charge_is_applied_with_the_take(pools, backend, alice):
    pools.ingest("data1", "a\nb\nc")

    def charge(record):
        record.used += 2
        record.used_pool1 += 2

    assert pools.take_many({"data1": 2}, user_id="alice", charge=charge) == {"data1": ["a", "b"]}
    assert backend.get_user("alice").quota.used == 2


def test_refused_charge_takes_nothing(pools, backend, alice):
    pools.ingest("data1", "a\nb")

    def refuse(record):
        record.used += 2
        raise QuotaExceeded(2, 0)

    with pytest.raises(QuotaExceeded):
        pools.take_many({"data1": 2}, user_id="alice", charge=refuse)

    assert pools.length("data1") == 2
    assert backend.get_user("alice").quota.used == 0


def test_short_pool_charges_nothing(pools, backend, alice):
    pools.ingest("data1", "a")

    def charge(record):
        record.used += 2

    with pytest.raises(InventoryChangedConcurrently):
        pools.take_many({"data1": 2}, user_id="alice", charge=charge)

    assert backend.get_user("alice").quota.used == 0
