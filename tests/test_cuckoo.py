import uuid

import pytest

from systemdesign.cuckoo import CuckooFilter


def test_insert_then_lookup():
    cf = CuckooFilter(1024)
    items = [uuid.uuid4().bytes for _ in range(200)]
    assert all(cf.insert(item) for item in items)
    assert all(cf.lookup(item) for item in items)
    assert len(cf) == len(items)


def test_delete_removes_items():
    cf = CuckooFilter(1024)
    items = [uuid.uuid4().bytes for _ in range(50)]
    for item in items:
        cf.insert(item)
    assert all(cf.delete(item) for item in items)
    assert len(cf) == 0
    assert not any(cf.lookup(item) for item in items)


def test_delete_missing_item_returns_false():
    cf = CuckooFilter(64)
    assert cf.delete(b"missing") is False
    assert len(cf) == 0


def test_empty_filter_lookup_is_false():
    cf = CuckooFilter(64)
    assert cf.lookup(b"nothing") is False


def test_bucket_count_is_power_of_two():
    for capacity in (0, 4, 5, 17, 100, 1000):
        cf = CuckooFilter(capacity)
        n = cf.num_buckets
        assert n >= 1
        assert n & (n - 1) == 0
        assert n * 4 >= capacity // 4


def test_single_bucket_fills_up():
    cf = CuckooFilter(4)
    assert cf.num_buckets == 1
    assert all(cf.insert(bytes([i])) for i in range(4))
    assert cf.insert(b"fifth") is False
    assert len(cf) == 4


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        CuckooFilter(-1)