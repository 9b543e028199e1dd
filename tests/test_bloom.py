import uuid

import pytest

from systemdesign.bloom import BloomFilter


def test_added_items_are_found():
    bf = BloomFilter(4096, 7)
    items = [uuid.uuid4().bytes for _ in range(100)]
    for item in items:
        bf.add(item)
    assert all(bf.test(item) for item in items)


def test_empty_filter_contains_nothing():
    bf = BloomFilter(1024, 3)
    assert not bf.test(b"anything")
    assert b"anything" not in bf


def test_contains_operator_matches_test():
    bf = BloomFilter(1024, 3)
    bf.add(b"present")
    assert b"present" in bf
    assert (b"absent" in bf) == bf.test(b"absent")


def test_false_positive_rate_is_low_when_sized_well():
    bf = BloomFilter(10_000, 7)
    for _ in range(500):
        bf.add(uuid.uuid4().bytes)
    false_positives = sum(bf.test(uuid.uuid4().bytes) for _ in range(2000))
    assert false_positives < 100


def test_zero_hashes_reports_everything_present():
    bf = BloomFilter(64, 0)
    assert bf.test(b"never added") is True


def test_single_bit_filter_saturates():
    bf = BloomFilter(1, 2)
    bf.add(b"x")
    assert bf.test(b"y") is True


@pytest.mark.parametrize("m,k", [(0, 3), (-5, 3), (10, -1)])
def test_invalid_parameters(m, k):
    with pytest.raises(ValueError):
        BloomFilter(m, k)