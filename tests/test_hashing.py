import pytest

from systemdesign.hashing import fnv1a_64, murmur3_64


def test_fnv1a_empty_is_offset_basis():
    assert fnv1a_64(b"") == 0xCBF29CE484222325


def test_fnv1a_single_byte_vector():
    assert fnv1a_64(b"a") == 0xAF63DC4C8601EC8C


def test_murmur3_empty_with_zero_seed():
    assert murmur3_64(b"") == 0


@pytest.mark.parametrize("func", [murmur3_64, fnv1a_64])
def test_hashes_are_deterministic_and_64_bit(func):
    data = b"some user identifier"
    first = func(data)
    assert first == func(data)
    assert 0 <= first < 2**64


@pytest.mark.parametrize("func", [murmur3_64, fnv1a_64])
def test_hashes_accept_bytearray(func):
    assert func(bytearray(b"abc")) == func(b"abc")


def test_murmur3_distinct_across_tail_lengths():
    values = {murmur3_64(bytes(range(n))) for n in range(40)}
    assert len(values) == 40


def test_fnv1a_distinct_across_lengths():
    values = {fnv1a_64(bytes(range(n))) for n in range(40)}
    assert len(values) == 40


def test_murmur3_seed_changes_result():
    assert murmur3_64(b"payload", 0) != murmur3_64(b"payload", 1337)


def test_murmur3_block_boundary_sensitivity():
    block = bytes(range(16))
    assert murmur3_64(block) != murmur3_64(block + b"\x00")