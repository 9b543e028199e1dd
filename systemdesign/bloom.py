"""Bloom filter using double hashing over MurmurHash3 and FNV-1a."""

from __future__ import annotations

from collections.abc import Iterator

from systemdesign.hashing import fnv1a_64, murmur3_64

_MASK64 = 0xFFFFFFFFFFFFFFFF


class BloomFilter:
    """A probabilistic set with ``m`` bits and ``k`` hash functions."""

    def __init__(self, m: int, k: int) -> None:
        if m <= 0:
            raise ValueError("m must be positive")
        if k < 0:
            raise ValueError("k must not be negative")
        self.m = m
        self.k = k
        self._bits = bytearray((m + 7) // 8)

    def _indices(self, data: bytes) -> Iterator[int]:
        h1 = murmur3_64(data)
        h2 = fnv1a_64(data)
        return (((h1 + i * h2) & _MASK64) % self.m for i in range(self.k))

    def add(self, data: bytes) -> None:
        """Add an item to the filter."""
        for index in self._indices(data):
            self._bits[index >> 3] |= 1 << (index & 7)

    def test(self, data: bytes) -> bool:
        """Return True if the item is probably in the set, False if it is definitely not."""
        return all(self._bits[index >> 3] & (1 << (index & 7)) for index in self._indices(data))

    def __contains__(self, data: bytes) -> bool:
        return self.test(data)