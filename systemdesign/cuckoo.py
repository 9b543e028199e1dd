"""Cuckoo filter with 4-slot buckets and 8-bit fingerprints, supporting deletion."""

from __future__ import annotations

import random

from systemdesign.hashing import murmur3_64

_BUCKET_SIZE = 4
_MAX_KICKS = 500
_SEED = 1337
_FINGERPRINT_HASHES = tuple(murmur3_64(bytes([fp]), _SEED) for fp in range(256))


class CuckooFilter:
    """An approximate set that supports insertion, lookup and deletion."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        per_bucket = capacity // _BUCKET_SIZE
        self.num_buckets = 1 if per_bucket <= 1 else 1 << (per_bucket - 1).bit_length()
        self._mask = self.num_buckets - 1
        self._slots = bytearray(self.num_buckets * _BUCKET_SIZE)
        self._count = 0
        self._rng = random.Random()

    def __len__(self) -> int:
        return self._count

    def _alt_index(self, fingerprint: int, index: int) -> int:
        return (index ^ _FINGERPRINT_HASHES[fingerprint]) & self._mask

    def _locate(self, data: bytes) -> tuple[int, int, int]:
        h = murmur3_64(data, _SEED)
        fingerprint = h % 255 + 1
        i1 = (h >> 32) & self._mask
        return i1, self._alt_index(fingerprint, i1), fingerprint

    def _find(self, index: int, fingerprint: int) -> int:
        start = index * _BUCKET_SIZE
        return self._slots.find(fingerprint, start, start + _BUCKET_SIZE)

    def _put(self, index: int, fingerprint: int) -> bool:
        pos = self._find(index, 0)
        if pos < 0:
            return False
        self._slots[pos] = fingerprint
        return True

    def insert(self, data: bytes) -> bool:
        """Insert an item; return False if the filter is too full to place it."""
        i1, i2, fingerprint = self._locate(data)
        if self._put(i1, fingerprint) or self._put(i2, fingerprint):
            self._count += 1
            return True
        index = self._rng.choice((i1, i2))
        for _ in range(_MAX_KICKS):
            pos = index * _BUCKET_SIZE + self._rng.randrange(_BUCKET_SIZE)
            fingerprint, self._slots[pos] = self._slots[pos], fingerprint
            index = self._alt_index(fingerprint, index)
            if self._put(index, fingerprint):
                self._count += 1
                return True
        return False

    def lookup(self, data: bytes) -> bool:
        """Return True if the item is probably in the filter."""
        i1, i2, fingerprint = self._locate(data)
        return self._find(i1, fingerprint) >= 0 or self._find(i2, fingerprint) >= 0

    def delete(self, data: bytes) -> bool:
        """Remove one copy of the item; return False if it was not found."""
        i1, i2, fingerprint = self._locate(data)
        for index in (i1, i2):
            pos = self._find(index, fingerprint)
            if pos >= 0:
                self._slots[pos] = 0
                self._count -= 1
                return True
        return False