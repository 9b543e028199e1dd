"""64-bit non-cryptographic hash functions: MurmurHash3 (x64, 128-bit) and FNV-1a."""

from __future__ import annotations

import struct

_MASK64 = 0xFFFFFFFFFFFFFFFF

_MURMUR_C1 = 0x87C37B91114253D5
_MURMUR_C2 = 0x4CF5AD432745937F

_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3


def _rotl64(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _fmix64(k: int) -> int:
    k ^= k >> 33
    k = (k * 0xFF51AFD7ED558CCD) & _MASK64
    k ^= k >> 33
    k = (k * 0xC4CEB9FE1A85EC53) & _MASK64
    k ^= k >> 33
    return k


def _mix_k1(k1: int) -> int:
    k1 = (k1 * _MURMUR_C1) & _MASK64
    k1 = _rotl64(k1, 31)
    return (k1 * _MURMUR_C2) & _MASK64


def _mix_k2(k2: int) -> int:
    k2 = (k2 * _MURMUR_C2) & _MASK64
    k2 = _rotl64(k2, 33)
    return (k2 * _MURMUR_C1) & _MASK64


def murmur3_64(data: bytes, seed: int = 0) -> int:
    """Return the first 64 bits of MurmurHash3 x64 128-bit of ``data``."""
    data = bytes(data)
    length = len(data)
    h1 = h2 = seed & 0xFFFFFFFF
    body_end = length - length % 16

    for k1, k2 in struct.iter_unpack("<QQ", data[:body_end]):
        h1 ^= _mix_k1(k1)
        h1 = _rotl64(h1, 27)
        h1 = (h1 + h2) & _MASK64
        h1 = (h1 * 5 + 0x52DCE729) & _MASK64

        h2 ^= _mix_k2(k2)
        h2 = _rotl64(h2, 31)
        h2 = (h2 + h1) & _MASK64
        h2 = (h2 * 5 + 0x38495AB5) & _MASK64

    tail = data[body_end:]
    if len(tail) > 8:
        h2 ^= _mix_k2(int.from_bytes(tail[8:], "little"))
    if tail:
        h1 ^= _mix_k1(int.from_bytes(tail[:8], "little"))

    h1 ^= length
    h2 ^= length
    h1 = (h1 + h2) & _MASK64
    h2 = (h2 + h1) & _MASK64
    h1 = _fmix64(h1)
    h2 = _fmix64(h2)
    h1 = (h1 + h2) & _MASK64
    return h1


def fnv1a_64(data: bytes) -> int:
    """Return the 64-bit FNV-1a hash of ``data``."""
    h = _FNV64_OFFSET
    for byte in bytes(data):
        h ^= byte
        h = (h * _FNV64_PRIME) & _MASK64
    return h