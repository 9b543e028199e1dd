"""Benchmarks comparing Bloom filter, cuckoo filter and database lookups."""

from __future__ import annotations

import math
import sqlite3
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from systemdesign.bloom import BloomFilter
from systemdesign.cuckoo import CuckooFilter
from systemdesign.userdb import fetch_ids, user_exists

_BANNER = "-------------------------------------------------------------"


@dataclass(frozen=True)
class Metrics:
    """Timing results for a batch of operations, in seconds."""

    total: float
    average: float
    ops_per_second: float


def measure(duration: float, num_ops: int) -> Metrics:
    """Summarise ``num_ops`` operations that took ``duration`` seconds."""
    if num_ops <= 0:
        raise ValueError("num_ops must be positive")
    ops = num_ops / duration if duration > 0 else math.inf
    return Metrics(duration, duration / num_ops, ops)


def _format_duration(seconds: float) -> str:
    magnitude = abs(seconds)
    if magnitude < 1e-6:
        return f"{seconds * 1e9:.0f}ns"
    if magnitude < 1e-3:
        return f"{seconds * 1e6:.3f}µs"
    if magnitude < 1:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"


def format_metrics(metrics: Metrics) -> str:
    """Render metrics as indented report lines."""
    return "\n".join(
        [
            f"  Total Time:       {_format_duration(metrics.total)}",
            f"  Avg. Per Lookup:  {_format_duration(metrics.average)}",
            f"  Ops/Second:       {metrics.ops_per_second:.2f}",
        ]
    )


def _timed(action: Callable[[], Any]) -> tuple[float, Any]:
    start = time.perf_counter()
    result = action()
    return time.perf_counter() - start, result


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else math.inf


def _header(title: str) -> None:
    print(f"\n{_BANNER}")
    print(title)
    print(_BANNER)


def _db_lookup(conn: sqlite3.Connection, raw: bytes) -> bool:
    return user_exists(conn, uuid.UUID(bytes=raw))


def benchmark_non_existent_users(
    conn: sqlite3.Connection,
    bloom: BloomFilter,
    cuckoo: CuckooFilter,
    ids: Sequence[bytes],
) -> dict[str, Any]:
    """Look up ids that are not stored, through each filter and the database."""
    ids = list(ids)
    _header(f"--- Benchmark: Non-Existent Users ({len(ids)} lookups) ---")

    bloom_time, bloom_fp = _timed(lambda: sum(1 for i in ids if bloom.test(i)))
    bloom_metrics = measure(bloom_time, len(ids))
    print("[Bloom Filter]")
    print(format_metrics(bloom_metrics))
    print(f"  False Positives:  {bloom_fp} ({bloom_fp / len(ids) * 100:.4f}%)")

    cuckoo_time, cuckoo_fp = _timed(lambda: sum(1 for i in ids if cuckoo.lookup(i)))
    cuckoo_metrics = measure(cuckoo_time, len(ids))
    print("\n[Cuckoo Filter]")
    print(format_metrics(cuckoo_metrics))
    print(f"  False Positives:  {cuckoo_fp} ({cuckoo_fp / len(ids) * 100:.4f}%)")

    db_time, _ = _timed(lambda: [_db_lookup(conn, i) for i in ids])
    db_metrics = measure(db_time, len(ids))
    print("\n[Database Only]")
    print(format_metrics(db_metrics))

    print(
        f"\nConclusion: Cuckoo was {_ratio(bloom_time, cuckoo_time):.2f}x faster than Bloom. "
        f"Bloom was {_ratio(db_time, bloom_time):.2f}x faster than DB."
    )
    return {
        "bloom": bloom_metrics,
        "cuckoo": cuckoo_metrics,
        "database": db_metrics,
        "bloom_false_positives": bloom_fp,
        "cuckoo_false_positives": cuckoo_fp,
    }


def benchmark_existing_users(
    conn: sqlite3.Connection,
    bloom: BloomFilter,
    cuckoo: CuckooFilter,
    ids: Sequence[bytes],
) -> dict[str, Any]:
    """Look up stored ids, going to the database only when the filter says yes."""
    ids = list(ids)
    _header(f"--- Benchmark: Existing Users ({len(ids)} lookups) ---")

    bloom_time, bloom_found = _timed(
        lambda: sum(1 for i in ids if bloom.test(i) and _db_lookup(conn, i))
    )
    bloom_metrics = measure(bloom_time, len(ids))
    print("[Bloom Filter + Database]")
    print(format_metrics(bloom_metrics))

    cuckoo_time, cuckoo_found = _timed(
        lambda: sum(1 for i in ids if cuckoo.lookup(i) and _db_lookup(conn, i))
    )
    cuckoo_metrics = measure(cuckoo_time, len(ids))
    print("\n[Cuckoo Filter + Database]")
    print(format_metrics(cuckoo_metrics))

    db_time, db_found = _timed(lambda: sum(1 for i in ids if _db_lookup(conn, i)))
    db_metrics = measure(db_time, len(ids))
    print("\n[Database Only]")
    print(format_metrics(db_metrics))

    overhead_bloom = (bloom_time - db_time) / len(ids)
    overhead_cuckoo = (cuckoo_time - db_time) / len(ids)
    print(
        f"\nConclusion: Bloom Filter added {_format_duration(overhead_bloom)} overhead. "
        f"Cuckoo Filter added {_format_duration(overhead_cuckoo)} overhead."
    )
    return {
        "bloom": bloom_metrics,
        "cuckoo": cuckoo_metrics,
        "database": db_metrics,
        "bloom_found": bloom_found,
        "cuckoo_found": cuckoo_found,
        "database_found": db_found,
    }


def benchmark_deletions(cuckoo: CuckooFilter, ids: Sequence[bytes]) -> dict[str, Any]:
    """Delete ids from the cuckoo filter and count how many are still reported."""
    ids = list(ids)
    _header(f"--- Benchmark: Deletions ({len(ids)} items) ---")

    duration, _ = _timed(lambda: [cuckoo.delete(i) for i in ids])
    metrics = measure(duration, len(ids))
    print("[Cuckoo Filter Deletion]")
    print(format_metrics(metrics))

    still_found = sum(1 for i in ids if cuckoo.lookup(i))
    print(
        f"\nVerification: After deleting {len(ids)} items, "
        f"{still_found} were still found in the filter."
    )
    print("Note: A standard Bloom Filter does not support deletion.")
    return {"deletion": metrics, "still_found": still_found}


def run_benchmarks(
    conn: sqlite3.Connection,
    bloom: BloomFilter,
    cuckoo: CuckooFilter,
    count: int = 100_000,
) -> dict[str, dict[str, Any]]:
    """Prepare existing and fresh ids and run every benchmark."""
    print("\n--- Preparing data for benchmarks ---")
    existing = [user_id.bytes for user_id in fetch_ids(conn, count)]
    print(f"Fetched {len(existing)} existing IDs for testing.")
    missing = [uuid.uuid4().bytes for _ in range(count)]
    print(f"Generated {len(missing)} non-existent IDs for testing.")

    return {
        "non_existent": benchmark_non_existent_users(conn, bloom, cuckoo, missing),
        "existing": benchmark_existing_users(conn, bloom, cuckoo, existing),
        "deletions": benchmark_deletions(cuckoo, existing),
    }