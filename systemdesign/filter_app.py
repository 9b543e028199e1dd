"""Seed a user database, warm Bloom and cuckoo filters from it, and benchmark them."""

from __future__ import annotations

import argparse
import logging
import sqlite3
import time

from systemdesign.bloom import BloomFilter
from systemdesign.cuckoo import CuckooFilter
from systemdesign.filter_benchmark import run_benchmarks
from systemdesign.userdb import connect_db, create_schema, fetch_ids, seed_database

log = logging.getLogger(__name__)

N_ITEMS = 20_000_000
M_BITS = 191_701_179
K_HASHES = 7
CUCKOO_CAPACITY = 67_108_864
BENCHMARK_N = 100_000

_PROGRESS_EVERY = 5_000_000


def warm_up_filters(conn: sqlite3.Connection, bloom: BloomFilter, cuckoo: CuckooFilter) -> int:
    """Add every stored user id to both filters and return how many were added."""
    count = 0
    for user_id in fetch_ids(conn):
        raw = user_id.bytes
        bloom.add(raw)
        cuckoo.insert(raw)
        count += 1
        if count % _PROGRESS_EVERY == 0:
            log.info("... %d million IDs added to filters", count // 1_000_000)
    return count


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Bloom vs cuckoo filter benchmark.")
    parser.add_argument("--db", default="users.db", help="path of the SQLite database")
    parser.add_argument("--items", type=int, default=N_ITEMS)
    parser.add_argument("--bits", type=int, default=M_BITS)
    parser.add_argument("--hashes", type=int, default=K_HASHES)
    parser.add_argument("--cuckoo-capacity", type=int, default=CUCKOO_CAPACITY)
    parser.add_argument("--benchmark-n", type=int, default=BENCHMARK_N)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    conn = connect_db(args.db)
    try:
        create_schema(conn)
        seed_database(conn, args.items)

        log.info("Creating Bloom and Cuckoo filters in memory...")
        bloom = BloomFilter(args.bits, args.hashes)
        cuckoo = CuckooFilter(args.cuckoo_capacity)

        log.info("Warming up both filters with data from the DB...")
        started = time.perf_counter()
        count = warm_up_filters(conn, bloom, cuckoo)
        log.info("Filters warmed up with %d items in %.3fs.", count, time.perf_counter() - started)

        run_benchmarks(conn, bloom, cuckoo, args.benchmark_n)
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())