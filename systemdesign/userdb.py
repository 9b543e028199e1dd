"""SQLite-backed user table used to benchmark membership filters."""

from __future__ import annotations

import logging
import sqlite3
import time
import uuid
from collections.abc import Iterator
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    """A row of the users table."""

    id: uuid.UUID
    name: str
    profile_data: str

    @classmethod
    def numbered(cls, number: int) -> User:
        """Create a new user with a random id and a name derived from ``number``."""
        name = f"User {number}"
        return cls(uuid.uuid4(), name, f"Profile data for {name}. ")


def connect_db(path: str) -> sqlite3.Connection:
    """Open the user database at ``path``."""
    return sqlite3.connect(path)


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the users table if it does not exist."""
    with conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS users "
            "(id BLOB PRIMARY KEY, name TEXT, profile_data TEXT)"
        )


def _count_users(conn: sqlite3.Connection) -> int:
    (count,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
    return count


def seed_database(conn: sqlite3.Connection, n: int) -> int:
    """Fill the table up to ``n`` users unless it already holds at least half.

    Returns the number of users inserted.
    """
    existing = _count_users(conn)
    log.info("The database already contains %d users.", existing)
    if existing >= n // 2:
        log.info("The database already contains %d users. Skipping insertion.", existing)
        return 0

    log.info("Starting the insertion of %d users into the database.", n)
    started = time.perf_counter()

    def rows() -> Iterator[tuple[bytes, str, str]]:
        for number in range(existing + 1, n + 1):
            if number % 1000 == 0:
                log.info("Inserting user %d", number)
            user = User.numbered(number)
            yield user.id.bytes, user.name, user.profile_data

    with conn:
        conn.executemany("INSERT INTO users (id, name, profile_data) VALUES (?, ?, ?)", rows())

    log.info("Insertion of %d users completed in %.3fs", n, time.perf_counter() - started)
    return n - existing


def fetch_ids(conn: sqlite3.Connection, limit: int | None = None) -> Iterator[uuid.UUID]:
    """Yield user ids, at most ``limit`` of them if given."""
    if limit is None:
        cursor = conn.execute("SELECT id FROM users")
    else:
        cursor = conn.execute("SELECT id FROM users LIMIT ?", (limit,))
    for (raw,) in cursor:
        yield uuid.UUID(bytes=raw)


def user_exists(conn: sqlite3.Connection, user_id: uuid.UUID) -> bool:
    """Return True if a user with ``user_id`` is stored."""
    row = conn.execute("SELECT id FROM users WHERE id = ?", (user_id.bytes,)).fetchone()
    return row is not None