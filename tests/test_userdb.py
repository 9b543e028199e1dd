import uuid

import pytest

from systemdesign.userdb import (
    User,
    connect_db,
    create_schema,
    fetch_ids,
    seed_database,
    user_exists,
)


@pytest.fixture
def conn():
    connection = connect_db(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


def _count(conn):
    return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]


def test_seed_inserts_requested_number(conn):
    assert seed_database(conn, 10) == 10
    assert _count(conn) == 10


def test_seed_skips_when_half_full(conn):
    seed_database(conn, 10)
    assert seed_database(conn, 20) == 0
    assert _count(conn) == 10


def test_seed_tops_up_when_below_half(conn):
    seed_database(conn, 3)
    assert seed_database(conn, 10) == 7
    names = {row[0] for row in conn.execute("SELECT name FROM users")}
    assert names == {f"User {i}" for i in range(1, 11)}


def test_profile_data_follows_name(conn):
    seed_database(conn, 2)
    rows = dict(conn.execute("SELECT name, profile_data FROM users"))
    assert rows["User 1"] == "Profile data for User 1. "


def test_create_schema_is_idempotent(conn):
    create_schema(conn)
    seed_database(conn, 4)
    create_schema(conn)
    assert _count(conn) == 4


def test_fetch_ids_and_exists(conn):
    seed_database(conn, 8)
    ids = list(fetch_ids(conn))
    assert len(ids) == 8
    assert len(set(ids)) == 8
    assert all(user_exists(conn, user_id) for user_id in ids)


def test_fetch_ids_limit(conn):
    seed_database(conn, 8)
    assert len(list(fetch_ids(conn, 3))) == 3


def test_unknown_user_does_not_exist(conn):
    seed_database(conn, 5)
    assert user_exists(conn, uuid.uuid4()) is False


def test_numbered_user():
    user = User.numbered(42)
    assert user.name == "User 42"
    assert user.profile_data == "Profile data for User 42. "