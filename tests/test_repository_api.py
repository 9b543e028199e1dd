import json
import socket

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from systemdesign.repository_api import create_app, main

MESSAGES = ["first message", "second message", "third message"]


def _engine(with_table: bool = True, messages=MESSAGES):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if with_table:
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE messages (message TEXT)"))
            for message in messages:
                conn.execute(text("INSERT INTO messages (message) VALUES (:m)"), {"m": message})
    return engine


def test_returns_a_stored_message_with_node_id():
    client = create_app(_engine(), max_wait_ms=0).test_client()
    resp = client.get("/data")
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "application/json"
    body = json.loads(resp.data)
    assert body["data_message"] in MESSAGES
    assert body["repository_node_id"] == socket.gethostname()
    assert set(body) == {"data_message", "repository_node_id"}


def test_every_answer_comes_from_the_table():
    client = create_app(_engine(), max_wait_ms=0).test_client()
    seen = {json.loads(client.get("/data").data)["data_message"] for _ in range(30)}
    assert seen <= set(MESSAGES)
    assert seen


def test_single_message_is_always_returned():
    client = create_app(_engine(messages=["only one"]), max_wait_ms=0).test_client()
    assert json.loads(client.get("/data").data)["data_message"] == "only one"


def test_small_wait_still_answers():
    client = create_app(_engine(), max_wait_ms=5).test_client()
    assert client.get("/data").status_code == 200


def test_empty_table_is_server_error():
    client = create_app(_engine(messages=[]), max_wait_ms=0).test_client()
    resp = client.get("/data")
    assert resp.status_code == 500
    assert resp.get_data(as_text=True).startswith("Error querying the database: ")


def test_missing_table_is_server_error():
    client = create_app(_engine(with_table=False), max_wait_ms=0).test_client()
    resp = client.get("/data")
    assert resp.status_code == 500
    assert resp.get_data(as_text=True).startswith("Error querying the database: ")


def test_negative_wait_rejected():
    with pytest.raises(ValueError):
        create_app(_engine(), max_wait_ms=-1)


def test_main_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert main([]) == 1
    monkeypatch.setenv("DATABASE_URL", "")
    assert main([]) == 1