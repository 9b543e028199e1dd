"""Exercise the sharded user API: bulk insert, shard counts, CRUD and failure cases."""

from __future__ import annotations

import argparse
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from termcolor import cprint

from systemdesign.sharding import COLLECTION, DATABASE

log = logging.getLogger(__name__)

API_URL = "http://localhost:8080"
NUM_USERS = 1000
NUM_SHARDS = 4
REPEATING_NAMES = ("John Doe", "Jane Smith", "Peter Jones")
_TIMEOUT = 10
_PARALLELISM = 50
_FIRST_SHARD_PORT = 27017


def _say(color: str, *parts: object) -> None:
    cprint(" ".join(str(part) for part in parts), color)


def _json_or_none(resp: requests.Response) -> Any:
    if resp.status_code != 200:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


def user_name_for(index: int) -> str:
    """Return the name of the ``index``-th user; every hundredth repeats a shared name."""
    if index % 100 == 0:
        return REPEATING_NAMES[(index // 100 - 1) % len(REPEATING_NAMES)]
    return f"User {index}"


def insert_users(api_url: str = API_URL, num_users: int = NUM_USERS) -> int:
    """Create users 1..num_users through the API in parallel; return how many succeeded."""
    _say("blue", "--- 1. Inserting", num_users, "users in parallel ---")

    def insert(index: int) -> bool:
        name = user_name_for(index)
        payload = {"name": name, "data": f"Random data for {name}"}
        try:
            resp = requests.post(f"{api_url}/users", json=payload, timeout=_TIMEOUT)
        except requests.RequestException as exc:
            log.error("Error inserting user %d: %s", index, exc)
            return False
        with resp:
            if resp.status_code != 201:
                log.error("Error inserting user %d: status %d", index, resp.status_code)
                return False
        print(".", end="", flush=True)
        return True

    with ThreadPoolExecutor(max_workers=_PARALLELISM) as pool:
        inserted = sum(pool.map(insert, range(1, num_users + 1)))
    print()
    _say("green", inserted, "users inserted successfully.")
    return inserted


def count_shards(num_shards: int = NUM_SHARDS) -> dict[int, int]:
    """Count the users on each shard reachable on localhost; return counts by shard."""
    _say("blue", "\n--- 2. Checking the data distribution in the shards ---")
    counts: dict[int, int] = {}
    for i in range(num_shards):
        uri = f"mongodb://localhost:{_FIRST_SHARD_PORT + i}"
        try:
            client = MongoClient(uri, serverSelectionTimeoutMS=_TIMEOUT * 1000)
        except PyMongoError as exc:
            _say("red", "Error connecting to shard", i, ":", exc)
            continue
        try:
            count = client[DATABASE][COLLECTION].count_documents({})
        except PyMongoError as exc:
            _say("red", "Error counting documents in shard", i, ":", exc)
            continue
        finally:
            client.close()
        _say("yellow", f"Shard {i}: {count} users")
        counts[i] = count
    _say("green", "Total users in the shards:", sum(counts.values()))
    _say("yellow", "Note: The distribution will not be perfect, but should be close due to the hash.")
    return counts


def run_crud_checks(api_url: str = API_URL) -> dict[str, Any]:
    """Create, read, update, search and delete a user; return what each step saw."""
    _say("blue", "\n--- 3. Testing the CRUD functionalities ---")

    _say("yellow", "\n-> Testing POST /users")
    resp = requests.post(
        f"{api_url}/users", json={"name": "Test CRUD", "data": "initial data"}, timeout=_TIMEOUT
    )
    created = resp.json()
    user_url = f"{api_url}/users/{created['id']}"
    _say("green", "Test user created with ID:", created["id"])

    _say("yellow", "\n-> Testing GET /users/{id}")
    resp = requests.get(user_url, timeout=_TIMEOUT)
    fetched = _json_or_none(resp)
    _say("green", "Get by ID successful. Response:", resp.text)

    _say("yellow", "\n-> Testing PUT /users/{id}")
    requests.put(
        user_url, json={"name": "Test CRUD Updated", "data": "updated data"}, timeout=_TIMEOUT
    )
    _say("green", "Update request sent. Checking...")
    resp = requests.get(user_url, timeout=_TIMEOUT)
    updated = _json_or_none(resp)
    _say("green", "Response after update:", resp.text)

    _say("yellow", "\n-> Testing GET /users/name/{name} (Scatter-Gather)")
    resp = requests.get(f"{api_url}/users/name/John%20Doe", timeout=_TIMEOUT)
    matches = _json_or_none(resp) or []
    _say("green", f"Get by name 'John Doe' found {len(matches)} users (expected > 1).")

    _say("yellow", "\n-> Testing DELETE /users/{id}")
    resp = requests.delete(user_url, timeout=_TIMEOUT)
    _say("green", f"User deleted. Status Code: {resp.status_code} (expected 204)")

    return {
        "created": created,
        "fetched": fetched,
        "updated": updated,
        "name_matches": len(matches),
        "delete_status": resp.status_code,
    }


def run_failure_checks(api_url: str = API_URL) -> dict[str, int]:
    """Call GET, PUT and DELETE with an unknown id; return the status of each."""
    _say("blue", "\n--- 4. Testing failure cases (non-existent IDs) ---")
    missing = uuid.uuid4()
    _say("yellow", "Using non-existent ID for tests:", missing)
    url = f"{api_url}/users/{missing}"

    statuses: dict[str, int] = {}
    for method, body in (("GET", None), ("PUT", b"{}"), ("DELETE", None)):
        headers = {"Content-Type": "application/json"} if body is not None else {}
        resp = requests.request(method, url, data=body, headers=headers, timeout=_TIMEOUT)
        statuses[method] = resp.status_code
        print(f"-> Testing {method} of non-existent ID (expected 404): {resp.status_code} ", end="")
        if resp.status_code == 404:
            _say("green", "OK")
        else:
            _say("red", "FAILED")
    return statuses


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check the sharded user API end to end.")
    parser.add_argument("--api-url", default=API_URL)
    parser.add_argument("--users", type=int, default=NUM_USERS)
    parser.add_argument("--shards", type=int, default=NUM_SHARDS)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    insert_users(args.api_url, args.users)
    count_shards(args.shards)
    run_crud_checks(args.api_url)
    run_failure_checks(args.api_url)
    _say("green", "\n--- All tests completed! ---")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())