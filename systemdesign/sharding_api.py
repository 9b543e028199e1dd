"""HTTP API for users stored across hash-sharded MongoDB collections."""

from __future__ import annotations

import argparse
import json
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from bson.binary import Binary
from flask import Flask, Response, request
from pymongo.errors import PyMongoError

from systemdesign.sharding import DEFAULT_URI_TEMPLATE, NUM_SHARDS, ShardManager, User

log = logging.getLogger(__name__)


class _BadRequest(Exception):
    pass


def _json_response(payload: Any, status: int = 200) -> Response:
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def _error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, content_type="text/plain; charset=utf-8")


def _decode_body() -> dict[str, str]:
    """Decode the request body as a JSON object of string values."""
    try:
        body = json.loads(request.get_data())
    except (ValueError, UnicodeDecodeError) as exc:
        raise _BadRequest from exc
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise _BadRequest
    values: dict[str, str] = {}
    for key, value in body.items():
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise _BadRequest
        values[key] = value
    return values


def _id_filter(user_id: uuid.UUID) -> dict[str, Binary]:
    return {"_id": Binary.from_uuid(user_id)}


def create_app(shard_manager: ShardManager) -> Flask:
    """Build the user API routed over ``shard_manager``."""
    app = Flask(__name__)

    @app.route("/users", methods=["POST"])
    def create_user() -> Response:
        try:
            body = _decode_body()
        except _BadRequest:
            return _error("Invalid request body", 400)
        user = User(uuid.uuid4(), body.get("name", ""), body.get("data", ""))
        try:
            shard_manager.get_shard_for_id(user.id).insert_one(user.to_document())
        except PyMongoError as exc:
            log.error("Error in insert_one: %s", exc)
            return _error("Error creating user", 500)
        return _json_response(user.to_json(), 201)

    @app.route("/users/<user_id>", methods=["GET"])
    def get_user_by_id(user_id: str) -> Response:
        try:
            uid = uuid.UUID(user_id)
        except ValueError:
            return _error("Invalid ID", 400)
        try:
            document = shard_manager.get_shard_for_id(uid).find_one(_id_filter(uid))
        except PyMongoError:
            document = None
        if document is None:
            return _error("User not found", 404)
        return _json_response(User.from_document(document).to_json())

    @app.route("/users/name/<name>", methods=["GET"])
    def get_user_by_name(name: str) -> Response:
        shards = shard_manager.get_all_shards()

        def query(shard: Any) -> list[dict[str, str]]:
            try:
                return [User.from_document(doc).to_json() for doc in shard.find({"name": name})]
            except PyMongoError as exc:
                log.warning("Error querying shard: %s", exc)
                return []

        users: list[dict[str, str]] = []
        if shards:
            with ThreadPoolExecutor(max_workers=len(shards)) as pool:
                for found in pool.map(query, shards):
                    users.extend(found)
        if not users:
            return _error("No user found with that name", 404)
        return _json_response(users)

    @app.route("/users/<user_id>", methods=["PUT"])
    def update_user(user_id: str) -> Response:
        try:
            uid = uuid.UUID(user_id)
        except ValueError:
            return _error("Invalid ID", 400)
        try:
            updates = _decode_body()
        except _BadRequest:
            return _error("Invalid request body", 400)
        change = {"$set": {"name": updates.get("name", ""), "data": updates.get("data", "")}}
        try:
            result = shard_manager.get_shard_for_id(uid).update_one(_id_filter(uid), change)
        except PyMongoError:
            result = None
        if result is None or result.matched_count == 0:
            return _error("User not found for update", 404)
        return Response(status=204)

    @app.route("/users/<user_id>", methods=["DELETE"])
    def delete_user(user_id: str) -> Response:
        try:
            uid = uuid.UUID(user_id)
        except ValueError:
            return _error("Invalid ID", 400)
        try:
            result = shard_manager.get_shard_for_id(uid).delete_one(_id_filter(uid))
        except PyMongoError:
            result = None
        if result is None or result.deleted_count == 0:
            return _error("User not found for deletion", 404)
        return Response(status=204)

    return app


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sharded user API server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--uri-template", default=DEFAULT_URI_TEMPLATE)
    parser.add_argument("--shards", type=int, default=NUM_SHARDS)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        manager = ShardManager.connect(args.uri_template, args.shards)
    except ConnectionError as exc:
        log.error("Failed to initialize the Shard Manager: %s", exc)
        return 1

    with manager:
        app = create_app(manager)
        log.info("Server started on port %d", args.port)
        app.run(host=args.host, port=args.port, threaded=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())