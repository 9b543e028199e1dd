"""User model and hash-based routing of users across MongoDB shards."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from bson.binary import Binary
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from systemdesign.hashing import fnv1a_64

log = logging.getLogger(__name__)

NUM_SHARDS = 4
DEFAULT_URI_TEMPLATE = "mongodb://mongo-shard-{}:27017"
DATABASE = "userdb"
COLLECTION = "users"
_CONNECT_TIMEOUT_MS = 10_000


@dataclass
class User:
    """A user stored on one of the shards."""

    id: uuid.UUID
    name: str = ""
    data: str = ""

    def to_json(self) -> dict[str, str]:
        """Return the user as a JSON-ready mapping."""
        return {"id": str(self.id), "name": self.name, "data": self.data}

    def to_document(self) -> dict[str, Any]:
        """Return the user as a MongoDB document keyed by ``_id``."""
        return {"_id": Binary.from_uuid(self.id), "name": self.name, "data": self.data}

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> User:
        """Build a user from a MongoDB document."""
        raw = document["_id"]
        if isinstance(raw, Binary):
            user_id = raw.as_uuid()
        elif isinstance(raw, uuid.UUID):
            user_id = raw
        else:
            user_id = uuid.UUID(str(raw))
        return cls(user_id, document.get("name") or "", document.get("data") or "")


def shard_index(user_id: uuid.UUID, num_shards: int = NUM_SHARDS) -> int:
    """Return the shard that holds ``user_id``: FNV-1a of its bytes modulo the shard count."""
    if num_shards <= 0:
        raise ValueError("num_shards must be positive")
    return fnv1a_64(user_id.bytes) % num_shards


class ShardManager:
    """Holds one collection per shard and routes ids to them."""

    def __init__(self, collections: Iterable[Any], clients: Iterable[Any] = ()) -> None:
        self.shards = list(collections)
        self.clients = list(clients)

    @classmethod
    def connect(
        cls, uri_template: str = DEFAULT_URI_TEMPLATE, num_shards: int = NUM_SHARDS
    ) -> ShardManager:
        """Connect to and ping every shard; raise ConnectionError if any fails."""
        clients: list[MongoClient] = []
        try:
            for i in range(num_shards):
                uri = uri_template.format(i)
                try:
                    client = MongoClient(
                        uri,
                        serverSelectionTimeoutMS=_CONNECT_TIMEOUT_MS,
                        connectTimeoutMS=_CONNECT_TIMEOUT_MS,
                    )
                except PyMongoError as exc:
                    raise ConnectionError(f"error creating client for shard {i}: {exc}") from exc
                clients.append(client)
                try:
                    client.admin.command("ping")
                except PyMongoError as exc:
                    raise ConnectionError(f"ping failed for shard {i}: {exc}") from exc
                log.info("Connected successfully to Shard %d", i)
        except ConnectionError:
            for client in clients:
                client.close()
            raise
        return cls([client[DATABASE][COLLECTION] for client in clients], clients)

    def get_shard_for_id(self, user_id: uuid.UUID) -> Any:
        """Return the collection that holds ``user_id``."""
        return self.shards[shard_index(user_id, len(self.shards))]

    def get_all_shards(self) -> list[Any]:
        """Return every shard collection, in shard order."""
        return list(self.shards)

    def close(self) -> None:
        """Disconnect from every shard, logging failures."""
        for i, client in enumerate(self.clients):
            try:
                client.close()
            except PyMongoError as exc:
                log.error("Error disconnecting from shard %d: %s", i, exc)

    def __enter__(self) -> ShardManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()