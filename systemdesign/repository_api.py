"""Repository HTTP service that returns a random message from the database."""

from __future__ import annotations

import argparse
import json
import logging
import os
import random
import socket
import time

from flask import Flask, Response
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

log = logging.getLogger(__name__)

MAX_WAIT_MS = 10_000
_QUERY = text("SELECT message FROM messages ORDER BY RANDOM() LIMIT 1")


class _NoRows(Exception):
    def __str__(self) -> str:
        return "no rows in result set"


def create_app(engine: Engine, max_wait_ms: int = MAX_WAIT_MS) -> Flask:
    """Build the repository app reading messages through ``engine``.

    Each request waits a random time below ``max_wait_ms`` milliseconds before answering.
    """
    if max_wait_ms < 0:
        raise ValueError("max_wait_ms must not be negative")
    app = Flask(__name__)

    @app.route("/data")
    def data() -> Response:
        hostname = socket.gethostname()
        log.info("Repository node '%s' received a request.", hostname)

        try:
            with engine.connect() as conn:
                row = conn.execute(_QUERY).first()
            if row is None:
                raise _NoRows
        except (SQLAlchemyError, _NoRows) as exc:
            return Response(
                f"Error querying the database: {exc}\n",
                status=500,
                content_type="text/plain; charset=utf-8",
            )

        wait_ms = random.randrange(max_wait_ms) if max_wait_ms > 0 else 0
        log.info("Repository node '%s' waiting for %dms", hostname, wait_ms)
        time.sleep(wait_ms / 1000)

        payload = {"data_message": row[0], "repository_node_id": hostname}
        return Response(json.dumps(payload) + "\n", mimetype="application/json")

    return app


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Repository service behind a load balancer.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8001)
    parser.add_argument("--max-wait-ms", type=int, default=MAX_WAIT_MS)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    database_url = os.environ.get("DATABASE_URL", "")
    if not database_url:
        log.error("DATABASE_URL is not defined")
        return 1

    try:
        engine = create_engine(database_url)
    except (SQLAlchemyError, ImportError) as exc:
        log.error("%s", exc)
        return 1
    try:
        app = create_app(engine, args.max_wait_ms)
        log.info("Repository server listening on port %d...", args.port)
        app.run(host=args.host, port=args.port, threaded=True)
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())