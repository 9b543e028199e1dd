"""Front-end HTTP service that forwards /data requests to the repository tier."""

from __future__ import annotations

import argparse
import logging
import socket

import requests
from flask import Flask, Response

log = logging.getLogger(__name__)

REPOSITORY_URL = "http://haproxy:8081/data"
NODE_HEADER = "X-Controller-Node-ID"


def create_app(repository_url: str = REPOSITORY_URL) -> Flask:
    """Build the controller app, which relays /data to ``repository_url``."""
    app = Flask(__name__)

    @app.route("/data")
    def data() -> Response:
        hostname = socket.gethostname()
        log.info("Controller node '%s' received a request.", hostname)

        try:
            upstream = requests.get(repository_url)
        except requests.RequestException as exc:
            return Response(
                f"Error calling repository service: {exc}\n",
                status=503,
                content_type="text/plain; charset=utf-8",
            )
        try:
            response = Response(upstream.content, status=upstream.status_code)
            content_type = upstream.headers.get("Content-Type")
            if content_type:
                response.headers["Content-Type"] = content_type
            else:
                del response.headers["Content-Type"]
            response.headers[NODE_HEADER] = hostname
            return response
        finally:
            upstream.close()

    return app


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Controller service behind a load balancer.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--repository-url", default=REPOSITORY_URL)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    app = create_app(args.repository_url)
    log.info("Controller server listening on port %d...", args.port)
    app.run(host=args.host, port=args.port, threaded=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())