"""Local stand-in for the LogDNA ingest API."""

import logging
import os
import threading

from flask import Flask, jsonify, request
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)


def create_app(response_status: int = 200):
    """Flask application factory.

    Every POST to ``/logs/ingest`` is recorded with its credentials and
    query; the response status can be changed at runtime through
    ``app.config["RESPONSE_STATUS"]``.
    """
    app = Flask(__name__)
    app.config["RESPONSE_STATUS"] = response_status

    received: list[dict] = []
    lock = threading.Lock()
    app.config["received"] = received

    @app.route("/health")
    def health():
        with lock:
            batches = len(received)
            lines = sum(len(b["lines"]) for b in received)
        return jsonify({"status": "healthy", "batches": batches, "lines": lines})

    @app.route("/logs/ingest", methods=["POST"])
    def ingest():
        status = app.config["RESPONSE_STATUS"]
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict) or not isinstance(payload.get("lines"), list):
            return jsonify({"status": "invalid"}), 400

        if 200 <= status < 300:
            auth = request.authorization
            with lock:
                received.append({
                    "api_key": auth.username if auth else None,
                    "hostname": request.args.get("hostname"),
                    "now": request.args.get("now"),
                    "content_type": request.content_type,
                    "lines": payload["lines"],
                })
            logger.info("Received batch of %d lines", len(payload["lines"]))
        return jsonify({"status": "ok" if status < 300 else "error"}), status

    @app.route("/received")
    def list_received():
        with lock:
            return jsonify(list(received))

    return app


class MockIngestServer:
    """Runs the mock ingest app on a background thread."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0, response_status: int = 200):
        self.app = create_app(response_status)
        self._host = host
        self._server = make_server(host, port, self.app, threaded=True)
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._server.server_address[1]}/logs/ingest"

    @property
    def received(self) -> list[dict]:
        return self.app.config["received"]

    def set_status(self, status: int):
        self.app.config["RESPONSE_STATUS"] = status

    def start(self):
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info("Mock ingest server listening on %s", self.url)

    def stop(self):
        self._server.shutdown()
        if self._thread:
            self._thread.join(timeout=5)
        self._server.server_close()


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    host = os.environ.get("SERVER_HOST", "127.0.0.1")
    port = int(os.environ.get("SERVER_PORT", "8080"))
    create_app().run(host=host, port=port)


if __name__ == "__main__":
    main()
