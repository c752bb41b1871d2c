"""Tests for the mock ingest Flask app."""

import base64

import pytest

from logdna_client.mock_server import create_app


@pytest.fixture
def app():
    application = create_app()
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


def _basic(key: str) -> dict:
    token = base64.b64encode(f"{key}:".encode()).decode()
    return {"Authorization": f"Basic {token}"}


class TestIngest:
    def test_accepts_batch(self, client, app):
        body = {"lines": [{"timestamp": 1, "line": "hello", "file": "a.log"}]}
        resp = client.post(
            "/logs/ingest?hostname=web-1&now=0", json=body, headers=_basic("key-1")
        )

        assert resp.status_code == 200
        received = app.config["received"]
        assert received[0]["api_key"] == "key-1"
        assert received[0]["hostname"] == "web-1"
        assert received[0]["lines"] == body["lines"]

    def test_rejects_malformed_payload(self, client, app):
        resp = client.post("/logs/ingest", json={"not_lines": []})
        assert resp.status_code == 400
        assert app.config["received"] == []

    def test_configured_failure_status(self, client, app):
        app.config["RESPONSE_STATUS"] = 503
        resp = client.post("/logs/ingest", json={"lines": []})
        assert resp.status_code == 503
        assert app.config["received"] == []


class TestInspection:
    def test_health_counts(self, client):
        client.post("/logs/ingest", json={"lines": [{"line": "a"}, {"line": "b"}]})
        data = client.get("/health").get_json()
        assert data == {"status": "healthy", "batches": 1, "lines": 2}

    def test_received_listing(self, client):
        client.post("/logs/ingest", json={"lines": [{"line": "a"}]})
        data = client.get("/received").get_json()
        assert len(data) == 1
        assert data[0]["api_key"] is None
