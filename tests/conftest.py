import pytest

from logdna_client.config import ClientConfig
from logdna_client.mock_server import MockIngestServer
from tests.helpers import UNREACHABLE_URL


@pytest.fixture
def ingest_server():
    """Start a real mock ingest server on an ephemeral port."""
    server = MockIngestServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def make_config():
    """Factory for configs aimed at a test endpoint."""
    def _make(ingest_url=UNREACHABLE_URL, **overrides):
        defaults = {
            "api_key": "test-key",
            "log_file": "app.log",
            "hostname": "test-host",
            "flush_limit": 100,
            "ingest_url": ingest_url,
            "timeout": 5.0,
            "max_retries": 0,
        }
        defaults.update(overrides)
        return ClientConfig(**defaults)

    return _make


@pytest.fixture
def no_backoff(monkeypatch):
    """Make retry backoff instantaneous."""
    from logdna_client.flush import FlushController

    monkeypatch.setattr(FlushController, "_backoff_delay", staticmethod(lambda attempt: 0.0))
