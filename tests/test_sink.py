"""Tests for the HTTP delivery sink."""

import json

import pytest

from logdna_client.endpoint import make_ingest_endpoint
from logdna_client.errors import EncodingError, TransmissionError
from logdna_client.models import LogLine
from logdna_client.sink import HTTPSink, encode_batch
from tests.helpers import UNREACHABLE_URL


def _lines(n: int, file: str = "app.log") -> list[LogLine]:
    return [LogLine(timestamp=1705307025000 + i, line=f"log-{i}", file=file) for i in range(n)]


@pytest.fixture
def sink(ingest_server):
    endpoint = make_ingest_endpoint("test-key", "web-1", base_url=ingest_server.url)
    s = HTTPSink(endpoint, timeout=5.0)
    yield s
    s.close()


class TestEncodeBatch:
    def test_payload_shape(self):
        payload = json.loads(encode_batch(_lines(2)))
        assert payload == {
            "lines": [
                {"timestamp": 1705307025000, "line": "log-0", "file": "app.log"},
                {"timestamp": 1705307025001, "line": "log-1", "file": "app.log"},
            ]
        }

    def test_unicode_survives(self):
        payload = json.loads(encode_batch([LogLine(1, "café ✓", "f")]))
        assert payload["lines"][0]["line"] == "café ✓"

    def test_unserializable_raises_encoding_error(self):
        bad = LogLine(timestamp=1, line=object(), file="f")
        with pytest.raises(EncodingError) as exc_info:
            encode_batch([bad])
        assert exc_info.value.retryable is False


class TestHTTPSinkRealServer:
    """Deliveries against the mock ingest server on loopback."""

    def test_deliver_posts_lines(self, sink, ingest_server):
        sent = sink.deliver(_lines(3))

        assert sent == len(encode_batch(_lines(3)))
        assert len(ingest_server.received) == 1
        batch = ingest_server.received[0]
        assert [l["line"] for l in batch["lines"]] == ["log-0", "log-1", "log-2"]
        assert batch["content_type"] == "application/json"

    def test_credentials_and_query(self, sink, ingest_server):
        sink.deliver(_lines(1))

        batch = ingest_server.received[0]
        assert batch["api_key"] == "test-key"
        assert batch["hostname"] == "web-1"
        assert batch["now"] == "-6795364578871345152"

    def test_server_error_is_retryable(self, sink, ingest_server):
        ingest_server.set_status(503)
        with pytest.raises(TransmissionError) as exc_info:
            sink.deliver(_lines(1))
        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable is True

    def test_client_error_is_permanent(self, sink, ingest_server):
        ingest_server.set_status(401)
        with pytest.raises(TransmissionError) as exc_info:
            sink.deliver(_lines(1))
        assert exc_info.value.status_code == 401
        assert exc_info.value.retryable is False

    def test_rate_limit_is_retryable(self, sink, ingest_server):
        ingest_server.set_status(429)
        with pytest.raises(TransmissionError) as exc_info:
            sink.deliver(_lines(1))
        assert exc_info.value.retryable is True


class TestHTTPSinkUnreachable:
    def test_connection_refused(self):
        endpoint = make_ingest_endpoint("k", "h", base_url=UNREACHABLE_URL)
        sink = HTTPSink(endpoint, timeout=2.0)
        try:
            with pytest.raises(TransmissionError) as exc_info:
                sink.deliver(_lines(1))
            assert exc_info.value.status_code is None
            assert exc_info.value.retryable is True
            assert "k@" not in str(exc_info.value)
        finally:
            sink.close()
