"""HTTP delivery sink: encodes a batch as JSON and POSTs it once."""

import json
import logging

import requests
from requests.auth import HTTPBasicAuth

from logdna_client.endpoint import IngestEndpoint
from logdna_client.errors import EncodingError, TransmissionError
from logdna_client.models import LogLine

logger = logging.getLogger(__name__)


def encode_batch(lines: list[LogLine]) -> bytes:
    """Serialize *lines* to the ingest payload ``{"lines": [...]}``."""
    try:
        payload = json.dumps({"lines": [line.to_dict() for line in lines]})
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"could not encode batch: {exc}") from exc
    return payload.encode("utf-8")


class HTTPSink:
    """Delivers batches to an ingest endpoint over a pooled HTTP session.

    Basic auth is taken from the user-info part of the endpoint URL, with
    the API key as username and an empty password.
    No retries happen here; that policy belongs to the flush controller.
    """

    def __init__(self, endpoint: IngestEndpoint, timeout: float = 10.0):
        self._endpoint = endpoint
        self._timeout = timeout
        self._session = requests.Session()
        credentials = endpoint.credentials()
        self._auth = HTTPBasicAuth(*credentials) if credentials else None

    def deliver(self, lines: list[LogLine]) -> int:
        """POST *lines* and return the number of bytes sent.

        Raises EncodingError or TransmissionError.
        """
        body = encode_batch(lines)
        try:
            resp = self._session.post(
                self._endpoint.url,
                data=body,
                auth=self._auth,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransmissionError(
                f"POST to {self._endpoint.redacted()} failed: {exc}"
            ) from exc

        try:
            if not 200 <= resp.status_code < 300:
                raise TransmissionError(
                    f"ingest endpoint returned HTTP {resp.status_code}",
                    status_code=resp.status_code,
                )
        finally:
            resp.close()

        logger.debug("Delivered %d lines (%d bytes)", len(lines), len(body))
        return len(body)

    def close(self):
        """Release pooled connections."""
        self._session.close()
