"""Batching client for the LogDNA ingest API."""

from logdna_client.client import LogDNAClient
from logdna_client.config import ClientConfig, DEFAULT_FLUSH_LIMIT
from logdna_client.endpoint import INGEST_BASE_URL, make_ingest_endpoint
from logdna_client.errors import (
    ClientClosedError,
    DeliveryError,
    EncodingError,
    TransmissionError,
)

__all__ = [
    "LogDNAClient",
    "ClientConfig",
    "DEFAULT_FLUSH_LIMIT",
    "INGEST_BASE_URL",
    "make_ingest_endpoint",
    "ClientClosedError",
    "DeliveryError",
    "EncodingError",
    "TransmissionError",
]
