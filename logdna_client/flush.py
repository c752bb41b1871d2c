"""Flush controller: decides when to deliver and what to do on failure."""

import logging
import random
import threading
import time
from typing import Callable

from logdna_client.buffer import BatchBuffer
from logdna_client.errors import DeliveryError
from logdna_client.metrics import ShipperMetrics
from logdna_client.models import LogLine
from logdna_client.sink import HTTPSink

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[DeliveryError, list[LogLine]], None]

# Threshold flushes are suppressed this long after retries run out.
RETRY_COOLDOWN = 5.0


class FlushController:
    """Owns the buffer's lifecycle on the worker thread.

    Threshold flushes retry transient failures with exponential backoff and
    hand permanently rejected batches to *on_error*. Explicit flushes make a
    single attempt and raise.
    """

    def __init__(
        self,
        buffer: BatchBuffer,
        sink: HTTPSink,
        flush_limit: int,
        stop_event: threading.Event,
        max_retries: int = 3,
        metrics: ShipperMetrics | None = None,
        on_error: ErrorCallback | None = None,
        retry_cooldown: float = RETRY_COOLDOWN,
    ):
        self._buffer = buffer
        self._sink = sink
        self._flush_limit = flush_limit
        self._stop = stop_event
        self._max_retries = max_retries
        self._metrics = metrics or ShipperMetrics()
        self._on_error = on_error
        self._retry_cooldown = retry_cooldown
        self._cooldown_until = 0.0

    @property
    def flush_limit(self) -> int:
        return self._flush_limit

    def append(self, line: LogLine):
        """Append *line* and flush immediately if the limit is reached."""
        size = self._buffer.append(line)
        if size >= self._flush_limit and time.monotonic() >= self._cooldown_until:
            self.threshold_flush()

    def flush(self, trigger: str = "explicit"):
        """Deliver the whole buffer once. Raises DeliveryError on failure.

        The buffer is left untouched when delivery fails.
        """
        lines = self._buffer.snapshot()
        if not lines:
            return
        self._deliver(lines, trigger)
        self._cooldown_until = 0.0

    def threshold_flush(self):
        """Deliver a full buffer, retrying transient failures.

        Never raises DeliveryError; failures are logged and handled here.
        """
        lines = self._buffer.snapshot()
        attempts = self._max_retries + 1

        for attempt in range(attempts):
            try:
                self._deliver(lines, "size")
                return
            except DeliveryError as exc:
                if not exc.retryable:
                    self._dead_letter(lines, exc)
                    return
                if attempt + 1 < attempts and not self._stop.is_set():
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        "Flush of %d lines failed (attempt %d/%d): %s; retrying in %.2fs",
                        len(lines), attempt + 1, attempts, exc, delay,
                    )
                    if self._stop.wait(delay):
                        break
                else:
                    logger.error(
                        "Flush of %d lines failed after %d attempt(s): %s",
                        len(lines), attempt + 1, exc,
                    )
                    break

        self._cooldown_until = time.monotonic() + self._retry_cooldown

    def _deliver(self, lines: list[LogLine], trigger: str):
        start = time.monotonic()
        try:
            bytes_sent = self._sink.deliver(lines)
        except DeliveryError:
            self._metrics.record_failure()
            raise
        elapsed_ms = (time.monotonic() - start) * 1000

        self._buffer.discard(len(lines))
        self._metrics.record_batch(
            lines=len(lines),
            bytes_sent=bytes_sent,
            send_time_ms=elapsed_ms,
            trigger=trigger,
        )
        logger.info(
            "Flushed %d lines (%d bytes, trigger=%s) in %.1fms",
            len(lines), bytes_sent, trigger, elapsed_ms,
        )

    def _dead_letter(self, lines: list[LogLine], exc: DeliveryError):
        """Drop a batch the endpoint will never accept."""
        self._buffer.discard(len(lines))
        self._metrics.record_dead_letter(len(lines))
        logger.error("Dropping %d lines rejected by ingest endpoint: %s", len(lines), exc)
        if self._on_error is None:
            return
        try:
            self._on_error(exc, lines)
        except Exception:
            logger.exception("Error callback raised")

    @staticmethod
    def _backoff_delay(attempt: int) -> float:
        """Seconds to wait before retry number *attempt* + 1.

        100ms doubling per attempt, capped at 2s, scaled by a random
        factor in [0.8, 1.2].
        """
        return min(0.1 * 2 ** attempt, 2.0) * random.uniform(0.8, 1.2)
