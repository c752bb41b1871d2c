"""LogDNA client that buffers log lines and ships them in batches."""

import datetime
import logging
import queue
import threading
from contextlib import contextmanager

from logdna_client.buffer import BatchBuffer
from logdna_client.config import ClientConfig, with_defaults
from logdna_client.endpoint import IngestEndpoint, make_ingest_endpoint
from logdna_client.errors import ClientClosedError
from logdna_client.flush import ErrorCallback, FlushController
from logdna_client.metrics import ShipperMetrics
from logdna_client.models import LogEntry
from logdna_client.sink import HTTPSink
from logdna_client.worker import FlushRequest, IngestionWorker

logger = logging.getLogger(__name__)

# Submission queue capacity, as a multiple of the flush limit.
QUEUE_HEADROOM = 10


class LogDNAClient:
    """Client for the LogDNA ingest API.

    Lines passed to :meth:`log` are queued to a background worker that
    buffers them and POSTs the batch once ``flush_limit`` lines have
    accumulated. Call :meth:`flush` to send early and :meth:`close` to send
    what is left and stop the worker.

    *on_error* is called as ``on_error(error, lines)`` with any batch the
    endpoint rejected permanently during an automatic flush.
    """

    def __init__(self, config: ClientConfig, on_error: ErrorCallback | None = None):
        self._config = with_defaults(config)
        self._endpoint = make_ingest_endpoint(
            self._config.api_key, self._config.hostname, self._config.ingest_url
        )
        self._metrics = ShipperMetrics()
        self._sink = HTTPSink(self._endpoint, timeout=self._config.timeout)
        self._buffer = BatchBuffer()
        self._stop = threading.Event()
        self._controller = FlushController(
            buffer=self._buffer,
            sink=self._sink,
            flush_limit=self._config.flush_limit,
            stop_event=self._stop,
            max_retries=self._config.max_retries,
            metrics=self._metrics,
            on_error=on_error,
        )
        self._queue: queue.Queue = queue.Queue(
            maxsize=QUEUE_HEADROOM * self._config.flush_limit
        )
        self._worker = IngestionWorker(
            self._queue, self._controller, self._buffer, self._config.log_file
        )
        self._closed = False
        # Guards _closed and the count of submissions still being enqueued.
        self._state = threading.Condition()
        self._submitting = 0
        self._worker.start()
        logger.info(
            "LogDNA client started: endpoint=%s, flush_limit=%d",
            self._endpoint.redacted(),
            self._config.flush_limit,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def log(self, timestamp: datetime.datetime, message: str):
        """Queue a line for delivery. Blocks while the queue is full."""
        if not isinstance(timestamp, datetime.datetime):
            raise TypeError(
                f"timestamp must be a datetime, not {type(timestamp).__name__}"
            )
        logger.debug("%s %s", timestamp, message)
        with self._submission():
            self._buffer.reserve()
            try:
                self._queue.put(LogEntry(timestamp, message))
            except BaseException:
                self._buffer.release()
                raise

    def size(self) -> int:
        """Number of lines logged and not yet delivered."""
        return self._buffer.size()

    def flush(self):
        """Send every line logged so far.

        No-op when nothing is buffered. Raises DeliveryError on failure, in
        which case the lines stay buffered for a later flush.
        """
        request = FlushRequest()
        with self._submission():
            self._queue.put(request)
        request.result.result()

    def close(self):
        """Flush remaining lines and stop the background worker.

        Raises the final flush's DeliveryError, if any. Calling close again
        does nothing.
        """
        with self._state:
            if self._closed:
                return
            self._closed = True
            self._state.wait_for(lambda: self._submitting == 0)

        self._stop.set()
        request = FlushRequest(final=True)
        self._queue.put(request)
        try:
            request.result.result()
        finally:
            self._worker.join(timeout=self._config.timeout + 1)
            self._sink.close()
            logger.info("LogDNA client closed: %s", self._metrics.snapshot())

    @contextmanager
    def _submission(self):
        """Admit one enqueue, unless the client is closed.

        close() waits for admitted enqueues to finish, so nothing lands
        behind the final flush request.
        """
        with self._state:
            if self._closed:
                raise ClientClosedError("client is closed")
            self._submitting += 1
        try:
            yield
        finally:
            with self._state:
                self._submitting -= 1
                self._state.notify_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> IngestEndpoint:
        return self._endpoint

    @property
    def metrics(self) -> ShipperMetrics:
        return self._metrics
