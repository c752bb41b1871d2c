"""Ingestion worker, the single consumer of the submission queue."""

import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field

from logdna_client.buffer import BatchBuffer
from logdna_client.errors import ClientClosedError
from logdna_client.flush import FlushController
from logdna_client.models import LogEntry, entry_to_line

logger = logging.getLogger(__name__)


@dataclass
class FlushRequest:
    """Queued ask for a flush; *final* also stops the worker afterwards."""

    final: bool = False
    result: Future = field(default_factory=Future)


class IngestionWorker:
    """Consumes entries and flush requests in FIFO order on one thread.

    Every buffer mutation and every delivery happens on this thread, so a
    caller's flush can never race a threshold flush.
    """

    def __init__(
        self,
        submissions: queue.Queue,
        controller: FlushController,
        buffer: BatchBuffer,
        log_file: str,
    ):
        self._queue = submissions
        self._controller = controller
        self._buffer = buffer
        self._log_file = log_file
        self._thread: threading.Thread | None = None

    def start(self):
        self._thread = threading.Thread(
            target=self._run, name="logdna-ingest", daemon=True
        )
        self._thread.start()

    def join(self, timeout: float | None = None):
        if self._thread:
            self._thread.join(timeout=timeout)

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if isinstance(item, FlushRequest):
                    self._handle_request(item)
                    if item.final:
                        self._drain_after_stop()
                        logger.debug("Ingestion worker stopped")
                        return
                else:
                    self._ingest(item)
            finally:
                self._queue.task_done()

    def _ingest(self, entry: LogEntry):
        try:
            line = entry_to_line(entry, self._log_file)
        except Exception:
            logger.exception("Dropping log entry that cannot be converted: %r", entry)
            self._buffer.release()
            return
        try:
            self._controller.append(line)
        except Exception:
            logger.exception("Failed to ingest log entry")

    def _drain_after_stop(self):
        """Fail or un-count whatever was queued behind the final request."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            try:
                if isinstance(item, FlushRequest):
                    if item.result.set_running_or_notify_cancel():
                        item.result.set_exception(ClientClosedError("client is closed"))
                else:
                    logger.warning("Discarding log entry submitted after close: %r", item)
                    self._buffer.release()
            finally:
                self._queue.task_done()

    def _handle_request(self, request: FlushRequest):
        if not request.result.set_running_or_notify_cancel():
            return
        trigger = "close" if request.final else "explicit"
        try:
            self._controller.flush(trigger)
        except Exception as exc:
            request.result.set_exception(exc)
        else:
            request.result.set_result(None)
