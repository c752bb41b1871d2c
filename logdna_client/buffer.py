"""Batch buffer holding lines that await delivery."""

import threading

from logdna_client.models import LogLine


class BatchBuffer:
    """Lines accumulated since the last successful flush.

    Only the ingestion worker appends and discards. The lock exists so that
    size queries from producer threads see a consistent count, including
    entries that were submitted but not yet taken off the queue.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: list[LogLine] = []
        self._pending = 0

    def reserve(self) -> None:
        """Count an entry that is on its way through the submission queue."""
        with self._lock:
            self._pending += 1

    def release(self) -> None:
        """Undo a reservation whose entry never reached the queue."""
        with self._lock:
            self._pending -= 1

    def append(self, line: LogLine) -> int:
        """Append a reserved entry's line and return the buffered length."""
        with self._lock:
            self._lines.append(line)
            if self._pending > 0:
                self._pending -= 1
            return len(self._lines)

    def snapshot(self) -> list[LogLine]:
        with self._lock:
            return list(self._lines)

    def discard(self, count: int) -> None:
        """Drop the first *count* lines, the ones a flush just delivered."""
        with self._lock:
            del self._lines[:count]

    def size(self) -> int:
        """Buffered lines plus entries still queued for the worker."""
        with self._lock:
            return len(self._lines) + self._pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)
