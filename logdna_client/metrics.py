"""Metrics collector — thread-safe counters for batch delivery to LogDNA."""

import threading
import time

FLUSH_TRIGGERS = ("size", "explicit", "close")


class ShipperMetrics:
    """Collects counters about deliveries, failures and dead-lettered lines."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches_sent: int = 0
        self._lines_sent: int = 0
        self._bytes_sent: int = 0
        self._failed_attempts: int = 0
        self._dead_lettered: int = 0
        self._send_times: list[float] = []
        self._flush_triggers: dict = {trigger: 0 for trigger in FLUSH_TRIGGERS}
        self._start_time = time.monotonic()

    def record_batch(
        self,
        lines: int,
        bytes_sent: int,
        send_time_ms: float,
        trigger: str = "size",
    ) -> None:
        """Record one successful delivery.

        Args:
            lines: Number of log lines in the batch.
            bytes_sent: Encoded payload size in bytes.
            send_time_ms: Round-trip time of the POST, in milliseconds.
            trigger: What caused the flush: "size", "explicit" or "close".
        """
        with self._lock:
            self._batches_sent += 1
            self._lines_sent += lines
            self._bytes_sent += bytes_sent
            self._send_times.append(send_time_ms)
            self._flush_triggers[trigger] = self._flush_triggers.get(trigger, 0) + 1

    def record_failure(self) -> None:
        with self._lock:
            self._failed_attempts += 1

    def record_dead_letter(self, lines: int) -> None:
        with self._lock:
            self._dead_lettered += lines

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all collected metrics."""
        with self._lock:
            send_times = list(self._send_times)
            avg_send = sum(send_times) / len(send_times) if send_times else 0.0

            return {
                "batches_sent": self._batches_sent,
                "lines_sent": self._lines_sent,
                "bytes_sent": self._bytes_sent,
                "failed_attempts": self._failed_attempts,
                "dead_lettered": self._dead_lettered,
                "avg_send_time_ms": avg_send,
                "p95_send_time_ms": self._percentile(send_times, 95),
                "flush_triggers": dict(self._flush_triggers),
                "uptime_seconds": time.monotonic() - self._start_time,
            }

    @staticmethod
    def _percentile(data: list, pct: float) -> float:
        """Send-time percentile by linear interpolation between ranks.

        Returns 0.0 before any batch was sent.
        """
        ordered = sorted(data)
        if not ordered:
            return 0.0

        rank = (len(ordered) - 1) * pct / 100
        below = int(rank)
        above = min(below + 1, len(ordered) - 1)
        weight = rank - below
        return float(ordered[below] * (1 - weight) + ordered[above] * weight)
