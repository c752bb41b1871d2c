"""Shared helpers for the test suite."""

import time

# Nothing listens on port 1, so connections are refused immediately.
UNREACHABLE_URL = "http://127.0.0.1:1/logs/ingest"


def wait_for(predicate, timeout=5.0):
    """Poll until *predicate* is true or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


class FakeSink:
    """Records delivered batches; fails with queued errors first."""

    def __init__(self, errors=None):
        self.delivered: list[list] = []
        self.attempts = 0
        self._errors = list(errors or [])

    def deliver(self, lines):
        self.attempts += 1
        if self._errors:
            raise self._errors.pop(0)
        self.delivered.append(list(lines))
        return 10 * len(lines)
