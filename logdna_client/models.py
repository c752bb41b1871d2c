"""Log entry and wire-line models."""

import datetime
from dataclasses import dataclass, asdict

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime.datetime
    message: str


@dataclass(frozen=True)
class LogLine:
    timestamp: int
    line: str
    file: str

    def to_dict(self) -> dict:
        return asdict(self)


def to_millis(ts: datetime.datetime) -> int:
    """Milliseconds since the epoch, truncated toward zero.

    Naive datetimes are taken as local time, like ``datetime.timestamp()``.
    """
    delta = ts.astimezone(datetime.timezone.utc) - EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    if micros >= 0:
        return micros // 1000
    return -(-micros // 1000)


def entry_to_line(entry: LogEntry, log_file: str) -> LogLine:
    """Convert a submitted entry into the line shape the ingest API expects."""
    return LogLine(
        timestamp=to_millis(entry.timestamp),
        line=entry.message,
        file=log_file,
    )
