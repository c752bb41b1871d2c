"""Tests for the log entry and line models."""

import datetime

import pytest

from logdna_client.models import LogEntry, LogLine, entry_to_line, to_millis

UTC = datetime.timezone.utc


class TestToMillis:
    def test_epoch_is_zero(self):
        assert to_millis(datetime.datetime(1970, 1, 1, tzinfo=UTC)) == 0

    def test_truncates_sub_millisecond_precision(self):
        ts = datetime.datetime(2024, 1, 15, 8, 23, 45, 123999, tzinfo=UTC)
        assert to_millis(ts) == 1705307025123

    def test_pre_epoch_truncates_toward_zero(self):
        ts = datetime.datetime(1969, 12, 31, 23, 59, 59, 998500, tzinfo=UTC)
        # -1.5 ms truncates to -1, not -2
        assert to_millis(ts) == -1

    def test_other_timezone_is_normalized(self):
        plus_two = datetime.timezone(datetime.timedelta(hours=2))
        local = datetime.datetime(2024, 1, 15, 10, 23, 45, tzinfo=plus_two)
        utc = datetime.datetime(2024, 1, 15, 8, 23, 45, tzinfo=UTC)
        assert to_millis(local) == to_millis(utc)

    def test_naive_matches_timestamp(self):
        ts = datetime.datetime(2024, 6, 1, 12, 0, 0, 500000)
        assert to_millis(ts) == int(ts.timestamp() * 1000)


class TestEntryToLine:
    def test_fields(self):
        ts = datetime.datetime(2024, 1, 15, 8, 23, 45, 1000, tzinfo=UTC)
        line = entry_to_line(LogEntry(ts, "User logged in"), "app.log")

        assert line == LogLine(timestamp=1705307025001, line="User logged in", file="app.log")

    def test_to_dict_wire_keys(self):
        line = LogLine(timestamp=1, line="hello", file="svc.log")
        assert line.to_dict() == {"timestamp": 1, "line": "hello", "file": "svc.log"}

    def test_entry_is_immutable(self):
        entry = LogEntry(datetime.datetime.now(UTC), "msg")
        with pytest.raises(AttributeError):
            entry.message = "changed"
