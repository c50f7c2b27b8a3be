"""
Tests for processors.

Covers:
- UidProcessor stability, reset and length clamping
- MemoryUsageProcessor fields and byte scaling
- IntrospectionProcessor call-site discovery
- processor ordering inside a logger
"""

from unittest.mock import MagicMock

import pytest

from chanlog.processors import IntrospectionProcessor, MemoryUsageProcessor, UidProcessor
from chanlog.records import LogLevel, LogRecord


def _record():
    return LogRecord.create(LogLevel.INFO, "test")


# ═══════════════════════════════════════════════════════════════════
#  UidProcessor
# ═══════════════════════════════════════════════════════════════════

class TestUidProcessor:
    def test_adds_uid(self):
        proc = UidProcessor()
        record = proc(_record())
        assert record.extra["uid"] == proc.uid
        assert len(proc.uid) == 8
        int(proc.uid, 16)  # hex

    def test_stable_until_reset(self):
        proc = UidProcessor()
        first = proc(_record()).extra["uid"]
        second = proc(_record()).extra["uid"]
        assert first == second
        proc.reset()
        assert proc(_record()).extra["uid"] != first

    @pytest.mark.parametrize("requested,expected", [(1, 4), (7, 7), (12, 12), (100, 32)])
    def test_length_clamped(self, requested, expected):
        assert len(UidProcessor(requested).uid) == expected

    def test_does_not_mutate_input(self):
        record = _record()
        UidProcessor()(record)
        assert record.extra == {}


# ═══════════════════════════════════════════════════════════════════
#  MemoryUsageProcessor
# ═══════════════════════════════════════════════════════════════════

class TestMemoryUsageProcessor:
    def test_adds_human_readable_fields(self):
        record = MemoryUsageProcessor()(_record())
        assert record.extra["memory_usage"].split()[1] in ("B", "KB", "MB", "GB")
        assert record.extra["memory_peak"].split()[1] in ("B", "KB", "MB", "GB")

    def test_raw_bytes(self):
        record = MemoryUsageProcessor(human=False)(_record())
        assert isinstance(record.extra["memory_usage"], int)
        assert record.extra["memory_peak"] >= record.extra["memory_usage"]

    def test_peak_is_high_water_mark(self):
        proc = MemoryUsageProcessor(human=False)
        proc._process = MagicMock()
        proc._process.memory_info.side_effect = [
            MagicMock(rss=5000), MagicMock(rss=3000),
        ]
        assert proc(_record()).extra["memory_peak"] == 5000
        second = proc(_record()).extra
        assert second["memory_usage"] == 3000
        assert second["memory_peak"] == 5000

    @pytest.mark.parametrize("size,expected", [
        (512, "512 B"),
        (2048, "2 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
        (3 * 1024 ** 4, "3072 GB"),
    ])
    def test_format_bytes(self, size, expected):
        assert MemoryUsageProcessor.format_bytes(size) == expected


# ═══════════════════════════════════════════════════════════════════
#  IntrospectionProcessor
# ═══════════════════════════════════════════════════════════════════

class Controller:
    def handle(self, logger):
        logger.info("handled")


def helper(logger):
    logger.warning("from helper")


class TestIntrospectionProcessor:
    def test_reports_external_caller(self, recording):
        recording.set_formatter(_ExtraCapture())
        recording.add_processor(IntrospectionProcessor())
        recording.info("here")
        extra = recording.formatter.extras[-1]
        assert extra["file"].endswith("test_processors.py")
        assert extra["function"] == "test_reports_external_caller"
        assert extra["class"] == "TestIntrospectionProcessor"
        assert extra["line"] > 0

    def test_reports_method_class(self, recording):
        recording.set_formatter(_ExtraCapture())
        recording.add_processor(IntrospectionProcessor())
        Controller().handle(recording)
        extra = recording.formatter.extras[-1]
        assert extra["function"] == "handle"
        assert extra["class"] == "Controller"

    def test_skip_frames(self, recording):
        recording.set_formatter(_ExtraCapture())
        recording.add_processor(IntrospectionProcessor(skip_frames=1))
        helper(recording)
        extra = recording.formatter.extras[-1]
        assert extra["function"] == "test_skip_frames"

    def test_skip_prefixes(self, recording):
        recording.set_formatter(_ExtraCapture())
        recording.add_processor(IntrospectionProcessor(skip_prefixes=[__name__]))
        recording.info("x")
        extra = recording.formatter.extras[-1]
        assert extra["function"] != "test_skip_prefixes"


# ═══════════════════════════════════════════════════════════════════
#  Ordering
# ═══════════════════════════════════════════════════════════════════

class TestProcessorChain:
    def test_registration_order_is_application_order(self, recording):
        seen = []

        def first(record):
            seen.append("first")
            return record.with_extra(step=1)

        def second(record):
            seen.append(("second", record.extra.get("step")))
            return record.with_extra(step=2)

        recording.set_formatter(_ExtraCapture())
        recording.add_processor(first).add_processor(second)
        recording.info("x")
        assert seen == ["first", ("second", 1)]
        assert recording.formatter.extras[-1] == {"step": 2}

    def test_processor_may_rewrite_level_message_channel(self, recording):
        recording.add_processor(
            lambda r: r.evolve(level="critical", message="rewritten", channel="audit")
        )
        recording.info("original")
        level, line = recording.lines[-1]
        assert level == LogLevel.CRITICAL
        assert line == "CRITICAL: rewritten"

    def test_processors_skipped_for_filtered_records(self, recording):
        calls = []
        recording.min_level = LogLevel.ERROR
        recording.add_processor(lambda r: calls.append(r) or r)
        recording.warning("dropped")
        assert calls == []
        assert recording.lines == []


class _ExtraCapture:
    """Formatter stand-in that remembers the extra mapping it was given."""

    def __init__(self):
        self.extras = []

    def render(self, level, message, context=None, extra=None, channel="app", env="dev"):
        self.extras.append(dict(extra or {}))
        return message
