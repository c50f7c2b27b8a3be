"""
Record processors.

A processor is a pure step record -> record applied before formatting,
in registration order. Later processors see earlier additions to extra.
Any plain callable with that shape works too; these are the built-ins.
"""

import inspect
import secrets
from abc import ABC, abstractmethod
from typing import Callable, Sequence

import psutil

from chanlog.records import LogRecord

ProcessorCallable = Callable[[LogRecord], LogRecord]

# Frames from modules under these prefixes belong to the logging library itself
INTERNAL_PREFIXES: tuple[str, ...] = ("chanlog.",)


class Processor(ABC):
    """Base processor."""

    @abstractmethod
    def __call__(self, record: LogRecord) -> LogRecord: ...


class IntrospectionProcessor(Processor):
    """
    Adds the call site (file, line, class, function) to extra.

    Walks outward from the processor, skipping the library's own frames and
    any module prefixes given by the caller, and reports the first frame
    outside them. skip_frames moves further out from there, for callers
    that wrap the logger in their own helpers.
    """

    def __init__(self, skip_frames: int = 0, skip_prefixes: Sequence[str] = ()):
        self.skip_frames = max(0, skip_frames)
        self.skip_prefixes = INTERNAL_PREFIXES + tuple(skip_prefixes)

    def __call__(self, record: LogRecord) -> LogRecord:
        frame = inspect.currentframe()
        try:
            while frame is not None and self._is_internal(frame):
                frame = frame.f_back
            for _ in range(self.skip_frames):
                if frame is None or frame.f_back is None:
                    break
                frame = frame.f_back

            if frame is None:
                site = {"file": "unknown", "line": 0, "class": "", "function": ""}
            else:
                site = {
                    "file": frame.f_code.co_filename,
                    "line": frame.f_lineno,
                    "class": _frame_class(frame),
                    "function": frame.f_code.co_name,
                }
            return record.with_extra(**site)
        finally:
            del frame

    def _is_internal(self, frame) -> bool:
        module = frame.f_globals.get("__name__", "")
        return any(
            module == prefix.rstrip(".") or module.startswith(prefix)
            for prefix in self.skip_prefixes
        )


class MemoryUsageProcessor(Processor):
    """
    Adds memory_usage (current RSS) and memory_peak to extra.

    memory_peak is the highest RSS this processor has observed. Values are
    human-scaled ("12.5 MB") unless human=False.
    """

    UNITS = ("B", "KB", "MB", "GB")

    def __init__(self, human: bool = True):
        self.human = human
        self._process = psutil.Process()
        self._peak = 0

    def __call__(self, record: LogRecord) -> LogRecord:
        current = self._process.memory_info().rss
        self._peak = max(self._peak, current)
        if self.human:
            return record.with_extra(
                memory_usage=self.format_bytes(current),
                memory_peak=self.format_bytes(self._peak),
            )
        return record.with_extra(memory_usage=current, memory_peak=self._peak)

    @classmethod
    def format_bytes(cls, size: int) -> str:
        value = float(size)
        unit = 0
        while value >= 1024 and unit < len(cls.UNITS) - 1:
            value /= 1024
            unit += 1
        return f"{round(value, 2):g} {cls.UNITS[unit]}"


class UidProcessor(Processor):
    """
    Adds a correlation id (extra["uid"]) shared by every record until reset().

    Long-running workers call reset() at the start of each unit of work.
    """

    def __init__(self, length: int = 8):
        self.length = max(4, min(32, length))
        self._uid = self._generate()

    @property
    def uid(self) -> str:
        return self._uid

    def reset(self) -> None:
        self._uid = self._generate()

    def __call__(self, record: LogRecord) -> LogRecord:
        return record.with_extra(uid=self._uid)

    def _generate(self) -> str:
        return secrets.token_hex((self.length + 1) // 2)[: self.length]


def _frame_class(frame) -> str:
    owner = frame.f_locals.get("self")
    if owner is not None:
        return type(owner).__qualname__
    cls = frame.f_locals.get("cls")
    if isinstance(cls, type):
        return cls.__qualname__
    return ""
