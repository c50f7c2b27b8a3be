"""
Buffer logger: holds records in memory and flushes them to a wrapped logger.

Suited to long-running workers, queue consumers and cron jobs that batch
their writes or defer logging until a unit of work completes.
"""

import weakref
from collections import deque
from typing import Any, Mapping

from chanlog.loggers.base import BaseLogger
from chanlog.records import LogLevel

PendingRecord = tuple[LogLevel, Any, dict[str, Any]]


class BufferLogger(BaseLogger):
    """
    Defers every record except EMERGENCY until flush().

    - EMERGENCY flushes everything queued, then goes straight through.
    - With a positive buffer_limit, reaching the limit flushes the queue.
    - Pending records are flushed when the logger is garbage collected or
      the interpreter exits, and when a `with` block around it ends.

    Usage:
        with BufferLogger(factory.make("daily"), buffer_limit=100) as log:
            for job in jobs:
                log.info("processed {id}", id=job.id)
    """

    def __init__(self, handler: BaseLogger, buffer_limit: int = 0, flush_on_overflow: bool = True):
        self.handler = handler
        self.buffer_limit = max(0, int(buffer_limit))
        self.flush_on_overflow = flush_on_overflow
        self._buffer: deque[PendingRecord] = deque()
        # Must not reference self, or the buffer would never be collected
        self._finalizer = weakref.finalize(self, _drain, handler, self._buffer)

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    def log(self, level: Any, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        level = LogLevel.normalize(level)
        merged = {**(context or {}), **fields}

        if level >= LogLevel.EMERGENCY:
            self.flush()
            self.handler.log(level, message, merged)
            return

        self._buffer.append((level, message, merged))
        if self.flush_on_overflow and self.buffer_limit and len(self._buffer) >= self.buffer_limit:
            self.flush()

    def smart_log(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        # The level depends on the handler's environment, so it is not buffered
        self.handler.smart_log(message, context, **fields)

    def flush(self) -> None:
        """Forward every pending record, in arrival order, then empty the queue."""
        _drain(self.handler, self._buffer)

    def clear(self) -> None:
        """Discard pending records without forwarding them."""
        self._buffer.clear()

    def close(self) -> None:
        self.flush()
        self.handler.close()

    def __enter__(self) -> "BufferLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()

    def __repr__(self) -> str:
        return f"BufferLogger(handler={self.handler!r}, pending={len(self._buffer)}, limit={self.buffer_limit})"


def _drain(handler: BaseLogger, buffer: deque) -> None:
    # Pop one at a time: if the handler raises, unsent records stay queued
    while buffer:
        level, message, context = buffer.popleft()
        handler.log(level, message, context)
