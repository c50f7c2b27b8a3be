"""
Logger interface and the shared per-record pipeline.

Every concrete driver runs the same steps and differs only in write():

    normalize level → drop if below min_level → add env to context →
    describe exception → build record → processors → formatter → write
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Mapping

from chanlog.exceptions import normalize_context
from chanlog.formatters import LineFormatter, LogFormatter
from chanlog.processors import ProcessorCallable
from chanlog.records import LogLevel, LogRecord, smart_level

ENV_KEY = "env"


class BaseLogger(ABC):
    """
    What every logger offers: one method per severity, a leveled log(),
    and smart_log() which picks the level from the environment.

    Context is a mapping, keyword fields are merged over it:
        log.error("Payment failed", {"exception": exc}, order_id="ORD-1")
    """

    @abstractmethod
    def log(self, level: Any, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        ...

    @abstractmethod
    def smart_log(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        ...

    def emergency(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.EMERGENCY, message, context, **fields)

    def alert(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.ALERT, message, context, **fields)

    def critical(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.CRITICAL, message, context, **fields)

    def error(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.ERROR, message, context, **fields)

    def warning(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.WARNING, message, context, **fields)

    def notice(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.NOTICE, message, context, **fields)

    def info(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.INFO, message, context, **fields)

    def debug(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(LogLevel.DEBUG, message, context, **fields)

    def close(self) -> None:
        """Release resources. Override if the logger holds any."""
        pass


class ChannelLogger(BaseLogger):
    """
    Base for concrete drivers. Owns the channel identity, minimum level,
    formatter binding and processor chain; subclasses implement write().
    """

    default_format = "[{env}] {level}: {message} {context}"

    def __init__(
        self,
        channel: str = "app",
        env: str | None = None,
        level: Any = LogLevel.DEBUG,
        formatter: LogFormatter | None = None,
        processors: list[ProcessorCallable] | None = None,
    ):
        self.channel = channel
        self.env = (env or os.environ.get("APP_ENV") or "dev").lower()
        self.min_level = LogLevel.normalize(level)
        self._formatter = formatter
        self._processors: list[ProcessorCallable] = list(processors or [])

    # ── Bindings ──────────────────────────────────────────────────

    @property
    def formatter(self) -> LogFormatter:
        if self._formatter is None:
            self._formatter = self._default_formatter()
        return self._formatter

    @formatter.setter
    def formatter(self, value: LogFormatter) -> None:
        self._formatter = value

    def _default_formatter(self) -> LogFormatter:
        """Subclass-specific default."""
        return LineFormatter(self.default_format)

    def set_formatter(self, formatter: LogFormatter) -> "ChannelLogger":
        self._formatter = formatter
        return self

    def add_processor(self, processor: ProcessorCallable) -> "ChannelLogger":
        """Append a processor. Registration order is application order."""
        self._processors.append(processor)
        return self

    @property
    def processors(self) -> tuple[ProcessorCallable, ...]:
        return tuple(self._processors)

    def is_handling(self, level: Any) -> bool:
        return LogLevel.normalize(level) >= self.min_level

    # ── Pipeline ──────────────────────────────────────────────────

    def log(self, level: Any, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        level = LogLevel.normalize(level)

        # Dropped records cost nothing: no processor or formatter work
        if level < self.min_level:
            return

        enriched = {ENV_KEY: self.env, **(context or {}), **fields}
        record = LogRecord(
            level=level,
            message=str(message),
            context=normalize_context(enriched),
            extra={},
            channel=self.channel,
        )

        for processor in self._processors:
            record = processor(record)

        line = self.formatter.render(
            record.level,
            record.message,
            record.context,
            record.extra,
            record.channel,
            self.env,
        )
        self.write(LogLevel.normalize(record.level), line)

    def smart_log(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self.log(smart_level(self.env), message, context, **fields)

    @abstractmethod
    def write(self, level: LogLevel, line: str) -> None:
        """Deliver one formatted line. Failures raise SinkError."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(channel={self.channel!r}, level={self.min_level.name})"
