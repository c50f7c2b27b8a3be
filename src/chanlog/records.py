"""
Log records and level definitions.

Eight ordered severities. Shared members keep Python-compatible numeric
values; NOTICE, ALERT and EMERGENCY slot into the gaps.
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Ordered severities, lowest first."""
    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
    ALERT = 55
    EMERGENCY = 60

    @classmethod
    def normalize(cls, value: Any) -> "LogLevel":
        """
        Resolve a level from a member, int or name.

        Common spellings ("warn", "err", "fatal", ...) map to their canonical
        member. Anything unrecognized resolves to DEBUG.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.DEBUG
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.DEBUG
        if isinstance(value, str):
            return LEVEL_ALIASES.get(value.strip().lower(), cls.DEBUG)
        return cls.DEBUG

    @property
    def syslog_priority(self) -> int:
        """RFC 5424 numeric priority: EMERGENCY=0 ... DEBUG=7."""
        return SYSLOG_PRIORITIES[self]


LEVEL_ALIASES: dict[str, LogLevel] = {
    "debug": LogLevel.DEBUG,
    "trace": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "information": LogLevel.INFO,
    "notice": LogLevel.NOTICE,
    "note": LogLevel.NOTICE,
    "warning": LogLevel.WARNING,
    "warn": LogLevel.WARNING,
    "error": LogLevel.ERROR,
    "err": LogLevel.ERROR,
    "critical": LogLevel.CRITICAL,
    "crit": LogLevel.CRITICAL,
    "fatal": LogLevel.CRITICAL,
    "alert": LogLevel.ALERT,
    "emergency": LogLevel.EMERGENCY,
    "emerg": LogLevel.EMERGENCY,
    "panic": LogLevel.EMERGENCY,
}

SYSLOG_PRIORITIES: dict[LogLevel, int] = {
    LogLevel.EMERGENCY: 0,
    LogLevel.ALERT: 1,
    LogLevel.CRITICAL: 2,
    LogLevel.ERROR: 3,
    LogLevel.WARNING: 4,
    LogLevel.NOTICE: 5,
    LogLevel.INFO: 6,
    LogLevel.DEBUG: 7,
}

# Environment tag → level used by smart_log()
SMART_LEVELS: dict[str, LogLevel] = {
    "production": LogLevel.INFO,
    "prod": LogLevel.INFO,
    "staging": LogLevel.NOTICE,
    "preprod": LogLevel.NOTICE,
    "testing": LogLevel.WARNING,
    "test": LogLevel.WARNING,
}


def smart_level(env: str) -> LogLevel:
    """Severity implied by an environment tag. Unknown environments log at DEBUG."""
    return SMART_LEVELS.get(env.lower(), LogLevel.DEBUG)


def level_name(level: int) -> str:
    """Upper-case display name for a level value."""
    return LogLevel.normalize(level).name


@dataclass(frozen=True)
class LogRecord:
    """
    One log call on its way through the pipeline.

    Processors never mutate a record; they return a new one via evolve()
    or with_extra().
    """
    level: LogLevel
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)
    channel: str = "app"

    @classmethod
    def create(
        cls,
        level: Any,
        message: Any,
        context: dict[str, Any] | None = None,
        channel: str = "app",
    ) -> "LogRecord":
        """Factory with level normalization and an empty extra mapping."""
        return cls(
            level=LogLevel.normalize(level),
            message=str(message),
            context=dict(context or {}),
            extra={},
            channel=channel,
        )

    @property
    def level_name(self) -> str:
        return self.level.name

    def evolve(self, **changes: Any) -> "LogRecord":
        """Copy with fields replaced. The level is re-normalized."""
        if "level" in changes:
            changes["level"] = LogLevel.normalize(changes["level"])
        return replace(self, **changes)

    def with_extra(self, **items: Any) -> "LogRecord":
        """Copy with items merged into extra."""
        return replace(self, extra={**self.extra, **items})
