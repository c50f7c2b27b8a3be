"""
Log formatters.

Each concrete logger owns one formatter:
  - line: "[{timestamp}] [{env}] {level}: {message} {context}"
  - json: one structured object per record for machine parsing
"""

import json
import re
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Any

from chanlog.records import LogLevel

DEFAULT_LINE_FORMAT = "[{timestamp}] [{channel}.{env}] {level}: {message} {context}"

_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_.]+)\}")
# Message tokens may name any context key, including "user-id" or "user id"
_MESSAGE_TOKEN = re.compile(r"\{([^{}]+)\}")


class LogFormatter(ABC):
    """Base formatter. Renders one finalized record into a string."""

    @abstractmethod
    def render(
        self,
        level: Any,
        message: Any,
        context: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
        channel: str = "app",
        env: str = "dev",
    ) -> str: ...


class LineFormatter(LogFormatter):
    """
    Single-line template with message interpolation.

    Template tokens: {timestamp} {env} {level} {channel} {message} {context} {extra}.
    Inside the message itself, {key} is replaced by context[key].

    Example: [2026-02-12T14:32:05.123456+00:00] [app.prod] INFO: User john logged in {"env":"prod"}
    """

    def __init__(self, format: str = DEFAULT_LINE_FORMAT, date_format: str | None = None):
        self.format = format
        self.date_format = date_format

    def render(
        self,
        level: Any,
        message: Any,
        context: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
        channel: str = "app",
        env: str = "dev",
    ) -> str:
        context = context or {}
        extra = extra or {}
        replacements = {
            "timestamp": self._timestamp(),
            "env": env,
            "level": LogLevel.normalize(level).name,
            "channel": channel,
            "message": interpolate(str(message), context),
            "context": _encode_compact(context) if context else "",
            "extra": _encode_compact(extra) if extra else "",
        }
        # Single pass so substituted values are never re-scanned for tokens
        line = _PLACEHOLDER.sub(
            lambda m: replacements.get(m.group(1), m.group(0)), self.format
        )
        return line.rstrip()

    def _timestamp(self) -> str:
        now = datetime.now().astimezone()
        if self.date_format:
            return now.strftime(self.date_format)
        return now.isoformat(timespec="microseconds")


class JsonFormatter(LogFormatter):
    """
    One JSON object per record.

    context and extra appear only when non-empty. A record that cannot be
    encoded degrades to its core fields plus an "error" entry.
    """

    def __init__(self, pretty_print: bool = False):
        self.pretty_print = pretty_print

    def render(
        self,
        level: Any,
        message: Any,
        context: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
        channel: str = "app",
        env: str = "dev",
    ) -> str:
        obj: dict[str, Any] = {
            "timestamp": datetime.now().astimezone().isoformat(timespec="microseconds"),
            "level": LogLevel.normalize(level).name,
            "channel": channel,
            "env": env,
            "message": str(message),
        }
        core = dict(obj)
        if context:
            obj["context"] = context
        if extra:
            obj["extra"] = extra

        try:
            return self._dumps(obj)
        except (TypeError, ValueError) as exc:
            core["error"] = f"json encoding failed: {exc}"
            return self._dumps(core)

    def _dumps(self, obj: dict[str, Any]) -> str:
        return json.dumps(
            obj,
            ensure_ascii=False,
            allow_nan=False,
            indent=4 if self.pretty_print else None,
            default=_json_default,
        )


def interpolate(message: str, context: dict[str, Any]) -> str:
    """Replace {key} tokens with context values. Unknown keys stay literal."""
    if "{" not in message:
        return message

    def _sub(match: re.Match) -> str:
        key = match.group(1)
        if key not in context:
            return match.group(0)
        return _stringify(context[key])

    return _MESSAGE_TOKEN.sub(_sub, message)


def _stringify(value: Any) -> str:
    """Render a context value for message interpolation."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if _has_own_str(value):
        return str(value)
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=_json_default)
    except (TypeError, ValueError):
        return "[unserializable]"


def _encode_compact(mapping: dict[str, Any]) -> str:
    """Compact JSON for {context}/{extra}; never raises."""
    try:
        return json.dumps(mapping, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return "[unserializable]"


def _json_default(value: Any) -> Any:
    """Encode the non-native values a record may carry."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if _has_own_str(value):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _has_own_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__
