"""
Pydantic configuration schemas for chanlog.

A logging config names a default channel, an environment tag and a set of
channels. Channel entries stay raw until the factory resolves them, so a
single malformed channel fails only its own make() call.

Usage:
    config = LoggingConfig.from_yaml("logging.yaml")
    factory = LoggerFactory(config)

Minimal YAML:
    default: stack
    channels:
      stack:   {driver: stack, channels: [daily, console]}
      daily:   {driver: file, path: "logs/app-{date}.log", level: info}
      console: {driver: console, colorize: true}
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════
#  Enums
# ═══════════════════════════════════════════════════════════════════

class Driver(str, Enum):
    STACK = "stack"
    FILE = "file"
    CONSOLE = "console"
    SYSLOG = "syslog"
    ERRORLOG = "errorlog"
    BUFFER = "buffer"
    NULL = "null"


DEFAULT_ENV = "dev"
ENV_VARIABLE = "APP_ENV"


# ═══════════════════════════════════════════════════════════════════
#  Channel Config
# ═══════════════════════════════════════════════════════════════════

class ChannelConfig(BaseModel):
    """
    One channel. Only driver is significant for every channel; the other
    fields apply to the drivers noted beside them. Unknown keys are kept.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    driver: str = Driver.NULL.value

    # Any concrete driver
    level: Any = "debug"
    channel: Optional[str] = None             # display name, defaults to the config key
    format: Optional[str] = None              # line template
    formatter: Optional[str] = None           # 'line' | 'json'
    pretty_print: bool = False                # json
    timestamp_format: Optional[str] = None    # line, strftime
    processors: list[Any] = Field(default_factory=list)

    # file
    path: Optional[str] = None
    date_format: str = "%Y-%m-%d"             # for the {date} placeholder in path

    # console
    colorize: bool = True

    # syslog
    ident: str = "python"
    facility: int | str = "user"

    # errorlog
    message_type: int = 0
    destination: Optional[str] = None

    # stack
    channels: list[Any] = Field(default_factory=list)

    # buffer
    handler: Optional[str] = None
    buffer_limit: int = 0
    flush_on_overflow: bool = True

    @property
    def member_channels(self) -> list[str]:
        """Stack members: strings only, duplicates removed, order kept."""
        return list(dict.fromkeys(c for c in self.channels if isinstance(c, str)))


# ═══════════════════════════════════════════════════════════════════
#  Top-Level Logging Config
# ═══════════════════════════════════════════════════════════════════

class LoggingConfig(BaseModel):
    """
    Top-level configuration consumed by LoggerFactory.

    channels maps name → raw channel mapping; ChannelConfig validation
    happens per channel at resolution time.
    """

    default: str = "stack"
    env: Optional[str] = None
    channels: dict[str, Any] = Field(default_factory=dict)

    # ── Metadata ──────────────────────────────────────────────────
    source_yaml: Optional[str] = Field(None, exclude=True)

    def resolve_env(self, override: str | None = None) -> str:
        """Explicit override, then the config, then $APP_ENV, then 'dev'."""
        env = override or self.env or os.environ.get(ENV_VARIABLE) or DEFAULT_ENV
        return env.lower()

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LoggingConfig":
        """Load and validate from a YAML file."""
        path = Path(path)
        raw = path.read_text(encoding="utf-8")
        config = cls.model_validate(yaml.safe_load(raw) or {})
        config.source_yaml = raw
        return config

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "LoggingConfig":
        """Load and validate from a YAML string."""
        config = cls.model_validate(yaml.safe_load(yaml_string) or {})
        config.source_yaml = yaml_string
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "LoggingConfig":
        """Load and validate from a dict."""
        return cls.model_validate(data)

    def to_dict(self, exclude_none: bool = True) -> dict:
        """Export as dict."""
        return self.model_dump(exclude_none=exclude_none)
