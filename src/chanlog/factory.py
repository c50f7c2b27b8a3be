"""
LoggerFactory: resolves channel names into live loggers.

Resolution of one name:
1. Name already mid-resolution → ChannelCycleError (checked before anything else)
2. Name missing from config → ConfigurationError
3. Validate the channel mapping, dispatch on its driver
4. stack/buffer: walk the static dependency graph first, so a cycle fails
   make() itself instead of the first log call
5. Concrete drivers get their formatter and processors from the config

The set of names mid-resolution is an immutable tuple passed down the call
chain (make → stack member → nested stack ...), never stored on the
factory, so unrelated make() calls cannot see each other's state.
"""

from __future__ import annotations

import warnings
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from chanlog.config import ChannelConfig, Driver, LoggingConfig
from chanlog.errors import ChannelCycleError, ConfigurationError, ConfigurationWarning
from chanlog.formatters import LogFormatter
from chanlog.loggers.base import BaseLogger, ChannelLogger
from chanlog.loggers.buffer import BufferLogger
from chanlog.loggers.drivers import (
    ConsoleLogger,
    FileLogger,
    NativeLogger,
    NullLogger,
    SyslogLogger,
    resolve_facility,
)
from chanlog.loggers.stack import StackLogger
from chanlog.processors import Processor, ProcessorCallable
from chanlog.registry import ComponentRegistry


class LoggerFactory:
    """
    Builds loggers from a LoggingConfig (or an equivalent plain mapping).

    Usage:
        factory = LoggerFactory(LoggingConfig.from_yaml("logging.yaml"))
        log = factory.make()            # default channel
        audit = factory.make("audit")

    One factory is meant to be built at process start. Each make() call
    returns a fresh logger graph.
    """

    def __init__(
        self,
        config: LoggingConfig | Mapping[str, Any] | None = None,
        env: str | None = None,
        registry: ComponentRegistry | None = None,
    ):
        if config is None:
            config = LoggingConfig()
        elif not isinstance(config, LoggingConfig):
            try:
                config = LoggingConfig.from_dict(dict(config))
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid logging configuration: {exc}") from exc

        self.config = config
        self.env = config.resolve_env(env)
        self._registry = registry or ComponentRegistry.instance()
        self._builders: dict[str, Callable[[str, ChannelConfig, tuple[str, ...]], BaseLogger]] = {
            Driver.STACK.value: self._create_stack,
            Driver.BUFFER.value: self._create_buffer,
            Driver.FILE.value: self._create_file,
            Driver.CONSOLE.value: self._create_console,
            Driver.SYSLOG.value: self._create_syslog,
            Driver.ERRORLOG.value: self._create_native,
            Driver.NULL.value: self._create_null,
        }

    @property
    def default_channel(self) -> str:
        return self.config.default

    @property
    def channels(self) -> list[str]:
        return list(self.config.channels)

    # ── Resolution ────────────────────────────────────────────────

    def make(self, channel: str | None = None) -> BaseLogger:
        """Resolve a channel (default channel if omitted) into a logger."""
        return self.resolve(channel or self.config.default)

    def resolve(self, channel: str, lineage: tuple[str, ...] = ()) -> BaseLogger:
        """
        Resolve `channel` while the channels in `lineage` are mid-resolution.

        Raises:
            ChannelCycleError: channel is already in lineage, or reachable
                from itself through stack members / buffer handlers.
            ConfigurationError: channel missing, malformed, or with an
                unsupported driver.
        """
        if channel in lineage:
            raise ChannelCycleError(channel)

        config = self._channel_config(channel)
        resolving = lineage + (channel,)

        builder = self._builders.get(config.driver)
        if builder is None:
            raise ConfigurationError(
                f"Unsupported logger driver: {config.driver} (channel '{channel}').",
                channel=channel,
            )
        return builder(channel, config, resolving)

    def _channel_config(self, channel: str) -> ChannelConfig:
        raw = self.config.channels.get(channel)
        if raw is None:
            raise ConfigurationError(f"Logger channel '{channel}' is not configured.", channel=channel)
        if isinstance(raw, ChannelConfig):
            return raw
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Invalid configuration for channel '{channel}'.", channel=channel)
        try:
            return ChannelConfig.model_validate(dict(raw))
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid configuration for channel '{channel}': {exc}", channel=channel
            ) from exc

    def _check_cycles(self, config: ChannelConfig, resolving: tuple[str, ...]) -> None:
        """
        Depth-first walk over stack members and buffer handlers.

        Channels that are missing or malformed are not followed; the stack
        skips them at first use and the buffer fails on its own handler.
        """
        cleared: set[str] = set()

        def visit(node: ChannelConfig, path: tuple[str, ...]) -> None:
            for name in _dependencies(node):
                if name in path:
                    raise ChannelCycleError(name)
                if name in cleared:
                    continue
                try:
                    child = self._channel_config(name)
                except ConfigurationError:
                    continue
                visit(child, path + (name,))
                cleared.add(name)

        visit(config, resolving)

    # ── Drivers ───────────────────────────────────────────────────

    def _create_stack(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        self._check_cycles(config, resolving)
        return StackLogger(config.member_channels, factory=self, lineage=resolving)

    def _create_buffer(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        if not config.handler:
            raise ConfigurationError(
                f"Buffer channel '{channel}' requires a 'handler' channel.", channel=channel
            )
        self._check_cycles(config, resolving)
        handler = self.resolve(config.handler, resolving)
        return BufferLogger(handler, config.buffer_limit, config.flush_on_overflow)

    def _create_file(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        path = config.path or "logs/app.log"
        if "{date}" in path:
            path = path.replace("{date}", datetime.now().strftime(config.date_format))
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return self._bind(channel, config, FileLogger(path=path, **self._common(channel, config)))

    def _create_console(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        logger = ConsoleLogger(colorize=config.colorize, **self._common(channel, config))
        return self._bind(channel, config, logger)

    def _create_syslog(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        try:
            facility = resolve_facility(config.facility)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid syslog facility for channel '{channel}': {exc}", channel=channel
            ) from exc
        logger = SyslogLogger(ident=config.ident, facility=facility, **self._common(channel, config))
        return self._bind(channel, config, logger)

    def _create_native(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        logger = NativeLogger(
            message_type=config.message_type,
            destination=config.destination,
            **self._common(channel, config),
        )
        return self._bind(channel, config, logger)

    def _create_null(self, channel: str, config: ChannelConfig, resolving: tuple[str, ...]) -> BaseLogger:
        return NullLogger(**self._common(channel, config))

    # ── Formatter / processor bindings ────────────────────────────

    def _common(self, channel: str, config: ChannelConfig) -> dict[str, Any]:
        return {
            "channel": config.channel or channel,
            "env": self.env,
            "level": config.level,
        }

    def _bind(self, channel: str, config: ChannelConfig, logger: ChannelLogger) -> ChannelLogger:
        formatter = self._build_formatter(channel, config, logger)
        if formatter is not None:
            logger.set_formatter(formatter)
        for entry in config.processors:
            processor = self._build_processor(channel, entry)
            if processor is not None:
                logger.add_processor(processor)
        return logger

    def _build_formatter(
        self, channel: str, config: ChannelConfig, logger: ChannelLogger
    ) -> LogFormatter | None:
        name = (config.formatter or "line").lower()
        if name == "json":
            options: dict[str, Any] = {"pretty_print": config.pretty_print}
        else:
            options = {"format": config.format or logger.default_format}
            if config.timestamp_format:
                options["date_format"] = config.timestamp_format

        if not self._registry.has("formatters", name):
            available = ", ".join(self._registry.names("formatters")) or "none"
            warnings.warn(
                f"Channel '{channel}': unknown formatter '{config.formatter}', using the default. "
                f"Available: {available}",
                ConfigurationWarning,
                stacklevel=4,
            )
            return None
        return self._registry.create("formatters", name, **options)

    def _build_processor(self, channel: str, entry: Any) -> ProcessorCallable | None:
        """
        Accepted entries: registered name, {"type": name, **options},
        a Processor subclass, or any callable record -> record.
        """
        try:
            if isinstance(entry, str):
                return self._registry.create("processors", entry)
            if isinstance(entry, Mapping):
                options = dict(entry)
                name = options.pop("type", None)
                if not isinstance(name, str):
                    raise KeyError("processor mapping needs a 'type' name")
                return self._registry.create("processors", name, **options)
            if isinstance(entry, type) and issubclass(entry, Processor):
                return entry()
            if callable(entry):
                return entry
            raise KeyError(f"unsupported processor entry {entry!r}")
        except (KeyError, TypeError, ValueError) as exc:
            warnings.warn(
                f"Channel '{channel}': processor {entry!r} skipped. {exc}",
                ConfigurationWarning,
                stacklevel=4,
            )
            return None


def _dependencies(config: ChannelConfig) -> list[str]:
    if config.driver == Driver.STACK.value:
        return config.member_channels
    if config.driver == Driver.BUFFER.value and config.handler:
        return [config.handler]
    return []
