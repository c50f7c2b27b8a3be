"""
chanlog: channel-based logging engine.

Named channels, each bound to a driver (file, console, syslog, errorlog,
buffer, stack, null), resolved by a factory into live loggers. Every
record goes through the same pipeline: level filter, context enrichment,
exception normalization, processors, formatter, sink.
"""

from chanlog.config import ChannelConfig, LoggingConfig
from chanlog.errors import (
    ChannelCycleError,
    ConfigurationError,
    ConfigurationWarning,
    SinkError,
)
from chanlog.factory import LoggerFactory
from chanlog.formatters import JsonFormatter, LineFormatter, LogFormatter
from chanlog.loggers import (
    BaseLogger,
    BufferLogger,
    ChannelLogger,
    ConsoleLogger,
    FileLogger,
    NativeLogger,
    NullLogger,
    StackLogger,
    SyslogLogger,
)
from chanlog.processors import (
    IntrospectionProcessor,
    MemoryUsageProcessor,
    Processor,
    UidProcessor,
)
from chanlog.records import LogLevel, LogRecord
from chanlog.registry import ComponentRegistry

__all__ = [
    "ChannelConfig",
    "LoggingConfig",
    "ChannelCycleError",
    "ConfigurationError",
    "ConfigurationWarning",
    "SinkError",
    "LoggerFactory",
    "LogFormatter",
    "LineFormatter",
    "JsonFormatter",
    "BaseLogger",
    "ChannelLogger",
    "BufferLogger",
    "ConsoleLogger",
    "FileLogger",
    "NativeLogger",
    "NullLogger",
    "StackLogger",
    "SyslogLogger",
    "Processor",
    "IntrospectionProcessor",
    "MemoryUsageProcessor",
    "UidProcessor",
    "LogLevel",
    "LogRecord",
    "ComponentRegistry",
]
