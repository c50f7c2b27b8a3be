"""Logger implementations: the shared pipeline, concrete drivers, stack and buffer."""

from chanlog.loggers.base import BaseLogger, ChannelLogger
from chanlog.loggers.buffer import BufferLogger
from chanlog.loggers.drivers import (
    ConsoleLogger,
    FileLogger,
    NativeLogger,
    NullLogger,
    SyslogLogger,
)
from chanlog.loggers.stack import StackLogger

__all__ = [
    "BaseLogger",
    "ChannelLogger",
    "BufferLogger",
    "ConsoleLogger",
    "FileLogger",
    "NativeLogger",
    "NullLogger",
    "SyslogLogger",
    "StackLogger",
]
