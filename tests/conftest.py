"""Shared fixtures: an in-memory sink and registry isolation."""

import pytest

from chanlog.loggers.base import ChannelLogger
from chanlog.records import LogLevel
from chanlog.registry import ComponentRegistry


class RecordingLogger(ChannelLogger):
    """Concrete driver that keeps (level, line) pairs in memory."""

    default_format = "{level}: {message}"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.lines: list[tuple[LogLevel, str]] = []

    def write(self, level, line):
        self.lines.append((level, line))

    @property
    def messages(self) -> list[str]:
        return [line for _, line in self.lines]


@pytest.fixture(autouse=True)
def reset_registry():
    ComponentRegistry.reset()
    yield
    ComponentRegistry.reset()


@pytest.fixture
def recording():
    return RecordingLogger(channel="test", env="dev")


@pytest.fixture
def make_recorder():
    """Build extra in-memory sinks: make_recorder("audit", level="error")."""

    def _make(channel="test", env="dev", **kwargs):
        return RecordingLogger(channel=channel, env=env, **kwargs)

    return _make
