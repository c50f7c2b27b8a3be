"""
Error taxonomy.

ConfigurationError is fatal to a make() call. ChannelCycleError is the
one configuration failure a stack never skips. SinkError surfaces I/O
failures to the caller of a log method. ConfigurationWarning reports the
soft failures that never disable a channel.
"""


class ConfigurationError(ValueError):
    """A channel cannot be built from its configuration."""

    def __init__(self, message: str, channel: str | None = None):
        super().__init__(message)
        self.channel = channel


class ChannelCycleError(ConfigurationError):
    """A channel (transitively) depends on itself."""

    def __init__(self, channel: str):
        super().__init__(
            f"Circular dependency detected for logger channel '{channel}'.",
            channel=channel,
        )


class SinkError(OSError):
    """A formatted line could not be delivered to its destination."""


class ConfigurationWarning(UserWarning):
    """A configuration entry was ignored."""
