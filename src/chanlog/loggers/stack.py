"""
Stack logger: one logical channel fanned out to several others.

Member names are resolved back through the factory once, on first use,
and the resulting loggers are cached for the lifetime of the stack.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from chanlog.errors import ChannelCycleError, ConfigurationWarning
from chanlog.loggers.base import BaseLogger

if TYPE_CHECKING:
    from chanlog.factory import LoggerFactory


class StackLogger(BaseLogger):
    """
    Forwards every call to each member logger, in configured order.

    - Duplicate member names are dropped before resolution.
    - A member that fails to resolve is skipped and recorded in `skipped`,
      except for a circular dependency, which always propagates.
    - A member that is itself a stack is flattened into its concrete
      members; a stack never holds another stack directly.

    lineage is the chain of channels that were mid-resolution when this
    stack was built (ending with its own name). It is passed back to the
    factory so cycles reached through lazy expansion are still detected.
    """

    def __init__(
        self,
        channel_names: Iterable[Any] = (),
        factory: "LoggerFactory | None" = None,
        lineage: tuple[str, ...] = (),
    ):
        self.channel_names: list[str] = list(
            dict.fromkeys(name for name in channel_names if isinstance(name, str))
        )
        self._factory = factory
        self._lineage = tuple(lineage)
        self._resolved: list[BaseLogger] | None = None  # None until first use
        self._attached: list[BaseLogger] = []
        self.skipped: dict[str, Exception] = {}

    def set_factory(self, factory: "LoggerFactory") -> "StackLogger":
        """Set the factory used to resolve member names. Clears any cached members."""
        self._factory = factory
        self._resolved = None
        return self

    @property
    def lineage(self) -> tuple[str, ...]:
        return self._lineage

    @property
    def is_resolved(self) -> bool:
        return self._resolved is not None

    # ── Members ───────────────────────────────────────────────────

    @property
    def loggers(self) -> list[BaseLogger]:
        """Resolved members followed by directly attached ones."""
        members: list[BaseLogger] = []
        for logger in self._resolve() + self._attached:
            _append_unique(members, logger)
        return members

    def add_logger(self, logger: BaseLogger) -> "StackLogger":
        """Attach a logger instance directly. Stacks are flattened."""
        for member in _flatten(logger):
            _append_unique(self._attached, member)
        return self

    def _resolve(self) -> list[BaseLogger]:
        if self._resolved is not None:
            return self._resolved

        members: list[BaseLogger] = []
        self.skipped = {}
        if self._factory is not None:
            for name in self.channel_names:
                try:
                    logger = self._factory.resolve(name, self._lineage)
                except ChannelCycleError:
                    raise
                except Exception as exc:
                    self.skipped[name] = exc
                    warnings.warn(
                        f"Stack member '{name}' skipped: {exc}",
                        ConfigurationWarning,
                        stacklevel=4,
                    )
                    continue
                for member in _flatten(logger):
                    _append_unique(members, member)

        self._resolved = members
        return members

    # ── Forwarding ────────────────────────────────────────────────

    def log(self, level: Any, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        for logger in self.loggers:
            logger.log(level, message, context, **fields)

    def smart_log(self, message: Any, context: Mapping[str, Any] | None = None, **fields: Any) -> None:
        for logger in self.loggers:
            logger.smart_log(message, context, **fields)

    def close(self) -> None:
        for logger in self._resolved or []:
            logger.close()
        for logger in self._attached:
            logger.close()

    def __repr__(self) -> str:
        return f"StackLogger(channels={self.channel_names!r})"


def _flatten(logger: BaseLogger) -> list[BaseLogger]:
    if isinstance(logger, StackLogger):
        return logger.loggers
    return [logger]


def _append_unique(members: list[BaseLogger], logger: BaseLogger) -> None:
    if not any(existing is logger for existing in members):
        members.append(logger)
