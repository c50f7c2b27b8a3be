"""
Component Registry.

Resolves the formatter and processor names a channel config may use to
the constructors that build them.

Usage:
    registry = ComponentRegistry.instance()
    formatter = registry.create("formatters", "json", pretty_print=True)
    uid = registry.create("processors", "uid", length=12)

Built-ins come from register_defaults(); applications add their own
components with register() before building a factory.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

Constructor = Callable[..., Any]


class ComponentRegistry:
    """
    Per-category tables of name → constructor. Shared through instance().

    create() always builds a new component, so two channels naming the
    same processor never share its state.
    """

    _instance: Optional["ComponentRegistry"] = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._components: dict[str, dict[str, Constructor]] = {}

    @classmethod
    def instance(cls) -> "ComponentRegistry":
        """The shared registry, holding the built-ins on first access."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    from chanlog.registry.defaults import register_defaults
                    registry = cls()
                    register_defaults(registry)
                    cls._instance = registry
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared registry; the next instance() rebuilds it."""
        with cls._lock:
            cls._instance = None

    # ── Registration ──────────────────────────────────────────────

    def register(self, category: str, name: str, constructor: Constructor) -> None:
        """
        Add or replace a component.

        Args:
            category: "formatters" or "processors"
            name: identifier used in channel configs, e.g. "uid"
            constructor: class or factory function accepting the config options
        """
        self._components.setdefault(category, {})[name] = constructor

    def register_from_config(self, config: dict[str, dict[str, Constructor]]) -> int:
        """Bulk register from {category: {name: constructor}}. Returns how many were added."""
        added = 0
        for category, constructors in config.items():
            for name, constructor in constructors.items():
                self.register(category, name, constructor)
                added += 1
        return added

    # ── Lookup ────────────────────────────────────────────────────

    def has(self, category: str, name: str) -> bool:
        return name in self._components.get(category, {})

    def names(self, category: str) -> list[str]:
        """Registered names in a category, sorted."""
        return sorted(self._components.get(category, {}))

    def create(self, category: str, name: str, **options: Any) -> Any:
        """
        Build a new component by category and name.

        Raises:
            KeyError: name is not registered in category.
            TypeError: options do not fit the constructor.
        """
        constructor = self._components.get(category, {}).get(name)
        if constructor is None:
            raise KeyError(
                f"No {category} component named '{name}'. "
                f"Available: {', '.join(self.names(category)) or 'none'}"
            )
        return constructor(**options)
