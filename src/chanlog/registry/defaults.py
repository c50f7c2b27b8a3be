"""
Built-in component registry configuration.

Formatters and processors selectable by name from a channel config.
Each processor is also reachable by its class name.

Usage:
    from chanlog.registry.defaults import register_defaults
    register_defaults(registry)
"""

from chanlog.formatters import JsonFormatter, LineFormatter
from chanlog.processors import IntrospectionProcessor, MemoryUsageProcessor, UidProcessor
from chanlog.registry import ComponentRegistry


BUILTIN_REGISTRY = {
    "formatters": {
        "line": LineFormatter,
        "json": JsonFormatter,
    },
    "processors": {
        "uid": UidProcessor,
        "UidProcessor": UidProcessor,
        "memory_usage": MemoryUsageProcessor,
        "MemoryUsageProcessor": MemoryUsageProcessor,
        "introspection": IntrospectionProcessor,
        "IntrospectionProcessor": IntrospectionProcessor,
    },
}


def register_defaults(registry: ComponentRegistry | None = None) -> int:
    """
    Register all built-in components.

    Args:
        registry: Registry to populate. Defaults to singleton.

    Returns count of components registered.
    """
    if registry is None:
        registry = ComponentRegistry.instance()
    return registry.register_from_config(BUILTIN_REGISTRY)
