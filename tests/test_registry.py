"""
Tests for the component registry.

Covers:
- ComponentRegistry singleton
- Registration (single, bulk from config dict)
- create() building fresh instances with options
- Error cases (missing component, empty category)
- Lookup (has, names)
- Built-in defaults registration
"""

import pytest

from chanlog.formatters import JsonFormatter, LineFormatter
from chanlog.processors import IntrospectionProcessor, MemoryUsageProcessor, UidProcessor
from chanlog.registry import ComponentRegistry
from chanlog.registry.defaults import BUILTIN_REGISTRY, register_defaults


@pytest.fixture
def registry():
    return ComponentRegistry.instance()


# ═══════════════════════════════════════════════════════════════════
#  ComponentRegistry Singleton
# ═══════════════════════════════════════════════════════════════════

class TestRegistrySingleton:
    def test_singleton_identity(self):
        a = ComponentRegistry.instance()
        b = ComponentRegistry.instance()
        assert a is b

    def test_reset_creates_new(self):
        a = ComponentRegistry.instance()
        ComponentRegistry.reset()
        b = ComponentRegistry.instance()
        assert a is not b

    def test_instance_has_builtins(self, registry):
        assert registry.has("formatters", "json")
        assert registry.has("processors", "uid")

    def test_plain_construction_is_empty(self):
        reg = ComponentRegistry()
        assert reg.names("formatters") == []
        assert reg.names("processors") == []


# ═══════════════════════════════════════════════════════════════════
#  Registration
# ═══════════════════════════════════════════════════════════════════

class TestRegistration:
    def test_register_class(self):
        reg = ComponentRegistry()
        reg.register("processors", "uid_test", UidProcessor)
        assert isinstance(reg.create("processors", "uid_test"), UidProcessor)

    def test_register_factory_function(self):
        reg = ComponentRegistry()
        reg.register("formatters", "compact", lambda: LineFormatter("{level} {message}"))
        assert reg.create("formatters", "compact").format == "{level} {message}"

    def test_register_from_config(self):
        reg = ComponentRegistry()
        count = reg.register_from_config(BUILTIN_REGISTRY)
        assert count == 8  # 2 formatters, 3 processors under two names each

    def test_re_register_replaces(self):
        reg = ComponentRegistry()
        reg.register("formatters", "main", LineFormatter)
        reg.register("formatters", "main", JsonFormatter)
        assert isinstance(reg.create("formatters", "main"), JsonFormatter)

    def test_register_defaults_returns_count(self):
        assert register_defaults(ComponentRegistry()) == 8


# ═══════════════════════════════════════════════════════════════════
#  Creation
# ═══════════════════════════════════════════════════════════════════

class TestCreation:
    def test_create_returns_fresh_instances(self, registry):
        a = registry.create("processors", "uid")
        b = registry.create("processors", "uid")
        assert a is not b
        assert a.uid != b.uid

    def test_create_passes_options(self, registry):
        fmt = registry.create("formatters", "json", pretty_print=True)
        assert fmt.pretty_print is True
        assert len(registry.create("processors", "uid", length=16).uid) == 16

    def test_class_name_aliases(self, registry):
        assert isinstance(registry.create("processors", "MemoryUsageProcessor"), MemoryUsageProcessor)
        assert isinstance(registry.create("processors", "introspection"), IntrospectionProcessor)

    def test_create_missing_raises_key_error(self, registry):
        with pytest.raises(KeyError, match="No processors component named 'nonexistent'"):
            registry.create("processors", "nonexistent")

    def test_create_missing_shows_available(self, registry):
        with pytest.raises(KeyError, match="memory_usage"):
            registry.create("processors", "nonexistent")

    def test_create_empty_category(self, registry):
        with pytest.raises(KeyError, match="none"):
            registry.create("empty_category", "something")

    def test_bad_options_raise_type_error(self, registry):
        with pytest.raises(TypeError):
            registry.create("formatters", "line", colour="red")


# ═══════════════════════════════════════════════════════════════════
#  Lookup
# ═══════════════════════════════════════════════════════════════════

class TestLookup:
    def test_names(self, registry):
        assert registry.names("formatters") == ["json", "line"]
        assert "uid" in registry.names("processors")
        assert "introspection" in registry.names("processors")

    def test_names_unknown_category(self, registry):
        assert registry.names("sinks") == []

    def test_has(self, registry):
        assert registry.has("processors", "uid")
        assert not registry.has("processors", "nonexistent")
        assert not registry.has("sinks", "uid")

    def test_builtin_count(self, registry):
        assert sum(len(registry.names(c)) for c in ("formatters", "processors")) == 8
