"""
Tests for the pydantic config schemas.

Covers:
- LoggingConfig defaults, dict and YAML loading
- env resolution order
- ChannelConfig defaults, extra keys and stack member cleanup
- Error cases (bad YAML, bad field types)
"""

import pytest
from pydantic import ValidationError

from chanlog.config import ChannelConfig, Driver, LoggingConfig


EXAMPLE_YAML = """
default: stack
env: staging
channels:
  stack:
    driver: stack
    channels: [daily, console]
  daily:
    driver: file
    path: "logs/app-{date}.log"
    level: info
    formatter: json
    processors: [uid, {type: memory_usage, human: false}]
  console:
    driver: console
    colorize: false
"""


# ═══════════════════════════════════════════════════════════════════
#  LoggingConfig
# ═══════════════════════════════════════════════════════════════════

class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()
        assert config.default == "stack"
        assert config.env is None
        assert config.channels == {}

    def test_from_dict_keeps_channels_raw(self):
        config = LoggingConfig.from_dict({"channels": {"broken": "not a mapping"}})
        assert config.channels["broken"] == "not a mapping"

    def test_to_dict_excludes_none(self):
        data = LoggingConfig(channels={"a": {"driver": "null"}}).to_dict()
        assert "env" not in data
        assert "source_yaml" not in data
        assert data["channels"] == {"a": {"driver": "null"}}

    def test_channels_must_be_mapping(self):
        with pytest.raises(ValidationError):
            LoggingConfig.from_dict({"channels": ["a", "b"]})


class TestYamlLoading:
    def test_from_yaml_string(self):
        config = LoggingConfig.from_yaml_string(EXAMPLE_YAML)
        assert config.default == "stack"
        assert config.env == "staging"
        assert config.channels["stack"]["channels"] == ["daily", "console"]
        assert config.source_yaml == EXAMPLE_YAML

    def test_from_yaml_file(self, tmp_path):
        yaml_file = tmp_path / "logging.yaml"
        yaml_file.write_text(EXAMPLE_YAML)
        config = LoggingConfig.from_yaml(yaml_file)
        assert config.channels["daily"]["level"] == "info"
        assert config.source_yaml == EXAMPLE_YAML

    def test_empty_yaml(self):
        config = LoggingConfig.from_yaml_string("")
        assert config.channels == {}

    def test_invalid_yaml_raises(self):
        with pytest.raises(Exception):
            LoggingConfig.from_yaml_string("not: {valid: [yaml: oops")


class TestEnvResolution:
    def test_override_wins(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        assert LoggingConfig(env="testing").resolve_env("Production") == "production"

    def test_config_before_variable(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        assert LoggingConfig(env="Testing").resolve_env() == "testing"

    def test_variable_before_default(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "Staging")
        assert LoggingConfig().resolve_env() == "staging"

    def test_default_dev(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)
        assert LoggingConfig().resolve_env() == "dev"


# ═══════════════════════════════════════════════════════════════════
#  ChannelConfig
# ═══════════════════════════════════════════════════════════════════

class TestChannelConfig:
    def test_defaults(self):
        config = ChannelConfig()
        assert config.driver == Driver.NULL.value
        assert config.level == "debug"
        assert config.date_format == "%Y-%m-%d"
        assert config.buffer_limit == 0
        assert config.flush_on_overflow is True
        assert config.processors == []

    def test_from_yaml_entry(self):
        raw = LoggingConfig.from_yaml_string(EXAMPLE_YAML).channels["daily"]
        config = ChannelConfig.model_validate(raw)
        assert config.driver == "file"
        assert config.formatter == "json"
        assert config.processors[1] == {"type": "memory_usage", "human": False}

    def test_extra_keys_kept(self):
        config = ChannelConfig.model_validate({"driver": "file", "rotation": "daily"})
        assert config.model_extra == {"rotation": "daily"}

    def test_member_channels_cleanup(self):
        config = ChannelConfig(driver="stack", channels=["a", 1, "b", None, "a", {"x": 1}])
        assert config.member_channels == ["a", "b"]

    def test_facility_int_or_name(self):
        assert ChannelConfig(facility=8).facility == 8
        assert ChannelConfig(facility="local0").facility == "local0"

    def test_bad_field_type(self):
        with pytest.raises(ValidationError):
            ChannelConfig.model_validate({"buffer_limit": "many"})

    def test_driver_values(self):
        assert {d.value for d in Driver} == {
            "stack", "file", "console", "syslog", "errorlog", "buffer", "null",
        }
