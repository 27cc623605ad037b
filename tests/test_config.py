from pathlib import Path

import pytest
from pydantic import ValidationError

from configcrunch.config import ConfigcrunchConfig


def test_defaults(monkeypatch):
    for name in ["YAML_EXTENSION", "LOOKUP_PATHS", "MAX_VARIABLE_PASSES", "LOG_LEVEL"]:
        monkeypatch.delenv(f"CONFIGCRUNCH_{name}", raising=False)

    settings = ConfigcrunchConfig(_env_file=None)

    assert settings.yaml_extension == ".yml"
    assert settings.lookup_paths == []
    assert settings.max_variable_passes == 25
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CONFIGCRUNCH_YAML_EXTENSION", "yaml")
    monkeypatch.setenv("CONFIGCRUNCH_MAX_VARIABLE_PASSES", "5")
    monkeypatch.setenv("CONFIGCRUNCH_LOOKUP_PATHS", '["/repo/a", "/repo/b"]')
    monkeypatch.setenv("CONFIGCRUNCH_LOG_LEVEL", "debug")

    settings = ConfigcrunchConfig(_env_file=None)

    assert settings.yaml_extension == ".yaml"
    assert settings.max_variable_passes == 5
    assert settings.lookup_paths == [Path("/repo/a"), Path("/repo/b")]
    assert settings.log_level == "DEBUG"


def test_invalid_values_raise(monkeypatch):
    monkeypatch.setenv("CONFIGCRUNCH_LOG_LEVEL", "loud")

    with pytest.raises(ValidationError):
        ConfigcrunchConfig(_env_file=None)

    with pytest.raises(ValidationError):
        ConfigcrunchConfig(_env_file=None, log_level="INFO", max_variable_passes=0)
