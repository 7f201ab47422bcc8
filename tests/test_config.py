"""Tests for settings loading."""

import json
import os
from pathlib import Path

import pytest

from anotherpass.config import ConfigError, Settings, default_data_file, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove ANOTHERPASS_* variables from the environment."""
    for name in list(os.environ):
        if name.startswith("ANOTHERPASS_"):
            monkeypatch.delenv(name)


def test_defaults():
    """Test settings without any source."""
    settings = load_settings()
    assert settings.data_file == default_data_file()
    assert settings.log_level == "INFO"
    assert settings.users == []
    assert settings.hash_prefix_len == 8
    assert settings.salt_length == 20


def test_layering(tmp_path: Path, monkeypatch):
    """Test file, environment and overrides are applied in order."""
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps({"log_level": "debug", "hash_prefix_len": 4, "users": ["alice"]}),
        encoding="utf-8",
    )
    monkeypatch.setenv("ANOTHERPASS_HASH_PREFIX_LEN", "6")
    monkeypatch.setenv("ANOTHERPASS_USERS", "alice, bob")

    settings = load_settings(config, data_file=str(tmp_path / "p.json"))
    assert isinstance(settings, Settings)
    assert settings.log_level == "DEBUG"
    assert settings.hash_prefix_len == 6
    assert settings.users == ["alice", "bob"]
    assert settings.data_file == tmp_path / "p.json"


def test_file_only(tmp_path: Path):
    """Test values read from the JSON file alone."""
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"salt_length": 32, "users": ["carol"]}), encoding="utf-8")

    settings = load_settings(config)
    assert settings.salt_length == 32
    assert settings.users == ["carol"]
    assert settings.log_level == "INFO"


def test_env_prefix(monkeypatch):
    """Test ANOTHERPASS_* variables are read by Settings itself."""
    monkeypatch.setenv("ANOTHERPASS_SALT_LENGTH", "40")
    monkeypatch.setenv("ANOTHERPASS_USERS", "dave")
    settings = Settings()
    assert settings.salt_length == 40
    assert settings.users == ["dave"]


def test_none_overrides_ignored(monkeypatch):
    """Test unset command-line options do not mask other sources."""
    monkeypatch.setenv("ANOTHERPASS_LOG_LEVEL", "ERROR")
    settings = load_settings(log_level=None)
    assert settings.log_level == "ERROR"


def test_invalid_value(monkeypatch):
    """Test invalid values are reported as config errors."""
    with pytest.raises(ConfigError):
        load_settings(salt_length=2)

    monkeypatch.setenv("ANOTHERPASS_LOG_LEVEL", "LOUD")
    with pytest.raises(ConfigError):
        load_settings()


def test_invalid_file(tmp_path: Path):
    """Test unreadable config files."""
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(bad)
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.json")


def test_is_known_user():
    """Test the known user predicate."""
    assert Settings().is_known_user("anyone")
    settings = Settings(users=["alice"])
    assert settings.is_known_user("alice")
    assert not settings.is_known_user("bob")
