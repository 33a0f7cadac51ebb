"""Tests for edumyles_api.settings.Settings behavior."""

from typing import Any

import pytest
from pydantic import ValidationError

from edumyles_api.settings import Settings, get_settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    """Defaults should be stable even if external env or .env sets values.

    We explicitly delete the relevant variables and bypass .env loading
    by passing `_env_file=None`.
    """
    for var in [
        "EDUMYLES_API_HOST",
        "EDUMYLES_API_PORT",
        "EDUMYLES_API_LOG_LEVEL",
        "EDUMYLES_API_SQL_LOG",
        "EDUMYLES_API_RELOAD",
        "EDUMYLES_API_DATABASE_URL",
        "EDUMYLES_API_REDIS_URL",
        "EDUMYLES_API_REDIS_ENABLED",
        "EDUMYLES_API_EVENT_STORE_ENABLED",
    ]:
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.host == "0.0.0.0"
    assert s.port == 3001
    assert s.log_level == "INFO"
    assert s.sql_log is False
    assert s.reload is False
    assert s.database_url is None
    assert s.redis_url == "redis://localhost:6379"
    assert s.redis_enabled is True
    assert s.event_store_enabled is True


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EDUMYLES_API_HOST", "127.0.0.1")
    monkeypatch.setenv("EDUMYLES_API_PORT", "9090")
    monkeypatch.setenv("EDUMYLES_API_SQL_LOG", "true")
    monkeypatch.setenv("EDUMYLES_API_REDIS_URL", "redis://cache:6380/1")
    monkeypatch.setenv("EDUMYLES_API_REDIS_ENABLED", "false")
    s = Settings(_env_file=None)
    assert s.host == "127.0.0.1"
    assert s.port == 9090
    assert s.sql_log is True
    assert s.redis_url == "redis://cache:6380/1"
    assert s.redis_enabled is False


def test_case_insensitive_env_name(monkeypatch: pytest.MonkeyPatch):
    # lower-case variable name should still be picked up due to case_sensitive=False
    monkeypatch.setenv("edumyles_api_host", "10.10.10.10")
    s = Settings(_env_file=None)
    assert s.host == "10.10.10.10"


def test_log_level_is_normalized():
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"


def test_invalid_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="verbose")


def test_get_settings_singleton():
    a = get_settings()
    b = get_settings()
    assert a is b


def test_get_settings_cache_not_affected_by_new_env(monkeypatch: pytest.MonkeyPatch):
    first = get_settings()
    original_host = first.host
    monkeypatch.setenv("EDUMYLES_API_HOST", "203.0.113.5")
    second = get_settings()
    assert second is first
    assert second.host == original_host


@pytest.mark.parametrize(
    "override,expected",
    [
        ({"host": "1.1.1.1"}, "1.1.1.1"),
        ({"port": 1234}, 1234),
        ({"event_store_enabled": False}, False),
    ],
)
def test_direct_instantiation_with_overrides(override: dict[str, Any], expected: Any):
    s = Settings(_env_file=None, **override)
    key = next(iter(override.keys()))
    assert getattr(s, key) == expected


def test_database_url_override(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EDUMYLES_API_DATABASE_URL", "postgresql+psycopg://u:p@h/db")
    s = Settings(_env_file=None)
    assert s.database_url == "postgresql+psycopg://u:p@h/db"
