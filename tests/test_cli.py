"""Tests for the administrative CLI."""

import pytest
from typer.testing import CliRunner

from edumyles_api.cli.app import app
from edumyles_api.cli.commands import db, events
from edumyles_api.settings import Settings

runner = CliRunner()


@pytest.fixture
def in_memory_settings(monkeypatch):
    settings = Settings(_env_file=None, redis_enabled=False, database_url=None)
    monkeypatch.setattr(events, "get_settings", lambda: settings)
    monkeypatch.setattr(db, "get_settings", lambda: settings)
    return settings


class TestEventsCommands:
    def test_publish_prints_event(self, in_memory_settings):
        result = runner.invoke(app, ["events", "publish", "t-42", "academic.year.created", "--data", '{"yearId": "2026"}'])

        assert result.exit_code == 0, result.output
        assert "Published academic.year.created" in result.output
        assert '"tenantId": "t-42"' in result.output

    def test_publish_rejects_invalid_json(self, in_memory_settings):
        result = runner.invoke(app, ["events", "publish", "t-42", "user.login", "--data", "{not json"])

        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_publish_rejects_non_object_data(self, in_memory_settings):
        result = runner.invoke(app, ["events", "publish", "t-42", "user.login", "--data", "[1, 2]"])

        assert result.exit_code == 1

    def test_subscriptions_without_registrations(self, in_memory_settings):
        result = runner.invoke(app, ["events", "subscriptions", "attendance"])

        assert result.exit_code == 0
        assert "No active subscriptions" in result.output

    def test_register_requires_database(self, in_memory_settings):
        result = runner.invoke(app, ["events", "register", "attendance", "user.login", "on_login"])

        assert result.exit_code == 1
        assert "Database URL missing" in result.output


class TestDbCommands:
    def test_check_requires_database(self, in_memory_settings):
        result = runner.invoke(app, ["db", "check"])

        assert result.exit_code == 1
        assert "Database URL missing" in result.output
