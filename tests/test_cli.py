"""Tests for the expiring-messages command line interface."""

import json
import logging

import pytest
import structlog
from typer.testing import CliRunner

from expiring_messages import __version__
from expiring_messages.cli import app
from expiring_messages.config import get_settings
from expiring_messages.expiration import BUCKET_PREFIX
from expiring_messages.store import SQLiteStore

runner = CliRunner()


def last_json(output: str) -> dict:
    """Parse the command's JSON result; log lines may precede it."""
    return json.loads(output.strip().splitlines()[-1])


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Point the CLI at a throwaway store."""
    db_path = tmp_path / "kv.db"
    monkeypatch.setenv("EXPIRING_MESSAGES_STORE_PATH", str(db_path))
    monkeypatch.setenv("EXPIRING_MESSAGES_ALLOWED_DURATIONS", "5m,1h")
    monkeypatch.setenv("EXPIRING_MESSAGES_ENABLED", "true")
    monkeypatch.setenv("EXPIRING_MESSAGES_SERVER_URL", "http://127.0.0.1:9")
    get_settings.cache_clear()
    yield db_path
    get_settings.cache_clear()
    # Commands attach handlers to the runner's streams
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


class TestCli:
    """Tests for the CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_schedule_writes_entry(self, env):
        result = runner.invoke(app, ["schedule", "post1", "--duration", "5m", "--json"])

        assert result.exit_code == 0, result.output
        data = last_json(result.output)
        assert data["content_id"] == "post1"

        store = SQLiteStore(env)
        keys = store.list_keys(0, 10)
        store.close()
        assert len(keys) == 1
        assert keys[0].startswith(BUCKET_PREFIX)
        assert keys[0].endswith("_post1")

    def test_schedule_rejects_disallowed_duration(self, env):
        result = runner.invoke(app, ["schedule", "post1", "--duration", "1d"])
        assert result.exit_code == 1
        assert "'1d' is not allowed" in result.output

    def test_schedule_refuses_when_disabled(self, env, monkeypatch):
        monkeypatch.setenv("EXPIRING_MESSAGES_ENABLED", "false")
        get_settings.cache_clear()
        result = runner.invoke(app, ["schedule", "post1", "--duration", "5m"])
        assert result.exit_code == 1
        assert "disabled" in result.output

    def test_status_json(self, env):
        runner.invoke(app, ["schedule", "post1", "--duration", "5m"])
        runner.invoke(app, ["schedule", "post2", "--duration", "1h"])

        result = runner.invoke(app, ["status", "--json"])

        assert result.exit_code == 0, result.output
        data = last_json(result.output)
        assert data["scheduled"] == 2
        assert data["due"] == 0
        assert data["stale"] == 0
        assert len(data["buckets"]) == 2

    def test_status_human(self, env):
        runner.invoke(app, ["schedule", "post1", "--duration", "5m"])
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Scheduled: 1 posts in 1 buckets" in result.output

    def test_sweep_with_nothing_due(self, env):
        runner.invoke(app, ["schedule", "post1", "--duration", "5m"])

        result = runner.invoke(app, ["sweep", "--json"])

        assert result.exit_code == 0, result.output
        data = last_json(result.output)
        assert data == {"examined": 0, "deleted": 0, "failed": 0, "stale_removed": 0}
