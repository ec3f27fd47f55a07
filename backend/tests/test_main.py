"""Tests for the command-line entrypoint and shared settings."""
from __future__ import annotations

import json
import sys

import pytest
import structlog

from reconciler import main as cli
from reconciler.config import ReconcilerSettings
from shared.config import Environment, Settings


@pytest.fixture(autouse=True)
def _logs_to_stderr(monkeypatch):
    # stdout carries only the JSON result; log lines must never land there
    def configure(*_args, **_kwargs) -> None:
        structlog.configure(logger_factory=structlog.PrintLoggerFactory(sys.stderr))

    monkeypatch.setattr(cli, "setup_logging", configure)
    yield
    structlog.reset_defaults()


def _write(tmp_path, name: str, payload) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


class TestMain:

    def test_prints_camel_case_result(self, tmp_path, capsys) -> None:
        fixtures = _write(tmp_path, "fixtures.json", [
            {"id": 1, "homeTeam": "Arsenal", "awayTeam": "Chelsea", "date": "2025-01-15T15:00:00Z"},
            {"id": 2, "homeTeam": "Everton", "awayTeam": "Fulham", "date": "2025-01-16T15:00:00Z"},
        ])
        predictions = _write(tmp_path, "predictions.json", [{"id": 10, "matchId": 1, "homeScore": 2, "awayScore": 1}])
        options = _write(tmp_path, "options.json", {"includeUnpredicted": False})

        assert cli.main([fixtures, predictions, "--options", options]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is True
        assert [f["id"] for f in payload["data"]["fixtures"]] == ["1"]
        assert payload["data"]["fixtures"][0]["userPrediction"]["homeScore"] == 2

    def test_failed_run_exits_nonzero(self, tmp_path, capsys) -> None:
        fixtures = _write(tmp_path, "fixtures.json", ["not a record"])
        predictions = _write(tmp_path, "predictions.json", [])

        assert cli.main([fixtures, predictions]) == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is False
        assert payload["error"]["type"] == "DATA_MERGE_ERROR"

    def test_missing_file(self, tmp_path) -> None:
        predictions = _write(tmp_path, "predictions.json", [])
        assert cli.main([str(tmp_path / "nope.json"), predictions]) == 2


class TestSettings:

    def test_defaults(self) -> None:
        settings = ReconcilerSettings()
        assert settings.match_window_hours == 24.0
        assert settings.fuzzy_fallback_enabled is False
        assert "tottenham" in settings.team_aliases

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("PR_RECONCILER_MATCH_WINDOW_HOURS", "6")
        monkeypatch.setenv("PR_RECONCILER_TEAM_ALIASES", '{"everton": ["toffees"]}')
        settings = ReconcilerSettings()
        assert settings.match_window_hours == 6.0
        assert settings.team_aliases == {"everton": ["toffees"]}

    def test_negative_window_rejected(self) -> None:
        with pytest.raises(ValueError):
            ReconcilerSettings(match_window_hours=-1)

    def test_weight_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            ReconcilerSettings(fuzzy_name_weight=1.5)

    def test_root_settings_env(self, monkeypatch) -> None:
        monkeypatch.setenv("PR_ENVIRONMENT", "production")
        monkeypatch.setenv("PR_LOG_FORMAT", "json")
        settings = Settings()
        assert settings.environment == Environment.PRODUCTION
        assert settings.log_format == "json"
