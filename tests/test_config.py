"""Tests for httpdiag.config -- files, environment and precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from httpdiag.config import env_overrides, load_config_file, load_project_config, resolve_config
from httpdiag.exceptions import ConfigError
from httpdiag.models import DiagnosticsConfig, OutputFormat


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestLoadConfigFile:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "diag.json"
        _write_json(path, {"success_level": "debug", "capture_headers": True})

        config = load_config_file(path)
        assert config.success_level == "DEBUG"
        assert config.capture_headers is True

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "diag.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config_file(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "diag.json"
        _write_json(path, ["a", "b"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_config_file(path)

    def test_validation_error(self, tmp_path: Path) -> None:
        path = tmp_path / "diag.json"
        _write_json(path, {"failure_level": "SHOUTING"})
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config_file(path)


class TestProjectConfig:
    def test_absent(self) -> None:
        assert load_project_config() is None

    def test_present(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "httpdiag.json", {"logger_name": "proj"})
        assert load_project_config() == {"logger_name": "proj"}

    def test_invalid(self, tmp_path: Path) -> None:
        (tmp_path / "httpdiag.json").write_text("oops", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestEnvOverrides:
    def test_empty_environment(self) -> None:
        assert env_overrides() == {}

    def test_all_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HTTPDIAG_LOGGER", "svc.http")
        monkeypatch.setenv("HTTPDIAG_LEVEL", "debug")
        monkeypatch.setenv("HTTPDIAG_CAPTURE_HEADERS", "yes")
        monkeypatch.setenv("HTTPDIAG_CAPTURE_CONTENT", "0")
        monkeypatch.setenv("HTTPDIAG_MAX_CONTENT_CHARS", " 512 ")
        monkeypatch.setenv("HTTPDIAG_FORMAT", "JSON")
        monkeypatch.setenv("NO_COLOR", "")

        assert env_overrides() == {
            "logger_name": "svc.http",
            "success_level": "debug",
            "capture_headers": True,
            "capture_content": False,
            "max_content_chars": 512,
            "console": {"format": "json", "no_color": True},
        }

    def test_bad_boolean(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HTTPDIAG_CAPTURE_HEADERS", "maybe")
        with pytest.raises(ConfigError, match="HTTPDIAG_CAPTURE_HEADERS"):
            env_overrides()

    def test_bad_integer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HTTPDIAG_MAX_CONTENT_CHARS", "lots")
        with pytest.raises(ConfigError, match="HTTPDIAG_MAX_CONTENT_CHARS"):
            env_overrides()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self) -> None:
        assert resolve_config() == DiagnosticsConfig()

    def test_project_file_applies(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "httpdiag.json", {"capture_headers": True, "console": {"quiet": True}})
        config = resolve_config()
        assert config.capture_headers is True
        assert config.console.quiet is True

    def test_env_beats_project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(
            tmp_path / "httpdiag.json",
            {"success_level": "WARNING", "console": {"quiet": True, "format": "plain"}},
        )
        monkeypatch.setenv("HTTPDIAG_LEVEL", "DEBUG")
        monkeypatch.setenv("HTTPDIAG_FORMAT", "json")

        config = resolve_config()
        assert config.success_level == "DEBUG"
        assert config.console.format == OutputFormat.JSON
        # Nested keys not set by the environment survive from the file.
        assert config.console.quiet is True

    def test_overrides_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HTTPDIAG_CAPTURE_CONTENT", "true")
        config = resolve_config(capture_content=False, logger_name=None)
        assert config.capture_content is False
        assert config.logger_name == "httpdiag"

    def test_invalid_merged_result(self) -> None:
        with pytest.raises(ConfigError, match="Invalid diagnostics configuration"):
            resolve_config(max_content_chars=-1)
