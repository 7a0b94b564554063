"""Tests for settings loading and validation"""
import pytest

from errorlog.common.config import (
    DEFAULT_FILE_NAME,
    ErrorLogSettings,
    default_data_dir,
    load_settings,
)
from errorlog.common.exceptions import ConfigError


class TestErrorLogSettings:

    def test_defaults(self):
        settings = load_settings()

        assert settings.debug_mode is False
        assert settings.minutes_wait == 30
        assert settings.file_name == DEFAULT_FILE_NAME == "error_log.txt"
        assert settings.log_dir is None

    @pytest.mark.parametrize("kwargs", [
        {"minutes_wait": 0},
        {"minutes_wait": -1},
        {"minutes_wait": 2.5},
        {"minutes_wait": True},
        {"debug_mode": "yes"},
        {"file_name": ""},
        {"file_name": "../escape.txt"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            ErrorLogSettings(**kwargs).validate()

    def test_resolve_log_dir(self, tmp_path, monkeypatch):
        assert ErrorLogSettings(log_dir=str(tmp_path)).resolve_log_dir() == tmp_path

        monkeypatch.setenv("ERRORLOG_DATA_DIR", str(tmp_path / "env"))
        assert ErrorLogSettings().resolve_log_dir() == tmp_path / "env"

    def test_default_data_dir_without_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))

        assert default_data_dir() == tmp_path / ".local" / "share" / "errorlog"


class TestLoadSettings:

    def test_yaml_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "errorlog:\n"
            "  debug_mode: true\n"
            "  minutes_wait: 5\n"
            "  file_name: crash.txt\n"
        )

        settings = load_settings(path)

        assert settings == ErrorLogSettings(debug_mode=True, minutes_wait=5, file_name="crash.txt")

    def test_yaml_top_level(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("minutes_wait: 10\n")

        assert load_settings(path).minutes_wait == 10

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_settings(path) == ErrorLogSettings()

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("debug_mode: true\nminutes_wait: 5\n")
        monkeypatch.setenv("ERRORLOG_DEBUG", "0")
        monkeypatch.setenv("ERRORLOG_MINUTES_WAIT", "45")
        monkeypatch.setenv("ERRORLOG_FILE_NAME", "env.txt")
        monkeypatch.setenv("ERRORLOG_DATA_DIR", str(tmp_path))

        settings = load_settings(path)

        assert settings.debug_mode is False
        assert settings.minutes_wait == 45
        assert settings.file_name == "env.txt"
        assert settings.log_dir == str(tmp_path)

    @pytest.mark.parametrize("name,value", [
        ("ERRORLOG_DEBUG", "maybe"),
        ("ERRORLOG_MINUTES_WAIT", "soon"),
        ("ERRORLOG_MINUTES_WAIT", "0"),
    ])
    def test_bad_env(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigError):
            load_settings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("upload_url: http://example.invalid\n")

        with pytest.raises(ConfigError, match="upload_url"):
            load_settings(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("errorlog: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            load_settings(path)
