"""
Configuration

Settings for a LogBuffer instance, loaded from an optional YAML file with
environment variable overrides.

Example config.yaml:
    errorlog:
      debug_mode: false
      minutes_wait: 30
      file_name: error_log.txt
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

DEFAULT_FILE_NAME = "error_log.txt"
DEFAULT_MINUTES_WAIT = 30

# Environment overrides (take precedence over the YAML file)
ENV_DEBUG = "ERRORLOG_DEBUG"
ENV_MINUTES_WAIT = "ERRORLOG_MINUTES_WAIT"
ENV_FILE_NAME = "ERRORLOG_FILE_NAME"
ENV_DATA_DIR = "ERRORLOG_DATA_DIR"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def default_data_dir() -> Path:
    """
    Writable per-application directory that holds the log file.

    ERRORLOG_DATA_DIR wins; otherwise %APPDATA%/errorlog on Windows and
    ~/.local/share/errorlog elsewhere.
    """
    override = os.environ.get(ENV_DATA_DIR)
    if override:
        return Path(override)

    if os.name == "nt" and os.environ.get("APPDATA"):
        return Path(os.environ["APPDATA"]) / "errorlog"

    return Path.home() / ".local" / "share" / "errorlog"


@dataclass
class ErrorLogSettings:
    """LogBuffer configuration"""
    debug_mode: bool = False
    minutes_wait: int = DEFAULT_MINUTES_WAIT  # Upload check interval
    file_name: str = DEFAULT_FILE_NAME
    log_dir: str | None = None  # None = default_data_dir()

    def validate(self) -> None:
        """Raise ConfigError if any setting is unusable."""
        validate_minutes_wait(self.minutes_wait)

        if not isinstance(self.debug_mode, bool):
            raise ConfigError(f"debug_mode must be a bool, got {self.debug_mode!r}")

        if not self.file_name or not isinstance(self.file_name, str):
            raise ConfigError("file_name must be a non-empty string")

        if Path(self.file_name).name != self.file_name:
            raise ConfigError(f"file_name must not contain a directory: {self.file_name!r}")

    def resolve_log_dir(self) -> Path:
        return Path(self.log_dir) if self.log_dir else default_data_dir()


def validate_minutes_wait(minutes_wait: Any) -> None:
    # bool is an int subclass; True minutes is never what anyone meant
    if isinstance(minutes_wait, bool) or not isinstance(minutes_wait, int):
        raise ConfigError(f"minutes_wait must be an int, got {minutes_wait!r}")
    if minutes_wait <= 0:
        raise ConfigError(f"minutes_wait must be positive, got {minutes_wait}")


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def load_settings(config_path: str | Path | None = None) -> ErrorLogSettings:
    """
    Load settings from YAML (if given) and apply environment overrides.

    The YAML document may hold the keys at top level or under an
    `errorlog:` section. Unknown keys are rejected.

    Args:
        config_path: Path to a YAML file, or None to use defaults + env only

    Returns:
        Validated ErrorLogSettings
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Expected a mapping in {path}")

        section = raw.get("errorlog", raw)
        if not isinstance(section, dict):
            raise ConfigError(f"'errorlog' section in {path} must be a mapping")
        data.update(section)

    known = {f.name for f in fields(ErrorLogSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

    if ENV_DEBUG in os.environ:
        data["debug_mode"] = _parse_bool(ENV_DEBUG, os.environ[ENV_DEBUG])
    if ENV_MINUTES_WAIT in os.environ:
        data["minutes_wait"] = _parse_int(ENV_MINUTES_WAIT, os.environ[ENV_MINUTES_WAIT])
    if os.environ.get(ENV_FILE_NAME):
        data["file_name"] = os.environ[ENV_FILE_NAME]
    if os.environ.get(ENV_DATA_DIR):
        data["log_dir"] = os.environ[ENV_DATA_DIR]

    settings = ErrorLogSettings(**data)
    settings.validate()
    return settings
