"""
Common Utilities

Shared modules used by the log buffer:
- config.py - Settings dataclass and YAML/env loading
- exceptions.py - Custom exception classes
- logging_setup.py - Structured diagnostic logging
- scheduler.py - Periodic timer
- timestamp.py - Record timestamp formatting
"""

from .config import (
    ErrorLogSettings,
    DEFAULT_FILE_NAME,
    DEFAULT_MINUTES_WAIT,
    default_data_dir,
    load_settings,
    validate_minutes_wait,
)
from .exceptions import (
    ErrorLogError,
    ConfigError,
    FileSinkError,
    UploadError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    JsonFormatter,
    ServiceLoggerAdapter,
    disable_console_logging,
)
from .scheduler import ScheduledLoop
from .timestamp import format_timestamp, now_timestamp

__all__ = [
    # Config
    "ErrorLogSettings",
    "DEFAULT_FILE_NAME",
    "DEFAULT_MINUTES_WAIT",
    "default_data_dir",
    "load_settings",
    "validate_minutes_wait",
    # Exceptions
    "ErrorLogError",
    "ConfigError",
    "FileSinkError",
    "UploadError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "JsonFormatter",
    "ServiceLoggerAdapter",
    "disable_console_logging",
    # Scheduling
    "ScheduledLoop",
    # Timestamps
    "format_timestamp",
    "now_timestamp",
]
