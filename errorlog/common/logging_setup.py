"""
Diagnostic Logging

errorlog reports on itself (startup, uploads, I/O errors) through the
`errorlog.*` loggers. As a library it stays quiet by default: the package
logger carries only a NullHandler and propagates, so the host's logging
configuration decides what is shown. These messages never end up in the
application log file.

Console output is opt-in, either by calling `setup_logging()` or by setting
ERRORLOG_LOG_LEVEL (ERRORLOG_LOG_FORMAT=json|text picks the format).
"""

import logging
import sys
import os
from datetime import datetime, timezone
import json
from typing import TextIO

PACKAGE_LOGGER = "errorlog"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

# Console handler added by setup_logging(), if any
_console_handler: logging.Handler | None = None


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in (
                "name", "msg", "args", "levelname", "levelno", "pathname",
                "filename", "module", "exc_info", "exc_text", "stack_info",
                "lineno", "funcName", "created", "msecs", "relativeCreated",
                "thread", "threadName", "processName", "process", "service",
                "message", "taskName",
            ):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds the component name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Print errorlog diagnostics to a console stream.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON format for logs
        stream: Output stream (default: stdout)

    Returns:
        The configured package logger. While a console handler is attached
        the package logger does not propagate, so records are not shown twice.
    """
    global _console_handler

    disable_console_logging()

    level = getattr(logging, log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    _console_handler = handler
    return logger


def disable_console_logging() -> None:
    """Remove the console handler; output goes back to the host's config."""
    global _console_handler

    if _console_handler is None:
        return

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.removeHandler(_console_handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _console_handler = None


def get_service_logger(name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter for one errorlog component (`errorlog.<name>`).

    The first call with ERRORLOG_LOG_LEVEL set turns console output on.
    """
    env_level = os.environ.get("ERRORLOG_LOG_LEVEL")
    if env_level and _console_handler is None:
        json_format = os.environ.get("ERRORLOG_LOG_FORMAT", "json").lower() == "json"
        setup_logging(env_level, json_format)

    logger = logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
    return ServiceLoggerAdapter(logger, {"service": name})
