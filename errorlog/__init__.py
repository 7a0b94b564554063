"""
errorlog - in-process log buffering and crash reporting

    from errorlog import LogBuffer

    log = LogBuffer(
        report_zone=start_app,
        debug_mode=False,
        upload_file=send_log,
        minutes_wait=30,
    )
    log.info("hello")
"""

from .common.config import ErrorLogSettings, load_settings
from .common.exceptions import ConfigError, ErrorLogError, FileSinkError, UploadError
from .services.log_buffer import BufferState, ErrorDetails, Label, LogBuffer, LogRecord

__version__ = "1.0.0"

__all__ = [
    "BufferState",
    "ConfigError",
    "ErrorDetails",
    "ErrorLogError",
    "ErrorLogSettings",
    "FileSinkError",
    "Label",
    "LogBuffer",
    "LogRecord",
    "UploadError",
    "load_settings",
]
