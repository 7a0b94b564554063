"""
Log Buffer - Log collection and crash reporting

Responsibilities:
- Buffer log lines and error reports in memory
- Append new records to the local log file
- Capture uncaught errors as report records
- Hand the file to the upload callback at startup and periodically
"""

from .error_source import ErrorHooks, run_protected
from .local_file import LocalLogFile
from .records import ErrorDetails, Label, LogRecord
from .service import BufferState, LogBuffer

__all__ = [
    "BufferState",
    "ErrorDetails",
    "ErrorHooks",
    "Label",
    "LocalLogFile",
    "LogBuffer",
    "LogRecord",
    "run_protected",
]
