"""
Custom Exception Classes for errorlog

Hierarchical exception structure for error handling across the log buffer.
"""

from pathlib import Path


class ErrorLogError(Exception):
    """Base exception for all errorlog errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(ErrorLogError):
    """Configuration-related errors"""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(f"Config Error: {message}", recoverable)


class FileSinkError(ErrorLogError):
    """Local log file read/append/clear errors"""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        operation: str | None = None,
    ):
        self.path = path
        self.operation = operation
        super().__init__(f"File Error: {message}", recoverable=True)


class UploadError(ErrorLogError):
    """Upload callback failed"""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(f"Upload Error: {message}", recoverable=True)
