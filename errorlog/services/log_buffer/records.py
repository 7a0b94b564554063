"""
Log Records

A record is one timestamped, labeled line (or block, for error reports) in
the log file:

    [2019-04-18 11:50:29.844858][error] something went wrong
    [2019-04-18 14:05:03.578755][report]
    Traceback (most recent call last):
      ...
    ValueError: bad value
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from types import TracebackType

from errorlog.common.timestamp import now_timestamp


class Label(str, Enum):
    """Built-in record labels"""
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
    REPORT = "report"


@dataclass(frozen=True)
class LogRecord:
    """One formatted log entry. Immutable once built."""
    timestamp: str
    label: str
    body: str

    @property
    def header(self) -> str:
        return f"[{self.timestamp}][{self.label}]"

    def format(self) -> str:
        # Reports put the (multi-line) body under the header
        if self.label == Label.REPORT.value:
            return f"{self.header}\n{self.body}"
        return f"{self.header} {self.body}"

    @classmethod
    def now(cls, label: str | Label, body: str) -> "LogRecord":
        label_value = label.value if isinstance(label, Label) else str(label)
        return cls(timestamp=now_timestamp(), label=label_value, body=body)


@dataclass(frozen=True)
class ErrorDetails:
    """
    An uncaught error and its stack trace.

    Either `exception` is set (its own traceback is used unless `stack` is
    given), or only `message` is, for errors reported without an exception
    object (e.g. event-loop context messages).
    """
    exception: BaseException | None = None
    stack: TracebackType | None = None
    message: str | None = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        stack: TracebackType | None = None,
    ) -> "ErrorDetails":
        return cls(exception=exc, stack=stack or exc.__traceback__)

    def describe(self) -> str:
        """Exception description followed by its stack trace."""
        parts: list[str] = []
        if self.message:
            parts.append(self.message)

        if self.exception is not None:
            lines = traceback.format_exception(
                type(self.exception), self.exception, self.stack
            )
            parts.append("".join(lines).rstrip("\n"))

        return "\n".join(parts) if parts else "Unknown error"

    def __str__(self) -> str:
        return self.describe()
