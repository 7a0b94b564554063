"""
Record Timestamp Utilities

Every record starts with a local wall-clock timestamp of the form
`2019-04-18 11:50:29.844858`. Microseconds are always present so records
written within the same second stay distinguishable and sortable.
"""

from datetime import datetime


def format_timestamp(ts: datetime) -> str:
    """
    Render a timestamp the way records carry it.

    Unlike str(datetime), this keeps the fractional part when microsecond
    is zero, so every record header has the same width.

    Examples:
        2019-04-18 11:50:29.844858
        2019-04-18 11:50:30.000000
    """
    return ts.isoformat(sep=" ", timespec="microseconds")


def now_local() -> datetime:
    """Current local wall-clock time (naive, as shown to the user)."""
    return datetime.now()


def now_timestamp() -> str:
    """Current local time formatted for a record header."""
    return format_timestamp(now_local())
