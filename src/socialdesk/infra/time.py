"""Clock and provider timestamp helpers. All datetimes are UTC-aware."""

from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_unix_seconds(value: Any) -> datetime | None:
    """Parse a Meta epoch-seconds timestamp ("1700000000" or 1700000000).

    Returns None when the value is missing, not a number, or out of range.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    if seconds < 0:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
