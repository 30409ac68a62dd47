"""UTC datetime utilities.

All timestamps are stored as ISO-8601 UTC strings.
"""

from datetime import datetime, timezone


def timestamp_to_iso(timestamp: float) -> str:
    """Format a POSIX timestamp as ISO-8601 UTC with milliseconds.

    Example:
        >>> timestamp_to_iso(0)
        '1970-01-01T00:00:00.000Z'
    """
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    """Return the current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
