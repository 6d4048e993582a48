"""Common time utilities."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; all report timestamps are stored naive in UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
