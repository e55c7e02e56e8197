"""
Timestamp utilities for Eternal Quest.

All stored timestamps are ISO 8601 in UTC.
"""

import datetime


def get_current_timestamp() -> str:
    """Get current timestamp in ISO 8601 format with timezone."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def parse_timestamp(timestamp_str: str) -> datetime.datetime:
    """
    Parse an ISO 8601 timestamp string.

    Naive timestamps are assumed to be UTC.

    Raises:
        ValueError: If timestamp format is invalid
    """
    dt = datetime.datetime.fromisoformat(timestamp_str.replace('Z', '+00:00'))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def validate_timestamp(timestamp_str: str) -> bool:
    """Return True if the string is a valid ISO 8601 timestamp."""
    try:
        parse_timestamp(timestamp_str)
        return True
    except (TypeError, ValueError):
        return False
