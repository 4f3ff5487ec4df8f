"""Utility functions for the complaintdesk application."""

import math
from datetime import datetime, timezone
from typing import Optional


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a Retry-After header given in seconds.

    HTTP-date values, non-finite numbers and values under one second are
    not understood and yield None, leaving the caller to apply its own
    default.

    Examples:
        >>> parse_retry_after("30")
        30
        >>> parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
        True
    """
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 1:
        return None
    return int(seconds)


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string, as stored in updated_at columns."""
    return datetime.now(timezone.utc).isoformat()
