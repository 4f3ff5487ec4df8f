"""Rate limiting data models.

This module contains dataclasses for token bucket configuration, state
and status snapshots.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RateLimitConfig:
    """Token bucket configuration for one operation class.

    Attributes:
        max_requests: Bucket capacity and tokens granted per full window
        window_ms: Milliseconds over which max_requests tokens are replenished
        retry_after_ms: Optional backoff floor for blocking waits
    """
    max_requests: int
    window_ms: int
    retry_after_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if self.window_ms <= 0:
            raise ValueError("window_ms must be positive")
        if self.retry_after_ms is not None and self.retry_after_ms <= 0:
            raise ValueError("retry_after_ms must be positive")

    @property
    def ms_per_token(self) -> float:
        """Milliseconds needed to earn one token."""
        return self.window_ms / self.max_requests


@dataclass
class RateLimitEntry:
    """Token bucket state for a single limiter key."""
    tokens: int
    last_refill: float  # ms since epoch


@dataclass
class RateLimitStatus:
    """Snapshot of a bucket as reported to callers."""
    remaining: int
    reset_at: datetime
    limit: int
