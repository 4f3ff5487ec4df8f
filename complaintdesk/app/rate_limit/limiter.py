"""In-process token bucket rate limiter.

Each limiter key owns an independent bucket that refills lazily in
proportion to elapsed wall-clock time. State lives in memory only, so the
limiter throttles the calls issued from this process and nothing else.
"""

import asyncio
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from complaintdesk.app.core.config import settings
from complaintdesk.app.core.logging import get_log_context, get_logger
from complaintdesk.app.exceptions import RateLimitError
from complaintdesk.app.rate_limit.models import (
    RateLimitConfig,
    RateLimitEntry,
    RateLimitStatus,
)

logger = get_logger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


def _to_datetime(timestamp_ms: float) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


@dataclass
class _WaitQueue:
    """FIFO queue of coroutines blocked in wait_for_limit on one key."""
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    waiters: int = 0


class RateLimiter:
    """Token bucket rate limiter keyed by arbitrary strings.

    Buckets are created on first use with one token already spent, refilled
    on every check and swept by a periodic cleanup task once idle for
    longer than ``max_entry_age_ms``.

    The clock returns milliseconds since the epoch and the sleeper is an
    ``asyncio.sleep``-compatible coroutine; both can be replaced to drive
    the limiter deterministically in tests.
    """

    DEFAULT_CLEANUP_INTERVAL = 300.0
    DEFAULT_MAX_ENTRY_AGE_MS = 600_000
    DEFAULT_WAIT_MAX_ATTEMPTS = 30
    DEFAULT_WAIT_MAX_SECONDS = 120.0

    def __init__(
        self,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
        max_entry_age_ms: float = DEFAULT_MAX_ENTRY_AGE_MS,
        auto_cleanup: bool = True,
        wait_max_attempts: int = DEFAULT_WAIT_MAX_ATTEMPTS,
        wait_max_seconds: float = DEFAULT_WAIT_MAX_SECONDS,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleeper] = None,
    ):
        """Initialize rate limiter.

        Args:
            cleanup_interval: Seconds between cleanup sweeps
            max_entry_age_ms: Idle age after which a bucket is dropped
            auto_cleanup: Start the cleanup task on first use
            wait_max_attempts: Default retry ceiling for wait_for_limit
            wait_max_seconds: Default total sleep ceiling for wait_for_limit
            clock: Millisecond clock, defaults to wall-clock time
            sleep: Async sleep used between wait_for_limit retries
        """
        if cleanup_interval <= 0:
            raise ValueError("cleanup_interval must be positive")
        if max_entry_age_ms <= 0:
            raise ValueError("max_entry_age_ms must be positive")

        self.cleanup_interval = cleanup_interval
        self.max_entry_age_ms = max_entry_age_ms
        self.auto_cleanup = auto_cleanup
        self.wait_max_attempts = wait_max_attempts
        self.wait_max_seconds = wait_max_seconds
        self._clock = clock or _wall_clock_ms
        self._sleep = sleep or asyncio.sleep

        self._buckets: Dict[str, RateLimitEntry] = {}
        self._wait_queues: Dict[str, _WaitQueue] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, **overrides) -> "RateLimiter":
        """Build a limiter configured from application settings."""
        params = {
            "cleanup_interval": settings.rate_limit_cleanup_interval_seconds,
            "max_entry_age_ms": settings.rate_limit_entry_max_age_seconds * 1000,
            "auto_cleanup": settings.rate_limit_auto_cleanup,
            "wait_max_attempts": settings.rate_limit_wait_max_attempts,
            "wait_max_seconds": settings.rate_limit_wait_max_seconds,
        }
        params.update(overrides)
        return cls(**params)

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def now(self) -> float:
        """Current time in milliseconds according to the limiter's clock."""
        return self._clock()

    async def check_limit(self, key: str, config: RateLimitConfig) -> bool:
        """Admit or deny one unit of work for ``key``.

        Consumes a token when admitted. Never suspends; it is a coroutine so
        callers treat local and remote limiters alike.
        """
        self._ensure_cleanup_task()

        now = self._clock()
        entry = self._buckets.get(key)

        if entry is None:
            self._buckets[key] = RateLimitEntry(
                tokens=config.max_requests - 1,
                last_refill=now,
            )
            return True

        self._refill(entry, config, now)

        if entry.tokens > 0:
            entry.tokens -= 1
            return True

        return False

    @staticmethod
    def _refill(entry: RateLimitEntry, config: RateLimitConfig, now: float) -> None:
        elapsed = now - entry.last_refill
        refill_amount = math.floor(elapsed / config.window_ms * config.max_requests)
        if refill_amount <= 0:
            return

        entry.tokens = min(config.max_requests, entry.tokens + refill_amount)
        if entry.tokens >= config.max_requests:
            entry.last_refill = now
        else:
            # Only the time worth of whole tokens is spent; the remainder
            # keeps counting towards the next token.
            entry.last_refill += refill_amount * config.ms_per_token

    async def wait_for_limit(
        self,
        key: str,
        config: RateLimitConfig,
        *,
        max_attempts: Optional[int] = None,
        max_wait: Optional[float] = None,
    ) -> None:
        """Block until ``key`` admits a unit of work.

        Waiters on the same key are admitted in arrival order. Between
        attempts the coroutine sleeps for the larger of the configured
        backoff floor (1s by default) and the time to earn one token.

        Args:
            key: Limiter key
            config: Bucket configuration
            max_attempts: Retries after the first denial (default from limiter)
            max_wait: Total seconds allowed, including time queued behind
                other waiters on the key (default from limiter)

        Raises:
            RateLimitError: If the retry or time budget runs out first
            asyncio.CancelledError: If the waiting task is cancelled
        """
        attempts_allowed = self.wait_max_attempts if max_attempts is None else max_attempts
        wait_allowed = self.wait_max_seconds if max_wait is None else max_wait

        queue = self._wait_queues.setdefault(key, _WaitQueue())
        queue.waiters += 1
        queued_at = self._clock()
        try:
            async with queue.lock:
                if await self.check_limit(key, config):
                    return

                delay = max(config.retry_after_ms or 1000, config.ms_per_token) / 1000.0
                attempts = 0
                # Time spent queued behind earlier waiters counts against max_wait
                waited = max(0.0, (self._clock() - queued_at) / 1000.0)

                while attempts < attempts_allowed and waited + delay <= wait_allowed:
                    await self._sleep(delay)
                    attempts += 1
                    waited += delay
                    if await self.check_limit(key, config):
                        return

                retry_after = max(1, math.ceil(delay))
                logger.warning(
                    f"Gave up waiting for rate limit after {attempts} attempts ({waited:.1f}s)",
                    extra=get_log_context(limiter_key=key, retry_after=retry_after),
                )
                raise RateLimitError(
                    f"Rate limit still exceeded after waiting {waited:.0f} seconds. "
                    f"Please try again in {retry_after} seconds.",
                    retry_after=retry_after,
                    limit=config.max_requests,
                )
        finally:
            queue.waiters -= 1
            if queue.waiters == 0 and self._wait_queues.get(key) is queue:
                del self._wait_queues[key]

    def get_status(self, key: str, config: RateLimitConfig) -> RateLimitStatus:
        """Report remaining tokens and reset time without consuming anything.

        Tokens earned since the last check are included in ``remaining`` but
        not written back to the bucket.
        """
        now = self._clock()
        entry = self._buckets.get(key)

        if entry is None:
            return RateLimitStatus(
                remaining=config.max_requests,
                reset_at=_to_datetime(now + config.window_ms),
                limit=config.max_requests,
            )

        earned = math.floor((now - entry.last_refill) / config.window_ms * config.max_requests)
        return RateLimitStatus(
            remaining=min(config.max_requests, entry.tokens + max(0, earned)),
            reset_at=_to_datetime(entry.last_refill + config.window_ms),
            limit=config.max_requests,
        )

    def seconds_until_reset(self, key: str, config: RateLimitConfig) -> int:
        """Whole seconds until the bucket's reset time, never less than 1."""
        status = self.get_status(key, config)
        remaining_ms = status.reset_at.timestamp() * 1000.0 - self._clock()
        return max(1, math.ceil(remaining_ms / 1000.0))

    def cleanup(self) -> int:
        """Drop buckets idle for longer than ``max_entry_age_ms``.

        Returns:
            Number of buckets removed
        """
        now = self._clock()
        expired = [
            key for key, entry in self._buckets.items()
            if now - entry.last_refill > self.max_entry_age_ms
        ]
        for key in expired:
            del self._buckets[key]

        if expired:
            logger.debug(f"Removed {len(expired)} idle rate limit buckets")
        return len(expired)

    def reset(self, key: str) -> bool:
        """Forget the bucket for ``key``. Returns True if one existed."""
        return self._buckets.pop(key, None) is not None

    def reset_prefix(self, prefix: str) -> int:
        """Forget every bucket whose key starts with ``prefix``."""
        keys = [key for key in self._buckets if key.startswith(prefix)]
        for key in keys:
            del self._buckets[key]
        return len(keys)

    def start_cleanup(self) -> None:
        """Start the periodic cleanup task on the running event loop.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        loop = asyncio.get_running_loop()
        task = self._cleanup_task
        if task is not None and not task.done() and task.get_loop() is loop:
            return
        self._cleanup_task = loop.create_task(self._cleanup_loop())
        logger.debug("Rate limiter cleanup task started")

    def stop_cleanup(self) -> None:
        """Cancel the periodic cleanup task if it is running.

        Call this from the event loop that runs the task, before the loop
        closes. A task whose loop is already closed can no longer be
        cancelled and is only forgotten.
        """
        task = self._cleanup_task
        self._cleanup_task = None
        if task is None or task.done():
            return
        if task.get_loop().is_closed():
            logger.warning("Rate limiter cleanup task outlived its event loop")
            return
        task.cancel()
        logger.debug("Rate limiter cleanup task stopped")

    @property
    def cleanup_running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    def _ensure_cleanup_task(self) -> None:
        if self.auto_cleanup:
            self.start_cleanup()

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            self.cleanup()

    def destroy(self) -> None:
        """Stop the cleanup task and forget all buckets.

        The limiter stays usable; the next check starts from empty state.
        """
        self.stop_cleanup()
        self._buckets.clear()
        self._wait_queues.clear()


# Default limiter used when callers do not pass one explicitly.
_default_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Return the default limiter, creating it from settings on first use."""
    global _default_limiter
    if _default_limiter is None:
        _default_limiter = RateLimiter.from_settings()
    return _default_limiter


def set_rate_limiter(limiter: Optional[RateLimiter]) -> None:
    """Install the limiter the application's composition root owns.

    Passing None makes the next get_rate_limiter() call build a fresh one.
    The previously installed limiter is not destroyed.
    """
    global _default_limiter
    _default_limiter = limiter


def destroy_rate_limiter() -> None:
    """Destroy the default limiter and forget it."""
    global _default_limiter
    if _default_limiter is not None:
        _default_limiter.destroy()
        _default_limiter = None
