"""Rate-limit gating for async backend calls.

``with_rate_limit`` wraps an async callable so every call first spends a
token from the limiter. Throttling reported by the backend is folded into
the same ``RateLimitError`` as local denials, so callers branch on one
error type regardless of where the limit was enforced.
"""

import functools
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import httpx

from complaintdesk.app.core.config import settings
from complaintdesk.app.core.logging import get_log_context, get_logger
from complaintdesk.app.core.utils import parse_retry_after
from complaintdesk.app.exceptions import BackendRateLimitError, RateLimitError
from complaintdesk.app.rate_limit.limiter import RateLimiter, get_rate_limiter
from complaintdesk.app.rate_limit.models import RateLimitStatus
from complaintdesk.app.rate_limit.policies import (
    OperationType,
    get_rate_limit_config,
    resolve_operation_type,
)

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def translate_backend_error(exc: BaseException, limit: int) -> Optional[RateLimitError]:
    """Map a backend throttling failure to a RateLimitError.

    Recognizes, in order: BackendRateLimitError, an httpx 429 response,
    and any other error whose message mentions "rate limit". Returns None
    for everything else.
    """
    default_retry = settings.rate_limit_remote_retry_after_seconds

    if isinstance(exc, RateLimitError):
        return None

    if isinstance(exc, BackendRateLimitError):
        return RateLimitError(exc.message, exc.retry_after or default_retry, limit)

    if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 429:
        retry_after = parse_retry_after(exc.response.headers.get("Retry-After"))
        return RateLimitError(str(exc), retry_after or default_retry, limit)

    if "rate limit" in str(exc).lower():
        return RateLimitError(str(exc), default_retry, limit)

    return None


def with_rate_limit(
    fn: F,
    operation_type: Union[OperationType, str],
    custom_key: Optional[str] = None,
    *,
    limiter: Optional[RateLimiter] = None,
    wait: bool = False,
) -> F:
    """Wrap an async function with rate limiting.

    Args:
        fn: Coroutine function performing a backend call
        operation_type: Operation class whose limits apply
        custom_key: Bucket key; defaults to "{operation}:{function name}"
        limiter: Limiter to use; defaults to the process-wide limiter,
            resolved at call time
        wait: Block until a token is available instead of failing fast

    Returns:
        Coroutine function with the same signature as ``fn``

    Raises:
        ValueError: If ``operation_type`` is not a known operation class

    Example:
        >>> get_templates = with_rate_limit(_get_templates, "read")
        >>> rows = await get_templates(client)
    """
    operation = resolve_operation_type(operation_type)
    config = get_rate_limit_config(operation)
    name = getattr(fn, "__name__", type(fn).__name__)
    key = custom_key if custom_key is not None else f"{operation.value}:{name}"

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        active = limiter or get_rate_limiter()

        if wait:
            await active.wait_for_limit(key, config)
        elif not await active.check_limit(key, config):
            retry_after = active.seconds_until_reset(key, config)
            logger.warning(
                f"Rate limit exceeded for {operation.value} operations",
                extra=get_log_context(
                    operation=operation.value,
                    limiter_key=key,
                    retry_after=retry_after,
                ),
            )
            raise RateLimitError(
                f"Rate limit exceeded for {operation.value} operations. "
                f"Please try again in {retry_after} seconds.",
                retry_after=retry_after,
                limit=config.max_requests,
            )

        try:
            return await fn(*args, **kwargs)
        except Exception as e:
            translated = translate_backend_error(e, config.max_requests)
            if translated is None:
                raise
            logger.warning(
                f"Backend throttled {name}: {e}",
                extra=get_log_context(
                    operation=operation.value,
                    limiter_key=key,
                    retry_after=translated.retry_after,
                ),
            )
            raise translated from e

    return wrapper  # type: ignore


def rate_limited(
    operation_type: Union[OperationType, str],
    custom_key: Optional[str] = None,
    *,
    limiter: Optional[RateLimiter] = None,
    wait: bool = False,
) -> Callable[[F], F]:
    """Decorator form of with_rate_limit.

    Example:
        >>> @rate_limited("write")
        ... async def create_template(client, template):
        ...     return await client.insert("complaint_templates", template)
    """
    def decorator(fn: F) -> F:
        return with_rate_limit(fn, operation_type, custom_key, limiter=limiter, wait=wait)

    return decorator


def get_rate_limit_status(
    operation_type: Union[OperationType, str],
    custom_key: Optional[str] = None,
    *,
    limiter: Optional[RateLimiter] = None,
) -> RateLimitStatus:
    """Get rate limit status for an operation class.

    Without a custom key the bucket named after the operation class is
    reported.
    """
    operation = resolve_operation_type(operation_type)
    config = get_rate_limit_config(operation)
    key = custom_key if custom_key is not None else operation.value
    return (limiter or get_rate_limiter()).get_status(key, config)


def reset_rate_limit(
    operation_type: Union[OperationType, str],
    custom_key: Optional[str] = None,
    *,
    limiter: Optional[RateLimiter] = None,
) -> None:
    """Reset rate limit buckets, mainly for test setup and teardown.

    With a custom key only that bucket is cleared. Without one the bucket
    named after the operation class and every "{operation}:..." bucket
    created by wrapped functions are cleared.
    """
    operation = resolve_operation_type(operation_type)
    active = limiter or get_rate_limiter()
    if custom_key is not None:
        active.reset(custom_key)
        return
    active.reset(operation.value)
    active.reset_prefix(f"{operation.value}:")
