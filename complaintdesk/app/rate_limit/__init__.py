"""Client-side rate limiting for backend calls.

Token bucket limiter with per-operation-class limits, an async wrapper
that gates calls behind it, and helpers to inspect and reset buckets.
"""

from complaintdesk.app.exceptions import RateLimitError

# Re-export models
from complaintdesk.app.rate_limit.models import (
    RateLimitConfig,
    RateLimitEntry,
    RateLimitStatus,
)

# Re-export policies
from complaintdesk.app.rate_limit.policies import (
    RATE_LIMITS,
    OperationType,
    get_rate_limit_config,
)

# Re-export limiter
from complaintdesk.app.rate_limit.limiter import (
    RateLimiter,
    destroy_rate_limiter,
    get_rate_limiter,
    set_rate_limiter,
)

# Re-export wrappers
from complaintdesk.app.rate_limit.wrappers import (
    get_rate_limit_status,
    rate_limited,
    reset_rate_limit,
    translate_backend_error,
    with_rate_limit,
)

__all__ = [
    # Models
    "RateLimitConfig",
    "RateLimitEntry",
    "RateLimitStatus",
    # Policies
    "RATE_LIMITS",
    "OperationType",
    "get_rate_limit_config",
    # Limiter
    "RateLimiter",
    "get_rate_limiter",
    "set_rate_limiter",
    "destroy_rate_limiter",
    # Wrappers
    "RateLimitError",
    "with_rate_limit",
    "rate_limited",
    "get_rate_limit_status",
    "reset_rate_limit",
    "translate_backend_error",
]
