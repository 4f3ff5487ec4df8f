"""Rate limit configurations for the backend operation classes.

Read-heavy calls get the largest allowance, bulk/administrative calls the
smallest. The table is read-only at runtime.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union

from complaintdesk.app.rate_limit.models import RateLimitConfig


class OperationType(str, Enum):
    """Named categories of backend calls sharing one rate limit."""
    READ = "read"
    WRITE = "write"
    BULK = "bulk"
    AUTH = "auth"
    SEARCH = "search"
    UPLOAD = "upload"


RATE_LIMITS: Mapping[OperationType, RateLimitConfig] = MappingProxyType({
    OperationType.READ: RateLimitConfig(max_requests=100, window_ms=60000),
    OperationType.WRITE: RateLimitConfig(max_requests=30, window_ms=60000),
    OperationType.BULK: RateLimitConfig(max_requests=10, window_ms=60000),
    OperationType.AUTH: RateLimitConfig(max_requests=20, window_ms=60000),
    OperationType.SEARCH: RateLimitConfig(max_requests=50, window_ms=60000),
    OperationType.UPLOAD: RateLimitConfig(max_requests=20, window_ms=60000),
})


def resolve_operation_type(operation_type: Union[OperationType, str]) -> OperationType:
    """Normalize an operation class given as enum member or plain string.

    Raises:
        ValueError: If the name is not a known operation class
    """
    try:
        return OperationType(operation_type)
    except ValueError:
        known = ", ".join(op.value for op in OperationType)
        raise ValueError(
            f"Unknown operation type {operation_type!r}; expected one of: {known}"
        ) from None


def get_rate_limit_config(operation_type: Union[OperationType, str]) -> RateLimitConfig:
    """Look up the token bucket configuration for an operation class."""
    return RATE_LIMITS[resolve_operation_type(operation_type)]
