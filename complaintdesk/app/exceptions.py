"""Custom exceptions for the complaintdesk application."""

from typing import Optional


class ComplaintDeskException(Exception):
    """Base class for complaintdesk exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code so API layers can map them consistently.
    """
    status_code: int = 500

    def __init__(self, message: str = "Complaint desk error"):
        self.message = message
        super().__init__(message)


class RateLimitError(ComplaintDeskException):
    """Raised when an operation is throttled, locally or by the backend.

    Maps to HTTP 429 Too Many Requests.
    """
    status_code = 429

    def __init__(self, message: str, retry_after: int, limit: int):
        self.retry_after = retry_after
        self.limit = limit
        super().__init__(message)

    def to_response(self) -> dict:
        return {
            "error": "rate_limit_exceeded",
            "message": self.message,
            "retry_after": self.retry_after,
            "limit": self.limit,
        }


class BackendError(ComplaintDeskException):
    """Raised when the PostgREST backend rejects a request.

    Maps to HTTP 502 Bad Gateway; the upstream status is kept for callers
    that need to distinguish e.g. RLS denials from constraint failures.
    """
    status_code = 502

    def __init__(self, message: str = "Backend request failed", upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message)


class BackendRateLimitError(BackendError):
    """Raised when the backend itself signals throttling (HTTP 429)."""
    status_code = 429

    def __init__(self, message: str = "Backend rate limit reached", retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(message, upstream_status=429)
