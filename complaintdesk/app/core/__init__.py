"""Core utilities for the complaintdesk application."""

from complaintdesk.app.core.config import settings
from complaintdesk.app.core.http_client import create_http_client
from complaintdesk.app.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "create_http_client",
    "get_logger",
    "setup_logging",
]
