"""httpx client factory for backend calls.

Every data-access client gets the same pool limits and per-phase timeouts
from settings.
"""

from typing import Dict, Optional

import httpx

from complaintdesk.app.core.config import settings


def _default_timeout() -> httpx.Timeout:
    return httpx.Timeout(
        settings.httpx_timeout,
        connect=settings.httpx_connect_timeout,
        read=settings.httpx_read_timeout,
        write=settings.httpx_write_timeout,
        pool=settings.httpx_pool_timeout,
    )


def create_http_client(
    base_url: str = "",
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> httpx.AsyncClient:
    """Create an AsyncClient configured from settings.

    The caller owns the client and must close it, e.g.
    ``async with create_http_client() as client: ...``

    Args:
        base_url: Prefix for relative request URLs
        headers: Headers sent with every request
        timeout: One timeout for every phase instead of the configured ones
    """
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(timeout) if timeout is not None else _default_timeout(),
        limits=httpx.Limits(
            max_connections=settings.httpx_max_connections,
            max_keepalive_connections=settings.httpx_max_keepalive_connections,
            keepalive_expiry=settings.httpx_keepalive_expiry,
        ),
    )
