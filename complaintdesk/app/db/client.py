"""Async PostgREST client for the Supabase backend.

Only the handful of query shapes the CRUD modules need are supported:
filtered/ordered selects, single-row lookup by id, insert, update and
delete. Permissions, triggers and notifications live in the database.
"""

from typing import Any, Dict, List, Optional

import httpx

from complaintdesk.app.core.config import settings
from complaintdesk.app.core.http_client import create_http_client
from complaintdesk.app.core.logging import get_logger
from complaintdesk.app.core.utils import parse_retry_after
from complaintdesk.app.exceptions import BackendError, BackendRateLimitError

logger = get_logger(__name__)


def _format_filter(value: Any) -> str:
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if value is None:
        return "is.null"
    return f"eq.{value}"


class SupabaseClient:
    """Thin async wrapper over the PostgREST endpoint at ``/rest/v1``.

    The client can own its httpx client (created from settings) or borrow
    one passed in; only an owned client is closed by ``aclose``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_anon_key
        self.access_token = access_token
        self._owns_client = http_client is None
        self._http = http_client or create_http_client()

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    def _headers(self, *, representation: bool = False, single: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if representation:
            headers["Prefer"] = "return=representation"
        if single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        return headers

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        response = await self._http.request(
            method,
            f"{self.rest_url}/{table}",
            params=params,
            json=json,
            headers=headers,
        )
        self._raise_for_error(response, method, table)
        return response

    @staticmethod
    def _raise_for_error(response: httpx.Response, method: str, table: str) -> None:
        if response.status_code < 400:
            return

        message = ""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error") or ""
        if not message:
            message = f"{method} {table} failed with status {response.status_code}"

        if response.status_code == 429:
            logger.warning(f"Backend rate limit hit on {method} {table}")
            raise BackendRateLimitError(
                message,
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )

        logger.error(f"Backend error on {method} {table}: {response.status_code} {message}")
        raise BackendError(message, upstream_status=response.status_code)

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Optional[Dict[str, Any]] = None,
        since: Optional[Dict[str, str]] = None,
        order: Optional[str] = "created_at",
        ascending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Select rows with equality filters, ordering and an optional limit.

        Args:
            table: Table name
            columns: PostgREST select list
            filters: Column -> value equality filters
            since: Column -> lower bound (inclusive) range filters
            order: Column to order by, or None for backend order
            ascending: Sort direction
            limit: Maximum number of rows
        """
        params = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = _format_filter(value)
        for column, value in (since or {}).items():
            params[column] = f"gte.{value}"
        if order:
            params["order"] = f"{order}.{'asc' if ascending else 'desc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._request("GET", table, params=params, headers=self._headers())
        return response.json() or []

    async def select_one(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a single row by id, or None when it does not exist."""
        params = {"select": "*", "id": _format_filter(row_id)}
        response = await self._request("GET", table, params=params, headers=self._headers())
        rows = response.json() or []
        return rows[0] if rows else None

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            table,
            params={"select": "*"},
            json=row,
            headers=self._headers(representation=True, single=True),
        )
        return response.json()

    async def update(self, table: str, row_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request(
            "PATCH",
            table,
            params={"select": "*", "id": _format_filter(row_id)},
            json=values,
            headers=self._headers(representation=True, single=True),
        )
        return response.json()

    async def delete(self, table: str, row_id: str) -> None:
        await self._request(
            "DELETE",
            table,
            params={"id": _format_filter(row_id)},
            headers=self._headers(),
        )
