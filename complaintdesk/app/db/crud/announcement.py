"""Announcement CRUD operations.

Announcement notifications are created by a database trigger on insert.
"""
from typing import Any, Dict, List, Optional

from complaintdesk.app.core.utils import utc_now_iso
from complaintdesk.app.db.client import SupabaseClient
from complaintdesk.app.rate_limit import rate_limited

TABLE = "announcements"


@rate_limited("write")
async def create_announcement(
    client: SupabaseClient,
    announcement: Dict[str, Any],
) -> Dict[str, Any]:
    """Create a new announcement.

    Args:
        client: Backend client
        announcement: Row data without id, created_at or updated_at

    Returns:
        The created announcement row
    """
    return await client.insert(TABLE, announcement)


@rate_limited("read")
async def get_announcements(
    client: SupabaseClient,
    limit: Optional[int] = None,
    created_by: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Get announcements, newest first.

    Args:
        client: Backend client
        limit: Maximum number of rows to return
        created_by: Only announcements authored by this user

    Returns:
        List of announcement rows
    """
    filters = {"created_by": created_by} if created_by else None
    return await client.select(TABLE, filters=filters, limit=limit)


@rate_limited("read")
async def get_announcement_by_id(
    client: SupabaseClient,
    announcement_id: str,
) -> Optional[Dict[str, Any]]:
    return await client.select_one(TABLE, announcement_id)


@rate_limited("write")
async def update_announcement(
    client: SupabaseClient,
    announcement_id: str,
    updates: Dict[str, Any],
) -> Dict[str, Any]:
    """Update an announcement and stamp updated_at."""
    return await client.update(TABLE, announcement_id, {**updates, "updated_at": utc_now_iso()})


@rate_limited("write")
async def delete_announcement(client: SupabaseClient, announcement_id: str) -> None:
    await client.delete(TABLE, announcement_id)


@rate_limited("read")
async def get_recent_announcements(
    client: SupabaseClient,
    limit: int = 5,
) -> List[Dict[str, Any]]:
    """Get the most recent announcements for dashboard display."""
    return await get_announcements.__wrapped__(client, limit=limit)
