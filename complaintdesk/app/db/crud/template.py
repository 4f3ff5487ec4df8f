"""Complaint template CRUD operations."""
from typing import Any, Dict, List, Optional

from complaintdesk.app.core.utils import utc_now_iso
from complaintdesk.app.db.client import SupabaseClient
from complaintdesk.app.rate_limit import rate_limited

TABLE = "complaint_templates"


@rate_limited("read")
async def get_templates(
    client: SupabaseClient,
    is_active: Optional[bool] = None,
    created_by: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Get complaint templates, newest first.

    Args:
        client: Backend client
        is_active: Filter on the active flag when given
        created_by: Only templates authored by this user

    Returns:
        List of template rows
    """
    filters: Dict[str, Any] = {}
    if is_active is not None:
        filters["is_active"] = is_active
    if created_by:
        filters["created_by"] = created_by
    return await client.select(TABLE, filters=filters)


@rate_limited("read")
async def get_template_by_id(
    client: SupabaseClient,
    template_id: str,
) -> Optional[Dict[str, Any]]:
    return await client.select_one(TABLE, template_id)


@rate_limited("write")
async def create_template(
    client: SupabaseClient,
    template: Dict[str, Any],
) -> Dict[str, Any]:
    return await client.insert(TABLE, template)


@rate_limited("write")
async def update_template(
    client: SupabaseClient,
    template_id: str,
    updates: Dict[str, Any],
) -> Dict[str, Any]:
    return await client.update(TABLE, template_id, {**updates, "updated_at": utc_now_iso()})


@rate_limited("write")
async def delete_template(client: SupabaseClient, template_id: str) -> None:
    await client.delete(TABLE, template_id)


@rate_limited("write")
async def toggle_template_active(
    client: SupabaseClient,
    template_id: str,
    is_active: bool,
) -> Dict[str, Any]:
    return await update_template.__wrapped__(client, template_id, {"is_active": is_active})
