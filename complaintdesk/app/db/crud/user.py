"""User CRUD operations (admin only; enforced by row-level security)."""
from typing import Any, Dict, List, Optional

from complaintdesk.app.core.utils import utc_now_iso
from complaintdesk.app.db.client import SupabaseClient
from complaintdesk.app.rate_limit import rate_limited

TABLE = "users"

USER_ROLES = ("student", "lecturer", "admin")


@rate_limited("read")
async def get_all_users(client: SupabaseClient) -> List[Dict[str, Any]]:
    return await client.select(TABLE)


@rate_limited("read")
async def get_user_by_id(client: SupabaseClient, user_id: str) -> Optional[Dict[str, Any]]:
    return await client.select_one(TABLE, user_id)


@rate_limited("write")
async def update_user_role(
    client: SupabaseClient,
    user_id: str,
    new_role: str,
) -> Dict[str, Any]:
    """Change a user's role.

    Args:
        client: Backend client
        user_id: User to update
        new_role: One of student, lecturer or admin

    Returns:
        The updated user row

    Raises:
        ValueError: If new_role is not a known role
    """
    if new_role not in USER_ROLES:
        raise ValueError(f"Invalid role {new_role!r}; expected one of: {', '.join(USER_ROLES)}")
    return await client.update(TABLE, user_id, {"role": new_role, "updated_at": utc_now_iso()})
