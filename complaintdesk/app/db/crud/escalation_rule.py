"""Escalation rule CRUD operations."""
from typing import Any, Dict, List

from complaintdesk.app.core.utils import utc_now_iso
from complaintdesk.app.db.client import SupabaseClient
from complaintdesk.app.rate_limit import rate_limited

TABLE = "escalation_rules"


@rate_limited("read")
async def get_escalation_rules(client: SupabaseClient) -> List[Dict[str, Any]]:
    """Get all escalation rules, newest first."""
    return await client.select(TABLE)


@rate_limited("write")
async def create_escalation_rule(
    client: SupabaseClient,
    rule: Dict[str, Any],
) -> Dict[str, Any]:
    """Create a new escalation rule.

    Args:
        client: Backend client
        rule: category, priority, hours_threshold, escalate_to and is_active

    Returns:
        The created rule row
    """
    return await client.insert(TABLE, rule)


@rate_limited("write")
async def update_escalation_rule(
    client: SupabaseClient,
    rule_id: str,
    updates: Dict[str, Any],
) -> Dict[str, Any]:
    return await client.update(TABLE, rule_id, {**updates, "updated_at": utc_now_iso()})


@rate_limited("write")
async def delete_escalation_rule(client: SupabaseClient, rule_id: str) -> None:
    await client.delete(TABLE, rule_id)


@rate_limited("write")
async def toggle_escalation_rule(
    client: SupabaseClient,
    rule_id: str,
    is_active: bool,
) -> Dict[str, Any]:
    """Enable or disable an escalation rule."""
    return await update_escalation_rule.__wrapped__(client, rule_id, {"is_active": is_active})
