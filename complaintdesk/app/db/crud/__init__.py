"""CRUD operations package.

Every function takes a SupabaseClient first and is rate limited: reads
under the "read" class, mutations under "write".

- analytics.py: Dashboard analytics
- announcement.py: Announcement operations
- escalation_rule.py: Escalation rule operations
- template.py: Complaint template operations
- user.py: User operations
"""

# Analytics
from complaintdesk.app.db.crud.analytics import get_analytics_data

# Announcement operations
from complaintdesk.app.db.crud.announcement import (
    create_announcement,
    get_announcements,
    get_announcement_by_id,
    update_announcement,
    delete_announcement,
    get_recent_announcements,
)

# Escalation rule operations
from complaintdesk.app.db.crud.escalation_rule import (
    get_escalation_rules,
    create_escalation_rule,
    update_escalation_rule,
    delete_escalation_rule,
    toggle_escalation_rule,
)

# Template operations
from complaintdesk.app.db.crud.template import (
    get_templates,
    get_template_by_id,
    create_template,
    update_template,
    delete_template,
    toggle_template_active,
)

# User operations
from complaintdesk.app.db.crud.user import (
    USER_ROLES,
    get_all_users,
    get_user_by_id,
    update_user_role,
)

__all__ = [
    "get_analytics_data",
    "create_announcement",
    "get_announcements",
    "get_announcement_by_id",
    "update_announcement",
    "delete_announcement",
    "get_recent_announcements",
    "get_escalation_rules",
    "create_escalation_rule",
    "update_escalation_rule",
    "delete_escalation_rule",
    "toggle_escalation_rule",
    "get_templates",
    "get_template_by_id",
    "create_template",
    "update_template",
    "delete_template",
    "toggle_template_active",
    "USER_ROLES",
    "get_all_users",
    "get_user_by_id",
    "update_user_role",
]
