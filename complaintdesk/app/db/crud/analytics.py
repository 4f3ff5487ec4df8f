"""Complaint analytics for the admin dashboard.

One call reads the complaints, ratings and lecturers for a period and
aggregates them locally, so it spends a single "read" token however many
backend queries it makes.
"""
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from complaintdesk.app.db.client import SupabaseClient
from complaintdesk.app.rate_limit import rate_limited

COMPLAINT_COLUMNS = "id,status,category,priority,created_at,resolved_at,assigned_to,is_draft"

# (value, label) in display order; "reopened" is counted but not reported
STATUSES = (
    ("new", "New"),
    ("opened", "Opened"),
    ("in_progress", "In Progress"),
    ("resolved", "Resolved"),
    ("closed", "Closed"),
)
PRIORITIES = (
    ("critical", "Critical"),
    ("high", "High"),
    ("medium", "Medium"),
    ("low", "Low"),
)
RESOLVED_STATUSES = ("resolved", "closed")
ACTIVE_STATUSES = ("new", "opened", "in_progress")

OVER_TIME_POINTS = 14
TOP_TYPES = 5


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _percentage(count: int, total: int) -> int:
    return _round_half_up(count / total * 100) if total else 0


def _category_label(category: str) -> str:
    return category[:1].upper() + category[1:].replace("_", " ", 1)


def _day_label(created_at: str) -> str:
    day = datetime.fromisoformat(created_at)
    return f"{day:%b} {day.day}"


def _distribution(
    counts: Counter, choices: tuple, key: str, total: int
) -> List[Dict[str, Any]]:
    return [
        {key: label, "count": counts[value], "percentage": _percentage(counts[value], total)}
        for value, label in choices
    ]


@rate_limited("read")
async def get_analytics_data(client: SupabaseClient, days: int = 30) -> Dict[str, Any]:
    """Aggregate complaint statistics for the last ``days`` days.

    Draft complaints are excluded. Percentages are whole numbers rounded
    half up; the resolution rate counts resolved and closed complaints.

    Args:
        client: Backend client
        days: Length of the reporting period ending now

    Returns:
        Dict with ``time_period``, ``key_metrics``, distributions by status,
        category and priority, ``complaints_over_time`` (one point per day,
        most recent 14), ``lecturer_performance`` and ``top_complaint_types``
    """
    since = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

    complaints = await client.select(
        "complaints",
        columns=COMPLAINT_COLUMNS,
        filters={"is_draft": False},
        since={"created_at": since},
        ascending=True,
    )
    ratings = await client.select(
        "complaint_ratings", columns="rating", since={"created_at": since}, order=None
    )
    lecturers = await client.select(
        "users", columns="id,full_name", filters={"role": "lecturer"}, order=None
    )

    total = len(complaints)
    by_status = Counter(c.get("status") for c in complaints)
    by_priority = Counter(c.get("priority") for c in complaints)
    by_category = Counter(c.get("category") for c in complaints if c.get("category"))

    complaints_by_category = [
        {
            "category": _category_label(category),
            "count": count,
            "percentage": _percentage(count, total),
        }
        for category, count in by_category.most_common()
    ]

    per_day = Counter(_day_label(c["created_at"]) for c in complaints if c.get("created_at"))
    complaints_over_time = [
        {"date": day, "count": count, "label": day} for day, count in per_day.items()
    ][-OVER_TIME_POINTS:]

    resolved = sum(by_status[status] for status in RESOLVED_STATUSES)
    active = sum(by_status[status] for status in ACTIVE_STATUSES)

    scores = [float(r["rating"]) for r in ratings if r.get("rating") is not None]
    satisfaction = _round_half_up(sum(scores) / len(scores) * 10) / 10 if scores else 0

    lecturer_performance = []
    for lecturer in lecturers:
        assigned = [c for c in complaints if c.get("assigned_to") == lecturer["id"]]
        if not assigned:
            continue
        closed = sum(1 for c in assigned if c.get("status") in RESOLVED_STATUSES)
        lecturer_performance.append({
            "id": lecturer["id"],
            "name": lecturer.get("full_name") or "Unknown",
            "complaints_handled": len(assigned),
            "resolution_rate": _percentage(closed, len(assigned)),
        })

    return {
        "time_period": f"Last {days} days",
        "key_metrics": {
            "total_complaints": total,
            "resolution_rate": _percentage(resolved, total),
            "active_cases": active,
            "satisfaction_rating": satisfaction,
        },
        "complaints_by_status": _distribution(by_status, STATUSES, "status", total),
        "complaints_by_category": complaints_by_category,
        "complaints_by_priority": _distribution(by_priority, PRIORITIES, "priority", total),
        "complaints_over_time": complaints_over_time,
        "lecturer_performance": lecturer_performance,
        "top_complaint_types": [
            {"type": row["category"], "count": row["count"]}
            for row in complaints_by_category[:TOP_TYPES]
        ],
    }
