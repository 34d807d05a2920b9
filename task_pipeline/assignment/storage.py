"""Supabase helpers: read a team roster, persist resolved tasks."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, cast

from supabase import Client, create_client

from task_pipeline.assignment.resolver import REASON_NOTES, TaskRecord
from task_pipeline.config import settings
from task_pipeline.extraction.models import MembershipStatus, RosterMember

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """Create and return a Supabase client from settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


def _status(value: Any) -> MembershipStatus:
    try:
        return MembershipStatus(str(value).lower())
    except ValueError:
        # Unknown states count as inactive.
        return MembershipStatus.REJECTED


def fetch_roster(client: Client, team_id: str) -> list[RosterMember]:
    """Load the members of *team_id* with their profile names."""
    members_result = (
        client.table("team_members")
        .select("user_id, name, status")
        .eq("team_id", team_id)
        .execute()
    )
    members = cast(list[dict[str, Any]], members_result.data)
    if not members:
        return []

    user_ids = [m["user_id"] for m in members]
    profiles_result = (
        client.table("user_profiles")
        .select("id, username, full_name")
        .in_("id", user_ids)
        .execute()
    )
    profiles = {p["id"]: p for p in cast(list[dict[str, Any]], profiles_result.data)}

    roster: list[RosterMember] = []
    for m in members:
        profile = profiles.get(m["user_id"], {})
        roster.append(
            RosterMember(
                id=m["user_id"],
                membership_status=_status(m.get("status")),
                username=profile.get("username"),
                full_name=profile.get("full_name"),
                display_name=m.get("name"),
            )
        )
    return roster


def fetch_team_owner(client: Client, team_id: str) -> str | None:
    result = client.table("teams").select("created_by").eq("id", team_id).execute()
    rows = cast(list[dict[str, Any]], result.data)
    return rows[0].get("created_by") if rows else None


def task_record_to_row(record: TaskRecord, team_id: str, assigned_by: str) -> dict[str, Any]:
    task, disposition = record.task, record.disposition
    reason = disposition.unassigned_reason
    return {
        "team_id": team_id,
        "title": task.title,
        "description": task.description or task.title,
        "assigned_to": disposition.resolved_member_id,
        "assigned_to_name": disposition.resolved_display_name,
        "assigned_by": assigned_by,
        "priority": task.priority.value,
        "due_date": task.due_date,
        "status": "pending",
        "unassigned_reason_code": reason.value if reason else None,
        "unassigned_reason": REASON_NOTES[reason] if reason else None,
    }


def store_task_records(
    client: Client,
    team_id: str,
    assigned_by: str,
    records: Sequence[TaskRecord],
) -> list[dict[str, Any]]:
    """Insert task rows (batched by 50) and return the stored rows."""
    if not records:
        return []

    rows = [task_record_to_row(r, team_id, assigned_by) for r in records]

    stored: list[dict[str, Any]] = []
    batch_size = 50
    for i in range(0, len(rows), batch_size):
        result = client.table("tasks").insert(rows[i : i + batch_size]).execute()
        stored.extend(cast(list[dict[str, Any]], result.data))

    logger.info("Stored %d tasks for team %s", len(stored), team_id)
    return stored
