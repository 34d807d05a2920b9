"""Match task assignee hints to a team roster and decide the disposition."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from task_pipeline.extraction.models import (
    AssignmentDisposition,
    ExtractedTask,
    MembershipStatus,
    RosterMember,
    UnassignedReason,
)

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

# Stored alongside the reason code in the tasks table.
REASON_NOTES: dict[UnassignedReason, str] = {
    UnassignedReason.NO_ASSIGNEE_SPECIFIED: "No assignee specified",
    UnassignedReason.NOT_A_TEAM_MEMBER: "User is not a member of this team",
    UnassignedReason.MEMBERSHIP_NOT_ACTIVE: "Member status is not 'accepted' or 'pending'",
}


@dataclass
class TaskRecord:
    """A task paired with its assignment outcome, ready to persist."""

    task: ExtractedTask
    disposition: AssignmentDisposition


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value.strip()))


def match_member(hint: str, roster: Sequence[RosterMember]) -> RosterMember | None:
    """Find the first member whose username, full name or display name matches.

    Matching is a case-insensitive substring test in either direction
    ("eva" matches "Eva Martinez", "Eva Martinez" matches "eva").
    """
    needle = hint.strip().lower()
    if not needle:
        return None

    for member in roster:
        for field_value in (member.username, member.full_name, member.display_name):
            if not field_value:
                continue
            value = field_value.strip().lower()
            if value and (needle in value or value in needle):
                return member
    return None


def _display_name(member: RosterMember) -> str | None:
    return member.full_name or member.username or member.display_name


def resolve_assignee(
    task: ExtractedTask,
    roster: Sequence[RosterMember],
    owner_id: str | None = None,
) -> AssignmentDisposition:
    """Compute the assignment disposition for *task* against *roster*.

    A candidate member id is taken from, in order: the id a reviewer already
    attached to the task, the assignee itself when it is a UUID, or the first
    roster member matched by name. The candidate is then checked against the
    roster; *owner_id* (the team owner) is always accepted.

    Never raises. Returns either a resolved member or exactly one reason.
    """
    hint = (task.assignee or "").strip()
    if not task.member_id and not hint:
        return AssignmentDisposition(unassigned_reason=UnassignedReason.NO_ASSIGNEE_SPECIFIED)

    member: RosterMember | None = None
    if task.member_id:
        candidate_id = task.member_id
    elif is_uuid(hint):
        candidate_id = hint
    else:
        member = match_member(hint, roster)
        candidate_id = member.id if member else None

    if member is None and candidate_id is not None:
        member = next((m for m in roster if m.id == candidate_id), None)

    if candidate_id is not None and candidate_id == owner_id:
        name = _display_name(member) if member else None
        return AssignmentDisposition(
            resolved_member_id=candidate_id,
            resolved_display_name=name or hint or None,
        )

    if member is None:
        return AssignmentDisposition(unassigned_reason=UnassignedReason.NOT_A_TEAM_MEMBER)

    if not MembershipStatus(member.membership_status).is_active:
        return AssignmentDisposition(unassigned_reason=UnassignedReason.MEMBERSHIP_NOT_ACTIVE)

    return AssignmentDisposition(
        resolved_member_id=member.id,
        resolved_display_name=_display_name(member) or hint or None,
    )


def build_task_records(
    tasks: Sequence[ExtractedTask],
    roster: Sequence[RosterMember],
    owner_id: str | None = None,
) -> list[TaskRecord]:
    """Resolve every task against the same read-only roster."""
    return [TaskRecord(task=t, disposition=resolve_assignee(t, roster, owner_id)) for t in tasks]
