"""Data models for transcript-to-task extraction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Confidence(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MembershipStatus(StrEnum):
    """Team membership states as stored by the roster store."""

    ACCEPTED = "accepted"
    PENDING = "pending"
    REJECTED = "rejected"

    @property
    def is_active(self) -> bool:
        return self in (MembershipStatus.ACCEPTED, MembershipStatus.PENDING)


class UnassignedReason(StrEnum):
    """Why a task could not be handed to a roster member."""

    NO_ASSIGNEE_SPECIFIED = "NO_ASSIGNEE_SPECIFIED"
    NOT_A_TEAM_MEMBER = "NOT_A_TEAM_MEMBER"
    MEMBERSHIP_NOT_ACTIVE = "MEMBERSHIP_NOT_ACTIVE"


@dataclass
class Turn:
    """One non-empty transcript line, optionally attributed to a speaker."""

    text: str
    order: int
    speaker: str | None = None


@dataclass
class CandidateTask:
    """An unvalidated task record as produced by an extractor.

    Fields are loose: the generative path copies whatever the
    model returned, and the normalizer coerces it into an ``ExtractedTask``.
    """

    title: str
    description: str = ""
    assignee: str | None = None
    due_date: str | None = None
    priority: str | None = None
    confidence: Any = None
    source_text: str | None = None
    inferred: bool = False
    optional: bool = False
    member_id: str | None = None


@dataclass
class ExtractedTask:
    """A validated task in canonical shape."""

    title: str
    description: str = ""
    assignee: str | None = None
    priority: Priority = Priority.MEDIUM
    due_date: str | None = None
    optional: bool = False
    inferred: bool = False
    confidence: Confidence = Confidence.HIGH
    source_text: str | None = None
    member_id: str | None = None  # set when a reviewer already picked a roster member


@dataclass
class RosterMember:
    """A person eligible for assignment on one team (read-only)."""

    id: str
    membership_status: MembershipStatus
    username: str | None = None
    full_name: str | None = None
    display_name: str | None = None


@dataclass
class AssignmentDisposition:
    """Outcome of matching a task's assignee hint against a roster.

    Exactly one of ``resolved_member_id`` / ``unassigned_reason`` is set.
    """

    resolved_member_id: str | None = None
    resolved_display_name: str | None = None
    unassigned_reason: UnassignedReason | None = None

    @property
    def is_assigned(self) -> bool:
        return self.resolved_member_id is not None


@dataclass
class ExtractionMetadata:
    processed_at: datetime
    model: str
    transcript_length: int = 0
    fallback_used: bool = False


@dataclass
class ExtractionResult:
    """Tasks from one transcript plus provenance metadata."""

    tasks: list[ExtractedTask]
    metadata: ExtractionMetadata
