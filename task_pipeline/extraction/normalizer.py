"""Coerce extractor output into the canonical ExtractedTask shape."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from task_pipeline.extraction.models import CandidateTask, Confidence, ExtractedTask, Priority

UNTITLED = "Untitled task"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _text(value: Any) -> str | None:
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def coerce_priority(value: Any) -> Priority | None:
    """Map a raw priority value onto :class:`Priority`; ``None`` if unrecognised."""
    if isinstance(value, Priority):
        return value
    text = _text(value)
    if text is None:
        return None
    try:
        return Priority(text.lower())
    except ValueError:
        return None


def coerce_confidence(value: Any) -> Confidence | None:
    """Map a label or a 0-1 score onto :class:`Confidence`."""
    if isinstance(value, Confidence):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        if value >= 0.8:
            return Confidence.HIGH
        if value >= 0.5:
            return Confidence.MEDIUM
        return Confidence.LOW
    text = _text(value)
    if text is None:
        return None
    try:
        return Confidence(text.lower())
    except ValueError:
        return None


def _fields(task: CandidateTask | ExtractedTask | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(task, Mapping):
        return dict(task)
    return dict(vars(task))


def normalize_task(task: CandidateTask | ExtractedTask | Mapping[str, Any]) -> ExtractedTask:
    """Validate and coerce *task* into an :class:`ExtractedTask`.

    Never raises. Missing titles become ``"Untitled task"``, unknown
    priorities fall back to ``medium`` (``low`` for optional tasks), due
    dates that are not strict ``YYYY-MM-DD`` are dropped, and confidence
    defaults to ``medium`` for inferred tasks and ``high`` otherwise.
    Applying it twice gives the same result as applying it once.
    """
    raw = _fields(task)

    optional = raw.get("optional") is True
    inferred = raw.get("inferred") is True

    priority = coerce_priority(raw.get("priority"))
    if priority is None:
        priority = Priority.LOW if optional else Priority.MEDIUM

    confidence = coerce_confidence(raw.get("confidence"))
    if confidence is None:
        confidence = Confidence.MEDIUM if inferred else Confidence.HIGH

    due_date = _text(raw.get("due_date"))
    if due_date is not None and not _ISO_DATE_RE.match(due_date):
        due_date = None

    return ExtractedTask(
        title=_text(raw.get("title")) or UNTITLED,
        description=_text(raw.get("description")) or "",
        assignee=_text(raw.get("assignee")),
        priority=priority,
        due_date=due_date,
        optional=optional,
        inferred=inferred,
        confidence=confidence,
        source_text=_text(raw.get("source_text")),
        member_id=_text(raw.get("member_id")),
    )


def normalize_tasks(tasks: list[CandidateTask]) -> list[ExtractedTask]:
    return [normalize_task(t) for t in tasks]
