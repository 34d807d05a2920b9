"""Recover a JSON payload from free-form model output.

Recovery is a fixed sequence: strip a code fence, locate candidate JSON spans,
try to parse each, and on failure apply the textual repairs in
:data:`REPAIRS` once before parsing again. Each repair is idempotent.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from task_pipeline.extraction.errors import MalformedResponseError

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_PREAMBLE_RE = re.compile(
    r"\b(?:here'?s|here is|response|output|result)\b[^{]*?(\{[\s\S]*\})", re.IGNORECASE
)
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_ADJACENT_OBJECTS_RE = re.compile(r"\}(\s*)\{")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json / ``` fence and its closing fence."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    return _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", stripped))


def find_json_candidates(text: str) -> list[str]:
    """Return the spans of *text* that may hold the JSON payload, best first.

    A bare top-level array (``[{...}, ...]``) is returned whole. Otherwise the
    outermost ``{...}`` span comes first. When the prose before the payload
    has braces of its own ("I found {3} tasks. Here's the JSON: {...}") that
    span does not parse, so the object following the preamble is offered as
    a second choice.
    """
    if text.startswith("[") and text.endswith("]"):
        return [text]

    candidates: list[str] = []
    match = _OBJECT_RE.search(text)
    if match:
        candidates.append(match.group(0))
    preamble = _PREAMBLE_RE.search(text)
    if preamble and preamble.group(1) not in candidates:
        candidates.append(preamble.group(1))
    return candidates


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def insert_missing_commas(text: str) -> str:
    return _ADJACENT_OBJECTS_RE.sub("},\n{", text)


def truncate_to_last_array(text: str) -> str:
    """Cut everything after the last complete ``}]`` and close the object."""
    idx = text.rfind("}]")
    if idx == -1:
        return text
    if text.startswith("["):
        return text[: idx + 2]
    return text[: idx + 2] + "}"


REPAIRS: list[Callable[[str], str]] = [
    remove_trailing_commas,
    insert_missing_commas,
    truncate_to_last_array,
]


def repair_json(text: str) -> str:
    for repair in REPAIRS:
        text = repair(text)
    return text


def _parse_with_repair(candidate: str) -> Any:
    """Parse *candidate*, retrying exactly once after :func:`repair_json`."""
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("Initial JSON parse failed (%s); attempting repair", exc)

    parsed = json.loads(repair_json(candidate))
    logger.info("Model JSON repaired successfully")
    return parsed


def recover_json(raw: str) -> Any:
    """Parse the JSON embedded in *raw* model output.

    Candidates from :func:`find_json_candidates` are tried in order; the
    first one that parses (directly or after one round of repairs) wins.

    Raises:
        MalformedResponseError: If no JSON object can be located, or no
            candidate parses after repair. The full raw response is logged
            and attached to the exception.
    """
    candidates = find_json_candidates(strip_code_fence(raw))
    if not candidates:
        logger.error("No JSON object in model response (%d chars):\n%s", len(raw), raw)
        raise MalformedResponseError("No JSON found in model response", raw_text=raw)

    error: json.JSONDecodeError | None = None
    for candidate in candidates:
        try:
            return _parse_with_repair(candidate)
        except json.JSONDecodeError as exc:
            error = exc

    logger.error("JSON repair failed for model response (%d chars):\n%s", len(raw), raw)
    raise MalformedResponseError(
        "Invalid JSON in model response - unable to parse or repair", raw_text=raw
    ) from error
