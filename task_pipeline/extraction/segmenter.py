"""Split a raw transcript into ordered, optionally speaker-tagged turns."""

from __future__ import annotations

import re

from task_pipeline.extraction.models import Turn

_TIMESTAMP = r"\[?\d{1,2}:\d{2}(?::\d{2})?\]?"
_NAME = r"(?P<speaker>[A-Z][a-z]+(?:\s[A-Z][a-z]+)?)"
_ROLE = r"(?:\s*\([^)]*\))?"

# "[00:22] Seenu: text", "00:22 Priya (PM): text", "Mark: text"
_SPEAKER_LINE_RE = re.compile(
    rf"^(?:{_TIMESTAMP}\s*(?:[—–-]\s*)?)?{_NAME}{_ROLE}\s*:\s*(?P<text>.*)$"
)

# "00:00:23 — Mark" on its own line; the speech follows on the next lines.
_SPEAKER_HEADER_RE = re.compile(rf"^{_TIMESTAMP}\s*(?:[—–-]\s*)?{_NAME}{_ROLE}\s*$")


def segment_transcript(transcript: str) -> list[Turn]:
    """Segment *transcript* into one :class:`Turn` per non-empty line.

    A line that opens with an optional ``HH:MM[:SS]`` timestamp, a capitalised
    name, an optional parenthetical role and a colon starts a turn attributed
    to that speaker. A timestamped name with nothing after it is a speaker
    header and produces an attributed turn with empty text. Every other line
    is a continuation line with ``speaker=None``; continuation lines are not
    merged into the previous turn.

    ``order`` is the zero-based index among non-empty lines.
    """
    turns: list[Turn] = []
    lines = [line.strip() for line in transcript.splitlines()]

    for order, line in enumerate(line for line in lines if line):
        match = _SPEAKER_LINE_RE.match(line) or _SPEAKER_HEADER_RE.match(line)
        if match:
            text = match.groupdict().get("text") or ""
            turns.append(Turn(speaker=match.group("speaker"), text=text.strip(), order=order))
        else:
            turns.append(Turn(speaker=None, text=line, order=order))

    return turns
