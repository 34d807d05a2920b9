"""Rule-based task extraction from meeting transcripts (no external APIs).

Each transcript line is run through an ordered table of :class:`ExtractionRule`
entries; the first rule that produces a task wins for that line. Bullet lines
are matched separately against the whole transcript.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date

from task_pipeline.extraction.dates import resolve_due_date
from task_pipeline.extraction.models import CandidateTask, Priority
from task_pipeline.extraction.segmenter import segment_transcript

FALLBACK_TITLE = "Review meeting notes"
FALLBACK_DESCRIPTION_CHARS = 200
MIN_BULLET_CHARS = 10

# Lines that never become tasks: greetings, acknowledgements, status-only remarks.
_FILLER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"^(hi|hello|hey|morning|good morning|thanks|thank you|yeah|yep|yes|sure|"
        r"okay|ok|noted|will do|all clear|all good|looks good|sounds good|fine|"
        r"great|perfect|alright|bye)[.!,]?$",
        re.IGNORECASE,
    ),
    re.compile(r"^no blockers?\b", re.IGNORECASE),
    re.compile(r"^(all )?on track\b", re.IGNORECASE),
    re.compile(r"^(thanks|thank you),? everyone\b", re.IGNORECASE),
    re.compile(r"^let'?s (begin|get started|start)\b", re.IGNORECASE),
    re.compile(r"^meeting (ended|adjourned)\b", re.IGNORECASE),
]

_HIGH_PRIORITY_RE = re.compile(
    r"\b(urgent|asap|critical|high priority|immediately|blocker|blocking)\b", re.IGNORECASE
)
_LOW_PRIORITY_RE = re.compile(
    r"\b(low priority|when possible|nice to have|if time permits)\b", re.IGNORECASE
)

# Capitalised words that open sentences but never name a person.
_NOT_NAMES = frozenset(
    {
        "I", "We", "You", "They", "He", "She", "It", "This", "That", "There",
        "Someone", "Somebody", "Everyone", "Everybody", "Nobody", "Anyone",
        "Who", "What", "Okay", "Ok", "So", "And", "But", "Then", "Also",
        "Please", "Maybe", "Team", "The", "Need", "Remember", "Just",
    }
)

_NAME = r"\b(?P<name>[A-Z][a-z]+)"
_BULLET_RE = re.compile(r"^[ \t]*[-*•][ \t]+(?P<text>.+?)[ \t]*$", re.MULTILINE)
_BULLET_ASSIGNMENT_RE = re.compile(
    rf"^{_NAME}\s+(?i:to|will|needs?\s+to|should)\s+(?P<rest>.+)$"
)


@dataclass
class LineContext:
    """What a rule can see when it fires on one line."""

    line: str
    today: date
    speaker: str | None = None


@dataclass(frozen=True)
class ExtractionRule:
    """One entry of the pattern bank: a regex plus the builder for its match."""

    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str], LineContext], CandidateTask | None]


def detect_priority(text: str) -> Priority | None:
    """Return a priority hint from urgency keywords, or ``None``."""
    if _HIGH_PRIORITY_RE.search(text):
        return Priority.HIGH
    if _LOW_PRIORITY_RE.search(text):
        return Priority.LOW
    return None


def is_filler(line: str) -> bool:
    stripped = line.strip()
    return any(p.search(stripped) for p in _FILLER_PATTERNS)


def _clean_title(text: str) -> str:
    return re.sub(r"[\s.?!]+$", "", text.strip())


def _task(
    title: str,
    ctx: LineContext,
    *,
    assignee: str | None = None,
    inferred: bool = False,
) -> CandidateTask | None:
    title = _clean_title(title)
    if not title:
        return None
    priority = detect_priority(ctx.line)
    return CandidateTask(
        title=title,
        description=f'Extracted from: "{ctx.line}"',
        assignee=assignee,
        due_date=resolve_due_date(ctx.line, ctx.today),
        priority=priority.value if priority else None,
        source_text=ctx.line,
        inferred=inferred,
    )


def _named(match: re.Match[str]) -> str | None:
    name = match.group("name")
    return None if name in _NOT_NAMES else name


def _self_commitment(match: re.Match[str], ctx: LineContext) -> CandidateTask | None:
    if not ctx.speaker:
        return None
    return _task(match.group("rest"), ctx, assignee=ctx.speaker)


def _named_assignment(inferred: bool = False) -> Callable[[re.Match[str], LineContext], CandidateTask | None]:
    def build(match: re.Match[str], ctx: LineContext) -> CandidateTask | None:
        name = _named(match)
        if name is None:
            return None
        return _task(match.group("rest"), ctx, assignee=name, inferred=inferred)

    return build


def _open_question(match: re.Match[str], ctx: LineContext) -> CandidateTask | None:
    return _task(f"{match.group('verb')} {match.group('rest')}", ctx, inferred=True)


def _unassigned(match: re.Match[str], ctx: LineContext) -> CandidateTask | None:
    rest = re.sub(r"^to\s+", "", match.group("rest"), flags=re.IGNORECASE)
    return _task(rest, ctx, inferred=True)


RULES: list[ExtractionRule] = [
    ExtractionRule(
        "self_commitment",
        re.compile(r"^I(?:\s+(?:can|will)|'ll)\s+(?P<rest>.+)$", re.IGNORECASE),
        _self_commitment,
    ),
    ExtractionRule(
        "question_assignment",
        re.compile(rf"{_NAME},\s+(?i:after\s+[^,]+,\s+)?(?i:can\s+you)\s+(?P<rest>.+?)\?"),
        _named_assignment(inferred=True),
    ),
    ExtractionRule(
        "open_question",
        re.compile(r"\bwho'?s\s+(?P<verb>doing|updating|handling)\s+(?P<rest>.+?)\?", re.IGNORECASE),
        _open_question,
    ),
    ExtractionRule(
        "we_need",
        re.compile(r"\bwe\s+need\s+(?P<rest>.+?)\.", re.IGNORECASE),
        _unassigned,
    ),
    ExtractionRule(
        "deadline_assignment",
        re.compile(rf"{_NAME}\s+(?i:to)\s+(?P<rest>.+?)\s+(?i:by)\s+(?P<deadline>\w+)"),
        _named_assignment(),
    ),
    ExtractionRule(
        "future_commitment",
        re.compile(rf"{_NAME}\s+(?i:will)\s+(?P<rest>.+)"),
        _named_assignment(),
    ),
    ExtractionRule(
        "obligation",
        re.compile(rf"{_NAME}\s+(?i:needs?\s+to)\s+(?P<rest>.+)"),
        _named_assignment(),
    ),
    ExtractionRule(
        "reported_commitment",
        re.compile(
            rf"{_NAME}\s+(?i:mentioned|said)\s+(?i:he|she|they)"
            r"(?:\s+(?i:will|needs?\s+to)|'ll)\s+(?P<rest>.+)"
        ),
        _named_assignment(),
    ),
    ExtractionRule(
        "delegated_instruction",
        re.compile(r"\b(?i:told|asked)\s+(?P<name>[A-Z][a-z]+)\s+(?i:to)\s+(?P<rest>.+)"),
        _named_assignment(),
    ),
    ExtractionRule(
        "explicit_label",
        re.compile(rf"{_NAME},\s+(?i:this\s+is\s+your\s+task)\s*[-:–—]?\s*(?P<rest>.+)"),
        _named_assignment(),
    ),
    ExtractionRule(
        "unassigned_mandate",
        re.compile(r"\bsomeone\s+should\s+(?P<rest>.+)", re.IGNORECASE),
        _unassigned,
    ),
]


def _normalize_quotes(line: str) -> str:
    return line.replace("‘", "'").replace("’", "'").replace("“", '"').replace("”", '"')


def _candidate_matches(pattern: re.Pattern[str], line: str) -> Iterator[re.Match[str]]:
    # Restart one character past each rejected match so a later name on the
    # same line ("Everyone will join, and Priya will ...") still gets a turn.
    pos = 0
    while (match := pattern.search(line, pos)) is not None:
        yield match
        pos = match.start() + 1


def apply_rules(line: str, today: date, speaker: str | None = None) -> CandidateTask | None:
    """Run *line* through :data:`RULES`; return the first task produced, if any.

    The deadline is resolved against the whole line, so a date phrase
    anywhere on it is picked up regardless of which rule fired.
    """
    ctx = LineContext(line=_normalize_quotes(line.strip()), today=today, speaker=speaker)
    if not ctx.line or is_filler(ctx.line):
        return None

    for rule in RULES:
        for match in _candidate_matches(rule.pattern, ctx.line):
            task = rule.build(match, ctx)
            if task is not None:
                return task
    return None


def _bullet_tasks(transcript: str, today: date) -> list[CandidateTask]:
    tasks: list[CandidateTask] = []
    for match in _BULLET_RE.finditer(transcript):
        text = _normalize_quotes(match.group("text"))
        if is_filler(text):
            continue
        ctx = LineContext(line=text, today=today)

        assignment = _BULLET_ASSIGNMENT_RE.match(text)
        task = _named_assignment()(assignment, ctx) if assignment else None
        if task is None and len(text) > MIN_BULLET_CHARS:
            task = _task(text, ctx)
        if task is not None:
            tasks.append(task)
    return tasks


def extract_heuristic(transcript: str, today: date) -> list[CandidateTask]:
    """Extract candidate tasks from *transcript* using the rule bank.

    Turns are processed in document order. A speaker header or attributed
    line sets the active speaker used by first-person commitments ("I will
    ...") on the lines that follow it. Bullet lines are then matched on
    their own. Never fails: when nothing matches, a single low-priority
    "Review meeting notes" task is returned.

    Args:
        transcript: Raw meeting transcript.
        today: Anchor date for relative deadlines.

    Returns:
        Candidate tasks in the order they were found (not de-duplicated).
    """
    tasks: list[CandidateTask] = []
    active_speaker: str | None = None

    for turn in segment_transcript(transcript):
        if turn.speaker:
            active_speaker = turn.speaker
        task = apply_rules(turn.text, today, speaker=turn.speaker or active_speaker)
        if task is not None:
            tasks.append(task)

    tasks.extend(_bullet_tasks(transcript, today))

    if not tasks:
        tasks.append(
            CandidateTask(
                title=FALLBACK_TITLE,
                description=transcript[:FALLBACK_DESCRIPTION_CHARS],
                priority=Priority.LOW.value,
            )
        )
    return tasks
