"""Generative task extraction: prompt a completion service and parse its JSON."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import date
from typing import Any

from task_pipeline.extraction.completion import CompletionClient, CompletionRequest
from task_pipeline.extraction.errors import ExternalServiceError, MalformedResponseError
from task_pipeline.extraction.json_repair import recover_json
from task_pipeline.extraction.models import CandidateTask, Priority, RosterMember
from task_pipeline.extraction.normalizer import coerce_priority

logger = logging.getLogger(__name__)

OPTIONAL_PREFIX = "(optional)"

_OPTIONAL_WORDING_RE = re.compile(
    r"\b(optional|nice to have|if possible|later|future)\b", re.IGNORECASE
)
_OPTIONAL_LABEL_RE = re.compile(r"^optional\s*[:-]\s*", re.IGNORECASE)

EXTRACTION_PROMPT = """\
You are a JSON-only API. Extract actionable tasks from the meeting transcript below.

Return ONLY a JSON object with this exact structure (no text before or after):
{{"tasks":[{{"title":"Actionable task title","description":"Context from the meeting","assignee":"Name or null","priority":"high|medium|low","dueDate":"YYYY-MM-DD or null","optional":false,"inferred":false,"confidence":"high|medium|low","sourceText":"Exact quote from the transcript"}}]}}

Rules:
1. Assignments: "John, can you X?", "told John to X", "John to X by Friday" -> assignee "John".
2. Commitments: if a speaker says "I will X" or "I'll X", assign X to that speaker.
3. Deadlines: convert explicit dates and relative phrases ("tomorrow", "EOD",
   "by March 6") to YYYY-MM-DD assuming today is {today}. Otherwise null.
4. Implied tasks: suggestions ("someone should..."), open questions ("who's
   handling...?") or problems ("the docs are outdated") -> create the task,
   set "inferred": true and quote the evidence in "sourceText".
5. Priority: urgent / blocking / ASAP -> "high"; standard work -> "medium";
   nice to have / if time permits -> "low".
6. Optional work ("optional", "if possible", "later") -> "optional": true.
7. Skip greetings, status updates, past-tense reports and anything with no action."""

ROSTER_CONTEXT = """

Available Team Members for Assignment: [{names}]
IMPORTANT: Try to assign tasks to these specific members if their names (or variations) appear in the text."""


def _member_label(member: RosterMember) -> str | None:
    return member.full_name or member.display_name or member.username


def build_extraction_prompt(
    transcript: str,
    today: date,
    roster: Sequence[RosterMember] = (),
) -> str:
    """Assemble instructions, optional roster context and the transcript."""
    prompt = EXTRACTION_PROMPT.format(today=today.isoformat())

    names = [label for label in (_member_label(m) for m in roster) if label]
    if names:
        prompt += ROSTER_CONTEXT.format(names=", ".join(names))

    return f"{prompt}\n\nMeeting transcript:\n{transcript}"


def _optional_title(title: str) -> str:
    if title.lower().startswith(OPTIONAL_PREFIX):
        return title
    return f"{OPTIONAL_PREFIX} {_OPTIONAL_LABEL_RE.sub('', title).strip()}"


def _to_candidate(item: dict[str, Any]) -> CandidateTask:
    title = str(item.get("title") or "Untitled task").strip()
    optional = item.get("optional") is True or bool(_OPTIONAL_WORDING_RE.search(title))
    if optional:
        title = _optional_title(title)

    priority = coerce_priority(item.get("priority"))
    if priority is None and optional:
        priority = Priority.LOW

    assignee = item.get("assignee")
    description = item.get("description")
    source_text = item.get("sourceText") or item.get("source_text")
    return CandidateTask(
        title=title,
        description=str(description).strip() if description else "Extracted from meeting transcript",
        assignee=str(assignee).strip() if assignee else None,
        due_date=item.get("dueDate") or item.get("due_date"),
        priority=priority.value if priority else None,
        confidence=item.get("confidence"),
        source_text=str(source_text).strip() if source_text else None,
        inferred=item.get("inferred") is True,
        optional=optional,
    )


def parse_model_response(raw: str) -> list[CandidateTask]:
    """Turn raw completion text into candidate tasks.

    Raises:
        MalformedResponseError: If no JSON can be recovered or it has no task list.
    """
    parsed = recover_json(raw)

    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict):
        items = parsed.get("tasks") or []
    else:
        items = None

    if not isinstance(items, list):
        logger.error("Model JSON has no task list:\n%s", raw)
        raise MalformedResponseError("Model response has no task list", raw_text=raw)

    return [_to_candidate(item) for item in items if isinstance(item, dict)]


class ModelExtractor:
    """Extract candidate tasks by prompting an injected completion client."""

    def __init__(
        self,
        client: CompletionClient,
        temperature: float = 0.2,
        max_output_tokens: int = 8192,
    ) -> None:
        self.client = client
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @property
    def model_name(self) -> str:
        return self.client.model_name

    def extract(
        self,
        transcript: str,
        today: date,
        roster: Sequence[RosterMember] = (),
    ) -> list[CandidateTask]:
        """Prompt the completion service and parse its answer.

        Args:
            transcript: Raw meeting transcript.
            today: Anchor date written into the prompt.
            roster: Team members whose names are offered as assignees.

        Returns:
            Candidate tasks, all from the single model response.

        Raises:
            ExternalServiceError: The completion service failed or returned nothing.
            MalformedResponseError: The response held no recoverable JSON.
        """
        request = CompletionRequest(
            prompt=build_extraction_prompt(transcript, today, roster),
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
        raw = self.client.complete(request)
        if not raw or not raw.strip():
            raise ExternalServiceError(f"{self.model_name} returned no text")
        logger.debug("Model response length: %d chars", len(raw))

        tasks = parse_model_response(raw)
        logger.info("Model %s extracted %d tasks", self.model_name, len(tasks))
        return tasks
