"""Extraction endpoint: turn pasted meeting notes into reviewable tasks."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from task_pipeline.api.models import ExtractMetadata, ExtractRequest, ExtractResponse, TaskPayload
from task_pipeline.assignment.storage import fetch_roster, get_supabase_client
from task_pipeline.config import settings
from task_pipeline.extraction.errors import ExternalServiceError, MalformedResponseError
from task_pipeline.extraction.extractor import extract_tasks
from task_pipeline.extraction.models import RosterMember
from task_pipeline.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/extract", response_model=ExtractResponse)
async def extract(request: ExtractRequest) -> ExtractResponse:
    """Extract tasks from meeting notes.

    When ``team_id`` is given, the team's roster is loaded from Supabase and
    offered to the model as candidate assignees.
    """
    notes = request.notes
    if not notes.strip() or len(notes) > settings.max_transcript_chars:
        raise HTTPException(
            status_code=400,
            detail=(
                "Notes field is required and must be non-empty "
                f"(max {settings.max_transcript_chars} characters)"
            ),
        )

    roster: list[RosterMember] = []
    if request.team_id:
        roster = fetch_roster(get_supabase_client(), request.team_id)

    config = PipelineConfig(
        mode=request.mode or settings.extraction_mode,
        provider=settings.llm_provider,
    )
    logger.info("Extracting tasks from %d characters (%s)", len(notes), config.mode)

    try:
        result = extract_tasks(notes, roster, config=config)
    except ExternalServiceError as exc:
        raise HTTPException(status_code=503, detail=f"LLM unavailable: {exc}") from exc
    except MalformedResponseError as exc:
        raise HTTPException(status_code=502, detail=f"Unusable LLM response: {exc}") from exc

    metadata = result.metadata
    return ExtractResponse(
        tasks=[TaskPayload(**vars(task)) for task in result.tasks],
        metadata=ExtractMetadata(
            processed_at=metadata.processed_at,
            model=metadata.model,
            transcript_length=metadata.transcript_length,
            fallback_used=metadata.fallback_used,
        ),
    )
