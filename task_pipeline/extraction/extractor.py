"""Single entry point: transcript (+ roster) -> normalized task list with metadata."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime

from task_pipeline.config import settings
from task_pipeline.extraction.completion import get_completion_client
from task_pipeline.extraction.dedupe import dedupe_tasks
from task_pipeline.extraction.errors import ExternalServiceError, MalformedResponseError
from task_pipeline.extraction.heuristic import extract_heuristic
from task_pipeline.extraction.llm_extractor import ModelExtractor
from task_pipeline.extraction.models import (
    ExtractedTask,
    ExtractionMetadata,
    ExtractionResult,
    RosterMember,
)
from task_pipeline.extraction.normalizer import normalize_tasks
from task_pipeline.pipeline_config import ExtractionMode, LLMProvider, PipelineConfig

logger = logging.getLogger(__name__)

HEURISTIC_MODEL_NAME = "heuristic-extractor-v1"


def default_model_extractor(provider: LLMProvider | None = None) -> ModelExtractor:
    """Build a :class:`ModelExtractor` from settings, optionally for another provider."""
    client_settings = settings
    if provider is not None:
        client_settings = settings.model_copy(update={"llm_provider": LLMProvider(provider)})
    return ModelExtractor(
        get_completion_client(client_settings),
        temperature=settings.llm_temperature,
        max_output_tokens=settings.llm_max_output_tokens,
    )


def run_heuristic(transcript: str, today: date) -> list[ExtractedTask]:
    """Heuristic path: rule bank -> normalize -> de-duplicate."""
    return dedupe_tasks(normalize_tasks(extract_heuristic(transcript, today)))


def run_model(
    transcript: str,
    today: date,
    roster: Sequence[RosterMember],
    extractor: ModelExtractor,
) -> list[ExtractedTask]:
    """Generative path: prompt -> recover JSON -> normalize (no de-duplication)."""
    return normalize_tasks(extractor.extract(transcript, today, roster))


def extract_tasks(
    transcript: str,
    roster: Sequence[RosterMember] = (),
    config: PipelineConfig | None = None,
    extractor: ModelExtractor | None = None,
) -> ExtractionResult:
    """Extract normalized tasks from a meeting transcript.

    Args:
        transcript: Raw meeting transcript text.
        roster: Team members offered to the model as assignee names.
        config: Extraction mode and "today" anchor; defaults to settings.
        extractor: Generative extractor to use; built from settings when omitted.

    Returns:
        An :class:`ExtractionResult` with the tasks and processing metadata.

    Raises:
        ExternalServiceError: Model-only mode and the completion service failed.
        MalformedResponseError: Model-only mode and the response was unusable.
    """
    if config is None:
        config = PipelineConfig(mode=settings.extraction_mode, provider=settings.llm_provider)
    today = config.resolve_today()
    mode = ExtractionMode(config.mode)
    fallback_used = False

    if mode is ExtractionMode.HEURISTIC:
        tasks = run_heuristic(transcript, today)
        model = HEURISTIC_MODEL_NAME
    elif mode is ExtractionMode.MODEL:
        extractor = extractor or default_model_extractor(config.provider)
        tasks = run_model(transcript, today, roster, extractor)
        model = extractor.model_name
    else:
        try:
            extractor = extractor or default_model_extractor(config.provider)
            tasks = run_model(transcript, today, roster, extractor)
            model = extractor.model_name
        except (ExternalServiceError, MalformedResponseError):
            logger.warning("Model extraction failed; falling back to heuristics", exc_info=True)
            tasks = run_heuristic(transcript, today)
            model = HEURISTIC_MODEL_NAME
            fallback_used = True

    logger.info("Extracted %d tasks with %s (%d chars)", len(tasks), model, len(transcript))
    return ExtractionResult(
        tasks=tasks,
        metadata=ExtractionMetadata(
            processed_at=datetime.now(UTC),
            model=model,
            transcript_length=len(transcript),
            fallback_used=fallback_used,
        ),
    )
