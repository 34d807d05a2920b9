"""Tests for the extract_tasks entry point across modes (no live API calls)."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from task_pipeline.extraction.errors import (
    ExternalServiceError,
    ExtractionError,
    MalformedResponseError,
    ValidationError,
)
from task_pipeline.extraction.extractor import HEURISTIC_MODEL_NAME, extract_tasks
from task_pipeline.extraction.llm_extractor import ModelExtractor
from task_pipeline.extraction.models import (
    Confidence,
    ExtractedTask,
    MembershipStatus,
    Priority,
    RosterMember,
)
from task_pipeline.pipeline_config import ExtractionMode, LLMProvider, PipelineConfig

TODAY = date(2025, 3, 4)

SPEAKER_HEADER_TRANSCRIPT = """00:00:23 — Mark
I will implement rate limiting.

00:00:32 — Jenna
Okay, please complete that by March 5."""


def _extractor(response: str | None = None, error: Exception | None = None) -> ModelExtractor:
    client = MagicMock()
    client.model_name = "stub-model"
    if error is not None:
        client.complete.side_effect = error
    else:
        client.complete.return_value = response
    return ModelExtractor(client)


def _config(mode: ExtractionMode) -> PipelineConfig:
    return PipelineConfig(mode=mode, today=TODAY)


# ---------------------------------------------------------------------------
# Heuristic mode
# ---------------------------------------------------------------------------


class TestHeuristicMode:
    def test_speaker_header_transcript(self) -> None:
        result = extract_tasks(SPEAKER_HEADER_TRANSCRIPT, config=_config(ExtractionMode.HEURISTIC))

        assert len(result.tasks) == 1
        task = result.tasks[0]
        assert isinstance(task, ExtractedTask)
        assert task.title == "implement rate limiting"
        assert task.assignee == "Mark"
        assert task.priority is Priority.MEDIUM
        assert task.confidence is Confidence.HIGH

    def test_metadata(self) -> None:
        result = extract_tasks("lorem ipsum", config=_config(ExtractionMode.HEURISTIC))
        assert result.metadata.model == HEURISTIC_MODEL_NAME
        assert result.metadata.transcript_length == len("lorem ipsum")
        assert result.metadata.fallback_used is False
        assert result.metadata.processed_at.tzinfo is not None

    def test_does_not_touch_model(self) -> None:
        extractor = _extractor('{"tasks": []}')
        extract_tasks("Sarah will send the deck", config=_config(ExtractionMode.HEURISTIC), extractor=extractor)
        extractor.client.complete.assert_not_called()


# ---------------------------------------------------------------------------
# Model mode
# ---------------------------------------------------------------------------


class TestModelMode:
    @pytest.mark.parametrize("provider", [LLMProvider.OPENAI, LLMProvider.ANTHROPIC])
    def test_requested_provider_reaches_client_factory(self, provider: LLMProvider) -> None:
        client = MagicMock()
        client.model_name = "stub-model"
        client.complete.return_value = '{"tasks": []}'
        with patch(
            "task_pipeline.extraction.extractor.get_completion_client", return_value=client
        ) as mock_factory:
            result = extract_tasks("notes", config=PipelineConfig(mode=ExtractionMode.MODEL, provider=provider))

        assert mock_factory.call_args.args[0].llm_provider is provider
        assert result.metadata.model == "stub-model"

    def test_provider_defaults_to_settings(self) -> None:
        client = MagicMock()
        client.model_name = "stub-model"
        client.complete.return_value = '{"tasks": []}'
        with (
            patch("task_pipeline.extraction.extractor.settings") as mock_settings,
            patch("task_pipeline.extraction.extractor.get_completion_client", return_value=client) as mock_factory,
        ):
            extract_tasks("notes", config=PipelineConfig(mode=ExtractionMode.MODEL))

        assert mock_factory.call_args.args[0] is mock_settings

    def test_tasks_normalized(self) -> None:
        response = json.dumps(
            {"tasks": [{"title": " Fix bug ", "priority": "URGENT", "dueDate": "next week", "inferred": True}]}
        )
        result = extract_tasks("notes", config=_config(ExtractionMode.MODEL), extractor=_extractor(response))

        (task,) = result.tasks
        assert task.title == "Fix bug"
        assert task.priority is Priority.MEDIUM
        assert task.due_date is None
        assert task.confidence is Confidence.MEDIUM
        assert result.metadata.model == "stub-model"
        assert result.metadata.fallback_used is False

    def test_no_deduplication(self) -> None:
        response = json.dumps({"tasks": [{"title": "Fix login bug"}, {"title": "Fix login bug"}]})
        result = extract_tasks("notes", config=_config(ExtractionMode.MODEL), extractor=_extractor(response))
        assert len(result.tasks) == 2

    def test_roster_offered_to_model(self) -> None:
        extractor = _extractor('{"tasks": []}')
        roster = [RosterMember(id="u1", membership_status=MembershipStatus.ACCEPTED, full_name="Eva Martinez")]
        extract_tasks("notes", roster, config=_config(ExtractionMode.MODEL), extractor=extractor)
        assert "Eva Martinez" in extractor.client.complete.call_args.args[0].prompt

    def test_service_error_propagates(self) -> None:
        with pytest.raises(ExternalServiceError):
            extract_tasks(
                "notes",
                config=_config(ExtractionMode.MODEL),
                extractor=_extractor(error=ExternalServiceError("down")),
            )

    def test_malformed_response_propagates(self) -> None:
        with pytest.raises(MalformedResponseError):
            extract_tasks("notes", config=_config(ExtractionMode.MODEL), extractor=_extractor("no json"))


# ---------------------------------------------------------------------------
# Model with fallback
# ---------------------------------------------------------------------------


class TestFallbackMode:
    def test_model_success(self) -> None:
        result = extract_tasks(
            "notes",
            config=_config(ExtractionMode.MODEL_WITH_FALLBACK),
            extractor=_extractor('{"tasks": [{"title": "Fix bug"}]}'),
        )
        assert [t.title for t in result.tasks] == ["Fix bug"]
        assert result.metadata.fallback_used is False

    @pytest.mark.parametrize(
        "kwargs",
        [{"error": ExternalServiceError("down")}, {"response": "not json at all"}],
    )
    def test_falls_back_to_heuristics(self, kwargs: dict) -> None:
        result = extract_tasks(
            SPEAKER_HEADER_TRANSCRIPT,
            config=_config(ExtractionMode.MODEL_WITH_FALLBACK),
            extractor=_extractor(**kwargs),
        )
        assert [t.title for t in result.tasks] == ["implement rate limiting"]
        assert result.metadata.model == HEURISTIC_MODEL_NAME
        assert result.metadata.fallback_used is True

    def test_missing_client_configuration_falls_back(self) -> None:
        with patch(
            "task_pipeline.extraction.extractor.default_model_extractor",
            side_effect=ExternalServiceError("ANTHROPIC_API_KEY is not configured"),
        ):
            result = extract_tasks(SPEAKER_HEADER_TRANSCRIPT, config=_config(ExtractionMode.MODEL_WITH_FALLBACK))
        assert result.metadata.fallback_used is True
        assert result.tasks[0].assignee == "Mark"

    def test_unexpected_errors_are_not_swallowed(self) -> None:
        with pytest.raises(RuntimeError):
            extract_tasks(
                "notes",
                config=_config(ExtractionMode.MODEL_WITH_FALLBACK),
                extractor=_extractor(error=RuntimeError("bug")),
            )


# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------


class TestErrors:
    def test_hierarchy(self) -> None:
        for exc_type in (ExternalServiceError, MalformedResponseError, ValidationError):
            assert issubclass(exc_type, ExtractionError)

    def test_malformed_keeps_raw_text(self) -> None:
        exc = MalformedResponseError("bad", raw_text="{oops")
        assert str(exc) == "bad"
        assert exc.raw_text == "{oops"
