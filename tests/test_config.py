"""Tests for PipelineConfig, extraction enums and settings coercion."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from task_pipeline.config import Settings
from task_pipeline.pipeline_config import ExtractionMode, LLMProvider, PipelineConfig

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestExtractionMode:
    def test_values(self) -> None:
        assert ExtractionMode.HEURISTIC.value == "heuristic"
        assert ExtractionMode.MODEL.value == "model"
        assert ExtractionMode.MODEL_WITH_FALLBACK.value == "model_with_fallback"

    def test_from_string(self) -> None:
        assert ExtractionMode("heuristic") is ExtractionMode.HEURISTIC
        assert ExtractionMode("model_with_fallback") is ExtractionMode.MODEL_WITH_FALLBACK

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            ExtractionMode("invalid")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(ExtractionMode.MODEL, str)


class TestLLMProvider:
    def test_values(self) -> None:
        assert LLMProvider.ANTHROPIC.value == "anthropic"
        assert LLMProvider.OPENAI.value == "openai"

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            LLMProvider("gemini")


# ---------------------------------------------------------------------------
# PipelineConfig
# ---------------------------------------------------------------------------


class TestPipelineConfig:
    def test_defaults(self) -> None:
        cfg = PipelineConfig()
        assert cfg.mode is ExtractionMode.MODEL_WITH_FALLBACK
        assert cfg.provider is None
        assert cfg.today is None

    def test_frozen(self) -> None:
        cfg = PipelineConfig()
        with pytest.raises(FrozenInstanceError):
            cfg.mode = ExtractionMode.HEURISTIC  # type: ignore[misc]

    def test_resolve_today_uses_fixed_date(self) -> None:
        cfg = PipelineConfig(today=date(2025, 3, 4))
        assert cfg.resolve_today() == date(2025, 3, 4)

    def test_resolve_today_defaults_to_current_date(self) -> None:
        assert PipelineConfig().resolve_today() == date.today()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_provider_and_mode_coerced_from_strings(self) -> None:
        s = Settings(llm_provider="openai", extraction_mode="heuristic", _env_file=None)  # type: ignore[call-arg, arg-type]
        assert s.llm_provider is LLMProvider.OPENAI
        assert s.extraction_mode is ExtractionMode.HEURISTIC

    def test_invalid_mode_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(extraction_mode="guess", _env_file=None)  # type: ignore[call-arg, arg-type]

    def test_timeout_is_bounded_by_default(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.llm_timeout_seconds > 0
