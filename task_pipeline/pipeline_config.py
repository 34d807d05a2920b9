"""Pipeline configuration: strategy enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ExtractionMode(str, Enum):
    """How a transcript is turned into tasks."""

    HEURISTIC = "heuristic"
    MODEL = "model"
    MODEL_WITH_FALLBACK = "model_with_fallback"


class LLMProvider(str, Enum):
    """Text-completion providers the generative extractor can talk to."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for one extraction run.

    ``provider`` picks the completion service for the model modes; ``None``
    defers to ``settings.llm_provider``. ``today`` anchors relative dates
    ("tomorrow", "EOD"); ``None`` means the current local date at call time.
    """

    mode: ExtractionMode = ExtractionMode.MODEL_WITH_FALLBACK
    provider: LLMProvider | None = None
    today: date | None = None

    def resolve_today(self) -> date:
        return self.today or date.today()
