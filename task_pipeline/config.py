from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from task_pipeline.pipeline_config import ExtractionMode, LLMProvider


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Completion service
    llm_provider: LLMProvider = LLMProvider.ANTHROPIC
    llm_model: str = "claude-sonnet-4-20250514"
    openai_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.2
    llm_max_output_tokens: int = 8192
    llm_timeout_seconds: float = 60.0

    # Extraction
    extraction_mode: ExtractionMode = ExtractionMode.MODEL_WITH_FALLBACK
    max_transcript_chars: int = 50_000

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
