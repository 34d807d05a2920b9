"""Text-completion clients used by the generative extractor.

The extractor only needs ``complete(request) -> str``; the concrete provider
is chosen from settings and injected, so tests can pass a stub instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import anthropic
import openai
from anthropic.types import TextBlock

from task_pipeline.config import Settings
from task_pipeline.extraction.errors import ExternalServiceError
from task_pipeline.pipeline_config import LLMProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    prompt: str
    temperature: float = 0.2
    max_output_tokens: int = 8192


def _timeout_kwargs(timeout: float | None) -> dict[str, float]:
    # An explicit None disables the SDK timeout; omit it to keep the SDK default.
    return {} if timeout is None else {"timeout": timeout}


class CompletionClient(Protocol):
    """Anything that turns a prompt into unstructured text."""

    model_name: str

    def complete(self, request: CompletionRequest) -> str: ...


class AnthropicCompletionClient:
    """Claude Messages API wrapper."""

    def __init__(self, api_key: str, model: str, timeout: float | None = None) -> None:
        self.model_name = model
        self._client = anthropic.Anthropic(api_key=api_key, **_timeout_kwargs(timeout))

    def complete(self, request: CompletionRequest) -> str:
        try:
            response = self._client.messages.create(
                model=self.model_name,
                max_tokens=request.max_output_tokens,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except anthropic.APIError as exc:
            raise ExternalServiceError(f"Claude request failed: {exc}") from exc

        # Only text blocks carry the answer; tool or thinking blocks are ignored.
        text = "".join(block.text for block in response.content if isinstance(block, TextBlock))
        if not text.strip():
            raise ExternalServiceError("Claude returned an empty response")
        return text


class OpenAICompletionClient:
    """OpenAI Chat Completions wrapper."""

    def __init__(self, api_key: str, model: str, timeout: float | None = None) -> None:
        self.model_name = model
        self._client = openai.OpenAI(api_key=api_key, **_timeout_kwargs(timeout))

    def complete(self, request: CompletionRequest) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model_name,
                max_tokens=request.max_output_tokens,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except openai.OpenAIError as exc:
            raise ExternalServiceError(f"OpenAI request failed: {exc}") from exc

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise ExternalServiceError("OpenAI returned an empty response")
        return text


def get_completion_client(settings: Settings) -> CompletionClient:
    """Build the completion client selected by ``settings.llm_provider``.

    Raises:
        ExternalServiceError: If the selected provider has no API key configured.
    """
    provider = LLMProvider(settings.llm_provider)
    if provider is LLMProvider.OPENAI:
        if not settings.openai_api_key:
            raise ExternalServiceError("OPENAI_API_KEY is not configured")
        return OpenAICompletionClient(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.llm_timeout_seconds,
        )

    if not settings.anthropic_api_key:
        raise ExternalServiceError("ANTHROPIC_API_KEY is not configured")
    logger.debug("Using Anthropic completion client (%s)", settings.llm_model)
    return AnthropicCompletionClient(
        api_key=settings.anthropic_api_key,
        model=settings.llm_model,
        timeout=settings.llm_timeout_seconds,
    )
