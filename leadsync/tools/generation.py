"""
Generation backend adapter.

The pipeline treats text generation as an opaque completion service:
a system prompt plus conversation turns in, text plus token/timing
accounting out. Failures are classified into auth, rate-limit, and
unavailable so the caller can pick a specific user-facing message.
No retries happen here.
"""

import logging
import time
from typing import Optional, Protocol, Sequence

import openai
from openai import AsyncOpenAI

from leadsync.config import settings
from leadsync.errors import (
    BackendAuthError,
    BackendError,
    BackendRateLimited,
    BackendUnavailable,
)
from leadsync.schemas.response_schema import ConversationTurn, GenerationResult

logger = logging.getLogger(__name__)

_AUTH_MESSAGE_MARKERS = ("authentication", "invalid x-api-key", "invalid api key")


class GenerationBackend(Protocol):
    async def complete(
        self, system_prompt: str, turns: Sequence[ConversationTurn]
    ) -> GenerationResult: ...


def classify_backend_error(error: Exception) -> BackendError:
    """Map a client exception onto the backend error taxonomy."""
    if isinstance(error, BackendError):
        return error

    status: Optional[int] = getattr(error, "status_code", None)
    message = str(error) or error.__class__.__name__
    lower = message.lower()

    if isinstance(error, openai.AuthenticationError) or status == 401 or any(
        marker in lower for marker in _AUTH_MESSAGE_MARKERS
    ):
        return BackendAuthError(
            f"Generation backend authentication failed. Check OPENAI_API_KEY. Error: {message}",
            status_code=status or 401,
        )
    if isinstance(error, openai.RateLimitError) or status == 429:
        return BackendRateLimited(
            "Generation backend rate limit exceeded. Please try again later.",
            status_code=429,
        )
    if isinstance(error, openai.APIConnectionError):
        return BackendUnavailable(
            f"Generation backend unreachable: {message}", status_code=503
        )
    if status is not None and status >= 500:
        return BackendUnavailable(
            f"Generation backend server error ({status}). Please try again later.",
            status_code=status,
        )
    return BackendError(f"Generation backend error: {message}", status_code=status or 500)


class OpenAIBackend:
    """Chat-completions backend over the OpenAI async client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        cfg = settings.model
        self.model = model or cfg.llm_model
        self.max_tokens = max_tokens or cfg.llm_max_tokens
        self.temperature = cfg.llm_temperature if temperature is None else temperature
        if client is None:
            key = api_key or cfg.api_key
            if not key:
                raise ValueError(
                    "Missing OpenAI API key. Please set the OPENAI_API_KEY environment variable."
                )
            client = AsyncOpenAI(
                api_key=key,
                timeout=timeout or cfg.llm_timeout_sec,
                max_retries=0,
            )
        self.client = client
        logger.info("Generation backend initialized with model: %s", self.model)

    async def complete(
        self, system_prompt: str, turns: Sequence[ConversationTurn]
    ) -> GenerationResult:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": t.role, "content": t.content} for t in turns)

        started = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=messages,
            )
        except openai.OpenAIError as exc:
            classified = classify_backend_error(exc)
            logger.error("Error generating response: %s", classified)
            raise classified from exc
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        text = response.choices[0].message.content or ""
        output_tokens = response.usage.completion_tokens if response.usage else 0
        logger.info(
            "Response generated: tokens=%d elapsed_ms=%d", output_tokens, elapsed_ms
        )
        return GenerationResult(text=text, output_tokens=output_tokens, elapsed_ms=elapsed_ms)
