"""Tests for the generation backend adapter and error classification."""

import dataclasses
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from leadsync.errors import (
    BackendAuthError,
    BackendError,
    BackendRateLimited,
    BackendUnavailable,
)
from leadsync.schemas.response_schema import ConversationTurn
from leadsync.tools import generation
from leadsync.tools.generation import OpenAIBackend, classify_backend_error

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, status: int, message: str = "error"):
    return cls(message, response=httpx.Response(status, request=_REQUEST), body=None)


def _completion(text: str = "Hello there", tokens: int = 7):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(completion_tokens=tokens),
    )


class TestClassifyBackendError:
    def test_authentication_error(self):
        error = _status_error(openai.AuthenticationError, 401, "Incorrect API key provided")
        classified = classify_backend_error(error)
        assert isinstance(classified, BackendAuthError)
        assert classified.status_code == 401

    def test_auth_detected_from_message(self):
        classified = classify_backend_error(RuntimeError("invalid x-api-key"))
        assert isinstance(classified, BackendAuthError)

    def test_rate_limited(self):
        classified = classify_backend_error(_status_error(openai.RateLimitError, 429))
        assert isinstance(classified, BackendRateLimited)
        assert classified.status_code == 429

    def test_server_error_is_unavailable(self):
        classified = classify_backend_error(_status_error(openai.InternalServerError, 503))
        assert isinstance(classified, BackendUnavailable)
        assert classified.status_code == 503

    def test_connection_error_is_unavailable(self):
        classified = classify_backend_error(openai.APIConnectionError(request=_REQUEST))
        assert isinstance(classified, BackendUnavailable)

    def test_timeout_is_unavailable(self):
        classified = classify_backend_error(openai.APITimeoutError(request=_REQUEST))
        assert isinstance(classified, BackendUnavailable)

    def test_other_status_is_generic(self):
        classified = classify_backend_error(_status_error(openai.BadRequestError, 400))
        assert type(classified) is BackendError
        assert classified.status_code == 400

    def test_already_classified_passes_through(self):
        error = BackendRateLimited("slow down", status_code=429)
        assert classify_backend_error(error) is error


class TestOpenAIBackend:
    def setup_method(self):
        self.client = MagicMock()
        self.client.chat.completions.create = AsyncMock(return_value=_completion())
        self.backend = OpenAIBackend(
            model="test-model", max_tokens=50, temperature=0.1, client=self.client
        )

    @pytest.mark.asyncio
    async def test_complete_returns_text_and_tokens(self):
        result = await self.backend.complete(
            "You are helpful.", [ConversationTurn(role="user", content="hi")]
        )
        assert result.text == "Hello there"
        assert result.output_tokens == 7
        assert result.elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_system_prompt_sent_first(self):
        await self.backend.complete(
            "SYSTEM",
            [
                ConversationTurn(role="user", content="hi"),
                ConversationTurn(role="assistant", content="hello"),
                ConversationTurn(role="user", content="price?"),
            ],
        )
        kwargs = self.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 50
        assert kwargs["temperature"] == 0.1
        assert [m["role"] for m in kwargs["messages"]] == ["system", "user", "assistant", "user"]
        assert kwargs["messages"][0]["content"] == "SYSTEM"

    @pytest.mark.asyncio
    async def test_missing_content_becomes_empty_text(self):
        self.client.chat.completions.create.return_value = _completion(text=None)
        result = await self.backend.complete("SYSTEM", [])
        assert result.text == ""

    @pytest.mark.asyncio
    async def test_client_error_is_classified(self):
        self.client.chat.completions.create.side_effect = _status_error(
            openai.RateLimitError, 429
        )
        with pytest.raises(BackendRateLimited) as exc_info:
            await self.backend.complete("SYSTEM", [])
        assert isinstance(exc_info.value.__cause__, openai.RateLimitError)

    @pytest.mark.asyncio
    async def test_timeout_surfaces_as_unavailable(self):
        self.client.chat.completions.create.side_effect = openai.APITimeoutError(
            request=_REQUEST
        )
        with pytest.raises(BackendUnavailable):
            await self.backend.complete("SYSTEM", [])

    def test_missing_api_key_rejected(self, monkeypatch):
        no_key = dataclasses.replace(
            generation.settings,
            model=dataclasses.replace(generation.settings.model, api_key=""),
        )
        monkeypatch.setattr(generation, "settings", no_key)
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIBackend()
