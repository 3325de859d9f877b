"""Tests for the LLM client (chordsmith/core/llm_client.py).

Covers: LLMClient init, chat_completion payload and retries, _parse_response.
"""
from __future__ import annotations

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from chordsmith.core.llm_client import LLMClient, LLMResponse


def _response(status: int, json_body: dict | None = None) -> httpx.Response:
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    return httpx.Response(status, json=json_body or {}, request=request)


_OK_BODY = {
    "choices": [{"message": {"content": '{"frets": []}'}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 10, "completion_tokens": 5},
}


# ---------------------------------------------------------------------------
# LLMClient construction
# ---------------------------------------------------------------------------


class TestLLMClientInit:

    @patch("chordsmith.core.llm_client.settings")
    def test_default_init(self, mock_settings: MagicMock) -> None:
        mock_settings.llm_provider = "openrouter"
        mock_settings.openrouter_api_key = "sk-test"
        mock_settings.llm_model = "google/gemini-2.5-flash"
        mock_settings.llm_timeout = 60
        client = LLMClient()
        assert client.api_key == "sk-test"
        assert client.model == "google/gemini-2.5-flash"
        assert client.base_url == "https://openrouter.ai/api"

    @patch("chordsmith.core.llm_client.settings")
    def test_missing_key_raises(self, mock_settings: MagicMock) -> None:
        mock_settings.llm_provider = "openrouter"
        mock_settings.openrouter_api_key = None
        with pytest.raises(ValueError, match="not configured"):
            LLMClient()


# ---------------------------------------------------------------------------
# chat_completion
# ---------------------------------------------------------------------------


class TestChatCompletion:

    @pytest.mark.asyncio
    async def test_json_mode_sets_response_format(self) -> None:
        client = LLMClient(provider="openrouter", api_key="sk-test", model="m", timeout=5)
        post = AsyncMock(return_value=_response(200, _OK_BODY))
        client._client = MagicMock(post=post)
        result = await client.chat_completion([{"role": "user", "content": "hi"}], json_mode=True)

        payload = post.call_args.kwargs["json"]
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["model"] == "m"
        assert isinstance(result, LLMResponse)
        assert result.content == '{"frets": []}'
        assert result.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_retries_on_rate_limit(self) -> None:
        client = LLMClient(provider="openrouter", api_key="sk-test", model="m", timeout=5)
        post = AsyncMock(side_effect=[_response(429), _response(200, _OK_BODY)])
        client._client = MagicMock(post=post)
        with patch("chordsmith.core.llm_client.asyncio.sleep", new=AsyncMock()):
            result = await client.chat_completion([{"role": "user", "content": "hi"}])
        assert post.await_count == 2
        assert result.content == '{"frets": []}'

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self) -> None:
        client = LLMClient(provider="openrouter", api_key="sk-test", model="m", timeout=5)
        post = AsyncMock(return_value=_response(401))
        client._client = MagicMock(post=post)
        with pytest.raises(httpx.HTTPStatusError):
            await client.chat_completion([{"role": "user", "content": "hi"}])
        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self) -> None:
        client = LLMClient(provider="openrouter", api_key="sk-test", model="m", timeout=5)
        post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        client._client = MagicMock(post=post)
        with patch("chordsmith.core.llm_client.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(httpx.ReadTimeout):
                await client.chat_completion([{"role": "user", "content": "hi"}], max_retries=1)
        assert post.await_count == 2


def test_parse_response_handles_empty_choices() -> None:
    client = LLMClient(provider="openrouter", api_key="sk-test", model="m", timeout=5)
    result = client._parse_response({"choices": []})
    assert result.content is None
