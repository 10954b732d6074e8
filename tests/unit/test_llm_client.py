"""
Unit Tests for the OpenAI-backed LLM service, using a stand-in client.
"""

import asyncio
from types import SimpleNamespace

import httpx
import pytest
from openai import OpenAIError, APITimeoutError

from socratix_tutor.config import Config
from socratix_tutor.errors import LLMServiceError, LLMTimeoutError
from socratix_tutor.llm_client import OpenAILLMService


class FakeCompletions:
    def __init__(self, content="  Why do you think that?  ", delay=0.0, error=None):
        self.content = content
        self.delay = delay
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def make_service(completions, timeout=1.0):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAILLMService(model="test-model", timeout=timeout, client=client)


class TestOpenAILLMService:

    @pytest.mark.asyncio
    async def test_returns_trimmed_text(self):
        completions = FakeCompletions()
        service = make_service(completions)

        text = await service.complete("system", "user", max_tokens=42, temperature=0.1)

        assert text == "Why do you think that?"
        assert completions.kwargs["model"] == "test-model"
        assert completions.kwargs["max_tokens"] == 42
        assert completions.kwargs["temperature"] == 0.1
        assert completions.kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    @pytest.mark.asyncio
    async def test_timeout(self):
        service = make_service(FakeCompletions(delay=1.0), timeout=0.01)
        with pytest.raises(LLMTimeoutError) as exc_info:
            await service.complete("system", "user")
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_client_timeout(self):
        error = APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        service = make_service(FakeCompletions(error=error))
        with pytest.raises(LLMTimeoutError):
            await service.complete("system", "user")

    @pytest.mark.asyncio
    async def test_api_error(self):
        service = make_service(FakeCompletions(error=OpenAIError("boom")))
        with pytest.raises(LLMServiceError) as exc_info:
            await service.complete("system", "user")
        assert not isinstance(exc_info.value, LLMTimeoutError)
        assert exc_info.value.kind == "llm_failure"

    @pytest.mark.asyncio
    async def test_empty_content(self):
        service = make_service(FakeCompletions(content="   "))
        with pytest.raises(LLMServiceError):
            await service.complete("system", "user")

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(Config, "OPENAI_API_KEY", "")
        with pytest.raises(ValueError):
            OpenAILLMService()
