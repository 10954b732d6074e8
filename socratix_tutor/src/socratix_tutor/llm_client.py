"""
LLM Text Service

String-in / string-out contract the tutor core uses to obtain questions,
plus the OpenAI-backed implementation.

The core performs no parsing of question text beyond trimming. Retries and
rate-limit handling belong to the caller of the request boundary: a failure
surfaces as a retryable LLMServiceError.
"""

import asyncio
import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError, APITimeoutError

from socratix_tutor.config import Config
from socratix_tutor.errors import LLMServiceError, LLMTimeoutError

logger = logging.getLogger(__name__)


class LLMService:
    """Text completion collaborator."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = Config.LLM_MAX_TOKENS,
        temperature: float = Config.LLM_TEMPERATURE,
    ) -> str:
        raise NotImplementedError


class OpenAILLMService(LLMService):
    """LLMService backed by OpenAI chat completions."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the service.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY)
            model: Model name (defaults to OPENAI_MODEL)
            timeout: Seconds before a call is abandoned (defaults to LLM_TIMEOUT_SECONDS)
            client: Pre-built AsyncOpenAI client (optional)
        """
        self.model = model or Config.OPENAI_MODEL
        self.timeout = timeout or Config.LLM_TIMEOUT_SECONDS

        if client is not None:
            self.client = client
        else:
            api_key = api_key or Config.OPENAI_API_KEY
            if not api_key:
                raise ValueError("OPENAI_API_KEY not found in environment variables")
            self.client = AsyncOpenAI(api_key=api_key)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = Config.LLM_MAX_TOKENS,
        temperature: float = Config.LLM_TEMPERATURE,
    ) -> str:
        try:
            completion = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    max_tokens=max_tokens,
                    temperature=temperature,
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, APITimeoutError) as e:
            logger.warning(f"⏱️ [LLM] Completion timed out after {self.timeout}s")
            raise LLMTimeoutError(f"LLM call timed out after {self.timeout}s") from e
        except OpenAIError as e:
            logger.error(f"❌ [LLM] Completion failed: {e}")
            raise LLMServiceError(f"LLM call failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise LLMServiceError("LLM returned an empty response")
        return content.strip()
