"""
Test doubles shared by the unit and e2e suites.
"""

import asyncio
from typing import List, Optional

from socratix_tutor.llm_client import LLMService


class FakeLLM(LLMService):
    """Scripted LLM: returns queued responses, then numbered questions."""

    def __init__(self, responses: Optional[List[str]] = None, fail_with: Optional[Exception] = None, delay: float = 0.0):
        self.responses = list(responses or [])
        self.fail_with = fail_with
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def complete(self, system_prompt, user_prompt, max_tokens=150, temperature=0.8):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with
            if self.responses:
                return self.responses.pop(0)
            return f"What makes you say that? ({len(self.calls)})"
        finally:
            self.in_flight -= 1
