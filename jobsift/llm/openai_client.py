"""
OpenAI chat-completions backend (also works with API-compatible endpoints).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from jobsift.llm.provider import LLMClient, LLMConfig, LLMResponse

logger = logging.getLogger(__name__)


def _messages(prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _json_object(content: str) -> Optional[Dict[str, Any]]:
    """Parse `content` as a JSON object; None for anything else."""
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


class OpenAIClient(LLMClient):

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self._client = None

    @property
    def client(self):
        """The openai.AsyncOpenAI instance, created on first use."""
        if self._client is None:
            import openai
            self._client = openai.AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url or None,
                timeout=self.config.timeout_s,
            )
        return self._client

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        request: Dict[str, Any] = {
            "model": self.config.model,
            "messages": _messages(prompt, system_prompt),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            completion = await self.client.chat.completions.create(**request)
        except Exception as e:
            logger.debug("completion request to %s failed: %s", self.config.model, e)
            return LLMResponse(model=self.config.model, error=f"{type(e).__name__}: {e}")

        content = ""
        if completion.choices:
            content = completion.choices[0].message.content or ""
        usage = completion.usage

        return LLMResponse(
            content=content,
            json_data=_json_object(content) if json_mode and content else None,
            model=completion.model or self.config.model,
            tokens_used=usage.total_tokens if usage else 0,
        )
