"""
Tagging-service client interface.

LLMClient is the seam between the tagging step and a concrete chat API;
tests substitute a fake, production uses OpenAIClient.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from jobsift.config import Settings
    from jobsift.llm.openai_client import OpenAIClient


@dataclass
class LLMConfig:
    """Connection and cost settings for the tagging service."""

    api_key: str = ""
    model: str = "gpt-4o-mini"
    base_url: Optional[str] = None
    timeout_s: float = 60.0

    # Per-call limits
    max_tokens: int = 3000
    temperature: float = 0.1

    # Per-run limits
    max_records_per_run: int = 25
    concurrency: int = 5

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LLMConfig":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            max_records_per_run=settings.tag_max_records,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class LLMResponse:
    """
    Outcome of one completion call.

    Transport and API failures are reported in `error` rather than raised;
    callers decide whether a failed call is fatal.
    """
    content: str = ""
    json_data: Optional[Dict[str, Any]] = None
    model: str = ""
    tokens_used: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.content) and not self.error


class LLMClient(ABC):
    """A chat-completion backend."""

    def __init__(self, config: LLMConfig):
        self.config = config

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Send one prompt.

        With json_mode the backend is asked for a JSON object, and a
        parseable object is returned in `json_data`.
        """
        raise NotImplementedError

    async def complete_json(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        return await self.complete(prompt, system_prompt, json_mode=True)


def get_llm_client(config: LLMConfig) -> Optional["OpenAIClient"]:
    """OpenAI client for `config`, or None when no API key is set."""
    if not config.is_configured:
        return None

    from jobsift.llm.openai_client import OpenAIClient
    return OpenAIClient(config)
