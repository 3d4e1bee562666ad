"""
LLM integration for jobsift.

Provides AI-powered tagging of posting descriptions.
"""

from jobsift.llm.provider import LLMClient, LLMConfig, LLMResponse, get_llm_client
from jobsift.llm.tag import tag_description, tag_records

__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "get_llm_client",
    "tag_description",
    "tag_records",
]
