"""LLM integration layer."""

from .base import BaseLLMClient, LLMError, LLMResponse
from .client import create_llm_client
from .openai_compatible import OpenAICompatibleLLMClient

__all__ = [
    "BaseLLMClient",
    "LLMError",
    "LLMResponse",
    "OpenAICompatibleLLMClient",
    "create_llm_client",
]
