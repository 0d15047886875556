"""LLM client factory."""

import os
from typing import TYPE_CHECKING, Optional

import httpx

from .base import BaseLLMClient
from .openai_compatible import OpenAICompatibleLLMClient

if TYPE_CHECKING:
    from vox_engine.config.models import LLMConfig


def create_llm_client(
    config: "LLMConfig",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseLLMClient:
    """
    Factory function to create the LLM client for the configured provider.

    Args:
        config: LLM configuration with provider type and settings
        transport: Optional httpx transport override

    Returns:
        Provider-specific LLM client instance

    Raises:
        ValueError: If provider is unknown
    """
    provider = config.provider.lower()

    if provider == "openai-compatible":
        return OpenAICompatibleLLMClient(
            base_url=config.base_url,
            model=config.model,
            timeout=config.timeout_seconds,
            temperature=config.temperature,
            max_tokens=config.max_response_tokens,
            api_key=os.getenv(config.api_key_env),
            transport=transport,
        )

    raise ValueError(
        f"Unknown LLM provider: '{provider}'. "
        f"Supported providers: openai-compatible"
    )
