"""Base abstract class for text generation providers."""

from abc import ABC, abstractmethod
from typing import Optional
import httpx
from pydantic import BaseModel


class LLMResponse(BaseModel):
    """LLM response model."""
    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: Optional[dict] = None


class LLMError(Exception):
    """Base exception for LLM operations."""
    pass


class BaseLLMClient(ABC):
    """
    Abstract base class for text generation clients.

    Implementations receive the complete, already composed message list
    (system message first) and return the assistant reply.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float,
        temperature: float,
        max_tokens: int,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize LLM client.

        Args:
            base_url: Base URL for the provider
            model: Default model identifier
            timeout: Request timeout in seconds
            temperature: Default sampling temperature
            max_tokens: Default maximum tokens to generate
            api_key: Bearer token, if the provider needs one
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is available and responding.

        Returns:
            True if provider is healthy, False otherwise
        """
        pass

    @abstractmethod
    async def generate_with_history(
        self,
        messages: list,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate a non-streaming completion for a full message list.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Override default temperature
            max_tokens: Override default max tokens
            model: Override default model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails
        """
        pass

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
