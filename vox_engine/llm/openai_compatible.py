"""Text generation client for OpenAI-compatible chat completion APIs."""

import logging
from typing import Optional
from .base import BaseLLMClient, LLMResponse, LLMError
import httpx

logger = logging.getLogger(__name__)


class OpenAICompatibleLLMClient(BaseLLMClient):
    """
    Client for any provider exposing `/chat/completions` in OpenAI format.

    base_url is expected to include the version prefix, e.g.
    https://openai.qiniu.com/v1
    """

    async def health_check(self) -> bool:
        """Check if the provider answers its model listing."""
        try:
            response = await self.client.get(f"{self.base_url}/models")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"LLM health check failed: {e}")
            return False

    async def generate_with_history(
        self,
        messages: list,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate a completion with full conversation history.

        Args:
            messages: Full message array with roles and content
                     Format: [{"role": "system", "content": "..."}, {"role": "user", "content": "..."}, ...]
            temperature: Override default temperature
            max_tokens: Override default max tokens
            model: Override default model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails or the provider returns no content
        """
        payload = {
            "model": model if model is not None else self.model,
            "messages": messages,
            "stream": False,
            "temperature": temperature if temperature is not None else self.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }

        logger.debug(
            f"LLM request: model={payload['model']}, messages={len(messages)}, "
            f"temp={payload['temperature']}, max_tokens={payload['max_tokens']}"
        )

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                json=payload
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM error response: {e.response.text[:500]}")
            raise LLMError(f"llm api request failed: {e}") from e
        except httpx.HTTPError as e:
            raise LLMError(f"llm api request failed: {e}") from e
        except ValueError as e:
            raise LLMError(f"llm api returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise LLMError("llm api returned an unexpected response body")

        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise LLMError("llm api returned malformed choices")
        if not choices:
            raise LLMError("llm api returned an empty response")

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise LLMError("llm api returned a malformed choice")

        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LLMError("llm api returned an empty message")

        model_name = data.get("model")
        finish_reason = choice.get("finish_reason")
        usage = data.get("usage")
        return LLMResponse(
            content=content,
            model=model_name if isinstance(model_name, str) else payload["model"],
            finish_reason=finish_reason if isinstance(finish_reason, str) else None,
            usage=usage if isinstance(usage, dict) else None,
        )
