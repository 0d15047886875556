"""
Base speech provider interfaces

All speech-to-text and text-to-speech clients implement these.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx


class SpeechError(Exception):
    """Raised when a speech provider call fails."""
    pass


class _HTTPSpeechClient:
    """Shared httpx plumbing for HTTP speech providers."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


class BaseASRClient(_HTTPSpeechClient, ABC):
    """
    Base class for speech-to-text providers.

    Audio is referenced by URL (the client uploads it to object storage
    beforehand), never streamed through this service.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique provider identifier (e.g., 'qiniu')."""
        pass

    @abstractmethod
    async def transcribe(self, audio_url: str, audio_format: str) -> str:
        """
        Transcribe the audio at audio_url.

        Args:
            audio_url: Publicly reachable URL of the recording
            audio_format: Container/codec name (mp3, wav, ogg, ...)

        Returns:
            Transcribed text (never empty)

        Raises:
            SpeechError: If transcription fails
        """
        pass

    async def health_check(self) -> bool:
        return True


class BaseTTSClient(_HTTPSpeechClient, ABC):
    """Base class for text-to-speech providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique provider identifier (e.g., 'qiniu')."""
        pass

    @property
    @abstractmethod
    def mime_type(self) -> str:
        """MIME type of the audio returned by synthesize()."""
        pass

    @abstractmethod
    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """
        Synthesize speech.

        Args:
            text: Text to speak
            voice_id: Provider voice identifier

        Returns:
            Encoded audio bytes

        Raises:
            SpeechError: If synthesis fails
        """
        pass

    async def health_check(self) -> bool:
        return True
