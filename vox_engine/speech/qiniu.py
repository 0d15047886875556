"""Qiniu cloud speech endpoints (ASR and TTS)."""

import base64
import binascii
import logging
from typing import Optional

import httpx

from .base import BaseASRClient, BaseTTSClient, SpeechError

logger = logging.getLogger(__name__)

ASR_ENDPOINT = "/voice/asr"
TTS_ENDPOINT = "/voice/tts"

_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "pcm": "audio/L16",
}


async def _post_json(client: httpx.AsyncClient, url: str, payload: dict, what: str) -> dict:
    try:
        response = await client.post(url, json=payload)
    except httpx.HTTPError as e:
        raise SpeechError(f"{what} api request failed: {e}") from e

    if response.status_code != 200:
        raise SpeechError(
            f"{what} api returned error status {response.status_code}: {response.text[:500]}"
        )

    try:
        data = response.json()
    except ValueError as e:
        raise SpeechError(f"failed to decode {what} response: {e}") from e

    if not isinstance(data, dict):
        raise SpeechError(f"{what} api returned an unexpected response body")
    return data


def _get_dict(node: dict, key: str, what: str) -> dict:
    value = node.get(key)
    if not isinstance(value, dict):
        raise SpeechError(f"{what} response is missing object '{key}'")
    return value


class QiniuASRClient(BaseASRClient):
    """Speech-to-text through the Qiniu `/voice/asr` endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        model: str = "asr",
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, timeout, api_key=api_key, transport=transport)
        self.model = model

    @property
    def provider_name(self) -> str:
        return "qiniu"

    async def transcribe(self, audio_url: str, audio_format: str) -> str:
        payload = {
            "model": self.model,
            "audio": {
                "format": audio_format,
                "url": audio_url,
            },
        }
        data = await _post_json(self.client, f"{self.base_url}{ASR_ENDPOINT}", payload, "asr")

        result = _get_dict(_get_dict(data, "data", "asr"), "result", "asr")
        text = result.get("text")
        if not isinstance(text, str) or not text.strip():
            raise SpeechError("ASR result text is empty")
        text = text.strip()

        logger.debug(f"[ASR] Transcribed {len(text)} chars from {audio_format} audio")
        return text


class QiniuTTSClient(BaseTTSClient):
    """Text-to-speech through the Qiniu `/voice/tts` endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        encoding: str = "mp3",
        speed_ratio: float = 1.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, timeout, api_key=api_key, transport=transport)
        self.encoding = encoding
        self.speed_ratio = speed_ratio

    @property
    def provider_name(self) -> str:
        return "qiniu"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES.get(self.encoding, "application/octet-stream")

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        payload = {
            "audio": {
                "voice_type": voice_id,
                "encoding": self.encoding,
                "speed_ratio": self.speed_ratio,
            },
            "request": {
                "text": text,
            },
        }
        data = await _post_json(self.client, f"{self.base_url}{TTS_ENDPOINT}", payload, "tts")

        encoded = data.get("data")
        if not isinstance(encoded, str) or not encoded:
            raise SpeechError("TTS response contained no audio")

        try:
            audio = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SpeechError(f"TTS audio is not valid base64: {e}") from e

        logger.debug(f"[TTS] Synthesized {len(audio)} bytes with voice {voice_id}")
        return audio
