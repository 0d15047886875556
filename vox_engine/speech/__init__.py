"""Speech providers (speech-to-text and text-to-speech)."""

from .base import BaseASRClient, BaseTTSClient, SpeechError
from .factory import create_asr_client, create_tts_client
from .qiniu import QiniuASRClient, QiniuTTSClient

__all__ = [
    "BaseASRClient",
    "BaseTTSClient",
    "SpeechError",
    "QiniuASRClient",
    "QiniuTTSClient",
    "create_asr_client",
    "create_tts_client",
]
