"""
Speech client factories

Create ASR/TTS clients from configuration.
"""

import logging
import os
from typing import TYPE_CHECKING, Optional

import httpx

from .base import BaseASRClient, BaseTTSClient
from .qiniu import QiniuASRClient, QiniuTTSClient

if TYPE_CHECKING:
    from vox_engine.config.models import ASRConfig, TTSConfig

logger = logging.getLogger(__name__)


def create_asr_client(
    config: "ASRConfig",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseASRClient:
    """
    Create the speech-to-text client for the configured provider.

    Raises:
        ValueError: If provider is unknown
    """
    provider = config.provider.lower()
    if provider == "qiniu":
        client = QiniuASRClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            model=config.model,
            api_key=os.getenv(config.api_key_env),
            transport=transport,
        )
        logger.info(f"ASR provider: {client.provider_name} ({config.base_url})")
        return client

    raise ValueError(f"Unknown ASR provider: '{provider}'. Supported providers: qiniu")


def create_tts_client(
    config: "TTSConfig",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseTTSClient:
    """
    Create the text-to-speech client for the configured provider.

    Raises:
        ValueError: If provider is unknown
    """
    provider = config.provider.lower()
    if provider == "qiniu":
        client = QiniuTTSClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            encoding=config.encoding,
            speed_ratio=config.speed_ratio,
            api_key=os.getenv(config.api_key_env),
            transport=transport,
        )
        logger.info(f"TTS provider: {client.provider_name} ({config.base_url})")
        return client

    raise ValueError(f"Unknown TTS provider: '{provider}'. Supported providers: qiniu")
