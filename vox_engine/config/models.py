"""Pydantic models for configuration validation."""

from pathlib import Path
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict


def _validate_http_url(v: str, field_name: str) -> str:
    if not v.startswith(('http://', 'https://')):
        raise ValueError(f'{field_name} must start with http:// or https://')
    return v.rstrip('/')


class LLMConfig(BaseModel):
    """Text generation backend configuration."""

    provider: Literal["openai-compatible"] = "openai-compatible"
    base_url: str = "https://openai.qiniu.com/v1"
    model: str = "deepseek-v3"
    max_response_tokens: int = Field(default=1024, gt=0, le=8192)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: int = Field(default=60, gt=0)
    api_key_env: str = "VOX_LLM_API_KEY"

    @field_validator('base_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL is properly formatted."""
        return _validate_http_url(v, 'base_url')


class ASRConfig(BaseModel):
    """Speech-to-text backend configuration."""

    provider: Literal["qiniu"] = "qiniu"
    base_url: str = "https://openai.qiniu.com/v1"
    model: str = "asr"
    timeout_seconds: int = Field(default=30, gt=0)
    api_key_env: str = "VOX_LLM_API_KEY"

    @field_validator('base_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL is properly formatted."""
        return _validate_http_url(v, 'base_url')


class TTSConfig(BaseModel):
    """Text-to-speech backend configuration."""

    provider: Literal["qiniu"] = "qiniu"
    base_url: str = "https://openai.qiniu.com/v1"
    encoding: Literal["mp3", "wav", "pcm"] = "mp3"
    speed_ratio: float = Field(default=1.0, gt=0.0, le=3.0)
    timeout_seconds: int = Field(default=30, gt=0)
    api_key_env: str = "VOX_LLM_API_KEY"

    @field_validator('base_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL is properly formatted."""
        return _validate_http_url(v, 'base_url')


class PipelineConfig(BaseModel):
    """Conversation pipeline behaviour."""

    deadline_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Shared budget for one whole pipeline run (not reset per stage)"
    )
    fallback_voice: str = Field(
        default="qiniu_zh_female_tmjxxy",
        min_length=1,
        description="Voice used when neither the request nor the character names one"
    )
    tts_failure_policy: Literal["text_only", "fail"] = Field(
        default="text_only",
        description="text_only: return the reply without audio when synthesis fails; "
                    "fail: the whole request fails with the synthesis error"
    )


class AuthConfig(BaseModel):
    """How conversation scopes are derived from requests."""

    require_authentication: bool = Field(
        default=False,
        description="Reject requests without a verified user identity"
    )
    user_header: str = Field(
        default="X-User-ID",
        description="Header set by the auth gateway carrying the verified user id"
    )
    session_header: str = Field(
        default="X-Session-ID",
        description="Header carrying the anonymous scope token"
    )


class DatabaseConfig(BaseModel):
    """Storage configuration."""

    url: str = "sqlite:///data/vox.db"
    echo: bool = False


class PathsConfig(BaseModel):
    """File path configuration."""

    characters: Path = Path("characters")
    data: Path = Path("data")

    @field_validator('characters', 'data')
    @classmethod
    def validate_path(cls, v: Path) -> Path:
        """Ensure paths are cross-platform."""
        return Path(v)


class SystemConfig(BaseModel):
    """Top-level system configuration."""

    model_config = ConfigDict(extra='ignore')

    llm: LLMConfig = Field(default_factory=LLMConfig)
    asr: ASRConfig = Field(default_factory=ASRConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    debug: bool = False
    api_host: str = "localhost"
    api_port: int = Field(default=8000, gt=0, le=65535)


class CharacterConfig(BaseModel):
    """Persona seed loaded from characters/<id>.yaml."""

    model_config = ConfigDict(extra='ignore')

    id: str = Field(min_length=1, max_length=50, pattern=r'^[a-z0-9_-]+$')
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    system_prompt: str = Field(min_length=1)
    default_voice: str = Field(default="", description="Empty means use the system fallback voice")

    @field_validator('system_prompt')
    @classmethod
    def validate_system_prompt(cls, v: str) -> str:
        """A persona without instructions cannot drive generation."""
        if not v.strip():
            raise ValueError('system_prompt must not be blank')
        return v.strip()

    @field_validator('default_voice', mode='before')
    @classmethod
    def strip_voice(cls, v: Optional[str]) -> str:
        return (v or "").strip()
