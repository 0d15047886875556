"""Configuration loading and validation."""

from .models import (
    SystemConfig,
    CharacterConfig,
    LLMConfig,
    ASRConfig,
    TTSConfig,
    PipelineConfig,
    AuthConfig,
    DatabaseConfig,
    PathsConfig,
)
from .loader import ConfigLoader, ConfigLoadError, ConfigValidationError

__all__ = [
    "SystemConfig",
    "CharacterConfig",
    "LLMConfig",
    "ASRConfig",
    "TTSConfig",
    "PipelineConfig",
    "AuthConfig",
    "DatabaseConfig",
    "PathsConfig",
    "ConfigLoader",
    "ConfigLoadError",
    "ConfigValidationError",
]
