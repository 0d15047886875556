"""
Conversation pipeline error taxonomy.

Every error a pipeline run can surface to a caller derives from
PipelineError and carries the HTTP-equivalent status code the API layer
responds with. PersistenceWarning is the one non-fatal outcome: it is
recorded on the result and logged, never raised.
"""

import enum
from typing import Optional


class PipelineStage(str, enum.Enum):
    """Stages of one orchestration run, in execution order."""
    ASR = "asr"
    LOAD_CHARACTER = "load_character"
    LOAD_HISTORY = "load_history"
    GENERATE = "generate"
    PERSIST = "persist"
    TTS = "tts"


class PipelineError(Exception):
    """Base class for errors that abort a pipeline run."""

    status_code = 500

    def __init__(self, message: str, stage: Optional[PipelineStage] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class ValidationError(PipelineError):
    """Missing or invalid required input."""
    status_code = 400


class AuthenticationRequired(PipelineError):
    """No identity could be resolved and the deployment requires one."""
    status_code = 401


class NotFoundError(PipelineError):
    """Unknown character or scope."""
    status_code = 404

    def __init__(self, message: str, resource: str = "character", stage: Optional[PipelineStage] = None):
        super().__init__(message, stage)
        self.resource = resource


class UpstreamError(PipelineError):
    """An external AI operation failed."""
    status_code = 502

    def __init__(self, stage: PipelineStage, message: str):
        super().__init__(f"{stage.value} failed: {message}", stage)


class PipelineTimeoutError(PipelineError, TimeoutError):
    """The shared deadline expired before the run completed."""
    status_code = 504


class PersistenceWarning(Warning):
    """A turn could not be appended to history after a successful reply."""
    pass
