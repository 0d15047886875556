"""Conversation pipeline services."""

from .conversation_scope import (
    AnonymousScope,
    AuthenticatedScope,
    ConversationScope,
    IdentityResolver,
    mint_scope_token,
    scope_key,
)
from .history_store import (
    CharacterRecord,
    CharacterStore,
    HistoryStore,
    MonotonicClock,
    SqlCharacterStore,
    SqlHistoryStore,
    TurnRecord,
)
from .message_composer import MessageComposer
from .pipeline_errors import (
    AuthenticationRequired,
    NotFoundError,
    PersistenceWarning,
    PipelineError,
    PipelineStage,
    PipelineTimeoutError,
    UpstreamError,
    ValidationError,
)
from .pipeline_orchestrator import PipelineOrchestrator, PipelineRequest, PipelineResult
from .response_assembler import ResponseAssembler

__all__ = [
    "AnonymousScope",
    "AuthenticatedScope",
    "ConversationScope",
    "IdentityResolver",
    "mint_scope_token",
    "scope_key",
    "CharacterRecord",
    "CharacterStore",
    "HistoryStore",
    "MonotonicClock",
    "SqlCharacterStore",
    "SqlHistoryStore",
    "TurnRecord",
    "MessageComposer",
    "AuthenticationRequired",
    "NotFoundError",
    "PersistenceWarning",
    "PipelineError",
    "PipelineStage",
    "PipelineTimeoutError",
    "UpstreamError",
    "ValidationError",
    "PipelineOrchestrator",
    "PipelineRequest",
    "PipelineResult",
    "ResponseAssembler",
]
