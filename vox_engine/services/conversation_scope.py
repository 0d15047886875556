"""
Conversation scope resolution.

A scope identifies one continuous conversation thread. It is either
authenticated (verified user + character) or anonymous (opaque session
token + character). The two variants are separate frozen types, and
scope_key() is the single place that turns a scope into a storage key.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from vox_engine.models.conversation import ScopeKind
from vox_engine.services.pipeline_errors import AuthenticationRequired, ValidationError

logger = logging.getLogger(__name__)

# 32 random bytes -> 256 bits of entropy
SCOPE_TOKEN_BYTES = 32


@dataclass(frozen=True)
class AuthenticatedScope:
    user_id: str
    character_id: str


@dataclass(frozen=True)
class AnonymousScope:
    session_token: str
    character_id: str


ConversationScope = Union[AuthenticatedScope, AnonymousScope]


def scope_key(scope: ConversationScope) -> Tuple[ScopeKind, str, str]:
    """
    Map a scope to its storage key.

    Returns:
        (scope_kind, scope_id, character_id)
    """
    if isinstance(scope, AuthenticatedScope):
        return ScopeKind.USER, scope.user_id, scope.character_id
    if isinstance(scope, AnonymousScope):
        return ScopeKind.SESSION, scope.session_token, scope.character_id
    raise TypeError(f"Unsupported conversation scope: {type(scope).__name__}")


def mint_scope_token() -> str:
    """Generate a new opaque, unguessable session token."""
    return secrets.token_urlsafe(SCOPE_TOKEN_BYTES)


class IdentityResolver:
    """Derives the conversation scope for a request."""

    def __init__(self, require_authentication: bool = False):
        self.require_authentication = require_authentication

    def resolve(
        self,
        character_id: str,
        user_id: Optional[str] = None,
        supplied_token: Optional[str] = None,
    ) -> Tuple[ConversationScope, str]:
        """
        Resolve the scope of a request.

        Args:
            character_id: Character the conversation is with
            user_id: Verified user identity, if the request carries one
            supplied_token: Scope token handed back by the caller, if any

        Returns:
            (scope, response_scope_token). The token is empty for
            authenticated scopes; otherwise it is the echoed or newly
            minted session token the caller must send on the next turn.

        Raises:
            ValidationError: If character_id is empty
            AuthenticationRequired: If authentication is mandatory and no
                user identity is present
        """
        if not character_id:
            raise ValidationError("character_id is required")

        if user_id:
            return AuthenticatedScope(user_id=user_id, character_id=character_id), ""

        if self.require_authentication:
            raise AuthenticationRequired("authentication is required")

        if supplied_token:
            return AnonymousScope(session_token=supplied_token, character_id=character_id), supplied_token

        token = mint_scope_token()
        logger.debug(f"Minted new session scope for character {character_id}")
        return AnonymousScope(session_token=token, character_id=character_id), token
