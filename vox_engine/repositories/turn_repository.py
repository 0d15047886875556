"""Repository for conversation turn operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from vox_engine.models.conversation import Turn, ScopeKind, utc_now

logger = logging.getLogger(__name__)


class TurnRepository:
    """Handle database operations for turns."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        scope_kind: ScopeKind,
        scope_id: str,
        character_id: str,
        user_message: str,
        ai_message: str,
        created_at: Optional[datetime] = None,
    ) -> Turn:
        """
        Append a turn.

        Args:
            scope_kind: Whether scope_id is a user id or a session token
            scope_id: User id or session token
            character_id: Character the exchange was with
            user_message: What the user said (typed or transcribed)
            ai_message: The generated reply
            created_at: Creation time (defaults to now)

        Returns:
            Created turn
        """
        turn = Turn(
            scope_kind=scope_kind,
            scope_id=scope_id,
            character_id=character_id,
            user_message=user_message,
            ai_message=ai_message,
            created_at=created_at or utc_now(),
        )
        self.db.add(turn)
        self.db.commit()
        self.db.refresh(turn)
        return turn

    def list_for_scope(self, scope_kind: ScopeKind, scope_id: str, character_id: str) -> List[Turn]:
        """
        List all turns of one conversation thread.

        Returns:
            Turns ordered by creation time (oldest first), ties in insertion order
        """
        turns = (
            self.db.query(Turn)
            .filter(Turn.scope_kind == scope_kind)
            .filter(Turn.scope_id == scope_id)
            .filter(Turn.character_id == character_id)
            .order_by(Turn.created_at.asc(), Turn.id.asc())
            .all()
        )
        logger.debug(
            f"Retrieved {len(turns)} turns for {scope_kind.value} scope / {character_id}"
        )
        return turns

    def count_for_scope(self, scope_kind: ScopeKind, scope_id: str, character_id: str) -> int:
        """Count turns in one conversation thread."""
        return (
            self.db.query(Turn)
            .filter(Turn.scope_kind == scope_kind)
            .filter(Turn.scope_id == scope_id)
            .filter(Turn.character_id == character_id)
            .count()
        )
