"""Database models for characters and conversation turns."""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Text, Enum, Integer, Index
import enum

from vox_engine.db.database import Base


def utc_now() -> datetime:
    """Naive UTC timestamp (SQLite stores datetimes without zone info)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ScopeKind(str, enum.Enum):
    """Which identity a conversation thread is keyed on."""
    USER = "user"
    SESSION = "session"


class Character(Base):
    """
    A persona that can be talked to.

    Characters are created by administrative flows (seed files or the
    character API); the conversation pipeline only ever reads them.
    """
    __tablename__ = "characters"

    id = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    system_prompt = Column(Text, nullable=False)
    # Empty string means "use the system fallback voice"
    default_voice = Column(String(100), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f"<Character(id={self.id}, name={self.name})>"


class Turn(Base):
    """
    One persisted user/AI exchange within a conversation scope.

    Turns are append-only. For a fixed (scope_kind, scope_id, character_id)
    the canonical dialogue order is created_at ascending, ties broken by id.
    """
    __tablename__ = "turns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scope_kind = Column(Enum(ScopeKind), nullable=False)
    scope_id = Column(String(200), nullable=False)
    character_id = Column(String(50), nullable=False)
    user_message = Column(Text, nullable=False)
    ai_message = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        Index("ix_turns_scope_created", "scope_kind", "scope_id", "character_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<Turn(id={self.id}, scope={self.scope_kind.value}, "
            f"character={self.character_id})>"
        )
