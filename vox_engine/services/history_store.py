"""
History and character stores.

The orchestrator only talks to the abstract HistoryStore and
CharacterStore. The SQL implementations open one short-lived session per
call, so a single store instance can be shared by concurrent requests.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from vox_engine.models.conversation import utc_now
from vox_engine.repositories.character_repository import CharacterRepository
from vox_engine.repositories.turn_repository import TurnRepository
from vox_engine.services.conversation_scope import ConversationScope, scope_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnRecord:
    """One persisted user/AI exchange."""
    user_message: str
    ai_message: str
    created_at: datetime


@dataclass(frozen=True)
class CharacterRecord:
    """Persona data the pipeline reads."""
    id: str
    name: str
    system_prompt: str
    default_voice: str = ""
    description: str = ""


class MonotonicClock:
    """Wall clock that never goes backwards within this process."""

    def __init__(self, source: Callable[[], datetime] = utc_now):
        self._source = source
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._source()
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current


class HistoryStore(ABC):
    """Append-only, ordered log of turns keyed by conversation scope."""

    @abstractmethod
    def list(self, scope: ConversationScope) -> List[TurnRecord]:
        """Return the scope's turns oldest first; empty if there are none."""
        pass

    @abstractmethod
    def append(self, scope: ConversationScope, user_message: str, ai_message: str) -> TurnRecord:
        """Append a turn stamped with the current time."""
        pass


class CharacterStore(ABC):
    """Read-only persona lookup."""

    @abstractmethod
    def get(self, character_id: str) -> Optional[CharacterRecord]:
        """Return the character, or None if it does not exist."""
        pass


def _to_character_record(character) -> CharacterRecord:
    return CharacterRecord(
        id=character.id,
        name=character.name,
        system_prompt=character.system_prompt,
        default_voice=character.default_voice or "",
        description=character.description or "",
    )


class SqlHistoryStore(HistoryStore):
    """HistoryStore backed by the turns table."""

    def __init__(self, session_factory: Callable[[], Session], clock: Optional[MonotonicClock] = None):
        self.session_factory = session_factory
        self.clock = clock or MonotonicClock()

    def list(self, scope: ConversationScope) -> List[TurnRecord]:
        kind, scope_id, character_id = scope_key(scope)
        with self.session_factory() as db:
            turns = TurnRepository(db).list_for_scope(kind, scope_id, character_id)
            return [
                TurnRecord(user_message=t.user_message, ai_message=t.ai_message, created_at=t.created_at)
                for t in turns
            ]

    def append(self, scope: ConversationScope, user_message: str, ai_message: str) -> TurnRecord:
        kind, scope_id, character_id = scope_key(scope)
        with self.session_factory() as db:
            turn = TurnRepository(db).create(
                scope_kind=kind,
                scope_id=scope_id,
                character_id=character_id,
                user_message=user_message,
                ai_message=ai_message,
                created_at=self.clock.now(),
            )
            return TurnRecord(
                user_message=turn.user_message,
                ai_message=turn.ai_message,
                created_at=turn.created_at,
            )


class SqlCharacterStore(CharacterStore):
    """CharacterStore backed by the characters table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, character_id: str) -> Optional[CharacterRecord]:
        with self.session_factory() as db:
            character = CharacterRepository(db).get_by_id(character_id)
            if character is None:
                return None
            return _to_character_record(character)

    def list(self, page: int = 1, page_size: int = 10, query: Optional[str] = None):
        """
        List characters for the catalogue endpoint.

        Returns:
            (records, total)
        """
        with self.session_factory() as db:
            repo = CharacterRepository(db)
            records = [_to_character_record(c) for c in repo.list(page, page_size, query)]
            return records, repo.count(query)

    def create(
        self,
        character_id: str,
        name: str,
        system_prompt: str,
        description: str = "",
        default_voice: str = "",
    ) -> Optional[CharacterRecord]:
        """
        Create a character.

        Returns:
            The new record, or None if the id is already taken
        """
        with self.session_factory() as db:
            repo = CharacterRepository(db)
            if repo.get_by_id(character_id) is not None:
                return None
            return _to_character_record(
                repo.create(character_id, name, system_prompt, description, default_voice)
            )

    def upsert(
        self,
        character_id: str,
        name: str,
        system_prompt: str,
        description: str = "",
        default_voice: str = "",
    ) -> CharacterRecord:
        with self.session_factory() as db:
            return _to_character_record(
                CharacterRepository(db).upsert(character_id, name, system_prompt, description, default_voice)
            )
