"""
Tests for SQL-backed history and character storage.

Runs against in-memory SQLite.
"""

import logging
from datetime import datetime, timedelta

import pytest

from vox_engine.config import DatabaseConfig
from vox_engine.db import Database
from vox_engine.models import ScopeKind
from vox_engine.repositories import CharacterRepository, TurnRepository
from vox_engine.services import (
    AnonymousScope,
    AuthenticatedScope,
    MonotonicClock,
    SqlCharacterStore,
    SqlHistoryStore,
)


@pytest.fixture
def database():
    db = Database(DatabaseConfig(url="sqlite:///:memory:"))
    db.init_db()
    yield db
    db.dispose()


class TestSqlHistoryStore:

    def test_empty_scope_lists_nothing(self, database):
        store = SqlHistoryStore(database.SessionLocal)

        assert store.list(AnonymousScope("nobody", "socrates")) == []

    def test_append_then_list_in_order(self, database):
        store = SqlHistoryStore(database.SessionLocal)
        scope = AuthenticatedScope("42", "socrates")

        for i in range(10):
            store.append(scope, f"u{i}", f"a{i}")

        turns = store.list(scope)
        assert [t.user_message for t in turns] == [f"u{i}" for i in range(10)]
        assert [t.ai_message for t in turns] == [f"a{i}" for i in range(10)]
        assert all(a.created_at <= b.created_at for a, b in zip(turns, turns[1:]))

    def test_scopes_are_isolated(self, database):
        store = SqlHistoryStore(database.SessionLocal)
        store.append(AuthenticatedScope("42", "socrates"), "mine", "reply")
        store.append(AnonymousScope("42", "socrates"), "session", "reply")
        store.append(AuthenticatedScope("42", "harry_potter"), "other character", "reply")

        turns = store.list(AuthenticatedScope("42", "socrates"))

        assert [t.user_message for t in turns] == ["mine"]

    def test_equal_timestamps_keep_insertion_order(self, database):
        frozen = datetime(2024, 1, 1, 12, 0, 0)
        store = SqlHistoryStore(database.SessionLocal, clock=MonotonicClock(source=lambda: frozen))
        scope = AnonymousScope("tok", "socrates")

        for i in range(5):
            store.append(scope, f"u{i}", f"a{i}")

        assert [t.user_message for t in store.list(scope)] == [f"u{i}" for i in range(5)]


class TestMonotonicClock:

    def test_never_goes_backwards(self):
        now = datetime(2024, 1, 1, 12, 0, 0)
        readings = iter([now, now - timedelta(seconds=5), now + timedelta(seconds=1)])
        clock = MonotonicClock(source=lambda: next(readings))

        first = clock.now()
        second = clock.now()
        third = clock.now()

        assert first == now
        assert second == now
        assert third == now + timedelta(seconds=1)


class TestTurnRepository:

    def test_orders_by_created_at_not_insertion(self, database):
        with database.SessionLocal() as db:
            repo = TurnRepository(db)
            base = datetime(2024, 1, 1)
            repo.create(ScopeKind.USER, "1", "socrates", "later", "r", created_at=base + timedelta(minutes=1))
            repo.create(ScopeKind.USER, "1", "socrates", "earlier", "r", created_at=base)

            turns = repo.list_for_scope(ScopeKind.USER, "1", "socrates")

            assert [t.user_message for t in turns] == ["earlier", "later"]
            assert repo.count_for_scope(ScopeKind.USER, "1", "socrates") == 2

    def test_session_token_not_logged_or_repr(self, database, caplog):
        token = "secret-session-token-value"
        caplog.set_level(logging.DEBUG, logger="vox_engine")

        with database.SessionLocal() as db:
            repo = TurnRepository(db)
            turn = repo.create(ScopeKind.SESSION, token, "socrates", "hi", "hello")
            repo.list_for_scope(ScopeKind.SESSION, token, "socrates")

            assert token not in repr(turn)
        assert token not in caplog.text


class TestCharacterStorage:

    def _seed(self, database):
        with database.SessionLocal() as db:
            repo = CharacterRepository(db)
            repo.create("socrates", "Socrates", "prompt s")
            repo.create("harry_potter", "Harry Potter", "prompt h", default_voice="boy_voice")
            repo.create("hermione", "Hermione Granger", "prompt g")

    def test_get(self, database):
        self._seed(database)
        store = SqlCharacterStore(database.SessionLocal)

        record = store.get("harry_potter")

        assert record.system_prompt == "prompt h"
        assert record.default_voice == "boy_voice"
        assert store.get("missing") is None

    def test_list_paginates_by_id(self, database):
        self._seed(database)
        store = SqlCharacterStore(database.SessionLocal)

        first, total = store.list(page=1, page_size=2)
        second, _ = store.list(page=2, page_size=2)

        assert total == 3
        assert [c.id for c in first] == ["harry_potter", "hermione"]
        assert [c.id for c in second] == ["socrates"]

    def test_list_search_is_case_insensitive(self, database):
        self._seed(database)
        store = SqlCharacterStore(database.SessionLocal)

        records, total = store.list(query="harry")

        assert total == 1
        assert records[0].id == "harry_potter"

    def test_create_rejects_duplicate(self, database):
        store = SqlCharacterStore(database.SessionLocal)

        assert store.create("socrates", "Socrates", "prompt") is not None
        assert store.create("socrates", "Other", "prompt") is None

    def test_upsert_overwrites(self, database):
        store = SqlCharacterStore(database.SessionLocal)
        store.upsert("socrates", "Socrates", "old prompt")

        record = store.upsert("socrates", "Socrates", "new prompt", default_voice="sage")

        assert record.system_prompt == "new prompt"
        assert store.get("socrates").default_voice == "sage"
