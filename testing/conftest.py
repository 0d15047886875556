"""Shared fakes and fixtures for the test suite."""

import asyncio
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from vox_engine.config import PipelineConfig
from vox_engine.llm import LLMResponse
from vox_engine.services import (
    CharacterRecord,
    CharacterStore,
    HistoryStore,
    MonotonicClock,
    PipelineOrchestrator,
    TurnRecord,
    scope_key,
)


class FakeLLMClient:
    """Records every message list and replies with a fixed text."""

    def __init__(self, reply: str = "Hello there", error: Optional[Exception] = None, delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: List[List[Dict[str, str]]] = []

    async def generate_with_history(self, messages, temperature=None, max_tokens=None, model=None):
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply, model="fake")

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class FakeASRClient:
    def __init__(self, text: str = "How are you?", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls = []

    async def transcribe(self, audio_url: str, audio_format: str) -> str:
        self.calls.append((audio_url, audio_format))
        if self.error:
            raise self.error
        return self.text

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class FakeTTSClient:
    mime_type = "audio/mpeg"

    def __init__(self, audio: bytes = b"ID3fake-audio", error: Optional[Exception] = None, delay: float = 0.0):
        self.audio = audio
        self.error = error
        self.delay = delay
        self.calls = []

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        self.calls.append((text, voice_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.audio

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class InMemoryHistoryStore(HistoryStore):
    def __init__(self, fail_append: bool = False):
        self.fail_append = fail_append
        self.turns: Dict[tuple, List[TurnRecord]] = {}
        self.clock = MonotonicClock()
        self.append_calls = 0

    def list(self, scope):
        return list(self.turns.get(scope_key(scope), []))

    def append(self, scope, user_message, ai_message):
        self.append_calls += 1
        if self.fail_append:
            raise RuntimeError("database is locked")
        turn = TurnRecord(user_message=user_message, ai_message=ai_message, created_at=self.clock.now())
        self.turns.setdefault(scope_key(scope), []).append(turn)
        return turn


class InMemoryCharacterStore(CharacterStore):
    def __init__(self, characters: Optional[List[CharacterRecord]] = None):
        self.characters = {c.id: c for c in (characters or [])}

    def get(self, character_id):
        return self.characters.get(character_id)

    def list(self, page=1, page_size=10, query=None):
        matches = sorted(
            (c for c in self.characters.values() if not query or query.lower() in c.name.lower()),
            key=lambda c: c.id,
        )
        start = (page - 1) * page_size
        return matches[start:start + page_size], len(matches)

    def create(self, character_id, name, system_prompt, description="", default_voice=""):
        if character_id in self.characters:
            return None
        record = CharacterRecord(
            id=character_id,
            name=name,
            system_prompt=system_prompt,
            default_voice=default_voice,
            description=description,
        )
        self.characters[character_id] = record
        return record

    def upsert(self, character_id, name, system_prompt, description="", default_voice=""):
        self.characters.pop(character_id, None)
        return self.create(character_id, name, system_prompt, description, default_voice)


SOCRATES = CharacterRecord(
    id="socrates",
    name="Socrates",
    system_prompt="You are Socrates. Answer with questions.",
    default_voice="",
)

NARRATOR = CharacterRecord(
    id="narrator",
    name="Narrator",
    system_prompt="You narrate.",
    default_voice="narrator_voice",
)


@pytest.fixture
def character_store():
    return InMemoryCharacterStore([SOCRATES, NARRATOR])


@pytest.fixture
def history_store():
    return InMemoryHistoryStore()


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def asr():
    return FakeASRClient()


@pytest.fixture
def tts():
    return FakeTTSClient()


@pytest.fixture
def make_orchestrator(character_store, history_store, llm, asr, tts):
    """Build an orchestrator; keyword overrides replace individual collaborators."""

    def _make(**overrides):
        config = overrides.pop("config", None) or PipelineConfig()
        components = {
            "character_store": character_store,
            "history_store": history_store,
            "llm_client": llm,
            "asr_client": asr,
            "tts_client": tts,
        }
        components.update(overrides)
        return PipelineOrchestrator(config=config, **components)

    return _make


@pytest.fixture
def fakes():
    """Fake classes for tests that need their own instances."""
    return SimpleNamespace(
        LLM=FakeLLMClient,
        ASR=FakeASRClient,
        TTS=FakeTTSClient,
        HistoryStore=InMemoryHistoryStore,
        CharacterStore=InMemoryCharacterStore,
        SOCRATES=SOCRATES,
        NARRATOR=NARRATOR,
    )
