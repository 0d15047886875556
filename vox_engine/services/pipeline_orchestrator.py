"""
Conversation Pipeline Orchestrator

Runs one conversational turn end to end:
1. Transcribe (only when the request carries audio)
2. Load the character
3. Load the scope's history
4. Compose the message list
5. Generate the reply
6. Persist the turn (best-effort)
7. Synthesize the reply (only when audio output was requested)

All stages share one deadline that starts when the run begins. Once
Generate succeeds the reply is always delivered: a failed append is
downgraded to a PersistenceWarning on the result, and a failed synthesis
either degrades to a text-only reply or fails the run, depending on
PipelineConfig.tts_failure_policy.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Dict, List, Optional, TypeVar

from vox_engine.config.models import PipelineConfig
from vox_engine.llm.base import BaseLLMClient, LLMError
from vox_engine.services.conversation_scope import ConversationScope
from vox_engine.services.history_store import CharacterRecord, CharacterStore, HistoryStore, TurnRecord
from vox_engine.services.message_composer import MessageComposer
from vox_engine.services.pipeline_errors import (
    NotFoundError,
    PersistenceWarning,
    PipelineStage,
    PipelineTimeoutError,
    UpstreamError,
    ValidationError,
)
from vox_engine.speech.base import BaseASRClient, BaseTTSClient, SpeechError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TTS_POLICY_TEXT_ONLY = "text_only"
TTS_POLICY_FAIL = "fail"


@dataclass
class PipelineRequest:
    """Input to one orchestration run. Exactly one of text / audio_url is set."""
    character_id: str
    text: Optional[str] = None
    audio_url: Optional[str] = None
    audio_format: Optional[str] = None
    voice_id: Optional[str] = None
    with_audio: bool = False

    @property
    def has_audio_input(self) -> bool:
        return bool(self.audio_url)

    def validate(self) -> None:
        """
        Raises:
            ValidationError: If the request is incomplete or ambiguous
        """
        if not self.character_id:
            raise ValidationError("character_id is required")

        has_text = bool(self.text and self.text.strip())
        if has_text == self.has_audio_input:
            raise ValidationError("exactly one of text or audio_url is required")

        if self.has_audio_input and not self.audio_format:
            raise ValidationError("audio_format is required with audio_url")


@dataclass
class PipelineResult:
    """Outcome of a successful run."""
    user_text: str
    reply: str
    transcribed_text: Optional[str] = None
    audio: Optional[bytes] = None
    audio_mime_type: Optional[str] = None
    voice_id: Optional[str] = None
    tts_error: Optional[str] = None
    warnings: List[Warning] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)


@dataclass
class _RunProgress:
    stage: Optional[PipelineStage] = None
    timings: Dict[str, float] = field(default_factory=dict)


class PipelineOrchestrator:
    """
    Sequences ASR, generation, persistence and TTS for one request.

    Holds no per-request state; build it once with its collaborators and
    share it across requests.
    """

    def __init__(
        self,
        character_store: CharacterStore,
        history_store: HistoryStore,
        llm_client: BaseLLMClient,
        asr_client: Optional[BaseASRClient],
        tts_client: Optional[BaseTTSClient],
        config: Optional[PipelineConfig] = None,
        composer: Optional[MessageComposer] = None,
    ):
        self.character_store = character_store
        self.history_store = history_store
        self.llm_client = llm_client
        self.asr_client = asr_client
        self.tts_client = tts_client
        self.config = config or PipelineConfig()
        self.composer = composer or MessageComposer()

    async def chat(
        self,
        scope: ConversationScope,
        text: str,
        with_audio: bool = False,
        voice_id: Optional[str] = None,
    ) -> PipelineResult:
        """Text in, text (and optionally audio) out."""
        request = PipelineRequest(
            character_id=scope.character_id,
            text=text,
            voice_id=voice_id,
            with_audio=with_audio,
        )
        return await self.run(request, scope)

    async def voice_chat(
        self,
        scope: ConversationScope,
        audio_url: str,
        audio_format: str,
        voice_id: Optional[str] = None,
    ) -> PipelineResult:
        """Audio in, transcription + reply + audio out."""
        request = PipelineRequest(
            character_id=scope.character_id,
            audio_url=audio_url,
            audio_format=audio_format,
            voice_id=voice_id,
            with_audio=True,
        )
        return await self.run(request, scope)

    async def get_history(self, scope: ConversationScope) -> List[TurnRecord]:
        """Ordered turns of a scope (empty if the thread has not started)."""
        return await asyncio.to_thread(self.history_store.list, scope)

    def resolve_voice(self, override: Optional[str], character: CharacterRecord) -> str:
        """Request override, else the character's default voice, else the fallback voice."""
        if override:
            return override
        if character.default_voice:
            return character.default_voice
        return self.config.fallback_voice

    async def run(self, request: PipelineRequest, scope: ConversationScope) -> PipelineResult:
        """
        Execute one pipeline run under the shared deadline.

        Raises:
            ValidationError: Invalid request
            NotFoundError: Unknown character
            UpstreamError: ASR, generation, or (policy "fail") TTS failure
            PipelineTimeoutError: Deadline expired before completion
        """
        request.validate()
        if request.character_id != scope.character_id:
            raise ValidationError("request character does not match conversation scope")

        progress = _RunProgress()
        started = time.time()
        try:
            async with asyncio.timeout(self.config.deadline_seconds):
                result = await self._run_stages(request, scope, progress)
        except TimeoutError:
            stage = progress.stage.value if progress.stage else "start"
            logger.warning(
                f"[PIPELINE] Deadline of {self.config.deadline_seconds}s exceeded during {stage} "
                f"(character={request.character_id})"
            )
            raise PipelineTimeoutError(
                f"pipeline deadline of {self.config.deadline_seconds}s exceeded",
                stage=progress.stage,
            )

        result.timings = progress.timings
        logger.info(
            f"[PIPELINE] Completed for {request.character_id} in {time.time() - started:.2f}s "
            f"(stages: {', '.join(f'{k}={v:.2f}s' for k, v in progress.timings.items())})"
        )
        return result

    async def _step(self, progress: _RunProgress, stage: PipelineStage, awaitable: Awaitable[T]) -> T:
        progress.stage = stage
        stage_start = time.time()
        try:
            return await awaitable
        finally:
            progress.timings[stage.value] = time.time() - stage_start

    async def _run_stages(
        self,
        request: PipelineRequest,
        scope: ConversationScope,
        progress: _RunProgress,
    ) -> PipelineResult:
        transcribed_text = None
        if request.has_audio_input:
            transcribed_text = await self._step(progress, PipelineStage.ASR, self._transcribe(request))
            user_text = transcribed_text
        else:
            user_text = request.text.strip()

        character = await self._step(
            progress,
            PipelineStage.LOAD_CHARACTER,
            asyncio.to_thread(self.character_store.get, request.character_id),
        )
        if character is None:
            raise NotFoundError(
                f"character not found: {request.character_id}",
                resource="character",
                stage=PipelineStage.LOAD_CHARACTER,
            )

        history = await self._step(
            progress,
            PipelineStage.LOAD_HISTORY,
            asyncio.to_thread(self.history_store.list, scope),
        )

        messages = self.composer.compose(character.system_prompt, history, user_text)
        reply = await self._step(progress, PipelineStage.GENERATE, self._generate(messages))

        result = PipelineResult(user_text=user_text, reply=reply, transcribed_text=transcribed_text)

        await self._step(progress, PipelineStage.PERSIST, self._persist(scope, user_text, reply, result))

        if request.with_audio:
            await self._step(progress, PipelineStage.TTS, self._synthesize(request, character, reply, result))

        return result

    async def _transcribe(self, request: PipelineRequest) -> str:
        if self.asr_client is None:
            raise UpstreamError(PipelineStage.ASR, "no speech-to-text provider configured")
        try:
            return await self.asr_client.transcribe(request.audio_url, request.audio_format)
        except SpeechError as e:
            logger.error(f"[PIPELINE] ASR failed: {e}")
            raise UpstreamError(PipelineStage.ASR, str(e)) from e

    async def _generate(self, messages: List[Dict[str, str]]) -> str:
        try:
            response = await self.llm_client.generate_with_history(messages)
        except LLMError as e:
            logger.error(f"[PIPELINE] Generation failed: {e}")
            raise UpstreamError(PipelineStage.GENERATE, str(e)) from e
        return response.content

    async def _persist(self, scope: ConversationScope, user_text: str, reply: str, result: PipelineResult) -> None:
        try:
            await asyncio.to_thread(self.history_store.append, scope, user_text, reply)
        except Exception as e:
            # Non-fatal after a successful generate
            warning = PersistenceWarning(f"failed to save turn: {e}")
            result.warnings.append(warning)
            logger.warning(f"[PIPELINE] {warning} (character={scope.character_id})")

    async def _synthesize(
        self,
        request: PipelineRequest,
        character: CharacterRecord,
        reply: str,
        result: PipelineResult,
    ) -> None:
        voice_id = self.resolve_voice(request.voice_id, character)
        result.voice_id = voice_id
        try:
            if self.tts_client is None:
                raise SpeechError("no text-to-speech provider configured")
            audio = await self.tts_client.synthesize(reply, voice_id)
        except SpeechError as e:
            if self.config.tts_failure_policy == TTS_POLICY_FAIL:
                logger.error(f"[PIPELINE] TTS failed: {e}")
                raise UpstreamError(PipelineStage.TTS, str(e)) from e
            logger.warning(f"[PIPELINE] TTS failed, returning text only: {e}")
            result.tts_error = str(e)
            return

        result.audio = audio
        result.audio_mime_type = self.tts_client.mime_type
