"""FastAPI application for Vox Engine."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from vox_engine.api.container import ServiceContainer, get_services
from vox_engine.config import CharacterConfig, SystemConfig
from vox_engine.services import (
    CharacterRecord,
    ConversationScope,
    PipelineError,
    PipelineStage,
    UpstreamError,
    ValidationError,
)
from vox_engine.speech import SpeechError

logger = logging.getLogger(__name__)


# Request/Response models
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    llm_available: bool
    asr_configured: bool
    tts_configured: bool


class CharacterResponse(BaseModel):
    """Character response model."""
    id: str
    name: str
    description: str
    default_voice: str

    class Config:
        from_attributes = True


class CharacterListResponse(BaseModel):
    characters: List[CharacterResponse]
    total: int
    page: int
    page_size: int


class ChatRequest(BaseModel):
    """Text chat request."""
    character_id: str
    text: str
    with_audio: bool = False
    voice_id: Optional[str] = None
    scope_token: Optional[str] = None


class VoiceChatRequest(BaseModel):
    """Voice chat request. The audio must already be uploaded to a reachable URL."""
    character_id: str
    audio_url: str
    audio_format: str
    voice_id: Optional[str] = None
    scope_token: Optional[str] = None


class PipelineResponse(BaseModel):
    """Canonical conversation response."""
    scope_token: str
    transcribed_text: Optional[str] = None
    reply: str
    audio_base64: Optional[str] = None
    audio_mime_type: Optional[str] = None
    voice_id: Optional[str] = None
    tts_error: Optional[str] = None


class HistoryItem(BaseModel):
    user_message: str
    ai_message: str
    timestamp: str


class HistoryResponse(BaseModel):
    scope_token: str
    history: List[HistoryItem]


class TranscribeRequest(BaseModel):
    audio_url: str
    audio_format: str


class TranscribeResponse(BaseModel):
    text: str


class TTSRequest(BaseModel):
    text: str = Field(min_length=1)
    voice_id: Optional[str] = None


class TTSResponse(BaseModel):
    audio_base64: str
    audio_mime_type: str
    voice_id: str


def _resolve_scope(
    request: Request,
    services: ServiceContainer,
    character_id: str,
    body_token: Optional[str] = None,
) -> tuple[ConversationScope, str]:
    user_id = services.auth_provider.identity(request)
    supplied = request.headers.get(services.config.auth.session_header) or body_token
    return services.identity_resolver.resolve(character_id, user_id=user_id, supplied_token=supplied)


def _scoped_response(services: ServiceContainer, payload: dict, scope_token: str) -> JSONResponse:
    headers = {services.config.auth.session_header: scope_token} if scope_token else None
    return JSONResponse(content=payload, headers=headers)


def _character_response(record: CharacterRecord) -> CharacterResponse:
    return CharacterResponse(
        id=record.id,
        name=record.name,
        description=record.description,
        default_voice=record.default_voice,
    )


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(services: ServiceContainer = Depends(get_services)):
    """Check system health."""
    return HealthResponse(
        status="ok",
        llm_available=await services.llm_client.health_check(),
        asr_configured=services.asr_client is not None,
        tts_configured=services.tts_client is not None,
    )


@router.get("/api/v1/characters", response_model=CharacterListResponse)
def list_characters(
    page: int = 1,
    page_size: int = 10,
    query: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
):
    """List characters, optionally filtered by name."""
    page = page if page > 0 else 1
    page_size = page_size if page_size > 0 else 10
    records, total = services.character_store.list(page, page_size, query)
    return CharacterListResponse(
        characters=[_character_response(r) for r in records],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/api/v1/characters/{character_id}", response_model=CharacterResponse)
def get_character(character_id: str, services: ServiceContainer = Depends(get_services)):
    """Get one character."""
    record = services.character_store.get(character_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Character '{character_id}' not found")
    return _character_response(record)


@router.post("/api/v1/characters", response_model=CharacterResponse, status_code=201)
def create_character(character: CharacterConfig, services: ServiceContainer = Depends(get_services)):
    """Create a persona."""
    record = services.character_store.create(
        character.id,
        character.name,
        character.system_prompt,
        description=character.description,
        default_voice=character.default_voice,
    )
    if record is None:
        raise HTTPException(status_code=409, detail=f"Character '{character.id}' already exists")
    logger.info(f"Created character: {record.id}")
    return _character_response(record)


@router.post("/api/v1/chat", response_model=PipelineResponse)
async def chat(
    body: ChatRequest,
    request: Request,
    services: ServiceContainer = Depends(get_services),
):
    """Text chat with a character."""
    scope, scope_token = _resolve_scope(request, services, body.character_id, body.scope_token)
    result = await services.orchestrator.chat(
        scope,
        body.text,
        with_audio=body.with_audio,
        voice_id=body.voice_id,
    )
    return _scoped_response(services, services.assembler.assemble(result, scope_token), scope_token)


@router.post("/api/v1/voice/chat", response_model=PipelineResponse)
async def voice_chat(
    body: VoiceChatRequest,
    request: Request,
    services: ServiceContainer = Depends(get_services),
):
    """Voice chat: transcribe, reply, and speak the reply."""
    scope, scope_token = _resolve_scope(request, services, body.character_id, body.scope_token)
    result = await services.orchestrator.voice_chat(
        scope,
        body.audio_url,
        body.audio_format,
        voice_id=body.voice_id,
    )
    return _scoped_response(services, services.assembler.assemble(result, scope_token), scope_token)


@router.get("/api/v1/history/{character_id}", response_model=HistoryResponse)
async def get_history(
    character_id: str,
    request: Request,
    scope_token: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
):
    """Ordered turns of the caller's conversation with a character."""
    scope, response_token = _resolve_scope(request, services, character_id, scope_token)
    turns = await services.orchestrator.get_history(scope)
    payload = services.assembler.assemble_history(turns, response_token)
    return _scoped_response(services, payload, response_token)


@router.post("/api/v1/transcribe", response_model=TranscribeResponse)
async def transcribe(body: TranscribeRequest, services: ServiceContainer = Depends(get_services)):
    """Standalone speech-to-text."""
    if services.asr_client is None:
        raise UpstreamError(PipelineStage.ASR, "no speech-to-text provider configured")
    try:
        text = await services.asr_client.transcribe(body.audio_url, body.audio_format)
    except SpeechError as e:
        raise UpstreamError(PipelineStage.ASR, str(e)) from e
    return TranscribeResponse(text=text)


@router.post("/api/v1/tts", response_model=TTSResponse)
async def text_to_speech(body: TTSRequest, services: ServiceContainer = Depends(get_services)):
    """Standalone text-to-speech."""
    if not body.text.strip():
        raise ValidationError("text must not be blank")
    if services.tts_client is None:
        raise UpstreamError(PipelineStage.TTS, "no text-to-speech provider configured")

    voice_id = body.voice_id or services.config.pipeline.fallback_voice
    try:
        audio = await services.tts_client.synthesize(body.text, voice_id)
    except SpeechError as e:
        raise UpstreamError(PipelineStage.TTS, str(e)) from e

    return TTSResponse(
        audio_base64=services.assembler.encode_audio(audio),
        audio_mime_type=services.tts_client.mime_type,
        voice_id=voice_id,
    )


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "stage": exc.stage.value if exc.stage else None},
    )


def create_app(config: Optional[SystemConfig] = None, services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        config: System configuration (defaults if None)
        services: Pre-built container; when omitted, one is built from
            config on startup and closed on shutdown
    """
    config = config or (services.config if services else SystemConfig())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown logic."""
        logger.info("Starting Vox Engine...")
        owned = app.state.services is None
        if owned:
            app.state.services = ServiceContainer.build(config)
        logger.info("✓ Vox Engine ready")

        yield

        logger.info("Shutting down Vox Engine...")
        if owned:
            await app.state.services.aclose()
            app.state.services = None

    app = FastAPI(
        title="Vox Engine",
        description="Character voice conversation service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[config.auth.session_header],
    )
    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.include_router(router)
    return app
