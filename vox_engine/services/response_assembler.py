"""Shapes pipeline output into the single JSON contract returned to callers."""

import base64
from typing import Any, Dict, Iterable, List, Optional

from vox_engine.services.history_store import TurnRecord
from vox_engine.services.pipeline_orchestrator import PipelineResult


class ResponseAssembler:
    """
    Builds response payloads.

    Audio is always base64 inside JSON. Optional parts (transcription,
    audio) are null when the corresponding stage did not run.
    """

    def assemble(self, result: PipelineResult, scope_token: str) -> Dict[str, Any]:
        return {
            "scope_token": scope_token or "",
            "transcribed_text": result.transcribed_text,
            "reply": result.reply,
            "audio_base64": self.encode_audio(result.audio),
            "audio_mime_type": result.audio_mime_type if result.audio is not None else None,
            "voice_id": result.voice_id,
            "tts_error": result.tts_error,
        }

    def assemble_history(self, turns: Iterable[TurnRecord], scope_token: str) -> Dict[str, Any]:
        items: List[Dict[str, Any]] = [
            {
                "user_message": turn.user_message,
                "ai_message": turn.ai_message,
                "timestamp": turn.created_at.isoformat(),
            }
            for turn in turns
        ]
        return {"scope_token": scope_token or "", "history": items}

    @staticmethod
    def encode_audio(audio: Optional[bytes]) -> Optional[str]:
        if audio is None:
            return None
        return base64.b64encode(audio).decode("ascii")
