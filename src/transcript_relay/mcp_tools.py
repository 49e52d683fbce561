from __future__ import annotations

from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations

from transcript_relay.config import Settings
from transcript_relay.errors import RelayError
from transcript_relay.orchestrator import Orchestrator
from transcript_relay.types import TranscriptionRequest


class ToolRegistry:
    def __init__(self, orchestrator: Orchestrator, settings: Settings) -> None:
        self.orchestrator = orchestrator
        self.settings = settings

    def register(self, mcp: FastMCP) -> None:
        @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
        def transcribe(
            audio_url: str,
            speech_model: str | None = None,
            language_code: str | None = None,
        ) -> dict[str, Any]:
            """Transcribe a publicly reachable audio file.

            Args:
                audio_url: GitHub raw link or public storage link to an mp3, wav, flac or m4a file
                speech_model: "best" or "fast" (default from server settings)
                language_code: Spoken language code, or "auto" (default from server settings)

            Returns:
                Transcript text and audio duration in seconds.
            """
            api_key = self.settings.assemblyai_api_key
            if not api_key:
                return {"error": "missing_api_key", "message": "ASSEMBLYAI_API_KEY is not configured"}

            model = speech_model or self.settings.speech_model
            if model not in ("best", "fast"):
                return {"error": "invalid_speech_model", "message": f"Unsupported speech model: {model}"}

            request = TranscriptionRequest(
                audio_url=audio_url.strip(),
                speech_model=model,  # type: ignore[arg-type]
                language_code=language_code or self.settings.language_code,
            )
            try:
                result = self.orchestrator.transcribe(request, api_key)
            except RelayError as exc:
                return {"error": exc.cause, "message": exc.message}
            return {"success": True, "text": result.text, "duration": result.duration_seconds}

        @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
        def translate(text: str) -> dict[str, Any]:
            """Translate text, splitting long input into segments translated in parallel.

            Segments that cannot be translated are replaced by a failure marker
            instead of failing the whole call.
            """
            api_key = self.settings.translation_api_key
            if not api_key:
                return {"error": "missing_api_key", "message": "TRANSLATION_API_KEY is not configured"}
            if not text.strip():
                return {"error": "empty_text", "message": "Nothing to translate"}

            outcome = self.orchestrator.translate(text, api_key)
            return {
                "success": True,
                "translation": outcome.joined_text,
                "segments": len(outcome.segment_results),
                "failed_segments": outcome.failed_count,
            }
