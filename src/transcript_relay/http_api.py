"""JSON HTTP endpoints for browser and script clients.

``POST /api/transcribe`` takes ``{audioUrl, speechModel?, languageCode?}`` and
``POST /api/translate`` takes ``{text}``. Relay errors become ``{"error": ...}``
bodies with the error's status code.
"""

from __future__ import annotations

import logging
from typing import Any

from fastmcp import FastMCP
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from transcript_relay.config import Settings
from transcript_relay.errors import RelayError
from transcript_relay.orchestrator import Orchestrator
from transcript_relay.types import TranscriptionRequest

logger = logging.getLogger(__name__)

SPEECH_MODELS = ("best", "fast")


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


class HttpRoutes:
    def __init__(self, orchestrator: Orchestrator, settings: Settings) -> None:
        self.orchestrator = orchestrator
        self.settings = settings

    def routes(self) -> list[Route]:
        return [
            Route("/api/transcribe", self.transcribe, methods=["POST"]),
            Route("/api/translate", self.translate, methods=["POST"]),
        ]

    def register(self, mcp: FastMCP) -> None:
        for route in self.routes():
            mcp.custom_route(route.path, methods=["POST"])(route.endpoint)

    async def _json_body(self, request: Request) -> dict[str, Any] | None:
        try:
            body = await request.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    async def transcribe(self, request: Request) -> JSONResponse:
        body = await self._json_body(request)
        if body is None:
            return _error("Could not parse request; submit a valid JSON body", 400)

        audio_url = str(body.get("audioUrl") or "").strip()
        api_key = self.settings.assemblyai_api_key
        if not audio_url or not api_key:
            return _error("Missing required parameters", 400)

        speech_model = body.get("speechModel") or self.settings.speech_model
        if speech_model not in SPEECH_MODELS:
            return _error(f"Unsupported speech model: {speech_model}", 400)

        transcription = TranscriptionRequest(
            audio_url=audio_url,
            speech_model=speech_model,
            language_code=str(body.get("languageCode") or self.settings.language_code),
        )
        try:
            result = await run_in_threadpool(self.orchestrator.transcribe, transcription, api_key)
        except RelayError as exc:
            if exc.status_code >= 500:
                logger.exception("Transcription failed for %s", audio_url)
                return _error(f"Transcription service error: {exc.message}", exc.status_code)
            logger.info("Rejected audio %s: %s", audio_url, exc.message)
            return _error(exc.message, exc.status_code)

        return JSONResponse({"success": True, "text": result.text, "duration": result.duration_seconds})

    async def translate(self, request: Request) -> JSONResponse:
        body = await self._json_body(request)
        if body is None:
            return _error("Could not parse request; submit a valid JSON body", 400)

        text = str(body.get("text") or "")
        api_key = self.settings.translation_api_key
        if not text.strip() or not api_key:
            return _error("Missing required parameters", 400)

        try:
            outcome = await run_in_threadpool(self.orchestrator.translate, text, api_key)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Translation failed")
            return _error(f"Translation service error: {str(exc).strip() or type(exc).__name__}", 500)
        if outcome.is_degraded:
            logger.warning(
                "Translation degraded: %d of %d segments failed",
                outcome.failed_count,
                len(outcome.segment_results),
            )
        return JSONResponse({"success": True, "translation": outcome.joined_text})
