from __future__ import annotations

import logging

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from transcript_relay.config import Settings, load_settings
from transcript_relay.http_api import HttpRoutes
from transcript_relay.mcp_tools import ToolRegistry
from transcript_relay.orchestrator import Orchestrator
from transcript_relay.services.dispatcher import TranslationDispatcher
from transcript_relay.services.transcriber import AssemblyAITranscriber
from transcript_relay.services.translator import ChatCompletionTranslator
from transcript_relay.services.validation import AudioUrlValidator

logger = logging.getLogger(__name__)


class AppRuntime:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.transcriber = AssemblyAITranscriber(
            base_url=settings.assemblyai_base_url,
            poll_interval_seconds=settings.poll_interval_seconds,
            max_poll_attempts=settings.poll_max_attempts,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self.translator = ChatCompletionTranslator(
            settings.translation_api_url,
            settings.translation_model,
            target_language=settings.translation_target_language,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self.dispatcher = TranslationDispatcher(
            self.translator,
            max_attempts=settings.translation_max_attempts,
            max_workers=settings.translation_max_workers,
        )
        self.validator = AudioUrlValidator(
            max_bytes=settings.max_audio_bytes,
            storage_public_domain=settings.storage_public_domain,
        )
        self.orchestrator = Orchestrator(
            transcriber=self.transcriber,
            dispatcher=self.dispatcher,
            validator=self.validator,
            max_segment_length=settings.segment_max_length,
            translation_deadline_seconds=settings.translation_deadline_seconds,
        )


def create_app(runtime: AppRuntime) -> FastMCP:
    mcp = FastMCP(name="transcript-relay")

    ToolRegistry(runtime.orchestrator, runtime.settings).register(mcp)
    HttpRoutes(runtime.orchestrator, runtime.settings).register(mcp)

    @mcp.custom_route(runtime.settings.health_path, methods=["GET"])
    async def health(_: Request) -> JSONResponse:
        return JSONResponse(
            {
                "ok": True,
                "transcription_configured": bool(runtime.settings.assemblyai_api_key),
                "translation_configured": bool(runtime.settings.translation_api_key),
                "translation_model": runtime.settings.translation_model,
                "mcp_path": runtime.settings.mcp_path,
            }
        )

    return mcp


def cli() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    settings = load_settings()
    runtime = AppRuntime(settings)

    app = create_app(runtime)
    logger.info("Starting transcript-relay on %s:%s%s", settings.host, settings.port, settings.mcp_path)
    app.run(
        transport="http",
        host=settings.host,
        port=settings.port,
        path=settings.mcp_path,
    )


if __name__ == "__main__":
    cli()
