from __future__ import annotations

import logging
from typing import Callable

from transcript_relay.services.dispatcher import TranslationDispatcher
from transcript_relay.services.segmenter import DEFAULT_MAX_SEGMENT_LENGTH, segment_text
from transcript_relay.services.transcriber import AssemblyAITranscriber
from transcript_relay.types import TranscriptionRequest, TranscriptResult, TranslationOutcome

logger = logging.getLogger(__name__)

EMPTY_TRANSCRIPT_TEXT = "No transcription content"


class Orchestrator:
    """Entry point for callers: one transcription operation and one translation operation."""

    def __init__(
        self,
        *,
        transcriber: AssemblyAITranscriber,
        dispatcher: TranslationDispatcher,
        validator: Callable[[str], object] | None = None,
        max_segment_length: int = DEFAULT_MAX_SEGMENT_LENGTH,
        translation_deadline_seconds: float | None = 300.0,
    ) -> None:
        self.transcriber = transcriber
        self.dispatcher = dispatcher
        self.validator = validator
        self.max_segment_length = max_segment_length
        self.translation_deadline_seconds = translation_deadline_seconds

    def transcribe(self, request: TranscriptionRequest, api_key: str) -> TranscriptResult:
        if self.validator is not None:
            self.validator(request.audio_url)

        job = self.transcriber.submit(request, api_key)
        job = self.transcriber.poll(job, api_key)

        logger.info("Transcript %s completed (duration=%s)", job.id, job.duration_seconds)
        return TranscriptResult(
            text=job.text or EMPTY_TRANSCRIPT_TEXT,
            duration_seconds=job.duration_seconds,
            job_id=job.id,
        )

    def translate(self, text: str, api_key: str) -> TranslationOutcome:
        segments = segment_text(text, self.max_segment_length)
        logger.info("Source text has %d characters, split into %d segments", len(text), len(segments))
        return self.dispatcher.dispatch_all(
            segments,
            api_key,
            deadline_seconds=self.translation_deadline_seconds,
        )
