from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

JobStatus = Literal["queued", "processing", "completed", "error"]
SpeechModel = Literal["best", "fast"]
SegmentOutcome = Literal["success", "failed_after_retries", "deadline_exceeded"]

TERMINAL_STATUSES: tuple[JobStatus, ...] = ("completed", "error")


@dataclass(frozen=True, slots=True)
class TranscriptionRequest:
    audio_url: str
    speech_model: SpeechModel = "best"
    language_code: str = "zh"


@dataclass(slots=True)
class TranscriptionJob:
    id: str
    status: JobStatus = "queued"
    text: str | None = None
    duration_seconds: float | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def apply_remote(
        self,
        status: JobStatus,
        *,
        text: str | None = None,
        duration_seconds: float | None = None,
        error_message: str | None = None,
    ) -> None:
        if self.is_terminal:
            raise RuntimeError(f"Job {self.id} is already {self.status}")
        self.status = status
        if status == "completed":
            self.text = text
            self.duration_seconds = duration_seconds
        elif status == "error":
            self.error_message = error_message


@dataclass(slots=True)
class TranscriptResult:
    text: str
    duration_seconds: float | None = None
    job_id: str | None = None


@dataclass(frozen=True, slots=True)
class Segment:
    index: int
    text: str

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(slots=True)
class SegmentResult:
    index: int
    translated_text: str
    outcome: SegmentOutcome
    attempts: int = 0


@dataclass(slots=True)
class TranslationOutcome:
    joined_text: str
    segment_results: list[SegmentResult] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.segment_results if result.outcome != "success")

    @property
    def is_degraded(self) -> bool:
        return self.failed_count > 0
