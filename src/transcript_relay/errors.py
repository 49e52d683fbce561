from __future__ import annotations


class RelayError(RuntimeError):
    """Base class for failures surfaced by the transcription/translation core."""

    status_code = 500
    default_cause = "error"

    def __init__(self, message: str, *, cause: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause or self.default_cause


class ValidationError(RelayError):
    status_code = 400
    default_cause = "invalid_audio"

    def __init__(self, message: str, *, cause: str | None = None, status_code: int = 400) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class SubmissionError(RelayError):
    default_cause = "http_error"


class ProviderError(RelayError):
    default_cause = "provider_error"


class PollTimeoutError(RelayError):
    default_cause = "timeout"

    def __init__(self, job_id: str, attempts: int, interval_seconds: float) -> None:
        super().__init__(
            f"Transcription {job_id} did not finish after {attempts} polls "
            f"({attempts * interval_seconds:.0f}s)"
        )
        self.job_id = job_id
        self.attempts = attempts


class TranslationError(RelayError):
    default_cause = "upstream_http_error"
