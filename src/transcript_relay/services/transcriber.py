from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from transcript_relay.errors import PollTimeoutError, ProviderError, SubmissionError
from transcript_relay.types import JobStatus, TranscriptionJob, TranscriptionRequest

logger = logging.getLogger(__name__)

_STATUS_MAP: dict[str, JobStatus] = {
    "queued": "queued",
    "processing": "processing",
    "completed": "completed",
    "error": "error",
}


class AssemblyAITranscriber:
    def __init__(
        self,
        base_url: str = "https://api.assemblyai.com/v2",
        poll_interval_seconds: float = 3.0,
        max_poll_attempts: int = 200,
        timeout_seconds: float = 60.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        self.base_url = base_url.rstrip("/")
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_attempts = max_poll_attempts
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self._sleep = sleep

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout_seconds, transport=self.transport)

    def submit(self, request: TranscriptionRequest, api_key: str) -> TranscriptionJob:
        """Create a transcription job.

        The returned job is never terminal: a ``processing`` status from the
        provider is kept, anything else is recorded as ``queued`` and left for
        ``poll`` to resolve.
        """
        transcript_url = f"{self.base_url}/transcript"
        request_payload = {
            "audio_url": request.audio_url,
            "speech_model": request.speech_model,
            "language_code": request.language_code,
        }
        logger.info(
            "Submitting transcription for %s (model=%s, language=%s)",
            request.audio_url,
            request.speech_model,
            request.language_code,
        )
        try:
            with self._client() as client:
                response = client.post(transcript_url, headers={"authorization": api_key}, json=request_payload)
        except httpx.HTTPError as exc:
            raise SubmissionError(f"AssemblyAI transcript create failed: {exc}", cause="http_error") from exc

        if response.status_code >= 400:
            raise SubmissionError(
                f"AssemblyAI transcript create failed ({response.status_code}): {response.text[:400]}",
                cause="http_error",
            )

        payload = self._json(response)
        if payload.get("error"):
            raise SubmissionError(f"AssemblyAI rejected the request: {payload['error']}", cause="provider_rejected")

        transcript_id = payload.get("id")
        if not transcript_id:
            raise SubmissionError("AssemblyAI transcript response missing id", cause="provider_rejected")

        logger.info("Transcript %s created", transcript_id)
        job = TranscriptionJob(id=str(transcript_id))
        if self._map_status(payload.get("status"), "queued") == "processing":
            job.apply_remote("processing")
        return job

    def poll(self, job: TranscriptionJob, api_key: str) -> TranscriptionJob:
        """Poll ``job`` until it reaches a terminal status or the attempt budget runs out.

        Raises ``ProviderError`` when the provider reports an error and
        ``PollTimeoutError`` when ``max_poll_attempts`` reads pass without a
        terminal status.
        """
        transcript_url = f"{self.base_url}/transcript/{job.id}"
        headers = {"authorization": api_key}

        with self._client() as client:
            for attempt in range(1, self.max_poll_attempts + 1):
                payload = self._read_status(client, transcript_url, headers)
                status = self._map_status(payload.get("status"), "processing")
                logger.info(
                    "Poll %d/%d for transcript %s: %s",
                    attempt,
                    self.max_poll_attempts,
                    job.id,
                    status,
                )

                if status == "completed":
                    job.apply_remote(
                        "completed",
                        text=str(payload.get("text") or "").strip(),
                        duration_seconds=self._as_float(payload.get("audio_duration")),
                    )
                    self._log_timestamps(payload)
                    return job
                if status == "error":
                    message = str(payload.get("error") or "AssemblyAI reported error status")
                    job.apply_remote("error", error_message=message)
                    raise ProviderError(message, cause="provider_error")

                job.apply_remote(status)
                if attempt < self.max_poll_attempts:
                    self._sleep(self.poll_interval_seconds)

        raise PollTimeoutError(job.id, self.max_poll_attempts, self.poll_interval_seconds)

    def _read_status(self, client: httpx.Client, url: str, headers: dict[str, str]) -> dict[str, Any]:
        try:
            response = client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"AssemblyAI transcript poll failed: {exc}", cause="http_error") from exc
        if response.status_code >= 400:
            raise ProviderError(
                f"AssemblyAI transcript poll failed ({response.status_code}): {response.text[:400]}",
                cause="http_error",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"AssemblyAI transcript poll returned invalid JSON: {response.text[:200]}",
                cause="malformed_response",
            ) from exc
        if not isinstance(payload, dict) or not payload.get("status"):
            raise ProviderError("AssemblyAI transcript poll response missing status", cause="malformed_response")
        return payload

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return dict(payload) if isinstance(payload, dict) else {}

    @staticmethod
    def _map_status(value: object, default: JobStatus) -> JobStatus:
        raw = str(value or "").lower()
        if not raw:
            return default
        status = _STATUS_MAP.get(raw)
        if status is None:
            logger.warning("Unknown AssemblyAI status %r, treating as processing", raw)
            return "processing"
        return status

    def _log_timestamps(self, payload: dict[str, Any]) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        segments = payload.get("segments")
        if isinstance(segments, list):
            for item in segments:
                if isinstance(item, dict):
                    logger.debug(
                        "[%.2fs - %.2fs] %s",
                        self._ms_to_seconds(item.get("start")),
                        self._ms_to_seconds(item.get("end")),
                        item.get("text"),
                    )
        words = payload.get("words")
        if isinstance(words, list):
            for item in words[:10]:
                if isinstance(item, dict):
                    logger.debug(
                        "word [%.2fs - %.2fs] %s",
                        self._ms_to_seconds(item.get("start")),
                        self._ms_to_seconds(item.get("end")),
                        item.get("text"),
                    )

    @staticmethod
    def _as_float(value: object) -> float | None:
        try:
            return float(str(value)) if value is not None else None
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _ms_to_seconds(value: object) -> float:
        try:
            return float(str(value)) / 1000.0 if value is not None else 0.0
        except (TypeError, ValueError):
            return 0.0
