from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from transcript_relay.errors import ValidationError
from transcript_relay.utils.url import is_allowed_audio_url

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = (
    "audio/mpeg",
    "audio/wav",
    "audio/flac",
    "audio/mp4",
    "audio/x-m4a",
)


@dataclass(slots=True)
class AudioMetadata:
    size: int
    content_type: str


class AudioUrlValidator:
    """Checks that an audio URL is allowlisted, reachable, small enough and of a supported type."""

    def __init__(
        self,
        *,
        max_bytes: int = 50 * 1024 * 1024,
        storage_public_domain: str | None = None,
        allowed_mime_types: tuple[str, ...] = ALLOWED_MIME_TYPES,
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.max_bytes = max_bytes
        self.storage_public_domain = storage_public_domain
        self.allowed_mime_types = allowed_mime_types
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def __call__(self, audio_url: str) -> AudioMetadata:
        return self.validate(audio_url)

    def validate(self, audio_url: str) -> AudioMetadata:
        if not is_allowed_audio_url(audio_url, self.storage_public_domain):
            raise ValidationError(
                "Only GitHub raw links or links on the configured public storage domain are supported.",
                cause="url_not_allowed",
                status_code=403,
            )

        metadata = self.fetch_metadata(audio_url)
        if metadata is None:
            raise ValidationError(
                "Audio link is not reachable; make sure it is valid and publicly accessible.",
                cause="unreachable",
            )

        logger.info("Audio file %s: %d bytes, %s", audio_url, metadata.size, metadata.content_type)

        if metadata.size > self.max_bytes:
            raise ValidationError(
                f"File too large: {metadata.size / (1024 * 1024):.2f}MB, "
                f"limit is {self.max_bytes // (1024 * 1024)}MB",
                cause="too_large",
            )
        if metadata.content_type not in self.allowed_mime_types:
            raise ValidationError(
                f"Unsupported file type ({metadata.content_type}); upload mp3, wav, flac or m4a audio.",
                cause="unsupported_type",
            )
        return metadata

    def fetch_metadata(self, audio_url: str) -> AudioMetadata | None:
        try:
            with httpx.Client(
                timeout=self.timeout_seconds,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                response = client.head(audio_url)
        except httpx.HTTPError as exc:
            logger.warning("HEAD request for %s failed: %s", audio_url, exc)
            return None
        if response.status_code >= 400:
            return None

        try:
            size = int(response.headers.get("content-length") or 0)
        except ValueError:
            size = 0
        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        return AudioMetadata(size=size, content_type=content_type)
