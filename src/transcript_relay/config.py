from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_TRANSLATION_API_URL = "https://api.studio.nebius.ai/v1/chat/completions"
DEFAULT_TRANSLATION_MODEL = "deepseek-ai/DeepSeek-V3-0324"


@dataclass(slots=True)
class Settings:
    host: str
    port: int
    mcp_path: str
    health_path: str
    assemblyai_api_key: str | None
    assemblyai_base_url: str
    translation_api_key: str | None
    translation_api_url: str
    translation_model: str
    translation_target_language: str
    speech_model: str
    language_code: str
    poll_interval_seconds: float
    poll_max_attempts: int
    segment_max_length: int
    translation_max_attempts: int
    translation_max_workers: int
    translation_deadline_seconds: float
    http_timeout_seconds: float
    max_audio_bytes: int
    storage_public_domain: str | None


def _as_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


def _as_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = float(raw)
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _normalized_path(path: str) -> str:
    if not path.startswith("/"):
        path = f"/{path}"
    return path


def _optional(name: str) -> str | None:
    return (os.getenv(name) or "").strip() or None


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int("PORT", 3000),
        mcp_path=_normalized_path(os.getenv("MCP_PATH", "/mcp")),
        health_path=_normalized_path(os.getenv("HEALTH_PATH", "/healthz")),
        assemblyai_api_key=_optional("ASSEMBLYAI_API_KEY"),
        assemblyai_base_url=os.getenv("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com/v2").rstrip("/"),
        translation_api_key=_optional("TRANSLATION_API_KEY") or _optional("NEBIUS_API_KEY"),
        translation_api_url=os.getenv("TRANSLATION_API_URL", DEFAULT_TRANSLATION_API_URL),
        translation_model=os.getenv("TRANSLATION_MODEL", DEFAULT_TRANSLATION_MODEL),
        translation_target_language=os.getenv("TRANSLATION_TARGET_LANGUAGE", "Simplified Chinese"),
        speech_model=os.getenv("SPEECH_MODEL", "best"),
        language_code=os.getenv("LANGUAGE_CODE", "zh"),
        poll_interval_seconds=_as_float("POLL_INTERVAL_SECONDS", 3.0),
        poll_max_attempts=_as_int("POLL_MAX_ATTEMPTS", 200),
        segment_max_length=_as_int("SEGMENT_MAX_LENGTH", 3000),
        translation_max_attempts=_as_int("TRANSLATION_MAX_ATTEMPTS", 2),
        translation_max_workers=_as_int("TRANSLATION_MAX_WORKERS", 4),
        translation_deadline_seconds=_as_float("TRANSLATION_DEADLINE_SECONDS", 300.0),
        http_timeout_seconds=_as_float("HTTP_TIMEOUT_SECONDS", 60.0),
        max_audio_bytes=_as_int("MAX_AUDIO_BYTES", 50 * 1024 * 1024),
        storage_public_domain=_optional("STORAGE_PUBLIC_DOMAIN"),
    )
