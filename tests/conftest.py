from __future__ import annotations

import pytest

from transcript_relay.config import Settings, load_settings

ENV_KEYS = (
    "HOST",
    "PORT",
    "MCP_PATH",
    "HEALTH_PATH",
    "ASSEMBLYAI_API_KEY",
    "ASSEMBLYAI_BASE_URL",
    "TRANSLATION_API_KEY",
    "NEBIUS_API_KEY",
    "TRANSLATION_API_URL",
    "TRANSLATION_MODEL",
    "TRANSLATION_TARGET_LANGUAGE",
    "SPEECH_MODEL",
    "LANGUAGE_CODE",
    "POLL_INTERVAL_SECONDS",
    "POLL_MAX_ATTEMPTS",
    "SEGMENT_MAX_LENGTH",
    "TRANSLATION_MAX_ATTEMPTS",
    "TRANSLATION_MAX_WORKERS",
    "TRANSLATION_DEADLINE_SECONDS",
    "HTTP_TIMEOUT_SECONDS",
    "MAX_AUDIO_BYTES",
    "STORAGE_PUBLIC_DOMAIN",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("transcript_relay.config.load_dotenv", lambda: False)
    return monkeypatch


@pytest.fixture
def settings(clean_env: pytest.MonkeyPatch) -> Settings:
    clean_env.setenv("ASSEMBLYAI_API_KEY", "aai-key")
    clean_env.setenv("TRANSLATION_API_KEY", "tr-key")
    return load_settings()
