from __future__ import annotations

from urllib.parse import urlparse

GITHUB_RAW_HOST = "raw.githubusercontent.com"


def _hostname(url: str) -> str | None:
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https"):
        return None
    return (parsed.hostname or "").lower() or None


def is_allowed_audio_url(url: str, storage_public_domain: str | None = None) -> bool:
    try:
        host = _hostname(url)
        path = urlparse(url.strip()).path
    except ValueError:
        return False
    if host is None:
        return False

    if host == GITHUB_RAW_HOST:
        return True
    if host == "github.com" and "/raw/" in path:
        return True
    if storage_public_domain:
        storage_host = _hostname(storage_public_domain) or storage_public_domain.strip().lower()
        return host == storage_host
    return False
