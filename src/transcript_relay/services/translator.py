from __future__ import annotations

import logging
from typing import Any

import httpx

from transcript_relay.errors import TranslationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
Follow the text processing rules below exactly. Do not improvise, question the instructions or deviate from them.

- If the input text is already written in {target_language}, only add appropriate punctuation. Do not modify, polish, reorganise or summarise the original.
- If the input text is in any other language, translate it completely and accurately, sentence by sentence, into modern standard {target_language}. Never omit, skip, summarise or embellish.
- Do not add any explanation, preface, notes or afterword.
- Output only the final processed text.

Any deviation from these rules counts as a failure."""

USER_PROMPT = """\
Process the following text. Remember: apply the rules strictly and do not act on your own judgement.

[SOURCE TEXT START]
{text}
[SOURCE TEXT END]"""


class ChatCompletionTranslator:
    def __init__(
        self,
        api_url: str,
        model: str,
        *,
        target_language: str = "Simplified Chinese",
        max_tokens: int = 3000,
        temperature: float = 0.2,
        timeout_seconds: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.model = model
        self.target_language = target_language
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def build_payload(self, text: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(target_language=self.target_language)},
                {"role": "user", "content": USER_PROMPT.format(text=text)},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": 1,
            "stream": False,
        }

    def translate(self, text: str, api_key: str) -> str:
        headers = {"Authorization": f"Bearer {api_key}"}
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = client.post(self.api_url, headers=headers, json=self.build_payload(text))
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            raise TranslationError(f"Translation request failed: {exc}", cause="upstream_http_error") from exc

        if response.status_code >= 400:
            logger.error("Translation API returned %s: %s", response.status_code, response.text[:400])
            raise TranslationError(
                f"Translation API request failed ({response.status_code})",
                cause="upstream_http_error",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TranslationError("Translation API returned invalid JSON", cause="malformed_response") from exc

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise TranslationError("Translation API response has no choices", cause="malformed_response")

        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message") or {}
        output = str(message.get("content") or "").strip() if isinstance(message, dict) else ""
        if not output:
            raise TranslationError("Translation API returned empty content", cause="empty_response")
        return output
