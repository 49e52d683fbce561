import random
import threading
import time

from transcript_relay.errors import TranslationError
from transcript_relay.services.dispatcher import (
    DEADLINE_MARKER,
    FAILURE_MARKER,
    SEGMENT_SEPARATOR,
    TranslationDispatcher,
)
from transcript_relay.services.translator import ChatCompletionTranslator
from transcript_relay.types import Segment


def _segments(*texts: str) -> list[Segment]:
    return [Segment(index=index, text=text) for index, text in enumerate(texts)]


class JitterTranslator:
    """Uppercases input after a random delay; always fails for text containing "fail"."""

    def __init__(self) -> None:
        self.calls: dict[str, int] = {}
        self._lock = threading.Lock()

    def translate(self, text: str, api_key: str) -> str:
        with self._lock:
            self.calls[text] = self.calls.get(text, 0) + 1
        time.sleep(random.uniform(0, 0.02))
        if "fail" in text:
            raise TranslationError("upstream down")
        return text.upper()


class FlakyTranslator:
    def __init__(self) -> None:
        self.attempts = 0

    def translate(self, text: str, api_key: str) -> str:
        self.attempts += 1
        if self.attempts == 1:
            raise TranslationError("temporary", cause="empty_response")
        return f"translated {text}"


def test_results_are_joined_in_index_order_with_markers() -> None:
    texts = ["one", "fail two", "three", "four", "fail five", "six", "seven", "eight"]
    translator = JitterTranslator()
    dispatcher = TranslationDispatcher(translator, max_workers=8)

    outcome = dispatcher.dispatch_all(_segments(*texts), "key")

    parts = outcome.joined_text.split(SEGMENT_SEPARATOR)
    assert len(parts) == len(texts)
    for text, part in zip(texts, parts):
        assert part == (FAILURE_MARKER if "fail" in text else text.upper())
    assert [result.index for result in outcome.segment_results] == list(range(len(texts)))
    assert outcome.failed_count == 2
    assert outcome.is_degraded
    assert translator.calls["fail two"] == 2
    assert translator.calls["one"] == 1


def test_retry_success_replaces_failure() -> None:
    translator = FlakyTranslator()
    outcome = TranslationDispatcher(translator).dispatch_all(_segments("hello"), "key")

    assert outcome.joined_text == "translated hello"
    assert outcome.segment_results[0].outcome == "success"
    assert outcome.segment_results[0].attempts == 2
    assert not outcome.is_degraded


def test_total_failure_still_returns_markers() -> None:
    outcome = TranslationDispatcher(JitterTranslator()).dispatch_all(_segments("fail a", "fail b"), "key")

    assert outcome.joined_text == SEGMENT_SEPARATOR.join([FAILURE_MARKER, FAILURE_MARKER])
    assert all(result.outcome == "failed_after_retries" for result in outcome.segment_results)


def test_empty_input() -> None:
    outcome = TranslationDispatcher(JitterTranslator()).dispatch_all([], "key")
    assert outcome.joined_text == ""
    assert outcome.segment_results == []


def test_concurrency_is_bounded_by_max_workers() -> None:
    active = 0
    peak = 0
    lock = threading.Lock()

    class CountingTranslator:
        def translate(self, text: str, api_key: str) -> str:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1
            return text

    outcome = TranslationDispatcher(CountingTranslator(), max_workers=2).dispatch_all(
        _segments(*[f"s{i}" for i in range(6)]), "key"
    )

    assert peak <= 2
    assert outcome.failed_count == 0


def test_deadline_keeps_finished_segments() -> None:
    release = threading.Event()

    class SlowTranslator:
        def translate(self, text: str, api_key: str) -> str:
            if text == "slow":
                release.wait(5)
            return text.upper()

    try:
        outcome = TranslationDispatcher(SlowTranslator(), max_workers=3).dispatch_all(
            _segments("fast", "slow", "quick"), "key", deadline_seconds=0.3
        )
    finally:
        release.set()

    assert outcome.joined_text.split(SEGMENT_SEPARATOR) == ["FAST", DEADLINE_MARKER, "QUICK"]
    assert outcome.segment_results[1].outcome == "deadline_exceeded"


def test_unexpected_translator_errors_become_failure_markers() -> None:
    class BrokenTranslator:
        def __init__(self) -> None:
            self.calls = 0

        def translate(self, text: str, api_key: str) -> str:
            if text == "bad":
                self.calls += 1
                raise ValueError("unexpected")
            return text.upper()

    translator = BrokenTranslator()
    outcome = TranslationDispatcher(translator).dispatch_all(_segments("ok", "bad"), "key")

    assert outcome.joined_text == f"OK{SEGMENT_SEPARATOR}{FAILURE_MARKER}"
    assert outcome.segment_results[1].outcome == "failed_after_retries"
    assert translator.calls == 2


def test_invalid_endpoint_url_degrades_to_markers() -> None:
    translator = ChatCompletionTranslator("http://[::1", "model")
    outcome = TranslationDispatcher(translator).dispatch_all(_segments("hello"), "key")

    assert outcome.joined_text == FAILURE_MARKER
    assert outcome.segment_results[0].outcome == "failed_after_retries"
