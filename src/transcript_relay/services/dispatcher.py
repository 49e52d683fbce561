from __future__ import annotations

import concurrent.futures
import logging
import time
from typing import Protocol, Sequence

from transcript_relay.errors import TranslationError
from transcript_relay.types import Segment, SegmentResult, TranslationOutcome

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = "\n\n"
FAILURE_MARKER = "[segment translation failed]"
DEADLINE_MARKER = "[segment translation timed out]"


class Translator(Protocol):
    def translate(self, text: str, api_key: str) -> str: ...


class TranslationDispatcher:
    """Translate segments concurrently and reassemble them in index order.

    Individual segment failures never fail the whole operation: a segment that
    exhausts its attempts is replaced by ``failure_marker``, and a segment still
    unresolved when the deadline fires is replaced by ``deadline_marker``.
    """

    def __init__(
        self,
        translator: Translator,
        *,
        max_attempts: int = 2,
        max_workers: int = 4,
        failure_marker: str = FAILURE_MARKER,
        deadline_marker: str = DEADLINE_MARKER,
        separator: str = SEGMENT_SEPARATOR,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.translator = translator
        self.max_attempts = max_attempts
        self.max_workers = max_workers
        self.failure_marker = failure_marker
        self.deadline_marker = deadline_marker
        self.separator = separator

    def dispatch_all(
        self,
        segments: Sequence[Segment],
        api_key: str,
        deadline_seconds: float | None = None,
    ) -> TranslationOutcome:
        if not segments:
            return TranslationOutcome(joined_text="", segment_results=[])

        started = time.monotonic()
        logger.info(
            "Translating %d segments (%d characters) with up to %d workers",
            len(segments),
            sum(segment.length for segment in segments),
            self.max_workers,
        )

        pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(segments)),
            thread_name_prefix="translate-segment",
        )
        try:
            futures = {pool.submit(self._translate_one, segment, api_key): segment for segment in segments}
            done, pending = concurrent.futures.wait(futures, timeout=deadline_seconds)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        results: list[SegmentResult] = [future.result() for future in done]
        for future in pending:
            segment = futures[future]
            logger.warning("Segment %d abandoned after %.0fs deadline", segment.index + 1, deadline_seconds)
            results.append(
                SegmentResult(index=segment.index, translated_text=self.deadline_marker, outcome="deadline_exceeded")
            )

        results.sort(key=lambda result: result.index)
        joined = self.separator.join(result.translated_text for result in results).strip()
        outcome = TranslationOutcome(joined_text=joined, segment_results=results)

        logger.info(
            "Translation finished in %.1fs: %d segments, %d failed, %d characters",
            time.monotonic() - started,
            len(results),
            outcome.failed_count,
            len(joined),
        )
        return outcome

    def _translate_one(self, segment: Segment, api_key: str) -> SegmentResult:
        for attempt in range(1, self.max_attempts + 1):
            started = time.monotonic()
            logger.info("Segment %d attempt %d/%d", segment.index + 1, attempt, self.max_attempts)
            try:
                translated = self.translator.translate(segment.text, api_key)
            except TranslationError as exc:
                logger.warning(
                    "Segment %d attempt %d failed (%s): %s",
                    segment.index + 1,
                    attempt,
                    exc.cause,
                    exc.message,
                )
                continue
            except Exception:  # pylint: disable=broad-except
                logger.exception("Segment %d attempt %d failed unexpectedly", segment.index + 1, attempt)
                continue
            logger.info("Segment %d translated in %.1fs", segment.index + 1, time.monotonic() - started)
            return SegmentResult(
                index=segment.index,
                translated_text=translated.strip(),
                outcome="success",
                attempts=attempt,
            )

        return SegmentResult(
            index=segment.index,
            translated_text=self.failure_marker,
            outcome="failed_after_retries",
            attempts=self.max_attempts,
        )
