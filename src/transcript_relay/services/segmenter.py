from __future__ import annotations

from transcript_relay.types import Segment

DEFAULT_MAX_SEGMENT_LENGTH = 3000
SENTENCE_TERMINATORS = frozenset({"。", ".", "？", "！", "!", "?"})


def segment_text(text: str, max_length: int = DEFAULT_MAX_SEGMENT_LENGTH) -> list[Segment]:
    """Split ``text`` into ordered segments of roughly ``max_length`` characters.

    A segment is only closed on a sentence terminator once the buffer has
    reached ``max_length``, so segments run past the limit until the next
    terminator. ``max_length`` is a soft target, not a cap.
    """
    if max_length < 1:
        raise ValueError("max_length must be at least 1")

    segments: list[Segment] = []
    buffer: list[str] = []

    def flush() -> None:
        chunk = "".join(buffer).strip()
        buffer.clear()
        if chunk:
            segments.append(Segment(index=len(segments), text=chunk))

    for char in text:
        buffer.append(char)
        if len(buffer) >= max_length and char in SENTENCE_TERMINATORS:
            flush()

    flush()
    return segments
