"""Caption grouping for transcribed narration.

Words are merged into on-screen caption groups. A group is closed as soon as
the time it already covers reaches the maximum span, so a caption is checked
before the next word joins it and the final word may run past the limit.
"""

import logging

from ..constants import CAPTION_MAX_SPAN_SECONDS
from .base import CaptionGroup, InvalidInput, WordTiming

logger = logging.getLogger(__name__)


def _validate(words: list[WordTiming], max_span_seconds: float) -> None:
    """Reject inputs the grouping cannot make sense of."""
    if not words:
        raise InvalidInput("Cannot segment an empty word list")
    if max_span_seconds <= 0:
        raise InvalidInput(f"Maximum span must be positive, got {max_span_seconds}")

    previous_start = 0.0
    for i, word in enumerate(words):
        if word.start < 0:
            raise InvalidInput(f"Word {i} ({word.word!r}) starts before zero: {word.start}")
        if word.end < word.start:
            raise InvalidInput(
                f"Word {i} ({word.word!r}) ends before it starts: "
                f"{word.start} -> {word.end}"
            )
        if word.start < previous_start:
            raise InvalidInput(
                f"Word {i} ({word.word!r}) starts at {word.start}, "
                f"before the previous word at {previous_start}"
            )
        previous_start = word.start


def segment_words(
    words: list[WordTiming],
    max_span_seconds: float = CAPTION_MAX_SPAN_SECONDS,
) -> list[CaptionGroup]:
    """Merge word timings into caption groups.

    Args:
        words: Word timings ordered by start time.
        max_span_seconds: Span at which the running group is closed.

    Returns:
        Caption groups covering every word, in order. A single word longer
        than the span forms its own group.

    Raises:
        InvalidInput: If the list is empty, the span is not positive, or the
            timings are negative, reversed or out of order.
    """
    _validate(words, max_span_seconds)

    groups: list[CaptionGroup] = []
    current: list[str] = []
    current_start = words[0].start
    current_end = words[0].start

    for word in words:
        if current and abs(current_end - current_start) >= max_span_seconds:
            groups.append(CaptionGroup(text=" ".join(current), start=current_start, end=current_end))
            current = []
            current_start = word.start

        current.append(word.word)
        current_end = word.end

    groups.append(CaptionGroup(text=" ".join(current), start=current_start, end=current_end))

    logger.debug("Segmented %d words into %d caption groups", len(words), len(groups))
    return groups


class TimeSegmenter:
    """Groups words into captions no longer than a fixed span."""

    def __init__(self, max_span_seconds: float = CAPTION_MAX_SPAN_SECONDS):
        self.max_span_seconds = max_span_seconds

    def segment(self, words: list[WordTiming]) -> list[CaptionGroup]:
        return segment_words(words, self.max_span_seconds)
