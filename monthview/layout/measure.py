"""Two-line eligibility for event titles.

The layout code never measures text itself. Callers with a real text engine
pass a width function; :func:`approximate_text_width` is a font-free estimate
for everyone else.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Set

from .models import LayoutConfigError, SegmentKey, WeekSegment, is_same_day

TextWidthFn = Callable[[str], float]

DEFAULT_CHAR_WIDTH = 6.5
# Horizontal padding inside an event bar (bar inset plus text padding).
DEFAULT_BAR_PADDING = 12.0

_WORD_SPLIT = re.compile(r"\s+")


def approximate_text_width(text: str, char_width: float = DEFAULT_CHAR_WIDTH) -> float:
    return len(text) * char_width


def available_title_width(
    segment: WeekSegment,
    cell_width: float,
    padding: float = DEFAULT_BAR_PADDING,
) -> float:
    return segment.span * cell_width - padding


def needs_two_lines(title: str, available_width: float, measure: TextWidthFn) -> bool:
    """Whether wrapping ``title`` onto a second line would help.

    True when the title overflows one line but at least one of its words fits
    on a line by itself. A single unbreakable word gains nothing from a
    second line, so it stays truncated.
    """

    if measure(title) <= available_width:
        return False
    words = [word for word in _WORD_SPLIT.split(title) if word]
    return any(measure(word) <= available_width for word in words)


def collect_two_line_keys(
    segments: Iterable[WeekSegment],
    cell_width: float,
    measure: TextWidthFn = approximate_text_width,
    padding: float = DEFAULT_BAR_PADDING,
) -> Set[SegmentKey]:
    if cell_width <= 0:
        raise LayoutConfigError(f"cell_width must be positive, got {cell_width}")

    keys: Set[SegmentKey] = set()
    for segment in segments:
        if not segment.is_single_column or not is_same_day(segment.event.start, segment.event.end):
            continue
        width = available_title_width(segment, cell_width, padding)
        if needs_two_lines(segment.event.title, width, measure):
            keys.add(segment.key)
    return keys
