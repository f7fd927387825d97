from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

DEFAULT_MAX_LINE_WIDTH = 16
DEFAULT_BREAKABLE = (
    "。",
    "；",
)


@dataclass
class LineSpan:
    text: str
    start: int
    end: int


def _breakable_pattern(breakable: Iterable[str]) -> re.Pattern[str]:
    marks = "".join(dict.fromkeys(breakable))
    if not marks:
        raise ValueError("At least one breakable mark is required.")
    return re.compile(f"[{re.escape(marks)}]")


def break_points(
    text: str,
    max_width: int,
    *,
    breakable: Iterable[str] = DEFAULT_BREAKABLE,
) -> list[int]:
    """
    Return the committed line boundaries for ``text``.

    Lines end right after a breakable mark. The latest mark that keeps the
    line within ``max_width`` wins; when no mark fits, the line runs on to the
    next mark instead of being cut mid-clause.
    """
    if max_width <= 0:
        raise ValueError(f"max_width must be positive, got {max_width}")
    pattern = _breakable_pattern(breakable)
    breaks = [0]
    prev = 0
    for match in pattern.finditer(text):
        candidate = match.end()
        if candidate - breaks[-1] > max_width:
            if prev == breaks[-1]:
                breaks.append(candidate)
            else:
                breaks.append(prev)
        prev = candidate
    if len(text) > breaks[-1] or len(breaks) == 1:
        breaks.append(len(text))
    return breaks


def segment_with_spans(
    text: str,
    max_width: int = DEFAULT_MAX_LINE_WIDTH,
    *,
    breakable: Iterable[str] = DEFAULT_BREAKABLE,
) -> list[LineSpan]:
    breaks = break_points(text, max_width, breakable=breakable)
    return [
        LineSpan(text=text[start:end], start=start, end=end)
        for start, end in zip(breaks, breaks[1:])
    ]


def segment(
    text: str,
    max_width: int = DEFAULT_MAX_LINE_WIDTH,
    *,
    breakable: Iterable[str] = DEFAULT_BREAKABLE,
) -> list[str]:
    """Split a paragraph into display lines; joining the result gives back ``text``."""
    return [span.text for span in segment_with_spans(text, max_width, breakable=breakable)]


__all__ = [
    "DEFAULT_BREAKABLE",
    "DEFAULT_MAX_LINE_WIDTH",
    "LineSpan",
    "break_points",
    "segment",
    "segment_with_spans",
]
