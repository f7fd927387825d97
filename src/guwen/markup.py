from __future__ import annotations

import html
import re
from typing import Callable, Iterable, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag

DEFAULT_PUNCTUATION = (
    "，",
    "。",
    "；",
)
PUNCTUATION_CLASS = "punctuation"
LINE_CLASS = "line"

ReadingsOf = Callable[[str], Sequence[str]]


class ReadingAlignmentError(RuntimeError):
    """Raised when a reading lookup does not return exactly one reading per character."""

    def __init__(self, run: str, readings: Sequence[str]) -> None:
        super().__init__(
            f"Expected {len(run)} readings for {run!r}, got {len(readings)}: {list(readings)!r}"
        )
        self.run = run
        self.readings = list(readings)


def tag(name: str, content: str) -> str:
    return f"<{name}>{content}</{name}>"


def tag_with_class(name: str, class_name: str, content: str) -> str:
    return f'<{name} class="{class_name}">{content}</{name}>'


def _punctuation_chars(punctuation: Iterable[str]) -> str:
    chars = "".join(dict.fromkeys(punctuation))
    if not chars:
        raise ValueError("At least one punctuation mark is required.")
    return chars


def _run_pattern(punctuation: Iterable[str]) -> re.Pattern[str]:
    return re.compile(f"[^{re.escape(_punctuation_chars(punctuation))}]+")


def _mark_pattern(punctuation: Iterable[str]) -> re.Pattern[str]:
    return re.compile(f"([{re.escape(_punctuation_chars(punctuation))}])")


def annotate_run(run: str, readings_of: ReadingsOf) -> str:
    """
    Wrap a punctuation-free run in a single ``<ruby>`` element.

    Each character is followed by ``<rp>(</rp><rt>reading</rt><rp>)</rp>`` so
    browsers without ruby support still show the reading in brackets.
    """
    if not run:
        return ""
    readings = list(readings_of(run))
    if len(readings) != len(run):
        raise ReadingAlignmentError(run, readings)
    pieces = []
    for ch, reading in zip(run, readings):
        pieces.append(
            html.escape(ch, quote=False)
            + tag("rp", "(")
            + tag("rt", html.escape(reading, quote=False))
            + tag("rp", ")")
        )
    return tag("ruby", "".join(pieces))


def annotate(
    text: str,
    readings_of: ReadingsOf,
    *,
    punctuation: Iterable[str] = DEFAULT_PUNCTUATION,
) -> str:
    """Annotate every run between punctuation marks; punctuation itself is left bare."""
    pattern = _run_pattern(punctuation)
    return pattern.sub(lambda m: annotate_run(m.group(0), readings_of), text)


def _inside_punctuation_span(node: NavigableString) -> bool:
    parent = node.parent
    return (
        isinstance(parent, Tag)
        and parent.name == "span"
        and PUNCTUATION_CLASS in (parent.get("class") or [])
    )


def style_punctuation(
    markup: str,
    *,
    punctuation: Iterable[str] = DEFAULT_PUNCTUATION,
) -> str:
    """
    Wrap bare punctuation in ``<span class="punctuation">``.

    Only text nodes are rewritten, so tag names and attributes are never
    touched, and text already inside a punctuation span is left alone.
    """
    pattern = _mark_pattern(punctuation)
    soup = BeautifulSoup(markup, "html.parser")
    for node in list(soup.find_all(string=True)):
        if type(node) is not NavigableString:
            continue
        if _inside_punctuation_span(node):
            continue
        text = str(node)
        if not pattern.search(text):
            continue
        replacements: list[NavigableString | Tag] = []
        for piece in pattern.split(text):
            if not piece:
                continue
            if pattern.fullmatch(piece):
                span = soup.new_tag("span", attrs={"class": PUNCTUATION_CLASS})
                span.string = piece
                replacements.append(span)
            else:
                replacements.append(NavigableString(piece))
        node.replace_with(*replacements)
    return str(soup)


__all__ = [
    "DEFAULT_PUNCTUATION",
    "LINE_CLASS",
    "PUNCTUATION_CLASS",
    "ReadingAlignmentError",
    "ReadingsOf",
    "annotate",
    "annotate_run",
    "style_punctuation",
    "tag",
    "tag_with_class",
]
