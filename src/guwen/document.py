from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from .config import DEFAULT_LINES_PER_PART, DEFAULT_VOLUME_DELIMITER
from .logging_utils import debug_log
from .markup import (
    DEFAULT_PUNCTUATION,
    LINE_CLASS,
    ReadingsOf,
    annotate,
    style_punctuation,
    tag,
    tag_with_class,
)
from .segment import DEFAULT_BREAKABLE, DEFAULT_MAX_LINE_WIDTH, segment_with_spans

ProgressCallback = Callable[[dict[str, object]], None]


class MalformedDocumentError(ValueError):
    """Raised when the source text does not split into complete parts."""


@dataclass
class Part:
    title: str
    paragraphs: list[str] = field(default_factory=list)


@dataclass
class RenderOptions:
    max_line_width: int = DEFAULT_MAX_LINE_WIDTH
    breakable: tuple[str, ...] = DEFAULT_BREAKABLE
    punctuation: tuple[str, ...] = DEFAULT_PUNCTUATION


def split_volumes(raw: str, *, delimiter: str = DEFAULT_VOLUME_DELIMITER) -> list[str]:
    return raw.strip().split(delimiter)


def to_parts(
    volume: str,
    *,
    lines_per_part: int = DEFAULT_LINES_PER_PART,
    volume_index: int | None = None,
) -> list[Part]:
    """Group a volume's lines into parts of one title and ``lines_per_part - 1`` paragraphs."""
    lines = [line.rstrip("\r") for line in volume.strip().split("\n")]
    label = f"Volume {volume_index + 1}" if volume_index is not None else "Volume"
    if len(lines) % lines_per_part:
        raise MalformedDocumentError(
            f"{label} has {len(lines)} lines, which is not a multiple of {lines_per_part}."
        )
    parts: list[Part] = []
    for offset in range(0, len(lines), lines_per_part):
        title, *paragraphs = lines[offset : offset + lines_per_part]
        if not title.strip():
            raise MalformedDocumentError(f"{label}, line {offset + 1}: part is missing its title.")
        parts.append(Part(title=title, paragraphs=paragraphs))
    return parts


def assemble(
    raw: str,
    *,
    lines_per_part: int = DEFAULT_LINES_PER_PART,
    volume_delimiter: str = DEFAULT_VOLUME_DELIMITER,
) -> list[Part]:
    """Split the whole document into parts; volume boundaries are flattened away."""
    parts: list[Part] = []
    volumes = split_volumes(raw, delimiter=volume_delimiter)
    for index, volume in enumerate(volumes):
        volume_parts = to_parts(volume, lines_per_part=lines_per_part, volume_index=index)
        debug_log(f"Volume {index + 1}: {len(volume_parts)} parts")
        parts.extend(volume_parts)
    return parts


def render_title(title: str, readings_of: ReadingsOf, options: RenderOptions | None = None) -> str:
    options = options or RenderOptions()
    return tag("h3", annotate(title, readings_of, punctuation=options.punctuation))


def render_paragraph(
    paragraph: str,
    readings_of: ReadingsOf,
    options: RenderOptions | None = None,
) -> str:
    options = options or RenderOptions()
    spans = segment_with_spans(paragraph, options.max_line_width, breakable=options.breakable)
    for span in spans:
        if span.end - span.start > options.max_line_width:
            debug_log(f"Line {span.start}-{span.end} exceeds width {options.max_line_width}: {span.text}")
    return tag(
        "section",
        "".join(
            tag_with_class("span", LINE_CLASS, annotate(span.text, readings_of, punctuation=options.punctuation))
            for span in spans
        ),
    )


def render_part(part: Part, readings_of: ReadingsOf, options: RenderOptions | None = None) -> str:
    options = options or RenderOptions()
    pieces = [render_title(part.title, readings_of, options)]
    pieces.extend(render_paragraph(p, readings_of, options) for p in part.paragraphs)
    return tag("article", "".join(pieces))


def render_document(
    parts: Iterable[Part],
    readings_of: ReadingsOf,
    options: RenderOptions | None = None,
    *,
    progress_callback: ProgressCallback | None = None,
) -> str:
    """
    Render all parts into a ``<main>`` block with punctuation styled.

    Punctuation styling runs once over the finished markup, after every line
    has been annotated.
    """
    options = options or RenderOptions()
    parts = list(parts)
    total = len(parts)
    rendered: list[str] = []
    for index, part in enumerate(parts, start=1):
        rendered.append(render_part(part, readings_of, options))
        if progress_callback is not None:
            progress_callback({"event": "part_done", "index": index, "total": total, "title": part.title})
    body = tag("main", "".join(rendered))
    return style_punctuation(body, punctuation=options.punctuation)


__all__ = [
    "MalformedDocumentError",
    "Part",
    "ProgressCallback",
    "RenderOptions",
    "assemble",
    "render_document",
    "render_paragraph",
    "render_part",
    "render_title",
    "split_volumes",
    "to_parts",
]
