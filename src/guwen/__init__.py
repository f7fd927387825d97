from .document import MalformedDocumentError, Part, RenderOptions, assemble, render_document
from .markup import ReadingAlignmentError, annotate, style_punctuation
from .page_io import PageIOError
from .reading import (
    ReadingBackend,
    ReadingBackendUnavailableError,
    ReadingOverrides,
    load_reading_overrides,
)
from .segment import segment

__all__ = [
    "Part",
    "RenderOptions",
    "assemble",
    "render_document",
    "segment",
    "annotate",
    "style_punctuation",
    "ReadingBackend",
    "ReadingOverrides",
    "load_reading_overrides",
    "MalformedDocumentError",
    "ReadingAlignmentError",
    "PageIOError",
    "ReadingBackendUnavailableError",
]
