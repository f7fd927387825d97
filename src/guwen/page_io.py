from __future__ import annotations

from pathlib import Path

from .logging_utils import debug_log

DEFAULT_SOURCE_FILENAME = "raw_text.txt"
DEFAULT_OVERRIDE_FILENAME = "custom_pinyin.json"
DEFAULT_TEMPLATE_FILENAME = "index.template.html"
DEFAULT_OUTPUT_FILENAME = "index.html"
DEFAULT_PLACEHOLDER = "__CONTENT__"


class PageIOError(OSError):
    """Raised when a source, override, template or output file cannot be used."""


def _read_text(path: Path, label: str) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PageIOError(f"{label} not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise PageIOError(f"Failed to read {label.lower()} {path}: {exc}") from exc
    debug_log(f"Read {label.lower()} {path} ({len(text)} chars)")
    return text


def read_source(path: Path) -> str:
    return _read_text(path, "Source text")


def load_template(path: Path) -> str:
    return _read_text(path, "Template")


def fill_template(template: str, content: str, *, placeholder: str = DEFAULT_PLACEHOLDER) -> str:
    """Substitute ``content`` for the single ``placeholder`` occurrence in ``template``."""
    count = template.count(placeholder)
    if count != 1:
        raise PageIOError(
            f"Template must contain exactly one {placeholder!r} placeholder (found {count})."
        )
    return template.replace(placeholder, content, 1)


def write_page(path: Path, html: str) -> Path:
    try:
        path.write_text(html, encoding="utf-8")
    except OSError as exc:
        raise PageIOError(f"Failed to write output {path}: {exc}") from exc
    debug_log(f"Wrote {path} ({len(html)} chars)")
    return path


__all__ = [
    "DEFAULT_OUTPUT_FILENAME",
    "DEFAULT_OVERRIDE_FILENAME",
    "DEFAULT_PLACEHOLDER",
    "DEFAULT_SOURCE_FILENAME",
    "DEFAULT_TEMPLATE_FILENAME",
    "PageIOError",
    "fill_template",
    "load_template",
    "read_source",
    "write_page",
]
