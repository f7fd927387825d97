from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from .logging_utils import debug_log
from .page_io import PageIOError

__all__ = [
    "READING_STYLES",
    "ReadingBackend",
    "ReadingBackendUnavailableError",
    "ReadingOverrides",
    "load_reading_overrides",
    "parse_reading_overrides",
]

READING_STYLES = ("tone", "tone3", "normal")


class ReadingBackendUnavailableError(RuntimeError):
    """Raised when the pinyin backend cannot be initialized."""


def _split_reading(surface: str, value: object) -> tuple[str, ...] | None:
    if isinstance(value, str):
        parts = value.split()
    elif isinstance(value, list) and all(isinstance(item, str) for item in value):
        parts = [item.strip() for item in value]
    else:
        return None
    if len(parts) != len(surface) or not all(parts):
        return None
    return tuple(parts)


@dataclass(frozen=True, eq=False)
class ReadingOverrides:
    """
    Fixed readings for literal substrings.

    Built once before any text is processed and handed to ``ReadingBackend``
    at construction; the table is read-only afterwards. Tables compare and
    hash by identity.
    """

    entries: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    pattern: re.Pattern[str] | None = field(init=False, repr=False, default=None)

    def __post_init__(self) -> None:
        frozen = MappingProxyType(dict(self.entries))
        object.__setattr__(self, "entries", frozen)
        keys = sorted(frozen.keys(), key=len, reverse=True)
        if keys:
            # Longest key first so a phrase wins over its own prefix.
            object.__setattr__(self, "pattern", re.compile("|".join(re.escape(k) for k in keys)))

    def __len__(self) -> int:
        return len(self.entries)

    def spans(self, text: str) -> list[tuple[int, int, tuple[str, ...]]]:
        """Return ``(start, end, readings)`` for each override match, longest match first."""
        if self.pattern is None:
            return []
        return [(m.start(), m.end(), self.entries[m.group(0)]) for m in self.pattern.finditer(text)]


def parse_reading_overrides(raw: object, *, source: str = "overrides") -> ReadingOverrides:
    if not isinstance(raw, dict):
        raise ValueError(f"{source} must contain a JSON object mapping text to readings.")
    entries: dict[str, tuple[str, ...]] = {}
    for surface, value in raw.items():
        if not isinstance(surface, str) or not surface:
            raise ValueError(f"{source} contains an empty key.")
        readings = _split_reading(surface, value)
        if readings is None:
            raise ValueError(
                f"{source}: reading for {surface!r} must give one syllable per character "
                f"({len(surface)} expected), got {value!r}."
            )
        entries[surface] = readings
    return ReadingOverrides(entries)


def load_reading_overrides(path: Path, *, required: bool = True) -> ReadingOverrides:
    """
    Load a ``{"surface": "pin yin"}`` JSON table.

    A missing file is an error only when ``required`` is set; otherwise an empty
    table is returned.
    """
    if not path.exists():
        if required:
            raise PageIOError(f"Reading override file not found: {path}")
        debug_log(f"No reading override file at {path}")
        return ReadingOverrides()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PageIOError(f"Failed to read reading override file {path}: {exc}") from exc
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse reading override file: {path}") from exc
    overrides = parse_reading_overrides(raw, source=path.name)
    debug_log(f"Loaded {len(overrides)} reading overrides from {path}")
    return overrides


class ReadingBackend:
    """pypinyin-based backend returning one reading per character."""

    def __init__(self, overrides: ReadingOverrides | None = None, *, style: str = "tone") -> None:
        try:
            from pypinyin import Style, pinyin  # type: ignore
        except ImportError as exc:
            raise ReadingBackendUnavailableError(
                "Pinyin annotation requires 'pypinyin' to be installed."
            ) from exc

        styles = {
            "tone": Style.TONE,
            "tone3": Style.TONE3,
            "normal": Style.NORMAL,
        }
        if style not in styles:
            raise ValueError(f"Unknown reading style {style!r}; choose from {', '.join(READING_STYLES)}.")
        self._pinyin = pinyin
        self._style = styles[style]
        self.overrides = overrides or ReadingOverrides()

    def readings(self, text: str) -> list[str]:
        result: list[str] = []
        pos = 0
        for start, end, forced in self.overrides.spans(text):
            if start > pos:
                result.extend(self._default_readings(text[pos:start]))
            result.extend(forced)
            pos = end
        if pos < len(text):
            result.extend(self._default_readings(text[pos:]))
        return result

    __call__ = readings

    def to_reading_text(self, text: str) -> str:
        return " ".join(self.readings(text))

    def _default_readings(self, text: str) -> list[str]:
        if not text:
            return []
        # Characters without pinyin come back one per entry so output stays aligned.
        items = self._pinyin(
            text,
            style=self._style,
            heteronym=False,
            errors=lambda chars: list(chars),
        )
        return [item[0] for item in items]
