from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .markup import DEFAULT_PUNCTUATION
from .page_io import (
    DEFAULT_OUTPUT_FILENAME,
    DEFAULT_OVERRIDE_FILENAME,
    DEFAULT_PLACEHOLDER,
    DEFAULT_SOURCE_FILENAME,
    DEFAULT_TEMPLATE_FILENAME,
)
from .reading import READING_STYLES
from .segment import DEFAULT_BREAKABLE, DEFAULT_MAX_LINE_WIDTH

# 1 title line followed by 3 paragraph lines.
DEFAULT_LINES_PER_PART = 4
DEFAULT_VOLUME_DELIMITER = "---"
DEFAULT_READING_STYLE = "tone"


@dataclass
class GenerateConfig:
    source: Path = field(default_factory=lambda: Path(DEFAULT_SOURCE_FILENAME))
    overrides: Path | None = None
    template: Path = field(default_factory=lambda: Path(DEFAULT_TEMPLATE_FILENAME))
    output: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_FILENAME))
    placeholder: str = DEFAULT_PLACEHOLDER
    volume_delimiter: str = DEFAULT_VOLUME_DELIMITER
    lines_per_part: int = DEFAULT_LINES_PER_PART
    max_line_width: int = DEFAULT_MAX_LINE_WIDTH
    breakable: tuple[str, ...] = DEFAULT_BREAKABLE
    punctuation: tuple[str, ...] = DEFAULT_PUNCTUATION
    style: str = DEFAULT_READING_STYLE

    @property
    def overrides_required(self) -> bool:
        """An explicitly configured override file must exist; the default one is optional."""
        return self.overrides is not None

    def override_path(self) -> Path:
        if self.overrides is not None:
            return self.overrides
        return self.source.parent / DEFAULT_OVERRIDE_FILENAME

    def validate(self) -> None:
        if self.max_line_width <= 0:
            raise ValueError(f"Line width must be positive (got {self.max_line_width}).")
        if self.lines_per_part < 2:
            raise ValueError(
                f"A part needs a title and at least one paragraph (got {self.lines_per_part} lines)."
            )
        if not self.placeholder:
            raise ValueError("Template placeholder must not be empty.")
        if not self.volume_delimiter:
            raise ValueError("Volume delimiter must not be empty.")
        if not self.breakable:
            raise ValueError("At least one breakable mark is required.")
        missing = [mark for mark in self.breakable if mark not in self.punctuation]
        if missing:
            raise ValueError(
                f"Breakable marks must also be punctuation: {''.join(missing)}"
            )
        if self.style not in READING_STYLES:
            raise ValueError(f"Unknown reading style {self.style!r}.")


def split_marks(value: str) -> tuple[str, ...]:
    """Turn a CLI value such as ``"。；"`` into a tuple of single marks."""
    return tuple(dict.fromkeys(ch for ch in value if not ch.isspace()))


__all__ = [
    "DEFAULT_LINES_PER_PART",
    "DEFAULT_READING_STYLE",
    "DEFAULT_VOLUME_DELIMITER",
    "GenerateConfig",
    "split_marks",
]
