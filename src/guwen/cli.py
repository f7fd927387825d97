from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path

import tomllib
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

from .config import GenerateConfig, split_marks
from .document import MalformedDocumentError, RenderOptions, assemble, render_document
from .logging_utils import debug_log, get_console, set_debug_logging
from .markup import ReadingAlignmentError
from .page_io import (
    DEFAULT_OUTPUT_FILENAME,
    DEFAULT_TEMPLATE_FILENAME,
    PageIOError,
    fill_template,
    load_template,
    read_source,
    write_page,
)
from .reading import (
    READING_STYLES,
    ReadingBackend,
    ReadingBackendUnavailableError,
    ReadingOverrides,
    load_reading_overrides,
)


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("guwen")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"guwen {__version__}",
    )


def _add_reading_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--overrides",
        help="JSON file mapping text to forced pinyin (default: custom_pinyin.json next to the source, if present).",
    )
    parser.add_argument(
        "--style",
        choices=list(READING_STYLES),
        default="tone",
        help="Pinyin style: 'tone' marks (default), 'tone3' numbers, or 'normal' without tones.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )


def build_parser() -> argparse.ArgumentParser:
    defaults = GenerateConfig()
    ap = argparse.ArgumentParser(
        description="Classical text → HTML with pinyin ruby, width-bounded lines and styled punctuation.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "source",
        nargs="?",
        default=str(defaults.source),
        help=f"Path to the source text (default: {defaults.source}).",
    )
    ap.add_argument(
        "-t",
        "--template",
        help="HTML template containing the content placeholder (default: index.template.html next to the source).",
    )
    ap.add_argument(
        "-o",
        "--output",
        help="Output HTML path (default: index.html next to the source).",
    )
    ap.add_argument(
        "--placeholder",
        default=defaults.placeholder,
        help=f"Template placeholder replaced by the rendered content (default: {defaults.placeholder}).",
    )
    ap.add_argument(
        "-w",
        "--width",
        type=int,
        default=defaults.max_line_width,
        help=f"Maximum characters per line before breaking (default: {defaults.max_line_width}).",
    )
    ap.add_argument(
        "--lines-per-part",
        type=int,
        default=defaults.lines_per_part,
        help=f"Lines per part: one title plus paragraphs (default: {defaults.lines_per_part}).",
    )
    ap.add_argument(
        "--volume-delimiter",
        default=defaults.volume_delimiter,
        help=f"Token separating volumes in the source (default: {defaults.volume_delimiter}).",
    )
    ap.add_argument(
        "--breakable",
        default="".join(defaults.breakable),
        help=f"Marks a line may end after (default: {''.join(defaults.breakable)}).",
    )
    ap.add_argument(
        "--punctuation",
        default="".join(defaults.punctuation),
        help=f"Marks left unannotated and styled (default: {''.join(defaults.punctuation)}).",
    )
    _add_reading_options(ap)
    return ap


def build_convert_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Print the per-character pinyin the generator would use for a text.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "text",
        nargs="+",
        help="Text to convert. Wrap the phrase in quotes if it contains spaces.",
    )
    _add_reading_options(ap)
    return ap


def config_from_args(args: argparse.Namespace) -> GenerateConfig:
    source = Path(args.source)
    base_dir = source.parent
    config = GenerateConfig(
        source=source,
        overrides=Path(args.overrides) if args.overrides else None,
        template=Path(args.template) if args.template else base_dir / DEFAULT_TEMPLATE_FILENAME,
        output=Path(args.output) if args.output else base_dir / DEFAULT_OUTPUT_FILENAME,
        placeholder=args.placeholder,
        volume_delimiter=args.volume_delimiter,
        lines_per_part=args.lines_per_part,
        max_line_width=args.width,
        breakable=split_marks(args.breakable),
        punctuation=split_marks(args.punctuation),
        style=args.style,
    )
    config.validate()
    return config


def _build_backend(
    overrides: ReadingOverrides | None,
    style: str,
) -> ReadingBackend:
    try:
        return ReadingBackend(overrides, style=style)
    except ReadingBackendUnavailableError as exc:
        raise SystemExit(str(exc)) from exc


class _PartProgress:
    def __init__(self, total: int, console: Console) -> None:
        self.enabled = total > 0 and console.is_terminal
        self.progress: Progress | None = None
        self.task = None
        if not self.enabled:
            return
        self.progress = Progress(
            TextColumn("{task.description}", justify="left"),
            BarColumn(bar_width=None),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self.progress.start()
        self.task = self.progress.add_task("Parts", total=total)

    def handle(self, event: dict[str, object]) -> None:
        if self.progress is None or self.task is None:
            return
        if event.get("event") == "part_done":
            self.progress.update(self.task, completed=event.get("index"))

    def close(self) -> None:
        if self.progress is not None:
            self.progress.stop()


def generate(config: GenerateConfig, backend: ReadingBackend, *, console: Console | None = None) -> Path:
    """Read, render and write one page. Nothing is written unless every step succeeds."""
    raw = read_source(config.source)
    template = load_template(config.template)
    parts = assemble(
        raw,
        lines_per_part=config.lines_per_part,
        volume_delimiter=config.volume_delimiter,
    )
    debug_log(f"Assembled {len(parts)} parts from {config.source}")
    options = RenderOptions(
        max_line_width=config.max_line_width,
        breakable=config.breakable,
        punctuation=config.punctuation,
    )
    progress = _PartProgress(len(parts), console or get_console())
    try:
        content = render_document(parts, backend, options, progress_callback=progress.handle)
    finally:
        progress.close()
    page = fill_template(template, content, placeholder=config.placeholder)
    return write_page(config.output, page)


def _run_build(args: argparse.Namespace) -> int:
    set_debug_logging(bool(getattr(args, "debug", False)))
    try:
        config = config_from_args(args)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    try:
        overrides = load_reading_overrides(config.override_path(), required=config.overrides_required)
    except (PageIOError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc
    backend = _build_backend(overrides, config.style)
    console = get_console()
    try:
        output = generate(config, backend, console=console)
    except (PageIOError, MalformedDocumentError, ReadingAlignmentError) as exc:
        raise SystemExit(str(exc)) from exc
    debug_log(f"Output written to {output}")
    console.print("done")
    return 0


def _run_convert(args: argparse.Namespace) -> int:
    set_debug_logging(bool(getattr(args, "debug", False)))
    overrides = None
    if args.overrides:
        try:
            overrides = load_reading_overrides(Path(args.overrides))
        except (PageIOError, ValueError) as exc:
            raise SystemExit(str(exc)) from exc
    backend = _build_backend(overrides, args.style)
    text = " ".join(args.text).strip()
    if not text:
        raise SystemExit("No text provided for conversion.")
    print(backend.to_reading_text(text))
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "convert":
        convert_parser = build_convert_parser()
        convert_args = convert_parser.parse_args(argv[1:])
        return _run_convert(convert_args)
    if argv and argv[0] == "build":
        argv = argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_build(args)


if __name__ == "__main__":
    raise SystemExit(main())
