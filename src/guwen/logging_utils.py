from __future__ import annotations

from rich.console import Console

_DEBUG_LOG = False
_CONSOLE: Console | None = None


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def get_console() -> Console:
    """Return the shared stderr console used for status and debug output."""
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console(stderr=True)
    return _CONSOLE


def debug_log(message: str) -> None:
    if _DEBUG_LOG:
        get_console().print(f"[guwen debug] {message}", markup=False, highlight=False, soft_wrap=True)


__all__ = ["debug_log", "get_console", "set_debug_logging"]
