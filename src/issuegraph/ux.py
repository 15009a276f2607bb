"""Terminal status lines for the CLI. Status output always goes to stderr."""

from __future__ import annotations

import os
import sys
from typing import TextIO

RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"


def _supports_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, color: str, stream: TextIO | None = None) -> str:
    if not _supports_color(stream or sys.stderr):
        return text
    return f"{BOLD}{color}{text}{RESET}"


def _status(symbol: str, color: str, message: str, stream: TextIO | None) -> None:
    stream = stream or sys.stderr
    print(colorize(symbol, color, stream) + " " + message, file=stream)


def print_success(message: str, stream: TextIO | None = None) -> None:
    _status("✓", GREEN, message, stream)


def print_error(message: str, stream: TextIO | None = None) -> None:
    _status("✗", RED, message, stream)


def print_warning(message: str, stream: TextIO | None = None) -> None:
    _status("⚠", YELLOW, message, stream)


__all__ = ["colorize", "print_error", "print_success", "print_warning"]
