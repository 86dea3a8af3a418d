"""Console logging with optional time and source-location prefixes."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from enum import IntFlag
from types import FrameType


class LogFlags(IntFlag):
    """Which prefixes are written in front of every log line."""

    NONE = 0
    TIME = 1
    SOURCE_INFO = 2


@dataclass
class LogSettings:
    """Mutable logging configuration shared by the whole process."""

    flags: LogFlags = LogFlags.TIME | LogFlags.SOURCE_INFO


settings = LogSettings()


def _prefix(caller: FrameType) -> str:
    flags = settings.flags
    if not flags:
        return ""
    parts = []
    if flags & LogFlags.TIME:
        parts.append(f"[{time.strftime('%X').rstrip()}]")
    if flags & LogFlags.SOURCE_INFO:
        code = caller.f_code
        parts.append(f"(Line {caller.f_lineno} @ {code.co_name} @ {code.co_filename})")
    return "".join(parts) + " "


def _emit(tag: str, message: str, caller: FrameType) -> None:
    print(f"[{tag}] {_prefix(caller)}{message}", file=sys.stdout)


def _error(message: str, throw: bool, caller: FrameType) -> None:
    _emit("ERROR", message, caller)
    if throw:
        print(message, file=sys.stderr, end="")
        raise RuntimeError(message)


def log_error(message: str, throw: bool = False) -> None:
    """Write an error line; raise RuntimeError with the message if ``throw``."""
    _error(message, throw, sys._getframe(1))


def log_warning(message: str) -> None:
    """Write a warning line."""
    _emit("WARN", message, sys._getframe(1))


def log_info(message: str) -> None:
    """Write an informational line."""
    _emit("INFO", message, sys._getframe(1))


def check(assertion: bool, message: str = "") -> None:
    """Log an error and raise RuntimeError when ``assertion`` is false."""
    if not assertion:
        _error(message, True, sys._getframe(1))