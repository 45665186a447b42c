"""Description of buffered connection events."""

from __future__ import annotations

import enum
import os

__all__ = ["EventFlag", "format_reason"]


class EventFlag(enum.IntFlag):
    """Events reported for a buffered connection."""

    READING = 0x01
    WRITING = 0x02
    EOF = 0x10
    ERROR = 0x20
    TIMEOUT = 0x40
    CONNECTED = 0x80


_REASON_NAMES = (
    (EventFlag.READING, "reading"),
    (EventFlag.WRITING, "writing"),
    (EventFlag.ERROR, "error"),
    (EventFlag.TIMEOUT, "timeout"),
    (EventFlag.EOF, "eof"),
)


def format_reason(what: int, error: int) -> str:
    """Describe a connection event: the error text, then the event names in parentheses."""
    flags = EventFlag(what)
    names = ",".join(name for flag, name in _REASON_NAMES if flags & flag)
    return f"{os.strerror(error)} ({names})"