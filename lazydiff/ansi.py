"""Terminal-cell measurement for diff rows.

Wrapped visual row counts drive layout-toggle mapping, so widths here must
match what the terminal will draw: tabs expand to 8-column stops, combining
marks take no cells, and East Asian wide characters take two.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    """Return the rendered width of ``text`` ignoring escape sequences."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Escape sequences are kept verbatim; tabs are expanded to spaces so the
    clipped text lines up with terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    while i < len(text) and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1
    return "".join(out)


def wrap_ansi_line(text: str, width: int) -> list[str]:
    """Split a styled line into chunks that each fit ``width`` columns.

    Always returns at least one chunk, so an empty line still occupies a row.
    """
    if width <= 0 or not text:
        return [""]

    wrapped: list[str] = []
    chunk: list[str] = []
    col = 0
    i = 0
    while i < len(text):
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                chunk.append(match.group(0))
                i = match.end()
                continue

        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > width and chunk:
            wrapped.append("".join(chunk))
            chunk = []
            col = 0
            w = char_display_width(ch, col)
        chunk.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    wrapped.append("".join(chunk))
    return wrapped


def wrapped_line_count(text: str, width: int) -> int:
    """Number of visual rows ``text`` occupies when wrapped at ``width``."""
    return len(wrap_ansi_line(text, width))


__all__ = [
    "ANSI_ESCAPE_RE",
    "TAB_STOP",
    "char_display_width",
    "clip_ansi_line",
    "display_width",
    "strip_ansi",
    "wrap_ansi_line",
    "wrapped_line_count",
]
