"""Syntax colouring for printed diff rows.

Pygments is imported lazily on first use; when it is unavailable rows are
returned uncoloured. Terminal control bytes in diff text are neutralized
before anything is written to the terminal.
"""

from __future__ import annotations

import re

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
FALLBACK_STYLE = "monokai"

_PYGMENTS_READY = False
_PYGMENTS_AVAILABLE = False
_PYGMENTS_HIGHLIGHT = None
_PYGMENTS_GET_LEXER_FOR_FILENAME = None
_PYGMENTS_TEXT_LEXER = None
_PYGMENTS_FORMATTER_CLASS = None
_PYGMENTS_GET_STYLE_BY_NAME = None
_PYGMENTS_FORMATTERS: dict[str, object] = {}
_PYGMENTS_LEXERS: dict[str, object] = {}
_PYGMENTS_VALID_STYLES: set[str] = set()
_PYGMENTS_INVALID_STYLES: set[str] = set()


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _ensure_pygments_loaded() -> bool:
    global _PYGMENTS_READY
    global _PYGMENTS_AVAILABLE
    global _PYGMENTS_HIGHLIGHT
    global _PYGMENTS_GET_LEXER_FOR_FILENAME
    global _PYGMENTS_TEXT_LEXER
    global _PYGMENTS_FORMATTER_CLASS
    global _PYGMENTS_GET_STYLE_BY_NAME

    if _PYGMENTS_READY:
        return _PYGMENTS_AVAILABLE

    _PYGMENTS_READY = True
    try:
        from pygments import highlight as pygments_highlight
        from pygments.formatters import Terminal256Formatter
        from pygments.lexers import TextLexer, get_lexer_for_filename
        from pygments.styles import get_style_by_name
    except ImportError:
        _PYGMENTS_AVAILABLE = False
        return False

    _PYGMENTS_HIGHLIGHT = pygments_highlight
    _PYGMENTS_GET_LEXER_FOR_FILENAME = get_lexer_for_filename
    _PYGMENTS_TEXT_LEXER = TextLexer
    _PYGMENTS_FORMATTER_CLASS = Terminal256Formatter
    _PYGMENTS_GET_STYLE_BY_NAME = get_style_by_name
    _PYGMENTS_AVAILABLE = True
    return True


def _normalize_style(style: str) -> str:
    if style in _PYGMENTS_VALID_STYLES:
        return style
    if style in _PYGMENTS_INVALID_STYLES:
        return FALLBACK_STYLE

    try:
        assert _PYGMENTS_GET_STYLE_BY_NAME is not None
        _PYGMENTS_GET_STYLE_BY_NAME(style)
        _PYGMENTS_VALID_STYLES.add(style)
        return style
    except Exception:
        _PYGMENTS_INVALID_STYLES.add(style)
        return FALLBACK_STYLE


def _formatter_for_style(style: str):
    formatter = _PYGMENTS_FORMATTERS.get(style)
    if formatter is not None:
        return formatter
    assert _PYGMENTS_FORMATTER_CLASS is not None
    formatter = _PYGMENTS_FORMATTER_CLASS(style=style)
    _PYGMENTS_FORMATTERS[style] = formatter
    return formatter


def _lexer_for_path(path: str):
    name = path.rsplit("/", 1)[-1]
    lexer = _PYGMENTS_LEXERS.get(name)
    if lexer is not None:
        return lexer
    try:
        assert _PYGMENTS_GET_LEXER_FOR_FILENAME is not None
        lexer = _PYGMENTS_GET_LEXER_FOR_FILENAME(name)
    except Exception:
        assert _PYGMENTS_TEXT_LEXER is not None
        lexer = _PYGMENTS_TEXT_LEXER()
    _PYGMENTS_LEXERS[name] = lexer
    return lexer


def highlight_code_line(text: str, path: str, style: str = FALLBACK_STYLE) -> str | None:
    """Colour one line of code from ``path``; ``None`` when Pygments cannot."""
    if not text or not _ensure_pygments_loaded():
        return None

    formatter = _formatter_for_style(_normalize_style(style or FALLBACK_STYLE))
    try:
        assert _PYGMENTS_HIGHLIGHT is not None
        rendered = _PYGMENTS_HIGHLIGHT(text, _lexer_for_path(path), formatter)
    except Exception:
        return None
    return rendered.rstrip("\n")


def colorize_code_line(text: str, path: str, style: str = FALLBACK_STYLE) -> str:
    rendered = highlight_code_line(text, path, style)
    if rendered and "\x1b[" in rendered:
        return rendered
    return text


__all__ = [
    "FALLBACK_STYLE",
    "colorize_code_line",
    "highlight_code_line",
    "sanitize_terminal_text",
]
