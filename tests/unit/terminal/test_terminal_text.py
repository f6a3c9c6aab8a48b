"""Tests for ANSI-aware width helpers, syntax colouring and theme lookup.

These helpers decide how printed diff rows are clipped, wrapped and coloured.
"""

from __future__ import annotations

import unittest

from lazydiff.ansi import clip_ansi_line, display_width, strip_ansi, wrap_ansi_line, wrapped_line_count
from lazydiff.highlight import colorize_code_line, highlight_code_line, sanitize_terminal_text
from lazydiff.themes import (
    DEFAULT_THEME,
    PLAIN_THEME,
    available_theme_names,
    dark_theme_names,
    light_theme_names,
    normalize_theme_name,
    resolve_theme,
    theme_display_name,
)


class AnsiWidthTests(unittest.TestCase):
    def test_display_width_ignores_escapes_and_counts_wide_chars(self) -> None:
        self.assertEqual(display_width("\x1b[31mred\x1b[0m"), 3)
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(display_width("a\tb"), 9)

    def test_clip_keeps_escapes_and_respects_wide_chars(self) -> None:
        self.assertEqual(strip_ansi(clip_ansi_line("\x1b[1mabcdef\x1b[0m", 3)), "abc")
        self.assertEqual(clip_ansi_line("日本語", 3), "日")
        self.assertEqual(clip_ansi_line("abc", 0), "")

    def test_wrap_splits_into_width_chunks(self) -> None:
        self.assertEqual(wrap_ansi_line("abcdefg", 3), ["abc", "def", "g"])
        self.assertEqual(wrap_ansi_line("", 5), [""])
        self.assertEqual(wrapped_line_count("abcdef", 3), 2)


class HighlightTests(unittest.TestCase):
    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("bell\x07"), "bell\\x07")
        self.assertEqual(sanitize_terminal_text("tab\tok"), "tab\tok")

    def test_python_line_is_coloured(self) -> None:
        rendered = highlight_code_line("def main(): pass", "src/app.py")
        self.assertIsNotNone(rendered)
        self.assertIn("\x1b[", rendered)
        self.assertFalse(rendered.endswith("\n"))
        self.assertEqual(strip_ansi(rendered), "def main(): pass")

    def test_unknown_style_and_empty_text(self) -> None:
        self.assertIsNone(highlight_code_line("", "a.py"))
        rendered = colorize_code_line("x = 1", "a.py", "no-such-style")
        self.assertEqual(strip_ansi(rendered), "x = 1")


class ThemeTests(unittest.TestCase):
    def test_dark_and_light_partition(self) -> None:
        self.assertEqual(sorted(dark_theme_names() + light_theme_names()), list(available_theme_names()))
        self.assertIn("catppuccin-latte", light_theme_names())
        self.assertIn("nord", dark_theme_names())

    def test_name_normalization(self) -> None:
        self.assertEqual(normalize_theme_name(" Catpuccin "), "catppuccin")
        self.assertEqual(normalize_theme_name("unknown"), DEFAULT_THEME.name)
        self.assertEqual(normalize_theme_name(None), DEFAULT_THEME.name)
        self.assertEqual(theme_display_name("gruvbox-light"), "Gruvbox Light")

    def test_resolve_theme(self) -> None:
        self.assertIs(resolve_theme("nord", no_color=True), PLAIN_THEME)
        self.assertEqual(resolve_theme("nord").name, "nord")
        self.assertEqual(PLAIN_THEME.add, "")


if __name__ == "__main__":
    unittest.main()
