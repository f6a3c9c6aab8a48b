"""Tests for key normalization and viewer key dispatch.

Checks that every listed binding is registered and that dispatching keys
drives the expected viewer actions.
"""

from __future__ import annotations

import unittest

from lazydiff.keys import (
    KEY_BINDINGS,
    KeyComboBinding,
    KeyComboRegistry,
    build_viewer_key_registry,
    normalize_key,
)
from lazydiff.layout_sync import LayoutMode
from lazydiff.sections import DiffSection
from lazydiff.viewer import DiffViewer, FocusTarget


def _diff(*paths: str) -> str:
    return "".join(f"--- a/{path}\n+++ b/{path}\n@@ -1 +1 @@\n-a\n+b\n" for path in paths)


class FakeProvider:
    def load_diff(self, section: DiffSection) -> str:
        if section is DiffSection.UNSTAGED:
            return _diff("one.py", "two.py")
        return _diff("three.py")

    def repo_root(self) -> str:
        return ""

    def current_branch(self) -> str:
        return ""


class NormalizeKeyTests(unittest.TestCase):
    def test_combos_lowercase_and_escape_aliases(self) -> None:
        self.assertEqual(normalize_key("Ctrl+P"), "ctrl+p")
        self.assertEqual(normalize_key("ESC"), "escape")
        self.assertEqual(normalize_key("N"), "N")
        self.assertEqual(normalize_key("+"), "+")


class KeyComboRegistryTests(unittest.TestCase):
    def test_dispatch_results(self) -> None:
        calls: list[str] = []
        registry = KeyComboRegistry(normalize_key).register_bindings(
            KeyComboBinding(("a", "b"), lambda: calls.append("ab")),
            KeyComboBinding(("c",), lambda: False),
        )
        self.assertTrue(registry.dispatch("a"))
        self.assertTrue(registry.dispatch("b"))
        self.assertFalse(registry.dispatch("c"))
        self.assertIsNone(registry.dispatch("z"))
        self.assertEqual(calls, ["ab", "ab"])


class ViewerKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.quit_calls = 0
        self.viewer = DiffViewer(FakeProvider())
        self.registry = build_viewer_key_registry(self.viewer, self._quit)

    def _quit(self) -> None:
        self.quit_calls += 1

    def test_every_listed_combo_is_bound(self) -> None:
        expected = {normalize_key(combo) for info in KEY_BINDINGS for combo in info.combos}
        self.assertEqual(self.registry.bound_keys(), expected)

    def test_navigation_and_section_keys(self) -> None:
        self.registry.dispatch("n")
        self.assertEqual(self.viewer.selection.path, "two.py")
        self.registry.dispatch("[")
        self.assertEqual(self.viewer.selection.path, "one.py")
        self.registry.dispatch("s")
        self.assertEqual(self.viewer.active_section, DiffSection.STAGED)

    def test_layout_and_menu_keys(self) -> None:
        self.registry.dispatch("v")
        self.assertIs(self.viewer.layout, LayoutMode.SIDE_BY_SIDE)
        self.registry.dispatch("w")
        self.assertTrue(self.viewer.wrap)
        self.registry.dispatch("Ctrl+P")
        self.assertTrue(self.viewer.menu.visible)
        self.registry.dispatch("ctrl+p")
        self.assertFalse(self.viewer.menu.visible)
        self.registry.dispatch("t")
        self.assertEqual(self.viewer.menu.current_level().title, "Themes")

    def test_filter_escape_and_quit(self) -> None:
        self.registry.dispatch("/")
        self.assertIs(self.viewer.focus, FocusTarget.FILTER)
        self.registry.dispatch("esc")
        self.assertIs(self.viewer.focus, FocusTarget.TREE)
        self.registry.dispatch("q")
        self.assertEqual(self.quit_calls, 1)


if __name__ == "__main__":
    unittest.main()
