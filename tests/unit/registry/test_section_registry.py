"""Tests for section registry reloads.

Covers sticky per-section selection across reloads, combined tree paths,
aggregate counts, and that a failed reload leaves the previous snapshot intact.
"""

from __future__ import annotations

import unittest

from lazydiff.registry import ReloadError, SectionRegistry
from lazydiff.sections import DiffSection


def _diff(*paths: str) -> str:
    chunks = []
    for path in paths:
        chunks.append(
            f"diff --git a/{path} b/{path}\n--- a/{path}\n+++ b/{path}\n"
            f"@@ -1,1 +1,1 @@\n-old {path}\n+new {path}\n"
        )
    return "".join(chunks)


class SectionRegistryReloadTests(unittest.TestCase):
    def test_reload_builds_states_for_configured_sections(self) -> None:
        registry = SectionRegistry()
        registry.reload({DiffSection.UNSTAGED: _diff("b.txt", "a.txt"), DiffSection.STAGED: _diff("c.txt")})

        unstaged = registry.state(DiffSection.UNSTAGED)
        self.assertEqual(unstaged.ordered_file_paths, ["a.txt", "b.txt"])
        self.assertEqual(unstaged.last_selected_path, "a.txt")
        self.assertEqual(registry.file_count(DiffSection.STAGED), 1)
        self.assertEqual(registry.total_file_count(), 3)
        self.assertEqual(registry.totals(), (3, 3))

    def test_tree_index_is_prefixed_with_section_position(self) -> None:
        registry = SectionRegistry()
        registry.reload({DiffSection.UNSTAGED: _diff("a.txt"), DiffSection.STAGED: _diff("c.txt")})
        self.assertEqual(registry.state(DiffSection.STAGED).tree_index["c.txt"], (1, 0))

        roots = registry.tree_roots()
        self.assertEqual([root.name for root in roots], ["Unstaged", "Staged"])
        self.assertEqual(roots[1].children[0].path, "c.txt")

    def test_sticky_selection_survives_when_path_remains(self) -> None:
        registry = SectionRegistry()
        registry.reload({DiffSection.UNSTAGED: _diff("a.txt", "b.txt")})
        registry.state(DiffSection.UNSTAGED).last_selected_path = "b.txt"

        registry.reload({DiffSection.UNSTAGED: _diff("a.txt", "b.txt", "c.txt")})
        self.assertEqual(registry.state(DiffSection.UNSTAGED).preferred_path(), "b.txt")

        registry.reload({DiffSection.UNSTAGED: _diff("a.txt", "c.txt")})
        self.assertEqual(registry.state(DiffSection.UNSTAGED).preferred_path(), "a.txt")

    def test_preferred_paths_override_remembered_selection(self) -> None:
        registry = SectionRegistry()
        registry.reload({DiffSection.UNSTAGED: _diff("a.txt", "b.txt")})
        registry.reload(
            {DiffSection.UNSTAGED: _diff("a.txt", "b.txt")},
            preferred_paths={DiffSection.UNSTAGED: "b.txt"},
        )
        self.assertEqual(registry.state(DiffSection.UNSTAGED).last_selected_path, "b.txt")

    def test_parse_failure_keeps_previous_snapshot(self) -> None:
        registry = SectionRegistry()
        registry.reload({DiffSection.UNSTAGED: _diff("a.txt")})
        before = registry.state(DiffSection.UNSTAGED)

        with self.assertRaises(ReloadError) as ctx:
            registry.reload(
                {
                    DiffSection.UNSTAGED: _diff("a.txt", "b.txt"),
                    DiffSection.STAGED: "--- a/x\n+++ b/x\n@@ broken\n",
                }
            )

        self.assertIs(ctx.exception.section, DiffSection.STAGED)
        self.assertTrue(ctx.exception.message.startswith("staged parse error:"))
        self.assertIs(registry.state(DiffSection.UNSTAGED), before)
        self.assertEqual(registry.total_file_count(), 1)

    def test_load_wraps_provider_failures(self) -> None:
        registry = SectionRegistry()

        def load_diff(section: DiffSection) -> str:
            if section is DiffSection.STAGED:
                raise RuntimeError("index locked")
            return _diff("a.txt")

        with self.assertRaises(ReloadError) as ctx:
            registry.load(load_diff)
        self.assertEqual(ctx.exception.message, "staged diff: index locked")
        self.assertEqual(registry.total_file_count(), 0)

    def test_find_section_with_files_walks_from_start(self) -> None:
        registry = SectionRegistry()
        registry.reload({DiffSection.UNSTAGED: _diff("a.txt")})
        self.assertIs(registry.find_section_with_files(DiffSection.STAGED), DiffSection.UNSTAGED)
        self.assertIs(registry.find_section_with_files(DiffSection.UNSTAGED), DiffSection.UNSTAGED)

        registry.clear()
        self.assertIsNone(registry.find_section_with_files(DiffSection.UNSTAGED))
        self.assertFalse(registry.has_files(DiffSection.UNSTAGED))

    def test_custom_section_order(self) -> None:
        registry = SectionRegistry(["files"])
        self.assertEqual(registry.order, (DiffSection.FILES,))
        self.assertIsNone(registry.state(DiffSection.STAGED))
        self.assertEqual(registry.section_index(DiffSection.STAGED), -1)


if __name__ == "__main__":
    unittest.main()
