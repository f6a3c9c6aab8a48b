"""Tests for the per-section file tree.

Checks directory-first ordering, stat roll-up, leaf tree paths, and the
combined tree helpers the viewer uses to resolve a cursor.
"""

from __future__ import annotations

import unittest

from lazydiff.diff_model import DiffFile
from lazydiff.sections import DiffSection
from lazydiff.tree import (
    TreeNodeKind,
    build_section_tree,
    find_tree_path,
    node_at_path,
    section_root_node,
)


def _file(path: str, additions: int = 1, deletions: int = 0) -> DiffFile:
    return DiffFile(old_path=path, new_path=path, additions=additions, deletions=deletions)


def _files() -> list[DiffFile]:
    return [
        _file("b.txt", 2, 1),
        _file("pkg/sub/mod.py", 3, 0),
        _file("A.txt"),
        _file("pkg/init.py", 0, 4),
        _file("b.txt", 9, 9),
    ]


class BuildSectionTreeTests(unittest.TestCase):
    def test_directories_sort_before_files_case_insensitively(self) -> None:
        roots, _, ordered = build_section_tree(DiffSection.UNSTAGED, _files())
        self.assertEqual([node.name for node in roots], ["pkg", "A.txt", "b.txt"])
        self.assertEqual(ordered, ["pkg/sub/mod.py", "pkg/init.py", "A.txt", "b.txt"])

    def test_leaf_tree_paths_are_child_indices(self) -> None:
        _, local_paths, _ = build_section_tree(DiffSection.UNSTAGED, _files())
        self.assertEqual(local_paths["pkg/sub/mod.py"], (0, 0, 0))
        self.assertEqual(local_paths["pkg/init.py"], (0, 1))
        self.assertEqual(local_paths["b.txt"], (2,))

    def test_directory_stats_roll_up_and_duplicates_keep_first_record(self) -> None:
        roots, _, _ = build_section_tree(DiffSection.STAGED, _files())
        pkg = roots[0]
        self.assertIs(pkg.kind, TreeNodeKind.DIRECTORY)
        self.assertEqual((pkg.additions, pkg.deletions, pkg.touched_files), (3, 4, 2))
        self.assertEqual(pkg.key, "staged::dir::pkg")
        self.assertEqual((roots[2].additions, roots[2].deletions), (2, 1))

    def test_section_root_wraps_children(self) -> None:
        roots, _, _ = build_section_tree(DiffSection.STAGED, _files())
        root = section_root_node(DiffSection.STAGED, roots)
        self.assertIs(root.kind, TreeNodeKind.SECTION)
        self.assertEqual(root.touched_files, 4)
        self.assertEqual(root.name, "Staged")
        self.assertTrue(root.is_dir)

    def test_node_lookup_helpers(self) -> None:
        roots, _, _ = build_section_tree(DiffSection.UNSTAGED, _files())
        combined = [section_root_node(DiffSection.UNSTAGED, roots)]

        node = node_at_path(combined, (0, 0, 1))
        self.assertIsNotNone(node)
        self.assertEqual(node.path, "pkg/init.py")
        self.assertIsNone(node_at_path(combined, (0, 7)))
        self.assertEqual(find_tree_path(combined, "pkg/sub/mod.py"), (0, 0, 0, 0))
        self.assertIsNone(find_tree_path(combined, "missing.py"))


if __name__ == "__main__":
    unittest.main()
