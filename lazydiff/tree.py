"""Per-section file tree built from parsed diff files.

Tree order is the navigation order: directories before files, then by
case-folded name. Tree paths are tuples of child indices; the viewer prefixes
them with the section's position so one combined tree can hold every section.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .diff_model import DiffFile
from .sections import DiffSection, directory_node_key, file_node_key, section_root_node_key

TreePath = tuple[int, ...]


class TreeNodeKind(str, Enum):
    SECTION = "section"
    DIRECTORY = "directory"
    FILE = "file"


@dataclass
class DiffTreeNode:
    """One sidebar row: a section root, a directory, or a changed file."""

    name: str
    path: str
    kind: TreeNodeKind
    section: DiffSection
    key: str
    additions: int = 0
    deletions: int = 0
    touched_files: int = 0
    file: DiffFile | None = None
    children: list[DiffTreeNode] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return self.kind is not TreeNodeKind.FILE


def _sort_key(node: DiffTreeNode) -> tuple[bool, str, str]:
    return (not node.is_dir, node.name.casefold(), node.name)


def _finalize(nodes: list[DiffTreeNode]) -> None:
    """Sort children recursively and roll leaf stats up into directories."""
    nodes.sort(key=_sort_key)
    for node in nodes:
        if node.kind is TreeNodeKind.FILE:
            continue
        _finalize(node.children)
        node.additions = sum(child.additions for child in node.children)
        node.deletions = sum(child.deletions for child in node.children)
        node.touched_files = sum(
            child.touched_files if child.is_dir else 1 for child in node.children
        )


def _index_leaves(
    nodes: list[DiffTreeNode],
    prefix: TreePath,
    tree_paths: dict[str, TreePath],
    ordered: list[str],
) -> None:
    for idx, node in enumerate(nodes):
        node_path = (*prefix, idx)
        if node.kind is TreeNodeKind.FILE:
            tree_paths[node.path] = node_path
            ordered.append(node.path)
            continue
        _index_leaves(node.children, node_path, tree_paths, ordered)


def build_section_tree(
    section: DiffSection,
    files: list[DiffFile],
) -> tuple[list[DiffTreeNode], dict[str, TreePath], list[str]]:
    """Build tree roots, leaf tree paths, and ordered leaf paths for a section.

    A display path that repeats inside one section keeps its first record.
    """
    roots: list[DiffTreeNode] = []
    directories: dict[str, DiffTreeNode] = {}
    seen: set[str] = set()

    for file in files:
        display_path = file.display_path
        if not display_path or display_path in seen:
            continue
        seen.add(display_path)

        parts = [part for part in display_path.split("/") if part]
        siblings = roots
        for depth in range(len(parts) - 1):
            dir_path = "/".join(parts[: depth + 1])
            directory = directories.get(dir_path)
            if directory is None:
                directory = DiffTreeNode(
                    name=parts[depth],
                    path=dir_path,
                    kind=TreeNodeKind.DIRECTORY,
                    section=section,
                    key=directory_node_key(section, dir_path),
                )
                directories[dir_path] = directory
                siblings.append(directory)
            siblings = directory.children

        siblings.append(
            DiffTreeNode(
                name=parts[-1] if parts else display_path,
                path=display_path,
                kind=TreeNodeKind.FILE,
                section=section,
                key=file_node_key(section, display_path),
                additions=file.additions,
                deletions=file.deletions,
                touched_files=1,
                file=file,
            )
        )

    _finalize(roots)
    tree_paths: dict[str, TreePath] = {}
    ordered: list[str] = []
    _index_leaves(roots, (), tree_paths, ordered)
    return roots, tree_paths, ordered


def section_root_node(section: DiffSection, children: list[DiffTreeNode]) -> DiffTreeNode:
    touched = sum(child.touched_files if child.is_dir else 1 for child in children)
    return DiffTreeNode(
        name=section.display_name,
        path=section.value,
        kind=TreeNodeKind.SECTION,
        section=section,
        key=section_root_node_key(section),
        additions=sum(child.additions for child in children),
        deletions=sum(child.deletions for child in children),
        touched_files=touched,
        children=children,
    )


def node_at_path(roots: list[DiffTreeNode], tree_path: TreePath) -> DiffTreeNode | None:
    nodes = roots
    node: DiffTreeNode | None = None
    for idx in tree_path:
        if idx < 0 or idx >= len(nodes):
            return None
        node = nodes[idx]
        nodes = node.children
    return node


def find_tree_path(roots: list[DiffTreeNode], target_path: str, prefix: TreePath = ()) -> TreePath | None:
    """Depth-first search for the first node whose ``path`` equals ``target_path``."""
    for idx, node in enumerate(roots):
        node_path = (*prefix, idx)
        if node.path == target_path:
            return node_path
        found = find_tree_path(node.children, target_path, node_path)
        if found is not None:
            return found
    return None


__all__ = [
    "DiffTreeNode",
    "TreeNodeKind",
    "TreePath",
    "build_section_tree",
    "find_tree_path",
    "node_at_path",
    "section_root_node",
]
