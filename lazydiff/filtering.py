"""File-tree filtering for the sidebar query.

A leaf stays navigable only when its own name matches the query. A directory
counts as matched when its name or any descendant matches, which only feeds
the returned flag: typing ``pkg`` does not pull in the files under ``pkg/``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fuzzy import fuzzy_score, substring_index
from .tree import DiffTreeNode


@dataclass(frozen=True)
class FilterOptions:
    case_sensitive: bool = False
    fuzzy: bool = False


def name_matches(name: str, query: str, options: FilterOptions = FilterOptions()) -> bool:
    if not query:
        return True
    if substring_index(query, name, options.case_sensitive) is not None:
        return True
    return options.fuzzy and fuzzy_score(query, name, options.case_sensitive) is not None


def _filtered_leaves(
    nodes: list[DiffTreeNode],
    query: str,
    options: FilterOptions,
) -> tuple[bool, list[str]]:
    """Post-order walk returning ``(any_match, leaf_paths)`` in tree order."""
    any_match = False
    paths: list[str] = []
    for node in nodes:
        own_match = name_matches(node.name, query, options)
        if node.is_dir:
            child_match, child_paths = _filtered_leaves(node.children, query, options)
            if own_match or child_match:
                any_match = True
            paths.extend(child_paths)
            continue
        if own_match:
            paths.append(node.path)
            any_match = True
    return any_match, paths


def filtered_file_paths(
    roots: list[DiffTreeNode],
    query: str,
    options: FilterOptions = FilterOptions(),
) -> list[str]:
    """Return leaf paths that survive ``query``, preserving tree order.

    An empty query returns every leaf.
    """
    _, paths = _filtered_leaves(roots, query, options)
    return paths


__all__ = ["FilterOptions", "filtered_file_paths", "name_matches"]
