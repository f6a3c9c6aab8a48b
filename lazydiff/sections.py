"""Diff section identifiers and configured-order helpers.

A section is one named group of changed files (unstaged, staged, or the
single ``files`` group used for piped input). The configured order is fixed at
startup and drives every cyclic walk across sections.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class DiffSection(str, Enum):
    """Which diff space a file or tree node belongs to."""

    UNSTAGED = "unstaged"
    STAGED = "staged"
    FILES = "files"

    @property
    def display_name(self) -> str:
        if self is DiffSection.STAGED:
            return "Staged"
        if self is DiffSection.FILES:
            return "Files"
        return "Unstaged"

    def opposite(self) -> DiffSection:
        """Return the paired git space; ``files`` pairs with itself."""
        if self is DiffSection.STAGED:
            return DiffSection.UNSTAGED
        if self is DiffSection.UNSTAGED:
            return DiffSection.STAGED
        return DiffSection.FILES


DEFAULT_SECTIONS: tuple[DiffSection, ...] = (DiffSection.UNSTAGED, DiffSection.STAGED)


def parse_section(value: object) -> DiffSection | None:
    """Return the section named by ``value`` or ``None`` when unknown."""
    if isinstance(value, DiffSection):
        return value
    if not isinstance(value, str):
        return None
    try:
        return DiffSection(value.strip().lower())
    except ValueError:
        return None


def normalize_sections(sections: Iterable[object] | None) -> tuple[DiffSection, ...]:
    """Drop unknown and duplicate entries, falling back to the default pair."""
    if not sections:
        return DEFAULT_SECTIONS

    seen: set[DiffSection] = set()
    normalized: list[DiffSection] = []
    for raw in sections:
        section = parse_section(raw)
        if section is None or section in seen:
            continue
        seen.add(section)
        normalized.append(section)
    return tuple(normalized) if normalized else DEFAULT_SECTIONS


def ordered_sections_from(order: tuple[DiffSection, ...], start: DiffSection | None) -> list[DiffSection]:
    """Return ``order`` rotated so it begins at ``start``.

    Unknown or missing ``start`` yields the configured order unchanged.
    """
    if not order:
        return []
    if start not in order:
        return list(order)
    start_idx = order.index(start)
    return [order[(start_idx + i) % len(order)] for i in range(len(order))]


def ordered_sections_after(order: tuple[DiffSection, ...], start: DiffSection | None) -> list[DiffSection]:
    """Return every other section in cyclic order, beginning just after ``start``."""
    ordered = ordered_sections_from(order, start)
    if len(ordered) <= 1:
        return []
    return ordered[1:]


def section_root_node_key(section: DiffSection) -> str:
    return f"{section.value}::section"


def file_node_key(section: DiffSection, path: str) -> str:
    return f"{section.value}::{path}"


def directory_node_key(section: DiffSection, path: str) -> str:
    return f"{section.value}::dir::{path}"


__all__ = [
    "DEFAULT_SECTIONS",
    "DiffSection",
    "directory_node_key",
    "file_node_key",
    "normalize_sections",
    "ordered_sections_after",
    "ordered_sections_from",
    "parse_section",
    "section_root_node_key",
]
