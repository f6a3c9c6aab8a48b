"""Per-section caches of changed files, tree structure, and sticky selection.

``SectionRegistry.reload`` builds a complete replacement snapshot and swaps it
in with one assignment. A parse failure in any section raises
:class:`ReloadError` and leaves the previous snapshot in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .diff_model import (
    DiffFile,
    DiffParseError,
    RenderedFile,
    SideBySideRenderedFile,
    build_rendered_file,
    build_side_by_side,
    parse_unified_diff,
)
from .sections import DiffSection, normalize_sections, ordered_sections_from
from .tree import DiffTreeNode, TreePath, build_section_tree, section_root_node

logger = logging.getLogger(__name__)


class ReloadError(RuntimeError):
    """A configured section failed to load or parse."""

    def __init__(self, section: DiffSection, message: str) -> None:
        super().__init__(message)
        self.section = section
        self.message = message


@dataclass
class SectionState:
    """Everything the viewer knows about one section after a reload."""

    section: DiffSection
    files: list[DiffFile] = field(default_factory=list)
    roots: list[DiffTreeNode] = field(default_factory=list)
    ordered_file_paths: list[str] = field(default_factory=list)
    tree_index: dict[str, TreePath] = field(default_factory=dict)
    file_by_path: dict[str, DiffFile] = field(default_factory=dict)
    rendered_by_path: dict[str, RenderedFile] = field(default_factory=dict)
    side_by_side_by_path: dict[str, SideBySideRenderedFile] = field(default_factory=dict)
    last_selected_path: str | None = None
    additions: int = 0
    deletions: int = 0

    @property
    def file_count(self) -> int:
        return len(self.ordered_file_paths)

    def has_files(self) -> bool:
        return bool(self.ordered_file_paths)

    def contains(self, path: str | None) -> bool:
        return bool(path) and path in self.tree_index

    def first_path(self) -> str | None:
        return self.ordered_file_paths[0] if self.ordered_file_paths else None

    def preferred_path(self) -> str | None:
        """Sticky selection when still present, else the first path."""
        if self.contains(self.last_selected_path):
            return self.last_selected_path
        return self.first_path()


def build_section_state(
    section: DiffSection,
    section_index: int,
    raw_diff: str,
    previous_selection: str | None = None,
) -> SectionState:
    """Parse and project one section's diff text into a fresh state."""
    try:
        document = parse_unified_diff(raw_diff)
    except DiffParseError as exc:
        raise ReloadError(section, f"{section.display_name.lower()} parse error: {exc}") from exc

    state = SectionState(section=section, files=document.files)
    for file in document.files:
        path = file.display_path
        if not path or path in state.file_by_path:
            continue
        rendered = build_rendered_file(file)
        state.file_by_path[path] = file
        state.rendered_by_path[path] = rendered
        state.side_by_side_by_path[path] = build_side_by_side(rendered)
        state.additions += file.additions
        state.deletions += file.deletions

    roots, local_paths, ordered = build_section_tree(section, document.files)
    state.roots = roots
    state.ordered_file_paths = ordered
    state.tree_index = {path: (section_index, *local) for path, local in local_paths.items()}

    if previous_selection and previous_selection in state.tree_index:
        state.last_selected_path = previous_selection
    else:
        state.last_selected_path = state.first_path()
    return state


class SectionRegistry:
    """Owner of every configured section's :class:`SectionState`."""

    def __init__(self, sections: Iterable[object] | None = None) -> None:
        self.order: tuple[DiffSection, ...] = normalize_sections(sections)
        self._states: Mapping[DiffSection, SectionState] = self._empty_states()

    def _empty_states(self) -> Mapping[DiffSection, SectionState]:
        return MappingProxyType({section: SectionState(section) for section in self.order})

    def state(self, section: DiffSection | None) -> SectionState | None:
        if section is None:
            return None
        return self._states.get(section)

    def states(self) -> list[SectionState]:
        return [self._states[section] for section in self.order]

    def has_section(self, section: DiffSection | None) -> bool:
        return section in self.order

    def section_index(self, section: DiffSection) -> int:
        return self.order.index(section) if section in self.order else -1

    def has_files(self, section: DiffSection | None) -> bool:
        state = self.state(section)
        return state is not None and state.has_files()

    def file_count(self, section: DiffSection) -> int:
        state = self.state(section)
        return state.file_count if state is not None else 0

    def total_file_count(self) -> int:
        return sum(state.file_count for state in self._states.values())

    def totals(self) -> tuple[int, int]:
        additions = sum(state.additions for state in self._states.values())
        deletions = sum(state.deletions for state in self._states.values())
        return additions, deletions

    def find_section_with_files(self, start: DiffSection | None) -> DiffSection | None:
        """First section with files, walking configured order from ``start``."""
        for section in ordered_sections_from(self.order, start):
            if self.has_files(section):
                return section
        return None

    def tree_roots(self) -> list[DiffTreeNode]:
        """Combined tree: one root node per configured section."""
        return [section_root_node(state.section, state.roots) for state in self.states()]

    def clear(self) -> None:
        self._states = self._empty_states()

    def load(
        self,
        load_diff: Callable[[DiffSection], str],
        preferred_paths: Mapping[DiffSection, str] | None = None,
    ) -> None:
        """Fetch every configured section through ``load_diff`` and reload.

        A failure to fetch any section raises :class:`ReloadError` before
        anything is replaced.
        """
        raw_by_section: dict[DiffSection, str] = {}
        for section in self.order:
            try:
                raw_by_section[section] = load_diff(section)
            except Exception as exc:
                raise ReloadError(section, f"{section.display_name.lower()} diff: {exc}") from exc
        self.reload(raw_by_section, preferred_paths)

    def reload(
        self,
        raw_by_section: Mapping[DiffSection, str],
        preferred_paths: Mapping[DiffSection, str] | None = None,
    ) -> None:
        """Replace all section states from freshly loaded diff text.

        Each section keeps its sticky selection when that path survives,
        otherwise it falls back to its first path. ``preferred_paths``
        overrides the remembered selection per section (the active file).
        A configured section missing from ``raw_by_section`` is treated as
        having no changes.
        """
        remembered: dict[DiffSection, str] = {}
        for state in self._states.values():
            if state.last_selected_path:
                remembered[state.section] = state.last_selected_path
        for section, path in (preferred_paths or {}).items():
            if path:
                remembered[section] = path

        next_states: dict[DiffSection, SectionState] = {}
        for idx, section in enumerate(self.order):
            next_states[section] = build_section_state(
                section,
                idx,
                raw_by_section.get(section, ""),
                remembered.get(section),
            )

        self._states = MappingProxyType(next_states)
        logger.debug(
            "reloaded sections: %s",
            ", ".join(f"{section.value}={next_states[section].file_count}" for section in self.order),
        )


__all__ = [
    "ReloadError",
    "SectionRegistry",
    "SectionState",
    "build_section_state",
]
