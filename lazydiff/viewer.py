"""Diff viewer state: sections, selection, filter, layout, and command menu.

``DiffViewer`` owns every piece of mutable application state. Presentation
code reads ``selection``, ``rendered`` / ``side_by_side`` (the payload for the
active selection), ``navigable_paths()`` and the title/summary helpers, and
calls the action methods in response to input.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from .command_menu import ROOT_MENU_TITLE, CommandMenu, MenuItem
from .diff_model import (
    DiffFile,
    RenderedFile,
    SideBySideRenderedFile,
    build_meta_rendered_file,
    build_side_by_side,
    message_to_rendered,
)
from .diff_model.render import (
    DEFAULT_SPLIT_RATIO,
    rendered_gutter_width,
    side_by_side_divider_bounds,
    side_by_side_pane_layout,
    wrapped_content_height,
    wrapped_side_content_height,
)
from .filtering import FilterOptions, filtered_file_paths
from .layout_sync import (
    LayoutMode,
    LayoutSyncEngine,
    ScrollAnchor,
    anchor_for_side_row,
    anchor_for_unified_line,
    clamp_offset,
)
from .providers import DiffProvider, provider_manual_refresh_enabled, provider_sections
from .registry import ReloadError, SectionRegistry, SectionState
from .sections import DiffSection, ordered_sections_after, ordered_sections_from
from .selection import ActiveSelection, SelectionKind
from .startup import InitialState, normalize_initial_state
from .theme_preview import PreviewSession
from .themes import dark_theme_names, get_theme, light_theme_names, theme_display_name
from .tree import DiffTreeNode, TreeNodeKind, TreePath, node_at_path

logger = logging.getLogger(__name__)

THEMES_MENU_TITLE = "Themes"
DEFAULT_VIEWPORT_WIDTH = 100


class FocusTarget(Enum):
    VIEWER = "viewer"
    TREE = "tree"
    FILTER = "filter"
    DIVIDER = "divider"


def change_stat_text(additions: int, deletions: int) -> str:
    """``+3 -1`` with zero counts omitted."""
    parts: list[str] = []
    if additions > 0:
        parts.append(f"+{additions}")
    if deletions > 0:
        parts.append(f"-{deletions}")
    return " ".join(parts)


def empty_section_summary_message(section: DiffSection) -> str:
    if section is DiffSection.FILES:
        return "No files in this diff."
    return f"No {section.display_name.lower()} files in this diff."


def build_section_summary(section: DiffSection, state: SectionState | None) -> RenderedFile:
    file_count = state.file_count if state is not None else 0
    additions = state.additions if state is not None else 0
    deletions = state.deletions if state is not None else 0
    lines = [
        f"Section: {section.display_name}",
        f"Touched files: {file_count}",
        f"Additions: +{additions}",
        f"Deletions: -{deletions}",
        "",
        "Use n/p to jump between files in this section.",
    ]
    if file_count == 0:
        lines.extend(["", empty_section_summary_message(section)])
    return build_meta_rendered_file(f"{section.display_name} changes", lines)


def build_directory_summary(node: DiffTreeNode) -> RenderedFile:
    path = node.path or node.name or "(root)"
    return build_meta_rendered_file(
        path,
        [
            f"Section: {node.section.display_name}",
            f"Directory: {path}",
            f"Touched files: {node.touched_files}",
            f"Additions: +{node.additions}",
            f"Deletions: -{node.deletions}",
            "",
            "Use n/p to jump between changed files.",
        ],
    )


def no_matches_message(query: str) -> str:
    if not query:
        return "No files match the current filter.\n\nPress escape to clear the filter."
    return f'No files match "{query}".\n\nPress escape to clear the filter.'


class _DisplayedRows:
    """Row accessors over the payload currently shown by a viewer."""

    def __init__(self, viewer: DiffViewer) -> None:
        self.viewer = viewer

    def anchors(self, mode: LayoutMode) -> list[ScrollAnchor | None]:
        if mode is LayoutMode.SIDE_BY_SIDE:
            return [anchor_for_side_row(row) for row in self.viewer.side_by_side.rows]
        return [anchor_for_unified_line(line) for line in self.viewer.rendered.lines]

    def visual_rows(self, mode: LayoutMode) -> int:
        return self.viewer.visual_rows(mode)


class DiffViewer:
    """Navigation, filtering, layout and menu state for one diff session."""

    def __init__(
        self,
        provider: DiffProvider,
        *,
        staged: bool = False,
        initial_state: InitialState | None = None,
        viewport_width: int = DEFAULT_VIEWPORT_WIDTH,
    ) -> None:
        initial = normalize_initial_state(initial_state)
        self.provider = provider
        self.registry = SectionRegistry(provider_sections(provider))

        order = self.registry.order
        self.initial_section = order[0]
        if staged and DiffSection.STAGED in order:
            self.initial_section = DiffSection.STAGED
        self.manual_refresh_enabled = provider_manual_refresh_enabled(provider)

        self.selection = ActiveSelection.none(self.initial_section)
        self.tree_roots: list[DiffTreeNode] = self.registry.tree_roots()
        self.tree_cursor: TreePath | None = None
        self.load_error = ""
        self.repo_root = ""
        self.branch = ""

        self.query = ""
        self.filter_options = FilterOptions()
        self.filter_visible = False
        self.no_matches = False
        self.focus = FocusTarget.VIEWER
        self.divider_return_focus = FocusTarget.VIEWER

        self.layout = initial.layout
        self.wrap = False
        self.hide_change_signs = not initial.show_change_signs
        self.intraline_style = initial.intraline_style
        self.sidebar_visible = initial.sidebar_visible
        self.theme_name = initial.theme_name
        self.split_ratio = DEFAULT_SPLIT_RATIO
        self.viewport_width = viewport_width

        self.rendered: RenderedFile = build_meta_rendered_file("Diff", ["Loading diff..."])
        self.side_by_side: SideBySideRenderedFile = build_side_by_side(self.rendered)
        self.scroll_offset = 0
        self.layout_sync = LayoutSyncEngine()

        self.theme_preview = PreviewSession(THEMES_MENU_TITLE, lambda: self.theme_name, self.set_theme)
        self.menu = CommandMenu(
            self.command_menu_items,
            on_cursor_change=self._on_menu_cursor_change,
            on_dismiss=self.theme_preview.cancel,
        )
        self.refresh()

    # section helpers
    @property
    def order(self) -> tuple[DiffSection, ...]:
        return self.registry.order

    @property
    def active_section(self) -> DiffSection:
        return self.selection.section

    @property
    def tree_index(self) -> dict[str, TreePath]:
        state = self.registry.state(self.active_section)
        return state.tree_index if state is not None else {}

    def can_switch_sections(self) -> bool:
        return len(self.order) > 1

    def is_piped_mode(self) -> bool:
        return self.order == (DiffSection.FILES,)

    def _valid_section(self, section: DiffSection | None) -> DiffSection:
        if section is None or not self.registry.has_section(section):
            return self.initial_section
        return section

    def _set_payload(self, rendered: RenderedFile, side: SideBySideRenderedFile | None = None) -> None:
        self.rendered = rendered
        self.side_by_side = side if side is not None else build_side_by_side(rendered)
        self.scroll_offset = 0

    # reload
    def manual_refresh(self) -> None:
        if not self.manual_refresh_enabled:
            return
        self.refresh()

    def refresh(self) -> None:
        """Reload every section and restore the selection."""
        try:
            self.repo_root = self.provider.repo_root()
        except Exception as exc:
            logger.debug("repo root unavailable: %s", exc)
        try:
            self.branch = self.provider.current_branch()
        except Exception as exc:
            logger.debug("branch unavailable: %s", exc)

        preferred: dict[DiffSection, str] = {}
        if self.selection.is_file and self.selection.path:
            preferred[self.active_section] = self.selection.path
        previous_active = self._valid_section(self.active_section)

        try:
            self.registry.load(self.provider.load_diff, preferred)
        except ReloadError as exc:
            logger.debug("reload failed: %s", exc.message)
            self._set_load_error(exc.message)
            return

        self.load_error = ""
        self.tree_roots = self.registry.tree_roots()

        if self.registry.total_file_count() == 0:
            self.selection = ActiveSelection.none(self.initial_section)
            self.tree_cursor = None
            self.no_matches = False
            self._set_payload(message_to_rendered("Diff", self.empty_message()))
            return

        target = previous_active
        if not self.registry.has_files(target):
            target = self.registry.find_section_with_files(previous_active) or self.initial_section
        state = self.registry.state(target)
        path = state.preferred_path() if state is not None else None
        if path:
            self.select_file(path, target)
        self._sync_filter_selection()

    def _set_load_error(self, message: str) -> None:
        self.load_error = message
        self.registry.clear()
        self.tree_roots = self.registry.tree_roots()
        self.selection = ActiveSelection.none(self.initial_section)
        self.tree_cursor = None
        self.no_matches = False
        self._set_payload(message_to_rendered("Error", self.error_message()))

    # selection
    def select_file(self, path: str, section: DiffSection | None = None) -> bool:
        """Select ``path`` in ``section`` (default: the active one).

        Returns ``False`` without changing anything when the path is unknown.
        """
        if not path:
            return False
        state = self.registry.state(self._valid_section(section or self.active_section))
        if state is None:
            return False
        tree_path = state.tree_index.get(path)
        if tree_path is None:
            return False
        node = node_at_path(self.tree_roots, tree_path)
        if node is None:
            return False
        self.tree_cursor = tree_path
        self.on_tree_cursor_change(node)
        return True

    def on_tree_cursor_change(self, node: DiffTreeNode) -> None:
        """Show whatever the sidebar cursor landed on."""
        if node.kind is TreeNodeKind.SECTION:
            self.select_section_summary(node.section)
        elif node.kind is TreeNodeKind.DIRECTORY:
            self.select_directory(node)
        elif node.kind is TreeNodeKind.FILE:
            self._set_active_file(node.section, node.path)

    def _set_active_file(self, section: DiffSection, path: str) -> None:
        state = self.registry.state(section)
        if state is None:
            return
        rendered = state.rendered_by_path.get(path)
        if rendered is None:
            return
        self.selection = ActiveSelection.file(section, path)
        state.last_selected_path = path
        self._set_payload(rendered, state.side_by_side_by_path.get(path))

    def select_directory(self, node: DiffTreeNode) -> None:
        self.selection = ActiveSelection.directory(self._valid_section(node.section), node.path)
        self._set_payload(build_directory_summary(node))

    def select_section_summary(self, section: DiffSection) -> None:
        section = self._valid_section(section)
        self.selection = ActiveSelection.section_summary(section)
        self._set_payload(build_section_summary(section, self.registry.state(section)))

    def current_file(self) -> DiffFile | None:
        if not self.selection.is_file:
            return None
        state = self.registry.state(self.active_section)
        if state is None:
            return None
        return state.file_by_path.get(self.selection.path)

    # navigation
    def filtered_paths_for_section(self, section: DiffSection) -> list[str]:
        state = self.registry.state(section)
        if state is None or not state.has_files():
            return []
        if not self.query:
            return list(state.ordered_file_paths)
        return filtered_file_paths(state.roots, self.query, self.filter_options)

    def navigable_paths(self) -> list[str]:
        """Paths ``move_cursor`` walks: the active section, filtered by the query."""
        return self.filtered_paths_for_section(self.active_section)

    def move_cursor(self, delta: int) -> None:
        paths = self.navigable_paths()
        if not paths:
            return
        current = -1
        if self.selection.is_file and self.selection.path in paths:
            current = paths.index(self.selection.path)
        if current < 0:
            next_idx = len(paths) - 1 if delta < 0 else 0
        else:
            next_idx = (current + delta) % len(paths)
        self.select_file(paths[next_idx])

    def switch_section(self) -> None:
        """Jump to the next section that has something to show."""
        if not self.can_switch_sections():
            return

        target_section: DiffSection | None = None
        target_path: str | None = None
        for candidate in ordered_sections_after(self.order, self.active_section):
            state = self.registry.state(candidate)
            if state is None:
                continue
            if self.query:
                filtered = self.filtered_paths_for_section(candidate)
                if not filtered:
                    continue
                target_section = candidate
                target_path = filtered[0]
                if state.last_selected_path in filtered:
                    target_path = state.last_selected_path
                break
            if not state.has_files():
                continue
            target_section = candidate
            target_path = state.preferred_path()
            if target_path:
                break

        if target_section is None or not target_path:
            return
        self.select_file(target_path, target_section)
        self.focus = FocusTarget.TREE

    # filter
    def set_query(self, text: str) -> None:
        self.filter_visible = True
        self.query = text
        self._sync_filter_selection()

    def _switch_to_first_file(self, section: DiffSection) -> bool:
        state = self.registry.state(section)
        if state is None or not state.has_files():
            return False
        return self.select_file(state.ordered_file_paths[0], section)

    def _sync_filter_selection(self) -> None:
        if not self.query:
            self.no_matches = False
            if not self.selection.is_file:
                for section in ordered_sections_from(self.order, self.active_section):
                    if self._switch_to_first_file(section):
                        break
            return

        for section in ordered_sections_from(self.order, self.active_section):
            filtered = self.filtered_paths_for_section(section)
            if not filtered:
                continue
            if section is not self.active_section:
                logger.debug("filter %r fell back to section %s", self.query, section.value)
            self.no_matches = False
            self.select_file(filtered[0], section)
            return
        self._set_no_matches()

    def _set_no_matches(self) -> None:
        self.no_matches = True
        self.tree_cursor = None
        self.selection = ActiveSelection.none(self.active_section)
        self._set_payload(message_to_rendered("No matches", no_matches_message(self.query)))

    def open_filter(self) -> None:
        if not self.sidebar_visible:
            self.sidebar_visible = True
        self.filter_visible = True
        self.focus = FocusTarget.FILTER

    def clear_filter(self) -> bool:
        if not self.query:
            return False
        self.query = ""
        self.filter_visible = False
        self._sync_filter_selection()
        self.focus = FocusTarget.TREE
        return True

    def handle_escape(self) -> None:
        if self.clear_filter():
            return
        if self.focus is FocusTarget.FILTER and self.filter_visible:
            self.filter_visible = False
            self.focus = FocusTarget.TREE

    def should_show_filter_input(self) -> bool:
        return self.filter_visible or self.focus is FocusTarget.FILTER or bool(self.query)

    # layout
    def visual_rows(self, mode: LayoutMode) -> int:
        """Rows the payload occupies in ``mode``, counting wrapped lines."""
        if mode is LayoutMode.SIDE_BY_SIDE:
            rows = self.side_by_side.rows
            if not rows:
                return 0
            if not self.wrap or self.viewport_width <= 0:
                return len(rows)
            panes = side_by_side_pane_layout(
                self.viewport_width,
                self.side_by_side,
                self.hide_change_signs,
                self.split_ratio,
            )
            return wrapped_side_content_height(rows, panes, self.viewport_width)

        lines = self.rendered.lines
        if not lines:
            return 0
        if not self.wrap or self.viewport_width <= 0:
            return len(lines)
        wrap_width = max(1, self.viewport_width - rendered_gutter_width(self.rendered, self.hide_change_signs))
        return wrapped_content_height(lines, wrap_width)

    def set_scroll_offset(self, offset: int) -> None:
        self.scroll_offset = clamp_offset(offset, self.visual_rows(self.layout))

    def toggle_layout(self) -> None:
        """Switch unified/side-by-side, keeping the same content in view."""
        source = self.layout
        target_offset = self.layout_sync.toggle(
            source,
            self.scroll_offset,
            _DisplayedRows(self),
            wrap=self.wrap,
            section=self.active_section,
            path=self.selection.path,
        )
        self.layout = source.other
        self._refresh_menu_items()
        self.scroll_offset = target_offset

    @property
    def layout_label(self) -> str:
        return self.layout.label

    def toggle_wrap(self) -> None:
        self.wrap = not self.wrap

    def toggle_change_signs(self) -> None:
        self.hide_change_signs = not self.hide_change_signs

    def toggle_intraline_style(self) -> None:
        self.intraline_style = self.intraline_style.other

    def toggle_sidebar(self) -> None:
        self.sidebar_visible = not self.sidebar_visible
        if self.sidebar_visible:
            return
        if self.focus in (FocusTarget.TREE, FocusTarget.FILTER, FocusTarget.DIVIDER):
            self.focus = FocusTarget.VIEWER

    def reset_split(self) -> None:
        if self.layout is not LayoutMode.SIDE_BY_SIDE:
            return
        self.split_ratio = DEFAULT_SPLIT_RATIO

    def shift_split(self, delta: int) -> None:
        """Move the side-by-side divider by ``delta`` cells."""
        if delta == 0 or self.layout is not LayoutMode.SIDE_BY_SIDE or self.viewport_width <= 0:
            return
        available, min_offset, max_offset = side_by_side_divider_bounds(self.viewport_width)
        panes = side_by_side_pane_layout(
            self.viewport_width,
            self.side_by_side,
            self.hide_change_signs,
            self.split_ratio,
        )
        next_offset = max(min_offset, min(max_offset, panes.divider_x + delta))
        if next_offset == panes.divider_x:
            return
        self.split_ratio = next_offset / available if available > 0 else DEFAULT_SPLIT_RATIO

    def focus_divider(self) -> None:
        if not self.sidebar_visible:
            return
        if self.focus is not FocusTarget.DIVIDER:
            self.divider_return_focus = self.focus
        self.focus = FocusTarget.DIVIDER

    def exit_divider_focus(self) -> None:
        target = self.divider_return_focus
        self.focus = FocusTarget.VIEWER if target is FocusTarget.DIVIDER else target

    # theme + command menu
    def set_theme(self, name: str) -> None:
        if get_theme(name) is None:
            return
        self.theme_name = name

    @property
    def theme_display_name(self) -> str:
        return theme_display_name(self.theme_name)

    def toggle_menu(self) -> None:
        if self.menu.visible:
            self.theme_preview.cancel()
            self.menu.close()
            return
        self.theme_preview.begin()
        self.menu.open()

    def open_theme_menu(self) -> None:
        self.theme_preview.cancel()
        self.menu.close()
        self.theme_preview.begin()
        self.menu.open()
        self.menu.push_level(THEMES_MENU_TITLE, self.theme_items())

    def menu_back(self) -> None:
        """Escape inside the menu: pop one level, or dismiss at the root."""
        self.menu.pop_level()

    def _on_menu_cursor_change(self, item: MenuItem) -> None:
        self.theme_preview.on_cursor_change(self.menu, item)

    def _menu_action(self, action: Callable[[], None]) -> Callable[[], None]:
        def run() -> None:
            action()
            self.theme_preview.cancel()
            self.menu.close()

        return run

    def _set_theme_action(self, name: str) -> Callable[[], None]:
        def run() -> None:
            self.set_theme(name)
            self.theme_preview.commit()
            self.menu.close()

        return run

    def _focus_divider_from_menu(self) -> None:
        if not self.sidebar_visible:
            return
        self.focus_divider()
        self.theme_preview.cancel()
        self.menu.close()

    def _refresh_menu_items(self) -> None:
        if self.menu.current_level().title != ROOT_MENU_TITLE:
            return
        self.menu.set_items(self.command_menu_items())

    def command_menu_items(self) -> list[MenuItem]:
        items: list[MenuItem] = []
        if self.can_switch_sections():
            items.append(
                MenuItem(
                    label="Switch section",
                    filter_text="Switch section staged unstaged files",
                    hint="[s]",
                    action=self._menu_action(self.switch_section),
                )
            )
        items.extend(
            [
                MenuItem(
                    label="Refresh",
                    filter_text="Refresh reload diff",
                    hint="[r]",
                    action=self._menu_action(self.manual_refresh),
                ),
                MenuItem(divider="Layout"),
                MenuItem(
                    label="Toggle sidebar",
                    filter_text="Toggle sidebar layout panel",
                    hint="[b]",
                    action=self._menu_action(self.toggle_sidebar),
                ),
                MenuItem(
                    label="Focus divider",
                    filter_text="Focus divider split resize",
                    hint="[d]",
                    action=self._focus_divider_from_menu,
                ),
                MenuItem(divider="Appearance"),
                MenuItem(
                    label="Toggle line wrap",
                    filter_text="Toggle line wrap hard wrap soft wrap",
                    hint="[w]",
                    action=self._menu_action(self.toggle_wrap),
                ),
                MenuItem(
                    label="Toggle side-by-side mode",
                    filter_text="Toggle side by side mode split unified layout view",
                    hint="[v]",
                    action=self._menu_action(self.toggle_layout),
                ),
            ]
        )
        if self.layout is LayoutMode.SIDE_BY_SIDE:
            items.append(
                MenuItem(
                    label="Reset pane split",
                    filter_text="Reset pane split divider even ratio 50 50",
                    action=self._menu_action(self.reset_split),
                )
            )
        items.extend(
            [
                MenuItem(
                    label="Toggle +/- symbols",
                    filter_text="Toggle plus minus symbols signs prefixes add remove",
                    action=self._menu_action(self.toggle_change_signs),
                ),
                MenuItem(
                    label="Toggle intraline style",
                    filter_text="Toggle intraline style highlight background underline changed characters",
                    hint="[i]",
                    action=self._menu_action(self.toggle_intraline_style),
                ),
                MenuItem(
                    label="Theme",
                    hint="[t]",
                    children_title=THEMES_MENU_TITLE,
                    children=self.theme_items,
                ),
            ]
        )
        return items

    def theme_items(self) -> list[MenuItem]:
        items: list[MenuItem] = []
        for title, names in (("Dark themes", dark_theme_names()), ("Light themes", light_theme_names())):
            if not names:
                continue
            items.append(MenuItem(divider=title))
            for name in names:
                label = theme_display_name(name)
                items.append(
                    MenuItem(
                        label=label,
                        filter_text=f"{label} {name}",
                        hint="current" if name == self.theme_name else "",
                        data=name,
                        action=self._set_theme_action(name),
                    )
                )
        return items

    # presentation text
    def viewer_title(self) -> str:
        kind = self.selection.kind
        if kind is SelectionKind.SECTION_SUMMARY:
            return f"{self.active_section.display_name} changes"
        if kind is SelectionKind.DIRECTORY_SUMMARY:
            return f"{self.selection.path} (directory)"
        if kind is SelectionKind.FILE:
            return self.selection.path
        if self.load_error:
            return "Error"
        if self.no_matches:
            return "No matches"
        return "Diff"

    def file_position(self) -> tuple[int, int] | None:
        """1-based ``(index, count)`` of the active file in its section."""
        if not self.selection.is_file:
            return None
        state = self.registry.state(self.active_section)
        if state is None or self.selection.path not in state.ordered_file_paths:
            return None
        return state.ordered_file_paths.index(self.selection.path) + 1, state.file_count

    def sidebar_summary_label(self) -> str:
        return " ".join(
            f"{section.display_name}: {self.registry.file_count(section)}" for section in self.order
        )

    def sidebar_totals(self) -> tuple[int, int]:
        return self.registry.totals()

    @property
    def repo_name(self) -> str:
        return Path(self.repo_root).name if self.repo_root else ""

    def should_show_empty_state(self) -> bool:
        return (
            not self.load_error
            and not self.no_matches
            and self.selection.kind is SelectionKind.NONE
            and self.registry.total_file_count() == 0
        )

    def empty_message_parts(self) -> tuple[str, str]:
        if self.is_piped_mode():
            return "No files in piped diff.", "Run your diff command again and pipe it into lazydiff."
        return "No staged or unstaged changes.", "Make edits or stage files, then press r to refresh."

    def empty_message(self) -> str:
        heading, details = self.empty_message_parts()
        return f"{heading}\n\n{details}"

    def error_message(self) -> str:
        message = self.load_error.strip() or "Unknown error"
        if not self.manual_refresh_enabled:
            return f"Failed to load git diff:\n\n{message}\n\nRun the command again to retry."
        return f"Failed to load git diff:\n\n{message}\n\nPress r to retry."


__all__ = [
    "DiffViewer",
    "FocusTarget",
    "THEMES_MENU_TITLE",
    "build_directory_summary",
    "build_section_summary",
    "change_stat_text",
    "no_matches_message",
]
