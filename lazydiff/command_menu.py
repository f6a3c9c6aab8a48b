"""Nested command menu state: a stack of filterable item levels.

The menu is pure state. Callers observe cursor movement through
``on_cursor_change`` and dismissal through ``on_dismiss``; item actions are
plain callables bound by the owner.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .fuzzy import fuzzy_match_labels

logger = logging.getLogger(__name__)

ROOT_MENU_TITLE = "Commands"
MENU_RESULT_LIMIT = 200


@dataclass
class MenuItem:
    """One menu row: an action, a submenu entry, or a divider heading."""

    label: str = ""
    filter_text: str = ""
    hint: str = ""
    action: Callable[[], None] | None = None
    data: object = None
    divider: str = ""
    children_title: str = ""
    children: Callable[[], list[MenuItem]] | None = None

    @property
    def is_divider(self) -> bool:
        return bool(self.divider)

    @property
    def search_text(self) -> str:
        return self.filter_text or self.label


@dataclass
class MenuLevel:
    """Items shown at one depth plus that depth's query and cursor."""

    title: str
    items: list[MenuItem] = field(default_factory=list)
    query: str = ""
    cursor: int = 0

    def visible_items(self) -> list[MenuItem]:
        """All items without a query; ranked matches (no dividers) with one."""
        if not self.query:
            return list(self.items)
        candidates = [item for item in self.items if not item.is_divider]
        matched = fuzzy_match_labels(
            self.query,
            [item.search_text for item in candidates],
            limit=MENU_RESULT_LIMIT,
        )
        return [candidates[idx] for idx, _, _ in matched]

    def _selectable_indices(self) -> list[int]:
        return [idx for idx, item in enumerate(self.visible_items()) if not item.is_divider]

    def current_item(self) -> MenuItem | None:
        visible = self.visible_items()
        if not 0 <= self.cursor < len(visible):
            return None
        item = visible[self.cursor]
        return None if item.is_divider else item

    def reset_cursor(self) -> None:
        selectable = self._selectable_indices()
        self.cursor = selectable[0] if selectable else 0

    def select_index(self, index: int) -> bool:
        """Place the cursor on ``index``; returns whether it moved."""
        visible = self.visible_items()
        if not 0 <= index < len(visible) or visible[index].is_divider:
            return False
        if index == self.cursor:
            return False
        self.cursor = index
        return True

    def move_cursor(self, delta: int) -> bool:
        """Step over dividers, clamping at both ends."""
        selectable = self._selectable_indices()
        if not selectable or delta == 0:
            return False
        if self.cursor in selectable:
            position = selectable.index(self.cursor)
        else:
            position = 0 if delta > 0 else len(selectable) - 1
            delta = 0
        target = selectable[max(0, min(len(selectable) - 1, position + delta))]
        if target == self.cursor:
            return False
        self.cursor = target
        return True

    def index_of_data(self, value: object) -> int | None:
        for idx, item in enumerate(self.visible_items()):
            if not item.is_divider and item.data == value:
                return idx
        return None


class CommandMenu:
    """Stack of :class:`MenuLevel` rooted at the ``Commands`` level."""

    def __init__(
        self,
        root_items: Callable[[], list[MenuItem]],
        *,
        root_title: str = ROOT_MENU_TITLE,
        on_cursor_change: Callable[[MenuItem], None] | None = None,
        on_dismiss: Callable[[], None] | None = None,
    ) -> None:
        self.root_items = root_items
        self.root_title = root_title
        self.on_cursor_change = on_cursor_change
        self.on_dismiss = on_dismiss
        self.visible = False
        self.levels: list[MenuLevel] = [self._root_level()]

    def _root_level(self) -> MenuLevel:
        level = MenuLevel(self.root_title, self.root_items())
        level.reset_cursor()
        return level

    def _notify_cursor(self) -> None:
        item = self.current_item()
        if item is not None and self.on_cursor_change is not None:
            self.on_cursor_change(item)

    def current_level(self) -> MenuLevel:
        return self.levels[-1]

    def current_item(self) -> MenuItem | None:
        return self.current_level().current_item()

    def open(self) -> None:
        self.levels = [self._root_level()]
        self.visible = True

    def close(self) -> None:
        """Hide the menu and reset it to the root level."""
        self.visible = False
        self.levels = [self._root_level()]

    def dismiss(self) -> None:
        """Close without running an action."""
        self.close()
        if self.on_dismiss is not None:
            self.on_dismiss()

    def set_items(self, items: list[MenuItem]) -> None:
        """Replace the current level's items, keeping the cursor in range."""
        level = self.current_level()
        level.items = items
        if level.current_item() is None:
            level.reset_cursor()

    def push_level(self, title: str, items: list[MenuItem]) -> None:
        level = MenuLevel(title, items)
        level.reset_cursor()
        self.levels.append(level)
        logger.debug("menu push level %r (%d items)", title, len(items))
        self._notify_cursor()

    def pop_level(self) -> bool:
        """Return to the parent level; at the root this dismisses instead."""
        if len(self.levels) <= 1:
            self.dismiss()
            return False
        self.levels.pop()
        self._notify_cursor()
        return True

    def move_cursor(self, delta: int) -> None:
        if self.current_level().move_cursor(delta):
            self._notify_cursor()

    def select_index(self, index: int) -> None:
        if self.current_level().select_index(index):
            self._notify_cursor()

    def set_query(self, query: str) -> None:
        level = self.current_level()
        if level.query == query:
            return
        level.query = query
        level.reset_cursor()
        self._notify_cursor()

    def activate(self) -> bool:
        """Run the item under the cursor or open its submenu."""
        item = self.current_item()
        if item is None:
            return False
        if item.children is not None:
            self.push_level(item.children_title or item.label, item.children())
            return True
        if item.action is not None:
            item.action()
            return True
        return False


__all__ = ["CommandMenu", "MenuItem", "MenuLevel", "ROOT_MENU_TITLE"]
