"""Live, revertible preview of a menu level's value (the theme menu).

Entering the preview level remembers the committed value. The first cursor
event only reconciles the cursor onto the committed value's row; later cursor
events apply the highlighted item's value immediately. ``commit`` keeps the
applied value, ``cancel`` restores the remembered one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .command_menu import CommandMenu, MenuItem

logger = logging.getLogger(__name__)


@dataclass
class MenuPreviewState:
    base_value: str | None = None
    cursor_synced: bool = False

    def reset(self) -> None:
        self.base_value = None
        self.cursor_synced = False


class PreviewSession:
    """Preview driver bound to one menu level title."""

    def __init__(
        self,
        level_title: str,
        current_value: Callable[[], str],
        apply_value: Callable[[str], None],
    ) -> None:
        self.level_title = level_title
        self.current_value = current_value
        self.apply_value = apply_value
        self.state = MenuPreviewState()

    @property
    def active(self) -> bool:
        return self.state.base_value is not None

    def begin(self) -> None:
        self.state.reset()

    def on_cursor_change(self, menu: CommandMenu, item: MenuItem) -> None:
        level = menu.current_level()
        if level.title != self.level_title:
            self.cancel()
            return
        if self.state.base_value is None:
            self.state.base_value = self.current_value()

        value = item.data
        if not isinstance(value, str) or not value:
            return

        if not self.state.cursor_synced:
            current = menu.current_item()
            if current is not None and current.data == value:
                self.state.cursor_synced = True
                committed_index = level.index_of_data(self.current_value())
                if committed_index is not None and level.select_index(committed_index):
                    return

        self.apply_value(value)

    def commit(self) -> None:
        self._finish(commit=True)

    def cancel(self) -> None:
        self._finish(commit=False)

    def _finish(self, *, commit: bool) -> None:
        base = self.state.base_value
        if not commit and base is not None and self.current_value() != base:
            logger.debug("preview reverted to %r", base)
            self.apply_value(base)
        self.state.reset()


__all__ = ["MenuPreviewState", "PreviewSession"]
