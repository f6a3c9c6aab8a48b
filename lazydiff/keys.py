"""Key bindings for the diff viewer.

``KeyComboRegistry`` is a small dispatch table from key tokens to handlers.
``build_viewer_key_registry`` binds the viewer's actions; ``KEY_BINDINGS``
describes them for help/footer rendering.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .viewer import DiffViewer


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


@dataclass(frozen=True)
class KeyBindingInfo:
    combos: tuple[str, ...]
    name: str
    hidden: bool = False


KEY_BINDINGS: tuple[KeyBindingInfo, ...] = (
    KeyBindingInfo(("n", "]"), "Next file"),
    KeyBindingInfo(("p", "["), "Prev file"),
    KeyBindingInfo(("/",), "Filter files"),
    KeyBindingInfo(("b",), "Toggle sidebar", hidden=True),
    KeyBindingInfo(("escape",), "Clear filter", hidden=True),
    KeyBindingInfo(("r",), "Refresh", hidden=True),
    KeyBindingInfo(("s",), "Switch section", hidden=True),
    KeyBindingInfo(("w",), "Toggle line wrap", hidden=True),
    KeyBindingInfo(("v",), "Toggle side-by-side", hidden=True),
    KeyBindingInfo(("ctrl+h",), "Shift split left", hidden=True),
    KeyBindingInfo(("ctrl+l",), "Shift split right", hidden=True),
    KeyBindingInfo(("i",), "Toggle intraline style", hidden=True),
    KeyBindingInfo(("d",), "Focus divider", hidden=True),
    KeyBindingInfo(("ctrl+p",), "Command palette"),
    KeyBindingInfo(("t",), "Theme menu", hidden=True),
    KeyBindingInfo(("q",), "Quit"),
)


def normalize_key(key: str) -> str:
    """Lowercase modifier combos (``Ctrl+P`` -> ``ctrl+p``); plain keys keep case."""
    token = key.strip()
    if "+" in token and len(token) > 1:
        return token.lower()
    if token.lower() in {"escape", "esc"}:
        return "escape"
    return token


class KeyComboRegistry:
    """Small key-dispatch table with optional key normalization strategy."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else self._identity
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    @staticmethod
    def _identity(key: str) -> str:
        return key

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def bound_keys(self) -> set[str]:
        return set(self._handlers)

    def dispatch(self, key: str) -> bool | None:
        """Invoke bound handler for ``key``; ``None`` when nothing is bound."""
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        result = handler()
        return True if result is None else result


def build_viewer_key_registry(viewer: DiffViewer, on_quit: Callable[[], None]) -> KeyComboRegistry:
    """Bind every viewer shortcut listed in ``KEY_BINDINGS``."""
    handlers: dict[str, Callable[[], bool | None]] = {
        "Next file": lambda: viewer.move_cursor(1),
        "Prev file": lambda: viewer.move_cursor(-1),
        "Filter files": viewer.open_filter,
        "Toggle sidebar": viewer.toggle_sidebar,
        "Clear filter": viewer.handle_escape,
        "Refresh": viewer.manual_refresh,
        "Switch section": viewer.switch_section,
        "Toggle line wrap": viewer.toggle_wrap,
        "Toggle side-by-side": viewer.toggle_layout,
        "Shift split left": lambda: viewer.shift_split(-1),
        "Shift split right": lambda: viewer.shift_split(1),
        "Toggle intraline style": viewer.toggle_intraline_style,
        "Focus divider": viewer.focus_divider,
        "Command palette": viewer.toggle_menu,
        "Theme menu": viewer.open_theme_menu,
        "Quit": on_quit,
    }
    registry = KeyComboRegistry(normalize_key)
    registry.register_bindings(
        *(KeyComboBinding(info.combos, handlers[info.name]) for info in KEY_BINDINGS)
    )
    return registry


__all__ = [
    "KEY_BINDINGS",
    "KeyBindingInfo",
    "KeyComboBinding",
    "KeyComboRegistry",
    "build_viewer_key_registry",
    "normalize_key",
]
