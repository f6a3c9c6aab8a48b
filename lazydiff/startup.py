"""Startup option parsing and normalization.

CLI flags and config values go through the same ``parse_*`` helpers, which
raise :class:`StartupOptionError` on invalid input. ``normalize_initial_state``
is the lenient path used when a viewer is constructed directly: invalid values
are replaced with defaults instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .layout_sync import LayoutMode
from .themes import DEFAULT_THEME, THEME_ALIASES, available_theme_names, get_theme


class StartupOptionError(ValueError):
    """An explicitly supplied startup value is not recognised."""


class IntralineStyle(Enum):
    BACKGROUND = "background"
    UNDERLINE = "underline"

    @property
    def other(self) -> IntralineStyle:
        if self is IntralineStyle.BACKGROUND:
            return IntralineStyle.UNDERLINE
        return IntralineStyle.BACKGROUND


@dataclass(frozen=True)
class InitialState:
    layout: LayoutMode = LayoutMode.UNIFIED
    sidebar_visible: bool = True
    theme_name: str = DEFAULT_THEME.name
    intraline_style: IntralineStyle = IntralineStyle.BACKGROUND
    show_change_signs: bool = False


def default_initial_state() -> InitialState:
    return InitialState()


def normalize_cli_value(value: str) -> str:
    """Lowercase and trim; ``_`` and spaces become ``-``."""
    normalized = str(value).strip().lower()
    return normalized.replace("_", "-").replace(" ", "-")


def parse_layout_mode(value: str) -> LayoutMode:
    normalized = normalize_cli_value(value)
    if normalized == "unified":
        return LayoutMode.UNIFIED
    if normalized in {"split", "side-by-side", "sidebyside"}:
        return LayoutMode.SIDE_BY_SIDE
    raise StartupOptionError(f'invalid --view value {value!r} (expected "unified" or "split")')


def parse_intraline_style(value: str) -> IntralineStyle:
    normalized = normalize_cli_value(value)
    if normalized in {"background", "bg"}:
        return IntralineStyle.BACKGROUND
    if normalized == "underline":
        return IntralineStyle.UNDERLINE
    raise StartupOptionError(
        f'invalid --intraline-style value {value!r} (expected "background" or "underline")'
    )


def parse_theme_name(value: str) -> str:
    normalized = normalize_cli_value(value)
    normalized = THEME_ALIASES.get(normalized, normalized)
    if get_theme(normalized) is not None:
        return normalized
    raise StartupOptionError(
        f"invalid --theme value {value!r} (available themes: {', '.join(available_theme_names())})"
    )


def initial_state_from_values(
    view: str,
    sidebar_visible: bool,
    theme: str,
    intraline_style: str,
    show_symbols: bool,
) -> InitialState:
    """Build a validated :class:`InitialState` from raw flag values."""
    return InitialState(
        layout=parse_layout_mode(view),
        sidebar_visible=bool(sidebar_visible),
        theme_name=parse_theme_name(theme),
        intraline_style=parse_intraline_style(intraline_style),
        show_change_signs=bool(show_symbols),
    )


def normalize_initial_state(initial: InitialState | None) -> InitialState:
    """Replace unrecognised fields with defaults without raising."""
    defaults = default_initial_state()
    if initial is None:
        return defaults

    layout = initial.layout if isinstance(initial.layout, LayoutMode) else defaults.layout
    intraline = (
        initial.intraline_style
        if isinstance(initial.intraline_style, IntralineStyle)
        else defaults.intraline_style
    )
    try:
        theme_name = parse_theme_name(initial.theme_name)
    except StartupOptionError:
        theme_name = defaults.theme_name
    return replace(
        initial,
        layout=layout,
        intraline_style=intraline,
        theme_name=theme_name,
        sidebar_visible=bool(initial.sidebar_visible),
        show_change_signs=bool(initial.show_change_signs),
    )


__all__ = [
    "InitialState",
    "IntralineStyle",
    "StartupOptionError",
    "default_initial_state",
    "initial_state_from_values",
    "normalize_cli_value",
    "normalize_initial_state",
    "parse_intraline_style",
    "parse_layout_mode",
    "parse_theme_name",
]
