"""Diff theme definitions and selection helpers.

Themes are ANSI palettes for diff rows plus the Pygments style used when the
CLI colourises printed payloads. Themes are grouped into dark and light sets
for the theme menu.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiffTheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    dark: bool
    pygments_style: str
    divider: str
    reset: str
    add: str
    remove: str
    add_emphasis: str
    remove_emphasis: str
    hunk: str
    meta: str
    line_number: str
    title: str


CATPPUCCIN_THEME = DiffTheme(
    name="catppuccin",
    dark=True,
    pygments_style="monokai",
    divider="\033[2;38;5;60m",
    reset="\033[0m",
    add="\033[38;5;114m",
    remove="\033[38;5;211m",
    add_emphasis="\033[1;48;5;22m",
    remove_emphasis="\033[1;48;5;52m",
    hunk="\033[38;5;147m",
    meta="\033[2;38;5;146m",
    line_number="\033[38;5;60m",
    title="\033[1;38;5;183m",
)

DRACULA_THEME = DiffTheme(
    name="dracula",
    dark=True,
    pygments_style="dracula",
    divider="\033[2;38;5;61m",
    reset="\033[0m",
    add="\033[38;5;84m",
    remove="\033[38;5;203m",
    add_emphasis="\033[1;48;5;22m",
    remove_emphasis="\033[1;48;5;88m",
    hunk="\033[38;5;141m",
    meta="\033[2;38;5;103m",
    line_number="\033[38;5;61m",
    title="\033[1;38;5;212m",
)

GRUVBOX_DARK_THEME = DiffTheme(
    name="gruvbox-dark",
    dark=True,
    pygments_style="gruvbox-dark",
    divider="\033[2;38;5;239m",
    reset="\033[0m",
    add="\033[38;5;142m",
    remove="\033[38;5;167m",
    add_emphasis="\033[1;48;5;58m",
    remove_emphasis="\033[1;48;5;52m",
    hunk="\033[38;5;109m",
    meta="\033[2;38;5;245m",
    line_number="\033[38;5;243m",
    title="\033[1;38;5;214m",
)

NORD_THEME = DiffTheme(
    name="nord",
    dark=True,
    pygments_style="nord",
    divider="\033[2;38;5;60m",
    reset="\033[0m",
    add="\033[38;5;108m",
    remove="\033[38;5;174m",
    add_emphasis="\033[1;48;5;23m",
    remove_emphasis="\033[1;48;5;53m",
    hunk="\033[38;5;110m",
    meta="\033[2;38;5;103m",
    line_number="\033[38;5;60m",
    title="\033[1;38;5;153m",
)

CATPPUCCIN_LATTE_THEME = DiffTheme(
    name="catppuccin-latte",
    dark=False,
    pygments_style="friendly",
    divider="\033[2;38;5;145m",
    reset="\033[0m",
    add="\033[38;5;28m",
    remove="\033[38;5;161m",
    add_emphasis="\033[1;48;5;194m",
    remove_emphasis="\033[1;48;5;224m",
    hunk="\033[38;5;61m",
    meta="\033[2;38;5;102m",
    line_number="\033[38;5;145m",
    title="\033[1;38;5;98m",
)

GRUVBOX_LIGHT_THEME = DiffTheme(
    name="gruvbox-light",
    dark=False,
    pygments_style="gruvbox-light",
    divider="\033[2;38;5;250m",
    reset="\033[0m",
    add="\033[38;5;100m",
    remove="\033[38;5;124m",
    add_emphasis="\033[1;48;5;187m",
    remove_emphasis="\033[1;48;5;224m",
    hunk="\033[38;5;24m",
    meta="\033[2;38;5;243m",
    line_number="\033[38;5;246m",
    title="\033[1;38;5;130m",
)

SOLARIZED_LIGHT_THEME = DiffTheme(
    name="solarized-light",
    dark=False,
    pygments_style="solarized-light",
    divider="\033[2;38;5;187m",
    reset="\033[0m",
    add="\033[38;5;64m",
    remove="\033[38;5;160m",
    add_emphasis="\033[1;48;5;194m",
    remove_emphasis="\033[1;48;5;224m",
    hunk="\033[38;5;33m",
    meta="\033[2;38;5;246m",
    line_number="\033[38;5;245m",
    title="\033[1;38;5;136m",
)

PLAIN_THEME = DiffTheme(
    name="plain",
    dark=True,
    pygments_style="",
    divider="",
    reset="",
    add="",
    remove="",
    add_emphasis="",
    remove_emphasis="",
    hunk="",
    meta="",
    line_number="",
    title="",
)

DEFAULT_THEME = CATPPUCCIN_THEME
THEME_ALIASES: dict[str, str] = {"catpuccin": CATPPUCCIN_THEME.name}

_THEMES: dict[str, DiffTheme] = {
    theme.name: theme
    for theme in (
        CATPPUCCIN_THEME,
        DRACULA_THEME,
        GRUVBOX_DARK_THEME,
        NORD_THEME,
        CATPPUCCIN_LATTE_THEME,
        GRUVBOX_LIGHT_THEME,
        SOLARIZED_LIGHT_THEME,
    )
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def dark_theme_names() -> list[str]:
    return [name for name in available_theme_names() if _THEMES[name].dark]


def light_theme_names() -> list[str]:
    return [name for name in available_theme_names() if not _THEMES[name].dark]


def get_theme(name: str) -> DiffTheme | None:
    return _THEMES.get(name)


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    candidate = THEME_ALIASES.get(candidate, candidate)
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def theme_display_name(name: str) -> str:
    """``catppuccin-latte`` -> ``Catppuccin Latte``."""
    parts = [part for part in name.split("-") if part]
    return " ".join(part[:1].upper() + part[1:] for part in parts)


def resolve_theme(name: str | None, *, no_color: bool = False) -> DiffTheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES.get(normalize_theme_name(name), DEFAULT_THEME)


__all__ = [
    "DEFAULT_THEME",
    "DiffTheme",
    "PLAIN_THEME",
    "THEME_ALIASES",
    "available_theme_names",
    "dark_theme_names",
    "get_theme",
    "light_theme_names",
    "normalize_theme_name",
    "resolve_theme",
    "theme_display_name",
]
