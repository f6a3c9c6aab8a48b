"""Startup config file loading.

The config is a JSON object stored under the platform config directory. Its
keys mirror the startup flags and only fill in flags the user did not pass.
An explicit ``--config`` path must exist; the default path is optional.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Container
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

from .startup import StartupOptionError, parse_intraline_style, parse_layout_mode, parse_theme_name

logger = logging.getLogger(__name__)

APP_NAME = "lazydiff"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

KEY_VIEW = "view"
KEY_SIDEBAR = "sidebar"
KEY_THEME = "theme"
KEY_INTRALINE_STYLE = "intraline-style"
KEY_SHOW_SYMBOLS = "show-symbols"
CONFIG_KEYS = (KEY_VIEW, KEY_SIDEBAR, KEY_THEME, KEY_INTRALINE_STYLE, KEY_SHOW_SYMBOLS)


class ConfigError(ValueError):
    """The config file is unreadable, malformed, or holds an invalid value."""


@dataclass(frozen=True)
class StartupConfig:
    """Values present in the config file; ``None`` means the key was absent."""

    view: str | None = None
    sidebar: bool | None = None
    theme: str | None = None
    intraline_style: str | None = None
    show_symbols: bool | None = None


@dataclass(frozen=True)
class StartupFlagValues:
    """Raw startup values before parsing into an ``InitialState``."""

    view: str = "unified"
    sidebar: bool = True
    theme: str = "catppuccin"
    intraline_style: str = "background"
    show_symbols: bool = False


@dataclass(frozen=True)
class ResolvedConfigPath:
    path: Path | None
    required: bool
    enabled: bool


def resolve_config_path(explicit_path: str | Path | None = None, no_config: bool = False) -> ResolvedConfigPath:
    """Return which file to read and whether its absence is an error."""
    if no_config:
        return ResolvedConfigPath(path=None, required=False, enabled=False)
    if explicit_path:
        return ResolvedConfigPath(path=Path(explicit_path), required=True, enabled=True)
    return ResolvedConfigPath(path=DEFAULT_CONFIG_PATH, required=False, enabled=True)


def _validated(path: Path, key: str, value: object, parse: Callable[[str], object] | None) -> object:
    expected = bool if parse is None else str
    if not isinstance(value, expected):
        raise ConfigError(
            f'invalid config value for key "{key}" in "{path}": expected {expected.__name__}, got {value!r}'
        )
    if parse is not None:
        try:
            parse(value)
        except StartupOptionError as exc:
            raise ConfigError(f'invalid config value for key "{key}" in "{path}": {exc}') from exc
    return value


def parse_startup_config(path: Path, data: object) -> StartupConfig:
    """Validate a decoded JSON document and turn it into a ``StartupConfig``."""
    if data is None:
        return StartupConfig()
    if not isinstance(data, dict):
        raise ConfigError(f'parse config "{path}": top level must be an object')

    unknown = sorted(str(key) for key in data if key not in CONFIG_KEYS)
    if unknown:
        raise ConfigError(f'parse config "{path}": unknown key "{unknown[0]}"')

    values: dict[str, object] = {}
    if KEY_VIEW in data:
        values["view"] = _validated(path, KEY_VIEW, data[KEY_VIEW], parse_layout_mode)
    if KEY_SIDEBAR in data:
        values["sidebar"] = _validated(path, KEY_SIDEBAR, data[KEY_SIDEBAR], None)
    if KEY_THEME in data:
        values["theme"] = _validated(path, KEY_THEME, data[KEY_THEME], parse_theme_name)
    if KEY_INTRALINE_STYLE in data:
        values["intraline_style"] = _validated(
            path, KEY_INTRALINE_STYLE, data[KEY_INTRALINE_STYLE], parse_intraline_style
        )
    if KEY_SHOW_SYMBOLS in data:
        values["show_symbols"] = _validated(path, KEY_SHOW_SYMBOLS, data[KEY_SHOW_SYMBOLS], None)
    return StartupConfig(**values)


def read_startup_config(path: Path, required: bool) -> StartupConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if not required:
            return StartupConfig()
        raise ConfigError(f'read config "{path}": file not found') from None
    except OSError as exc:
        raise ConfigError(f'read config "{path}": {exc}') from exc

    if not text.strip():
        return StartupConfig()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f'parse config "{path}": {exc}') from exc
    config = parse_startup_config(path, data)
    logger.debug("loaded startup config from %s", path)
    return config


def load_startup_config(explicit_path: str | Path | None = None, no_config: bool = False) -> StartupConfig:
    resolved = resolve_config_path(explicit_path, no_config)
    if not resolved.enabled or resolved.path is None:
        return StartupConfig()
    return read_startup_config(resolved.path, resolved.required)


def apply_startup_config(
    values: StartupFlagValues,
    config: StartupConfig,
    explicitly_set: Container[str],
) -> StartupFlagValues:
    """Fill flags the user did not set from config values that are present."""
    updates: dict[str, object] = {}
    if config.view is not None and KEY_VIEW not in explicitly_set:
        updates["view"] = config.view
    if config.sidebar is not None and KEY_SIDEBAR not in explicitly_set:
        updates["sidebar"] = config.sidebar
    if config.theme is not None and KEY_THEME not in explicitly_set:
        updates["theme"] = config.theme
    if config.intraline_style is not None and KEY_INTRALINE_STYLE not in explicitly_set:
        updates["intraline_style"] = config.intraline_style
    if config.show_symbols is not None and KEY_SHOW_SYMBOLS not in explicitly_set:
        updates["show_symbols"] = config.show_symbols
    return replace(values, **updates)


__all__ = [
    "CONFIG_KEYS",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ResolvedConfigPath",
    "StartupConfig",
    "StartupFlagValues",
    "apply_startup_config",
    "load_startup_config",
    "parse_startup_config",
    "read_startup_config",
    "resolve_config_path",
]
