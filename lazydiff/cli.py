"""Command-line front door for lazydiff.

Parses CLI options, merges the startup config, and picks a diff provider
(git, or piped stdin). Then builds the viewer, replays any ``--keys`` presses
through the viewer key bindings, and prints the payload for the selection.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import TextIO

from . import __version__
from .ansi import clip_ansi_line, display_width, wrap_ansi_line
from .config import (
    KEY_INTRALINE_STYLE,
    KEY_SHOW_SYMBOLS,
    KEY_SIDEBAR,
    KEY_THEME,
    KEY_VIEW,
    ConfigError,
    StartupFlagValues,
    apply_startup_config,
    load_startup_config,
)
from .diff_model import LineKind, RenderedLine, SideCell
from .diff_model.render import side_by_side_pane_layout
from .highlight import colorize_code_line, sanitize_terminal_text
from .keys import build_viewer_key_registry
from .layout_sync import LayoutMode
from .providers import DiffProvider, GitDiffProvider, StdinDiffProvider
from .startup import StartupOptionError, initial_state_from_values
from .themes import DiffTheme, available_theme_names, resolve_theme
from .viewer import DiffViewer, change_stat_text

logger = logging.getLogger(__name__)

SIDE_DIVIDER = "│"
_CODE_KINDS = (LineKind.ADD, LineKind.REMOVE, LineKind.CONTEXT)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_render_width() -> int:
    """Resolve default render width from current terminal size."""
    term = shutil.get_terminal_size((100, 24))
    return max(1, term.columns)


def _sign(kind: LineKind, hide_change_signs: bool) -> str:
    if hide_change_signs:
        return ""
    if kind is LineKind.ADD:
        return "+ "
    if kind is LineKind.REMOVE:
        return "- "
    return "  "


def _kind_color(kind: LineKind, theme: DiffTheme) -> str:
    if kind is LineKind.ADD:
        return theme.add
    if kind is LineKind.REMOVE:
        return theme.remove
    if kind is LineKind.HUNK:
        return theme.hunk
    if kind is LineKind.META:
        return theme.meta
    return ""


def _styled(text: str, color: str, theme: DiffTheme) -> str:
    if not color or not text:
        return text
    return f"{color}{text}{theme.reset}"


def _closed(text: str, theme: DiffTheme) -> str:
    """Append a reset when a clipped chunk may end inside a styled span."""
    if theme.reset and "\x1b" in text:
        return text + theme.reset
    return text


def _code_text(text: str, kind: LineKind, path: str, theme: DiffTheme, no_color: bool) -> str:
    text = sanitize_terminal_text(text)
    if no_color or kind not in _CODE_KINDS or not path:
        return _styled(text, _kind_color(kind, theme), theme)
    return colorize_code_line(text, path, theme.pygments_style)


def _number(value: int, width: int) -> str:
    return str(value).rjust(width) if value > 0 else " " * width


def _unified_rows(viewer: DiffViewer, width: int, theme: DiffTheme, no_color: bool) -> list[str]:
    rendered = viewer.rendered
    if rendered.is_meta:
        return [clip_ansi_line(sanitize_terminal_text(line.text), width) for line in rendered.lines]

    old_width = max([1, *(len(str(line.old_line)) for line in rendered.lines if line.old_line > 0)])
    new_width = max([1, *(len(str(line.new_line)) for line in rendered.lines if line.new_line > 0)])
    rows: list[str] = []
    for line in rendered.lines:
        if line.kind in (LineKind.HUNK, LineKind.META):
            text = clip_ansi_line(sanitize_terminal_text(line.text), width)
            rows.append(_styled(text, _kind_color(line.kind, theme), theme))
            continue
        gutter = (
            f"{_number(line.old_line, old_width)} {_number(line.new_line, new_width)} "
            f"{_sign(line.kind, viewer.hide_change_signs)}"
        )
        text_width = max(1, width - display_width(gutter))
        code = _code_text(line.text, line.kind, rendered.path, theme, no_color)
        chunks = wrap_ansi_line(code, text_width) if viewer.wrap else [clip_ansi_line(code, text_width)]
        gutter_color = theme.line_number if line.kind is LineKind.CONTEXT else _kind_color(line.kind, theme)
        rows.append(_styled(gutter, gutter_color, theme) + _closed(chunks[0], theme))
        for chunk in chunks[1:]:
            rows.append(" " * display_width(gutter) + _closed(chunk, theme))
    return rows


def _side_cell(
    cell: SideCell | None,
    number_width: int,
    pane_width: int,
    path: str,
    viewer: DiffViewer,
    theme: DiffTheme,
    no_color: bool,
) -> str:
    gutter_width = number_width + 1 + (0 if viewer.hide_change_signs else 2)
    if cell is None:
        return " " * (gutter_width + pane_width)
    gutter = f"{_number(cell.line_number, number_width)} {_sign(cell.kind, viewer.hide_change_signs)}"
    code = clip_ansi_line(_code_text(cell.text, cell.kind, path, theme, no_color), pane_width)
    padding = " " * max(0, pane_width - display_width(code))
    return _styled(gutter, _kind_color(cell.kind, theme), theme) + _closed(code, theme) + padding


def _side_by_side_rows(viewer: DiffViewer, width: int, theme: DiffTheme, no_color: bool) -> list[str]:
    side = viewer.side_by_side
    panes = side_by_side_pane_layout(width, side, viewer.hide_change_signs, viewer.split_ratio)
    number_width = max(1, panes.gutter_width - 1 - (0 if viewer.hide_change_signs else 2))
    divider = _styled(SIDE_DIVIDER, theme.divider, theme)
    rows: list[str] = []
    for row in side.rows:
        if row.shared is not None:
            shared: RenderedLine = row.shared
            text = clip_ansi_line(sanitize_terminal_text(shared.text), width)
            rows.append(_styled(text, _kind_color(shared.kind, theme), theme))
            continue
        left = _side_cell(row.left, number_width, panes.left_width, side.path, viewer, theme, no_color)
        right = _side_cell(row.right, number_width, panes.right_width, side.path, viewer, theme, no_color)
        rows.append(f"{left}{divider}{right}".rstrip())
    return rows


def render_viewer_payload(viewer: DiffViewer, width: int, no_color: bool = False) -> str:
    """Render the viewer's current payload as terminal text."""
    theme = resolve_theme(viewer.theme_name, no_color=no_color)
    title = viewer.viewer_title()
    current = viewer.current_file()
    if current is not None:
        stats = change_stat_text(current.additions, current.deletions)
        if stats:
            title = f"{title} {stats}"
    position = viewer.file_position()
    if position is not None:
        title = f"{title}  {position[0]}/{position[1]}"

    out = [_styled(clip_ansi_line(title, width), theme.title, theme)]
    if viewer.layout is LayoutMode.SIDE_BY_SIDE and not viewer.rendered.is_meta:
        out.extend(_side_by_side_rows(viewer, width, theme, no_color))
    else:
        out.extend(_unified_rows(viewer, width, theme, no_color))
    return "".join(f"{row}\n" for row in out)


def build_provider(work_dir: Path, stdin: TextIO | None) -> DiffProvider:
    """Piped stdin becomes the single ``files`` section; otherwise use git."""
    if stdin is None or stdin.isatty():
        return GitDiffProvider(work_dir)
    try:
        raw_diff = stdin.read()
    except OSError as exc:
        raise SystemExit(f"read piped diff from stdin: {exc}") from exc
    return StdinDiffProvider(work_dir, raw_diff)


def replay_keys(viewer: DiffViewer, keys: list[str]) -> None:
    """Dispatch ``keys`` to the viewer in order, stopping at the quit key."""
    quit_requested = False

    def _quit() -> None:
        nonlocal quit_requested
        quit_requested = True

    registry = build_viewer_key_registry(viewer, _quit)
    for key in keys:
        if registry.dispatch(key) is None:
            raise SystemExit(f"unknown key {key!r} in --keys")
        if quit_requested:
            break


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazydiff",
        description="Browse staged and unstaged git changes, or a piped diff.",
    )
    parser.add_argument("--staged", action="store_true", help="Start focused on staged changes.")
    parser.add_argument("--version", action="store_true", help="Print version and exit.")
    parser.add_argument("--view", default=None, help='Default view mode: "unified" or "split".')
    parser.add_argument(
        "--sidebar",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show the file sidebar on startup.",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help=f"Diff theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument(
        "--intraline-style",
        default=None,
        help='Default intraline style: "background" or "underline".',
    )
    parser.add_argument(
        "--show-symbols",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show +/- symbols by default.",
    )
    parser.add_argument("--config", default=None, metavar="PATH", help="Path to a JSON config file.")
    parser.add_argument("--no-config", action="store_true", help="Disable config file loading.")
    parser.add_argument(
        "--render-width",
        type=_positive_int,
        default=None,
        help="Column width for printed output (default: terminal width).",
    )
    parser.add_argument(
        "--keys",
        default=None,
        metavar="KEYS",
        help='Space-separated key presses replayed before printing, e.g. "n v".',
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--debug-log", default=None, metavar="PATH", help="Write debug logging to PATH.")
    return parser


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments, build the viewer, and print its initial payload.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = _build_parser().parse_args()

    if args.version:
        sys.stdout.write(f"lazydiff {__version__}\n")
        return

    if args.debug_log:
        logging.basicConfig(
            filename=args.debug_log,
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    flags = {
        KEY_VIEW: args.view,
        KEY_SIDEBAR: args.sidebar,
        KEY_THEME: args.theme,
        KEY_INTRALINE_STYLE: args.intraline_style,
        KEY_SHOW_SYMBOLS: args.show_symbols,
    }
    explicitly_set = {key for key, value in flags.items() if value is not None}
    defaults = StartupFlagValues()
    values = StartupFlagValues(
        view=args.view if args.view is not None else defaults.view,
        sidebar=args.sidebar if args.sidebar is not None else defaults.sidebar,
        theme=args.theme if args.theme is not None else defaults.theme,
        intraline_style=args.intraline_style if args.intraline_style is not None else defaults.intraline_style,
        show_symbols=args.show_symbols if args.show_symbols is not None else defaults.show_symbols,
    )

    try:
        config = load_startup_config(args.config, args.no_config)
        values = apply_startup_config(values, config, explicitly_set)
        initial_state = initial_state_from_values(
            values.view,
            values.sidebar,
            values.theme,
            values.intraline_style,
            values.show_symbols,
        )
    except (ConfigError, StartupOptionError) as exc:
        raise SystemExit(str(exc)) from exc

    work_dir = default_path if default_path is not None else Path.cwd()
    provider = build_provider(work_dir, sys.stdin)
    width = args.render_width if args.render_width is not None else _default_render_width()
    viewer = DiffViewer(
        provider,
        staged=args.staged,
        initial_state=initial_state,
        viewport_width=width,
    )
    if args.keys:
        replay_keys(viewer, args.keys.split())
    logger.debug("printing %s payload for %r", viewer.layout_label, viewer.viewer_title())
    sys.stdout.write(render_viewer_payload(viewer, width, args.no_color))


if __name__ == "__main__":
    main()
