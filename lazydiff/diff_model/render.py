"""Row projections of a parsed diff file: unified and side-by-side.

Both projections carry per-row line classification and old/new line numbers;
that is what layout-toggle scroll mapping reads. Visual row counts account for
hard wrapping at a viewport width.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..ansi import wrapped_line_count
from .types import DiffFile, LineKind

SIDE_BY_SIDE_DIVIDER_WIDTH = 1
SIDE_BY_SIDE_MIN_PANE_WIDTH = 12
DEFAULT_SPLIT_RATIO = 0.5


@dataclass(frozen=True)
class RenderedLine:
    kind: LineKind
    text: str
    old_line: int = 0
    new_line: int = 0


@dataclass
class RenderedFile:
    """Unified projection: one row per hunk header or body line."""

    title: str
    lines: list[RenderedLine] = field(default_factory=list)
    path: str = ""
    is_meta: bool = False


@dataclass(frozen=True)
class SideCell:
    kind: LineKind
    line_number: int
    text: str


@dataclass(frozen=True)
class SideBySideRow:
    """A paired row; ``shared`` spans both panes (hunk headers, messages)."""

    left: SideCell | None = None
    right: SideCell | None = None
    shared: RenderedLine | None = None


@dataclass
class SideBySideRenderedFile:
    title: str
    rows: list[SideBySideRow] = field(default_factory=list)
    path: str = ""


@dataclass(frozen=True)
class SidePaneLayout:
    divider_x: int
    left_width: int
    right_width: int
    gutter_width: int


def build_meta_rendered_file(title: str, lines: list[str]) -> RenderedFile:
    return RenderedFile(
        title=title,
        lines=[RenderedLine(LineKind.META, text) for text in lines],
        is_meta=True,
    )


def message_to_rendered(title: str, text: str) -> RenderedFile:
    """Build a message payload, one META row per line of ``text``."""
    normalized = text.replace("\r\n", "\n")
    return build_meta_rendered_file(title, normalized.split("\n"))


def build_rendered_file(file: DiffFile) -> RenderedFile:
    lines: list[RenderedLine] = []
    for hunk in file.hunks:
        lines.append(RenderedLine(LineKind.HUNK, hunk.header))
        for line in hunk.lines:
            lines.append(RenderedLine(line.kind, line.text, line.old_line, line.new_line))
    if not lines:
        note = "Binary file changed." if file.is_binary else "No content changes."
        lines.append(RenderedLine(LineKind.META, note))
    return RenderedFile(title=file.display_path, lines=lines, path=file.display_path)


def _cell(line: RenderedLine, side: str) -> SideCell:
    number = line.old_line if side == "left" else line.new_line
    return SideCell(line.kind, number, line.text)


def build_side_by_side(rendered: RenderedFile) -> SideBySideRenderedFile:
    """Pair each run of removed lines with the run of added lines after it."""
    rows: list[SideBySideRow] = []
    lines = rendered.lines
    idx = 0
    while idx < len(lines):
        line = lines[idx]
        if line.kind in (LineKind.REMOVE, LineKind.ADD):
            removed: list[RenderedLine] = []
            added: list[RenderedLine] = []
            while idx < len(lines) and lines[idx].kind is LineKind.REMOVE:
                removed.append(lines[idx])
                idx += 1
            while idx < len(lines) and lines[idx].kind is LineKind.ADD:
                added.append(lines[idx])
                idx += 1
            for pair_idx in range(max(len(removed), len(added))):
                rows.append(
                    SideBySideRow(
                        left=_cell(removed[pair_idx], "left") if pair_idx < len(removed) else None,
                        right=_cell(added[pair_idx], "right") if pair_idx < len(added) else None,
                    )
                )
            continue
        if line.kind is LineKind.CONTEXT:
            rows.append(SideBySideRow(left=_cell(line, "left"), right=_cell(line, "right")))
        else:
            rows.append(SideBySideRow(shared=line))
        idx += 1
    return SideBySideRenderedFile(title=rendered.title, rows=rows, path=rendered.path)


def _number_width(values: list[int]) -> int:
    return max([1, *(len(str(value)) for value in values if value > 0)])


def rendered_gutter_width(rendered: RenderedFile | None, hide_change_signs: bool) -> int:
    """Columns used by ``old new`` line numbers (and the +/- sign) in unified mode."""
    if rendered is None or rendered.is_meta:
        return 0
    old_width = _number_width([line.old_line for line in rendered.lines])
    new_width = _number_width([line.new_line for line in rendered.lines])
    sign_width = 0 if hide_change_signs else 2
    return old_width + 1 + new_width + 1 + sign_width


def side_gutter_width(side: SideBySideRenderedFile | None, hide_change_signs: bool) -> int:
    if side is None:
        return 0
    numbers: list[int] = []
    for row in side.rows:
        if row.left is not None:
            numbers.append(row.left.line_number)
        if row.right is not None:
            numbers.append(row.right.line_number)
    return _number_width(numbers) + 1 + (0 if hide_change_signs else 2)


def side_by_side_divider_bounds(viewport_width: int) -> tuple[int, int, int]:
    """Return ``(available, min_offset, max_offset)`` for the pane divider."""
    available = max(0, viewport_width - SIDE_BY_SIDE_DIVIDER_WIDTH)
    min_offset = min(SIDE_BY_SIDE_MIN_PANE_WIDTH, available // 2)
    max_offset = max(min_offset, available - min_offset)
    return available, min_offset, max_offset


def side_by_side_pane_layout(
    viewport_width: int,
    side: SideBySideRenderedFile | None,
    hide_change_signs: bool,
    split_ratio: float = DEFAULT_SPLIT_RATIO,
) -> SidePaneLayout:
    available, min_offset, max_offset = side_by_side_divider_bounds(viewport_width)
    divider_x = int(round(available * split_ratio))
    divider_x = max(min_offset, min(max_offset, divider_x))
    gutter = side_gutter_width(side, hide_change_signs)
    return SidePaneLayout(
        divider_x=divider_x,
        left_width=max(1, divider_x - gutter),
        right_width=max(1, available - divider_x - gutter),
        gutter_width=gutter,
    )


def wrapped_content_height(lines: list[RenderedLine], wrap_width: int) -> int:
    return sum(wrapped_line_count(line.text, wrap_width) for line in lines)


def wrapped_side_content_height(rows: list[SideBySideRow], panes: SidePaneLayout, viewport_width: int) -> int:
    total = 0
    for row in rows:
        if row.shared is not None:
            total += wrapped_line_count(row.shared.text, max(1, viewport_width))
            continue
        left = wrapped_line_count(row.left.text, panes.left_width) if row.left is not None else 1
        right = wrapped_line_count(row.right.text, panes.right_width) if row.right is not None else 1
        total += max(left, right)
    return total


__all__ = [
    "DEFAULT_SPLIT_RATIO",
    "RenderedFile",
    "RenderedLine",
    "SideBySideRenderedFile",
    "SideBySideRow",
    "SideCell",
    "SidePaneLayout",
    "build_meta_rendered_file",
    "build_rendered_file",
    "build_side_by_side",
    "message_to_rendered",
    "rendered_gutter_width",
    "side_by_side_divider_bounds",
    "side_by_side_pane_layout",
    "side_gutter_width",
    "wrapped_content_height",
    "wrapped_side_content_height",
]
