"""Scroll-offset reconciliation between unified and side-by-side layouts.

Toggling layouts keeps the same content in view: the row at the current
offset is reduced to a :class:`ScrollAnchor` (line kind plus old/new line
numbers) and looked up in the other layout's rows. When anchors cannot be
trusted (wrapping on) or nothing matches, the offset is mapped by ratio. The
most recent toggle is remembered so toggling straight back restores the
original offset exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .diff_model import LineKind, RenderedLine, SideBySideRow
from .sections import DiffSection

logger = logging.getLogger(__name__)


class LayoutMode(Enum):
    UNIFIED = "unified"
    SIDE_BY_SIDE = "side-by-side"

    @property
    def other(self) -> LayoutMode:
        if self is LayoutMode.SIDE_BY_SIDE:
            return LayoutMode.UNIFIED
        return LayoutMode.SIDE_BY_SIDE

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScrollAnchor:
    """Content identity of one row; line numbers are 0 when not applicable."""

    kind: LineKind
    old_line: int = 0
    new_line: int = 0


def anchor_for_unified_line(line: RenderedLine) -> ScrollAnchor:
    return ScrollAnchor(line.kind, line.old_line, line.new_line)


def anchor_for_side_row(row: SideBySideRow) -> ScrollAnchor | None:
    """Anchor of a paired row; the right (new) side decides the kind."""
    if row.shared is not None:
        return ScrollAnchor(row.shared.kind, row.shared.old_line, row.shared.new_line)
    if row.left is None and row.right is None:
        return None

    kind = LineKind.CONTEXT
    old_line = 0
    new_line = 0
    if row.right is not None:
        kind = row.right.kind
        new_line = row.right.line_number
    if row.left is not None:
        if row.right is None:
            kind = row.left.kind
        old_line = row.left.line_number
    return ScrollAnchor(kind, old_line, new_line)


def _first_index(anchors: Sequence[ScrollAnchor | None], match: Callable[[ScrollAnchor], bool]) -> int | None:
    for idx, candidate in enumerate(anchors):
        if candidate is not None and match(candidate):
            return idx
    return None


def find_row_for_anchor(anchors: Sequence[ScrollAnchor | None], anchor: ScrollAnchor) -> int | None:
    """Return the index of the row that best matches ``anchor``.

    Precedence: both line numbers; kind plus its own line number (new for
    added, old for removed, both for context); old number alone; new number
    alone; same kind. The first rule that finds a row wins.
    """
    if not anchors:
        return None

    old_line = anchor.old_line
    new_line = anchor.new_line

    rules: list[Callable[[ScrollAnchor], bool]] = []
    if old_line > 0 and new_line > 0:
        rules.append(lambda row: row.old_line == old_line and row.new_line == new_line)

    if anchor.kind is LineKind.ADD and new_line > 0:
        rules.append(lambda row: row.kind is LineKind.ADD and row.new_line == new_line)
    elif anchor.kind is LineKind.REMOVE and old_line > 0:
        rules.append(lambda row: row.kind is LineKind.REMOVE and row.old_line == old_line)
    elif anchor.kind is LineKind.CONTEXT and old_line > 0 and new_line > 0:
        rules.append(
            lambda row: row.kind is LineKind.CONTEXT and row.old_line == old_line and row.new_line == new_line
        )

    if old_line > 0:
        rules.append(lambda row: row.old_line == old_line)
    if new_line > 0:
        rules.append(lambda row: row.new_line == new_line)
    rules.append(lambda row: row.kind is anchor.kind)

    for rule in rules:
        found = _first_index(anchors, rule)
        if found is not None:
            return found
    return None


def clamp_offset(offset: int, rows: int) -> int:
    if rows <= 0:
        return 0
    return max(0, min(rows - 1, offset))


def map_offset_by_ratio(source_offset: int, source_rows: int, target_rows: int) -> int:
    """Proportional mapping with half-up rounding on integer division.

    ``(src * (target_rows - 1) + (source_rows - 1) // 2) // (source_rows - 1)``
    """
    if target_rows <= 0:
        return 0
    if source_rows <= 1:
        return clamp_offset(source_offset, target_rows)
    clamped_source = clamp_offset(source_offset, source_rows)
    numerator = clamped_source * (target_rows - 1) + (source_rows - 1) // 2
    return clamp_offset(numerator // (source_rows - 1), target_rows)


class LayoutRows(Protocol):
    """Row data the renderer exposes for the currently displayed file."""

    def anchors(self, mode: LayoutMode) -> list[ScrollAnchor | None]: ...

    def visual_rows(self, mode: LayoutMode) -> int: ...


@dataclass(frozen=True)
class LayoutToggleMemo:
    """Snapshot of the most recent toggle."""

    source_layout: LayoutMode
    target_layout: LayoutMode
    source_offset: int
    target_offset: int
    section: DiffSection | None
    path: str

    def is_inverse(
        self,
        source_layout: LayoutMode,
        target_layout: LayoutMode,
        source_offset: int,
        section: DiffSection | None,
        path: str,
    ) -> bool:
        """True when this toggle exactly undoes the remembered one."""
        return (
            self.section == section
            and self.path == path
            and self.target_layout is source_layout
            and self.source_layout is target_layout
            and self.target_offset == source_offset
        )


class LayoutSyncEngine:
    """Maps the vertical offset across a layout toggle."""

    def __init__(self) -> None:
        self.memo: LayoutToggleMemo | None = None

    def map_offset(
        self,
        source: LayoutMode,
        target: LayoutMode,
        source_offset: int,
        rows: LayoutRows,
        *,
        wrap: bool,
    ) -> int:
        if source is target:
            return clamp_offset(source_offset, rows.visual_rows(target))
        source_offset = max(0, source_offset)

        if not wrap:
            source_anchors = rows.anchors(source)
            if source_anchors:
                anchor = source_anchors[clamp_offset(source_offset, len(source_anchors))]
                if anchor is not None:
                    found = find_row_for_anchor(rows.anchors(target), anchor)
                    if found is not None:
                        logger.debug("layout toggle anchored %s -> row %d", anchor, found)
                        return clamp_offset(found, rows.visual_rows(target))

        return map_offset_by_ratio(source_offset, rows.visual_rows(source), rows.visual_rows(target))

    def toggle(
        self,
        source: LayoutMode,
        source_offset: int,
        rows: LayoutRows,
        *,
        wrap: bool,
        section: DiffSection | None,
        path: str,
    ) -> int:
        """Return the offset to use in ``source.other`` and remember the toggle."""
        target = source.other
        memo = self.memo
        if memo is not None and memo.is_inverse(source, target, source_offset, section, path):
            target_offset = memo.source_offset
        else:
            target_offset = self.map_offset(source, target, source_offset, rows, wrap=wrap)

        self.memo = LayoutToggleMemo(
            source_layout=source,
            target_layout=target,
            source_offset=source_offset,
            target_offset=target_offset,
            section=section,
            path=path,
        )
        return target_offset


__all__ = [
    "LayoutMode",
    "LayoutRows",
    "LayoutSyncEngine",
    "LayoutToggleMemo",
    "ScrollAnchor",
    "anchor_for_side_row",
    "anchor_for_unified_line",
    "clamp_offset",
    "find_row_for_anchor",
    "map_offset_by_ratio",
]
