"""Tests for scroll-offset reconciliation across layout toggles.

Covers row anchors, anchor lookup precedence, the ratio fallback, and the
toggle memo that makes toggling straight back an exact inverse.
"""

from __future__ import annotations

import unittest

from lazydiff.diff_model import (
    LineKind,
    RenderedLine,
    SideBySideRow,
    SideCell,
    build_rendered_file,
    build_side_by_side,
    parse_unified_diff,
)
from lazydiff.layout_sync import (
    LayoutMode,
    LayoutSyncEngine,
    ScrollAnchor,
    anchor_for_side_row,
    anchor_for_unified_line,
    clamp_offset,
    find_row_for_anchor,
    map_offset_by_ratio,
)
from lazydiff.sections import DiffSection

REPLACE_DIFF = "--- a/x.py\n+++ b/x.py\n@@ -1,2 +1,2 @@\n-old\n+new\n ctx\n"


class _Rows:
    """Row data for one rendered file, optionally with fixed visual row counts."""

    def __init__(self, text: str = REPLACE_DIFF, visual: dict[LayoutMode, int] | None = None) -> None:
        self.rendered = build_rendered_file(parse_unified_diff(text).files[0])
        self.side = build_side_by_side(self.rendered)
        self.visual = visual or {}

    def anchors(self, mode: LayoutMode):
        if mode is LayoutMode.SIDE_BY_SIDE:
            return [anchor_for_side_row(row) for row in self.side.rows]
        return [anchor_for_unified_line(line) for line in self.rendered.lines]

    def visual_rows(self, mode: LayoutMode) -> int:
        if mode in self.visual:
            return self.visual[mode]
        if mode is LayoutMode.SIDE_BY_SIDE:
            return len(self.side.rows)
        return len(self.rendered.lines)


class AnchorTests(unittest.TestCase):
    def test_side_row_anchor_prefers_right_kind(self) -> None:
        row = SideBySideRow(
            left=SideCell(LineKind.REMOVE, 4, "old"),
            right=SideCell(LineKind.ADD, 5, "new"),
        )
        self.assertEqual(anchor_for_side_row(row), ScrollAnchor(LineKind.ADD, 4, 5))

        removed_only = SideBySideRow(left=SideCell(LineKind.REMOVE, 9, "gone"))
        self.assertEqual(anchor_for_side_row(removed_only), ScrollAnchor(LineKind.REMOVE, 9, 0))

        shared = SideBySideRow(shared=RenderedLine(LineKind.HUNK, "@@"))
        self.assertEqual(anchor_for_side_row(shared), ScrollAnchor(LineKind.HUNK))
        self.assertIsNone(anchor_for_side_row(SideBySideRow()))


class FindRowForAnchorTests(unittest.TestCase):
    def test_both_line_numbers_win(self) -> None:
        anchors = [ScrollAnchor(LineKind.ADD, 0, 5), ScrollAnchor(LineKind.CONTEXT, 3, 5)]
        self.assertEqual(find_row_for_anchor(anchors, ScrollAnchor(LineKind.CONTEXT, 3, 5)), 1)

    def test_kind_with_own_number_beats_bare_number(self) -> None:
        anchors = [ScrollAnchor(LineKind.CONTEXT, 4, 4), ScrollAnchor(LineKind.ADD, 0, 4)]
        self.assertEqual(find_row_for_anchor(anchors, ScrollAnchor(LineKind.ADD, 0, 4)), 1)

        anchors = [ScrollAnchor(LineKind.CONTEXT, 7, 7), ScrollAnchor(LineKind.REMOVE, 7, 0)]
        self.assertEqual(find_row_for_anchor(anchors, ScrollAnchor(LineKind.REMOVE, 7, 0)), 1)

    def test_old_number_then_new_number_then_kind(self) -> None:
        anchors = [ScrollAnchor(LineKind.HUNK), ScrollAnchor(LineKind.CONTEXT, 7, 9)]
        self.assertEqual(find_row_for_anchor(anchors, ScrollAnchor(LineKind.REMOVE, 7, 0)), 1)
        self.assertEqual(find_row_for_anchor(anchors, ScrollAnchor(LineKind.ADD, 0, 9)), 1)

        headers = [ScrollAnchor(LineKind.CONTEXT, 1, 1), None, ScrollAnchor(LineKind.HUNK)]
        self.assertEqual(find_row_for_anchor(headers, ScrollAnchor(LineKind.HUNK)), 2)

    def test_no_match(self) -> None:
        self.assertIsNone(find_row_for_anchor([], ScrollAnchor(LineKind.ADD, 0, 1)))
        anchors = [ScrollAnchor(LineKind.CONTEXT, 1, 1)]
        self.assertIsNone(find_row_for_anchor(anchors, ScrollAnchor(LineKind.ADD, 0, 99)))


class RatioMappingTests(unittest.TestCase):
    def test_proportional_mapping_rounds_half_up(self) -> None:
        self.assertEqual(map_offset_by_ratio(5, 11, 21), 10)
        self.assertEqual(map_offset_by_ratio(9, 10, 4), 3)
        self.assertEqual(map_offset_by_ratio(1, 10, 4), 0)
        self.assertEqual(map_offset_by_ratio(2, 10, 4), 1)

    def test_degenerate_sizes(self) -> None:
        self.assertEqual(map_offset_by_ratio(7, 10, 0), 0)
        self.assertEqual(map_offset_by_ratio(3, 1, 5), 3)
        self.assertEqual(map_offset_by_ratio(9, 0, 5), 4)
        self.assertEqual(map_offset_by_ratio(20, 10, 4), 3)

    def test_clamp_offset(self) -> None:
        self.assertEqual(clamp_offset(-3, 5), 0)
        self.assertEqual(clamp_offset(9, 5), 4)
        self.assertEqual(clamp_offset(2, 0), 0)


class LayoutSyncEngineTests(unittest.TestCase):
    def test_removed_line_maps_to_its_paired_row_and_back(self) -> None:
        engine = LayoutSyncEngine()
        rows = _Rows()

        side_offset = engine.toggle(
            LayoutMode.UNIFIED, 1, rows, wrap=False, section=DiffSection.UNSTAGED, path="x.py"
        )
        self.assertEqual(side_offset, 1)

        back = engine.toggle(
            LayoutMode.SIDE_BY_SIDE, side_offset, rows, wrap=False, section=DiffSection.UNSTAGED, path="x.py"
        )
        self.assertEqual(back, 1)

    def test_without_memo_paired_row_maps_to_added_line(self) -> None:
        engine = LayoutSyncEngine()
        offset = engine.map_offset(LayoutMode.SIDE_BY_SIDE, LayoutMode.UNIFIED, 1, _Rows(), wrap=False)
        self.assertEqual(offset, 2)

    def test_added_line_maps_to_paired_row(self) -> None:
        engine = LayoutSyncEngine()
        offset = engine.map_offset(LayoutMode.UNIFIED, LayoutMode.SIDE_BY_SIDE, 2, _Rows(), wrap=False)
        self.assertEqual(offset, 1)

    def test_memo_ignored_after_scrolling_or_changing_file(self) -> None:
        engine = LayoutSyncEngine()
        rows = _Rows()
        engine.toggle(LayoutMode.UNIFIED, 1, rows, wrap=False, section=DiffSection.UNSTAGED, path="x.py")

        scrolled = engine.toggle(
            LayoutMode.SIDE_BY_SIDE, 2, rows, wrap=False, section=DiffSection.UNSTAGED, path="x.py"
        )
        self.assertEqual(scrolled, 3)

        engine.toggle(LayoutMode.UNIFIED, 1, rows, wrap=False, section=DiffSection.UNSTAGED, path="x.py")
        other_file = engine.toggle(
            LayoutMode.SIDE_BY_SIDE, 1, rows, wrap=False, section=DiffSection.UNSTAGED, path="y.py"
        )
        self.assertEqual(other_file, 2)

    def test_wrap_uses_ratio_over_visual_rows(self) -> None:
        rows = _Rows(visual={LayoutMode.UNIFIED: 11, LayoutMode.SIDE_BY_SIDE: 21})
        engine = LayoutSyncEngine()
        offset = engine.map_offset(LayoutMode.UNIFIED, LayoutMode.SIDE_BY_SIDE, 5, rows, wrap=True)
        self.assertEqual(offset, 10)

    def test_same_layout_only_clamps(self) -> None:
        engine = LayoutSyncEngine()
        self.assertEqual(engine.map_offset(LayoutMode.UNIFIED, LayoutMode.UNIFIED, 40, _Rows(), wrap=False), 3)


if __name__ == "__main__":
    unittest.main()
