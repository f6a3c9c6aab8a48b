"""Diff parsing and row projection used to feed the viewer."""

from .parse import DiffParseError, parse_unified_diff
from .render import (
    RenderedFile,
    RenderedLine,
    SideBySideRenderedFile,
    SideBySideRow,
    SideCell,
    build_meta_rendered_file,
    build_rendered_file,
    build_side_by_side,
    message_to_rendered,
)
from .types import DiffDocument, DiffFile, DiffHunk, DiffLine, LineKind

__all__ = [
    "DiffDocument",
    "DiffFile",
    "DiffHunk",
    "DiffLine",
    "DiffParseError",
    "LineKind",
    "RenderedFile",
    "RenderedLine",
    "SideBySideRenderedFile",
    "SideBySideRow",
    "SideCell",
    "build_meta_rendered_file",
    "build_rendered_file",
    "build_side_by_side",
    "message_to_rendered",
    "parse_unified_diff",
]
