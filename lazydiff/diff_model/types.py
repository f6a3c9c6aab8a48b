"""Parsed diff datatypes shared by the parser, renderer, and viewer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LineKind(str, Enum):
    """Classification of one diff row.

    ``CONTEXT``/``ADD``/``REMOVE`` come from hunk bodies; ``HUNK`` marks a hunk
    header row and ``META`` is used for synthetic message rows.
    """

    META = "meta"
    HUNK = "hunk"
    CONTEXT = "context"
    ADD = "add"
    REMOVE = "remove"


@dataclass
class DiffLine:
    kind: LineKind
    text: str
    old_line: int = 0
    new_line: int = 0
    no_newline: bool = False


@dataclass
class DiffHunk:
    """One ``@@`` block with its body lines and declared ranges."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str = ""
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def header(self) -> str:
        text = f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"
        if self.section:
            text += f" {self.section}"
        return text


@dataclass
class DiffFile:
    """All hunks for one path, with aggregate line counts."""

    old_path: str | None
    new_path: str | None
    hunks: list[DiffHunk] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0
    is_binary: bool = False
    is_rename: bool = False

    @property
    def display_path(self) -> str:
        if self.new_path:
            return self.new_path
        return self.old_path or ""

    @property
    def status(self) -> str:
        if self.old_path is None:
            return "added"
        if self.new_path is None:
            return "deleted"
        if self.is_rename or self.old_path != self.new_path:
            return "renamed"
        return "modified"


@dataclass
class DiffDocument:
    files: list[DiffFile] = field(default_factory=list)


__all__ = [
    "DiffDocument",
    "DiffFile",
    "DiffHunk",
    "DiffLine",
    "LineKind",
]
