"""Unified-diff text parser.

Accepts ``git diff`` output as well as plain ``diff -u`` text (files that start
with ``---``/``+++`` without a ``diff --git`` line). Text before the first file
header, such as a commit message from ``git show``, is ignored.
"""

from __future__ import annotations

import re

from .types import DiffDocument, DiffFile, DiffHunk, DiffLine, LineKind

_DIFF_GIT_RE = re.compile(r"^diff --git a/(.+?) b/(.+)$")
_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$")


class DiffParseError(ValueError):
    """Raised when diff text is structurally invalid."""


def _strip_path(raw: str) -> str | None:
    """Normalize a ``---``/``+++`` operand into a repo-relative path."""
    path = raw.split("\t", 1)[0].strip()
    if path.startswith('"') and path.endswith('"') and len(path) >= 2:
        path = path[1:-1]
    if path == "/dev/null":
        return None
    if path.startswith("a/") or path.startswith("b/"):
        path = path[2:]
    return path


class _Parser:
    def __init__(self) -> None:
        self.files: list[DiffFile] = []
        self.file: DiffFile | None = None
        self.hunk: DiffHunk | None = None
        self.old_remaining = 0
        self.new_remaining = 0
        self.old_line = 0
        self.new_line = 0

    def in_hunk_body(self) -> bool:
        return self.hunk is not None and (self.old_remaining > 0 or self.new_remaining > 0)

    def start_file(self, old_path: str | None, new_path: str | None) -> DiffFile:
        self.hunk = None
        self.old_remaining = 0
        self.new_remaining = 0
        self.file = DiffFile(old_path=old_path, new_path=new_path)
        self.files.append(self.file)
        return self.file

    def start_hunk(self, line: str, line_no: int) -> None:
        match = _HUNK_RE.match(line)
        if match is None:
            raise DiffParseError(f"invalid hunk header on line {line_no}: {line!r}")
        if self.file is None:
            raise DiffParseError(f"hunk header before any file header on line {line_no}")
        old_start = int(match.group(1))
        old_count = int(match.group(2) if match.group(2) is not None else "1")
        new_start = int(match.group(3))
        new_count = int(match.group(4) if match.group(4) is not None else "1")
        self.hunk = DiffHunk(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            section=match.group(5).strip(),
        )
        self.file.hunks.append(self.hunk)
        self.old_remaining = old_count
        self.new_remaining = new_count
        self.old_line = old_start
        self.new_line = new_start

    def body_line(self, line: str, line_no: int) -> None:
        assert self.hunk is not None and self.file is not None
        marker = line[:1]
        text = line[1:]
        if marker == "-":
            if self.old_remaining <= 0:
                raise DiffParseError(f"removed line exceeds hunk range on line {line_no}")
            self.hunk.lines.append(DiffLine(LineKind.REMOVE, text, old_line=self.old_line))
            self.old_line += 1
            self.old_remaining -= 1
            self.file.deletions += 1
            return
        if marker == "+":
            if self.new_remaining <= 0:
                raise DiffParseError(f"added line exceeds hunk range on line {line_no}")
            self.hunk.lines.append(DiffLine(LineKind.ADD, text, new_line=self.new_line))
            self.new_line += 1
            self.new_remaining -= 1
            self.file.additions += 1
            return
        # Some editors strip the single space that prefixes blank context lines.
        if marker not in (" ", ""):
            raise DiffParseError(f"unexpected hunk line on line {line_no}: {line!r}")
        if self.old_remaining <= 0 or self.new_remaining <= 0:
            raise DiffParseError(f"context line exceeds hunk range on line {line_no}")
        self.hunk.lines.append(
            DiffLine(LineKind.CONTEXT, text, old_line=self.old_line, new_line=self.new_line)
        )
        self.old_line += 1
        self.new_line += 1
        self.old_remaining -= 1
        self.new_remaining -= 1

    def header_line(self, line: str, line_no: int) -> None:
        if line.startswith("diff --git "):
            match = _DIFF_GIT_RE.match(line)
            if match:
                self.start_file(match.group(1), match.group(2))
            else:
                parts = line.split()
                old = _strip_path(parts[2]) if len(parts) > 2 else None
                new = _strip_path(parts[3]) if len(parts) > 3 else old
                self.start_file(old, new)
            return

        if line.startswith("--- "):
            old_path = _strip_path(line[4:])
            # Plain ``diff -u`` output has no ``diff --git`` line between files.
            if self.file is None or self.file.hunks:
                self.start_file(old_path, old_path)
            else:
                self.file.old_path = old_path
            return

        if line.startswith("+++ "):
            if self.file is None:
                raise DiffParseError(f"'+++' header without '---' on line {line_no}")
            self.file.new_path = _strip_path(line[4:])
            return

        if line.startswith("@@"):
            self.start_hunk(line, line_no)
            return

        if line.startswith("\\"):
            if self.hunk is not None and self.hunk.lines:
                self.hunk.lines[-1].no_newline = True
            return

        if self.file is None:
            return

        if line.startswith("new file mode"):
            self.file.old_path = None
        elif line.startswith("deleted file mode"):
            self.file.new_path = None
        elif line.startswith("rename from "):
            self.file.old_path = line[len("rename from "):].strip()
            self.file.is_rename = True
        elif line.startswith("rename to "):
            self.file.new_path = line[len("rename to "):].strip()
            self.file.is_rename = True
        elif line.startswith("Binary files ") or line.startswith("GIT binary patch"):
            self.file.is_binary = True
        elif line[:1] in ("+", "-") or (line[:1] == " " and line.strip()):
            raise DiffParseError(f"diff line outside of a hunk on line {line_no}: {line!r}")


def parse_unified_diff(text: str) -> DiffDocument:
    """Parse unified diff text into per-file hunk records.

    Raises :class:`DiffParseError` for malformed hunk headers and body lines
    that fall outside the ranges their hunk header declares.
    """
    parser = _Parser()
    normalized = text.replace("\r\n", "\n")
    for line_no, line in enumerate(normalized.split("\n"), start=1):
        if parser.in_hunk_body() and not line.startswith("\\"):
            parser.body_line(line, line_no)
            continue
        if not line:
            continue
        parser.header_line(line, line_no)
    return DiffDocument(files=parser.files)


__all__ = ["DiffParseError", "parse_unified_diff"]
