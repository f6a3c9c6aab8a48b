"""Active selection: which section/path the viewer is showing and as what."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .sections import DiffSection


class SelectionKind(Enum):
    NONE = "none"
    SECTION_SUMMARY = "section-summary"
    DIRECTORY_SUMMARY = "directory-summary"
    FILE = "file"


@dataclass(frozen=True)
class ActiveSelection:
    """Tagged selection value; ``path`` is meaningful only for its kind.

    ``NONE`` still records a section so section-relative walks keep a start.
    """

    kind: SelectionKind
    section: DiffSection
    path: str = ""

    @classmethod
    def none(cls, section: DiffSection) -> ActiveSelection:
        return cls(SelectionKind.NONE, section)

    @classmethod
    def file(cls, section: DiffSection, path: str) -> ActiveSelection:
        return cls(SelectionKind.FILE, section, path)

    @classmethod
    def directory(cls, section: DiffSection, path: str) -> ActiveSelection:
        return cls(SelectionKind.DIRECTORY_SUMMARY, section, path)

    @classmethod
    def section_summary(cls, section: DiffSection) -> ActiveSelection:
        return cls(SelectionKind.SECTION_SUMMARY, section, f"{section.display_name} changes")

    @property
    def is_file(self) -> bool:
        return self.kind is SelectionKind.FILE

    @property
    def file_path(self) -> str | None:
        return self.path if self.kind is SelectionKind.FILE else None


__all__ = ["ActiveSelection", "SelectionKind"]
