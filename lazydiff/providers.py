"""Diff text sources for the viewer.

``GitDiffProvider`` shells out to git for the working tree and the index.
``StdinDiffProvider`` serves one diff captured from a pipe as the single
``files`` section and disables manual refresh, since the input cannot be
re-read.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from .sections import DEFAULT_SECTIONS, DiffSection

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10.0


class ProviderError(RuntimeError):
    """A git command failed or could not be started."""


@runtime_checkable
class DiffProvider(Protocol):
    def load_diff(self, section: DiffSection) -> str: ...

    def repo_root(self) -> str: ...

    def current_branch(self) -> str: ...


def provider_sections(provider: DiffProvider) -> tuple[DiffSection, ...] | None:
    """Sections the provider declares, or ``None`` to use the default pair."""
    sections = getattr(provider, "sections", None)
    if sections is None:
        return None
    return tuple(sections())


def provider_manual_refresh_enabled(provider: DiffProvider) -> bool:
    enabled = getattr(provider, "manual_refresh_enabled", None)
    if enabled is None:
        return True
    return bool(enabled())


def _run_git(work_dir: Path, args: list[str], timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> str:
    """Execute a git subcommand and return stdout, raising ``ProviderError`` on failure."""
    command = ["git", "-C", str(work_dir), *args]
    try:
        proc = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise ProviderError(f"git {' '.join(args)}: {exc}") from exc
    if proc.returncode != 0:
        detail = (proc.stderr or "").strip() or f"exit status {proc.returncode}"
        raise ProviderError(f"git {' '.join(args)}: {detail}")
    return proc.stdout


class GitDiffProvider:
    """Working-tree (unstaged) and index (staged) diffs of a git repository."""

    def __init__(self, work_dir: str | Path) -> None:
        self.work_dir = Path(work_dir)

    def load_diff(self, section: DiffSection) -> str:
        if section is DiffSection.STAGED:
            args = ["diff", "--no-color", "--no-ext-diff", "--staged"]
        elif section is DiffSection.UNSTAGED:
            args = ["diff", "--no-color", "--no-ext-diff"]
        else:
            return ""
        logger.debug("loading %s diff from %s", section.value, self.work_dir)
        return _run_git(self.work_dir, args)

    def repo_root(self) -> str:
        return _run_git(self.work_dir, ["rev-parse", "--show-toplevel"]).strip()

    def current_branch(self) -> str:
        return _run_git(self.work_dir, ["rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def sections(self) -> tuple[DiffSection, ...]:
        return DEFAULT_SECTIONS


class StdinDiffProvider:
    """A single diff payload captured from stdin."""

    def __init__(self, work_dir: str | Path, diff: str) -> None:
        self.work_dir = Path(work_dir)
        self.diff = diff

    def load_diff(self, section: DiffSection) -> str:
        if section is DiffSection.FILES:
            return self.diff
        return ""

    def repo_root(self) -> str:
        return GitDiffProvider(self.work_dir).repo_root()

    def current_branch(self) -> str:
        return GitDiffProvider(self.work_dir).current_branch()

    def sections(self) -> tuple[DiffSection, ...]:
        return (DiffSection.FILES,)

    def manual_refresh_enabled(self) -> bool:
        return False


__all__ = [
    "DiffProvider",
    "GitDiffProvider",
    "ProviderError",
    "StdinDiffProvider",
    "provider_manual_refresh_enabled",
    "provider_sections",
]
