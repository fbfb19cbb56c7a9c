"""Git plumbing used by the upgrade flow."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import DirtyWorkingTreeError, GitError

__all__ = [
    "GitCommandResult",
    "run_git",
    "git_status_paths",
    "ensure_clean_repo",
    "git_checkout",
    "git_pull",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitCommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_git(repo_root: Path, args: list[str]) -> GitCommandResult:
    """Run ``git <args>`` in *repo_root* and log its output at DEBUG.

    A non-zero exit is returned to the caller; only a git that cannot be
    started at all raises :class:`GitError`.
    """
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=repo_root,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise GitError(f"Could not run git in {repo_root}: {exc}") from exc

    for line in (completed.stdout + completed.stderr).splitlines():
        if line.strip():
            logger.debug("git %s: %s", args[0], line)
    return GitCommandResult(tuple(args), completed.returncode, completed.stdout, completed.stderr)


def _call_git(repo_root: Path, args: list[str]) -> GitCommandResult:
    result = run_git(repo_root, args)
    if not result.ok:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit status {result.returncode}"
        raise GitError(f"git {' '.join(args)} failed in {repo_root}: {detail}")
    return result


def git_status_paths(repo_root: Path) -> list[str]:
    """Return paths git reports as changed or untracked (ignored files excluded)."""
    result = _call_git(repo_root, ["status", "--porcelain", "-z"])
    entries = result.stdout.split("\0")
    paths: list[str] = []

    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if not entry or len(entry) < 4:
            continue

        status = entry[:2]
        path = entry[3:]
        # Renames and copies carry the source path as the next NUL-separated entry.
        if "R" in status or "C" in status:
            if i < len(entries) and entries[i]:
                i += 1
        paths.append(path)

    return paths


def ensure_clean_repo(repo_root: Path, message: str) -> None:
    """Raise DirtyWorkingTreeError with *message* when *repo_root* has changes."""
    dirty = git_status_paths(repo_root)
    if dirty:
        listing = "\n".join(f"  {path}" for path in dirty)
        raise DirtyWorkingTreeError(f"{message}:\n{listing}", dirty)


def git_checkout(repo_root: Path, ref: str) -> None:
    _call_git(repo_root, ["checkout", ref])


def git_pull(repo_root: Path) -> None:
    _call_git(repo_root, ["pull"])
