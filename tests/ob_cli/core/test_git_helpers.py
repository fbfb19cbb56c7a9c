"""Tests for git plumbing used by ob upgrade."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ob_cli.core import git
from ob_cli.core.errors import DirtyWorkingTreeError, GitError


def test_clean_repo_passes(temp_repo: Path) -> None:
    git.ensure_clean_repo(temp_repo, "Cannot upgrade with uncommitted changes")


def test_modified_and_untracked_files_are_dirty(temp_repo: Path) -> None:
    (temp_repo / "README.md").write_text("changed\n", encoding="utf-8")
    (temp_repo / "new.txt").write_text("new\n", encoding="utf-8")

    with pytest.raises(DirtyWorkingTreeError) as excinfo:
        git.ensure_clean_repo(temp_repo, "Cannot upgrade with uncommitted changes")

    assert sorted(excinfo.value.paths) == ["README.md", "new.txt"]
    assert str(excinfo.value).startswith("Cannot upgrade with uncommitted changes:")


def test_ignored_files_do_not_count(temp_repo: Path) -> None:
    (temp_repo / ".gitignore").write_text("build/\n", encoding="utf-8")
    subprocess.run(["git", "add", ".gitignore"], cwd=temp_repo, check=True)
    subprocess.run(["git", "commit", "-q", "-m", "ignore build"], cwd=temp_repo, check=True)
    (temp_repo / "build").mkdir()
    (temp_repo / "build" / "out.o").write_text("", encoding="utf-8")

    git.ensure_clean_repo(temp_repo, "dirty")


def test_status_paths_reports_rename_destination(tmp_path: Path, monkeypatch) -> None:
    raw = "R  new.py\0old.py\0 M src/foo.py\0"
    monkeypatch.setattr(
        subprocess, "run", lambda *_a, **_kw: MagicMock(returncode=0, stdout=raw, stderr="")
    )
    assert git.git_status_paths(tmp_path) == ["new.py", "src/foo.py"]


def test_status_outside_repo_is_git_error(tmp_path: Path) -> None:
    with pytest.raises(GitError, match="git status"):
        git.git_status_paths(tmp_path)


def test_missing_git_binary_is_git_error(tmp_path: Path, monkeypatch) -> None:
    def missing(*_a, **_kw):
        raise FileNotFoundError("git")

    monkeypatch.setattr(subprocess, "run", missing)
    with pytest.raises(GitError, match="Could not run git"):
        git.run_git(tmp_path, ["status"])


def test_failed_command_is_returned_not_raised(tmp_path: Path) -> None:
    result = git.run_git(tmp_path, ["rev-parse", "--show-toplevel"])
    assert not result.ok
    assert result.args == ("rev-parse", "--show-toplevel")


def test_checkout_unknown_ref_fails_with_stderr(temp_repo: Path) -> None:
    with pytest.raises(GitError) as excinfo:
        git.git_checkout(temp_repo, "no-such-branch")
    assert "git checkout no-such-branch failed" in str(excinfo.value)


def test_checkout_switches_branch(temp_repo: Path) -> None:
    subprocess.run(["git", "branch", "develop"], cwd=temp_repo, check=True)
    git.git_checkout(temp_repo, "develop")
    head = git.run_git(temp_repo, ["rev-parse", "--abbrev-ref", "HEAD"])
    assert head.stdout.strip() == "develop"
