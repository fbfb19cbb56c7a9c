from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from tests.utils import commit_all, git_init


@pytest.fixture()
def temp_repo(tmp_path: Path) -> Iterator[Path]:
    repo_dir = git_init(tmp_path / "repo")
    (repo_dir / "README.md").write_text("project\n", encoding="utf-8")
    commit_all(repo_dir, "Initial commit")
    yield repo_dir


@pytest.fixture()
def ob_project(temp_repo: Path) -> Path:
    """Project whose vendored ob is an unpacked checkout ignored by the outer repo."""
    impl = git_init(temp_repo / ".obelisk" / "impl")
    (impl / "VERSION").write_text("v1\n", encoding="utf-8")
    commit_all(impl, "ob v1")
    (temp_repo / ".gitignore").write_text(".obelisk/impl/\n", encoding="utf-8")
    commit_all(temp_repo, "Vendor ob")
    return temp_repo
