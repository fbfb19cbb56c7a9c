"""Shared helpers for the ob test suite."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from ob_cli.migration import Hash, MigrationGraphId

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Ob Tests",
    "GIT_AUTHOR_EMAIL": "ob@example.com",
    "GIT_COMMITTER_NAME": "Ob Tests",
    "GIT_COMMITTER_EMAIL": "ob@example.com",
}


def run(cmd: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        cmd,
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
        env={**os.environ, **GIT_ENV},
    )


def git_init(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    run(["git", "init", "-q", "-b", "master"], cwd=path)
    run(["git", "config", "user.name", "Ob Tests"], cwd=path)
    run(["git", "config", "user.email", "ob@example.com"], cwd=path)
    return path


def commit_all(repo: Path, message: str) -> None:
    run(["git", "add", "-A"], cwd=repo)
    run(["git", "commit", "-q", "-m", message], cwd=repo)


def write_tool(
    root: Path,
    graphs: dict[MigrationGraphId, str] | None = None,
    scripts: dict[MigrationGraphId, str] | None = None,
) -> Path:
    """Lay out a tool instance: ``migration/<graph>`` YAML and ``<graph>.hash.sh`` scripts."""
    migration = root / "migration"
    migration.mkdir(parents=True, exist_ok=True)
    for graph_id, text in (graphs or {}).items():
        (migration / graph_id.resource_name).write_text(text, encoding="utf-8")
    for graph_id, body in (scripts or {}).items():
        (migration / graph_id.hash_script_name).write_text(body, encoding="utf-8")
    return root


class FakeHasher:
    """VertexHasher returning preset hashes keyed by (tool dir, graph)."""

    def __init__(self, hashes: dict[tuple[Path, MigrationGraphId], str] | None = None):
        self.hashes = {(tool.resolve(), graph): Hash(value) for (tool, graph), value in (hashes or {}).items()}
        self.calls: list[tuple[Path, MigrationGraphId, Path]] = []

    def set(self, tool_dir: Path, graph_id: MigrationGraphId, value: str) -> None:
        self.hashes[(tool_dir.resolve(), graph_id)] = Hash(value)

    def compute_hash(self, tool_dir: Path, graph_id: MigrationGraphId, target_dir: Path) -> Hash:
        self.calls.append((tool_dir, graph_id, target_dir))
        return self.hashes[(tool_dir.resolve(), graph_id)]


class HandoffIntercepted(Exception):
    """Raised by the test process replacer instead of exec'ing."""

    def __init__(self, argv: list[str]):
        self.argv = argv
        super().__init__(" ".join(argv))


def intercept_handoff(argv) -> None:
    raise HandoffIntercepted(list(argv))


