"""Placing tool instances on a migration graph.

Every graph ships a hash script next to it (``<graph-name>.hash.sh``). The
script receives a directory and prints the vertex hash of that directory's
contents. :class:`VertexHasher` is the seam the upgrade flow depends on, so
tests can substitute deterministic hashers for the real scripts.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from ob_cli.core.paths import migration_dir

from .exceptions import VertexHashError
from .graph import Hash
from .graphs import MigrationGraphId

__all__ = ["ScriptVertexHasher", "VertexHasher", "hash_script_path"]

logger = logging.getLogger(__name__)


class VertexHasher(Protocol):
    def compute_hash(self, tool_dir: Path, graph_id: MigrationGraphId, target_dir: Path) -> Hash:
        """Hash *target_dir* using the hashing procedure *tool_dir* ships for *graph_id*."""
        ...


def hash_script_path(tool_dir: Path, graph_id: MigrationGraphId) -> Path:
    return migration_dir(tool_dir) / graph_id.hash_script_name


class ScriptVertexHasher:
    """Run ``sh <tool>/migration/<graph>.hash.sh <target>`` and read the hash from stdout."""

    def __init__(self, shell: str = "sh"):
        self.shell = shell

    def compute_hash(self, tool_dir: Path, graph_id: MigrationGraphId, target_dir: Path) -> Hash:
        script = hash_script_path(tool_dir, graph_id)
        if not script.is_file():
            raise VertexHashError(f"Hash script {script} not found")

        command = [self.shell, str(script), str(target_dir)]
        logger.debug("Computing %s hash of %s: %s", graph_id.resource_name, target_dir, " ".join(command))
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise VertexHashError(f"Could not run hash script {script}: {exc}") from exc

        stderr = completed.stderr or ""
        if completed.returncode != 0:
            for line in stderr.splitlines():
                logger.error("%s: %s", script.name, line)
            raise VertexHashError(
                f"Hash script {script} exited with status {completed.returncode}"
                + (f": {stderr.strip()}" if stderr.strip() else ""),
                stderr=stderr,
            )

        value = (completed.stdout or "").strip()
        if not value:
            raise VertexHashError(f"Hash script {script} printed no hash", stderr=stderr)
        return Hash(value)
