"""Deciding whether the ambient ob should hand the upgrade to the project's ob.

The ambient ob is the executable currently running; the project ob is the
copy vendored at ``.obelisk/impl``. After the thunk moves to a newer
branch the project ob usually knows more migrations than the ambient one,
so by default the ambient ob replaces itself with the project ob. The
project's handoff graph can veto that: an edge whose action is
:data:`HANDOFF_VETO_ACTION` says the ambient ob is compatible and may
continue on its own.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import NoReturn

from ob_cli.cli.helpers import spinner
from ob_cli.core.config import ObSettings
from ob_cli.core.errors import HandoffError, NotAProjectError
from ob_cli.core.git import ensure_clean_repo
from ob_cli.core.paths import find_project_tool_command, impl_dir
from ob_cli.migration import (
    GraphInconsistencyError,
    Hash,
    MigrationGraph,
    MigrationGraphId,
    VertexHasher,
    find_path,
    load_graph,
)

__all__ = [
    "HANDOFF_VETO_ACTION",
    "ProcessReplacer",
    "decide_handoff",
    "ensure_clean_project",
    "exec_replacer",
    "get_replacer",
    "hand_off_to_project_tool",
    "handoff_argv",
    "is_handoff_veto",
    "spawn_replacer",
]

logger = logging.getLogger(__name__)

HANDOFF_VETO_ACTION = "True"

ProcessReplacer = Callable[[Sequence[str]], NoReturn]


def is_handoff_veto(action: str) -> bool:
    """True when a handoff edge allows the ambient ob to keep running."""
    return action == HANDOFF_VETO_ACTION


def ensure_clean_project(project: Path) -> None:
    ensure_clean_repo(project, "Cannot upgrade with uncommitted changes")


def _ambient_graph(ambient: Path) -> tuple[MigrationGraph, Hash]:
    """Return the ambient handoff graph and the ambient ob's place in it (its newest vertex)."""
    graph = load_graph(ambient, MigrationGraphId.HANDOFF)
    if graph is None:
        raise GraphInconsistencyError(f"Ambient ob at {ambient} has no migration graph")
    ambient_hash = graph.last
    if ambient_hash is None or not graph.has_vertex(ambient_hash):
        raise GraphInconsistencyError(
            f"Ambient ob's hash {ambient_hash} is not in its own graph"
        )
    return graph, ambient_hash


def decide_handoff(
    project: Path,
    *,
    hasher: VertexHasher,
    settings: ObSettings,
    check_clean: bool = True,
) -> bool:
    """Return True when the ambient ob should hand off to the project ob.

    Any doubt (old project ob, unknown project hash, no path) is logged and
    resolved in favour of handing off, except for a project ob too old to
    carry a handoff graph, which cannot take part in a handoff at all.
    """
    if check_clean:
        ensure_clean_project(project)

    project_ob = impl_dir(project)
    if load_graph(project_ob, MigrationGraphId.HANDOFF) is None:
        logger.warning("Project ob is too old (has no migration graph); won't hand off")
        return False

    project_hash = hasher.compute_hash(project_ob, MigrationGraphId.HANDOFF, project_ob)
    ambient_graph, ambient_hash = _ambient_graph(settings.resolved_ambient_dir())

    if not ambient_graph.has_vertex(project_hash):
        logger.warning(
            "Cannot find project ob (%s) in ambient ob's migration graph; handing off anyway",
            project_hash,
        )
        return True

    path = find_path(ambient_graph, project_hash, ambient_hash)
    if path is None:
        logger.warning(
            "No migration path between project ob (%s) and ambient ob (%s); handing off anyway",
            project_hash,
            ambient_hash,
        )
        return True

    actions = [ambient_graph.get_edge(edge) for edge in path]
    vetoed = any(is_handoff_veto(action) for action in actions)
    logger.debug(
        "Handoff path %s -> %s has %d edge(s); veto=%s",
        project_hash,
        ambient_hash,
        len(path),
        vetoed,
    )
    return not vetoed


def handoff_argv(command: Path, branch: str, from_hash: Hash) -> list[str]:
    """Argument vector the project ob is started with after a handoff."""
    return [
        str(command),
        "--no-handoff",
        "upgrade",
        "--migrate-only-from-hash",
        from_hash,
        branch,
    ]


def exec_replacer(argv: Sequence[str]) -> NoReturn:
    """Replace the current process image with *argv*."""
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execv(argv[0], list(argv))
    except OSError as exc:
        raise HandoffError(f"Could not hand off to project ob {argv[0]}: {exc}") from exc


def spawn_replacer(argv: Sequence[str]) -> NoReturn:
    """Run *argv* to completion and exit with its status."""
    try:
        completed = subprocess.run(list(argv), check=False)
    except OSError as exc:
        raise HandoffError(f"Could not hand off to project ob {argv[0]}: {exc}") from exc
    raise SystemExit(completed.returncode)


def get_replacer(settings: ObSettings) -> ProcessReplacer:
    return spawn_replacer if settings.handoff_mode == "spawn" else exec_replacer


def hand_off_to_project_tool(
    project: Path,
    branch: str,
    from_hash: Hash,
    *,
    settings: ObSettings,
    replace_process: ProcessReplacer | None = None,
) -> NoReturn:
    """Continue this upgrade inside the project ob; does not return."""
    with spinner("Preparing for handoff") as step:
        command = find_project_tool_command(project, settings)
        if command is None:
            raise NotAProjectError(
                f"Not an ob project: no executable at {impl_dir(project) / settings.executable}"
            )
        step.done = f"Handing off to new ob {command}"

    argv = handoff_argv(command, branch, from_hash)
    replacer = replace_process or get_replacer(settings)
    replacer(argv)
    raise AssertionError("process replacement returned")  # pragma: no cover
