"""The ``ob upgrade`` flow.

A user-invoked upgrade verifies the project is clean, records the current
upgrade-graph hash of the vendored ob, moves the thunk to the requested
branch and then either hands off to the updated project ob or migrates
itself. A handed-off run (``--migrate-only-from-hash``) goes straight to
the migration step with the hash recorded by the ambient ob.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ob_cli.cli.helpers import console, spinner
from ob_cli.core.config import ObSettings, load_settings
from ob_cli.core.git import git_checkout, git_pull
from ob_cli.core.paths import impl_dir
from ob_cli.migration import (
    GraphInconsistencyError,
    Hash,
    MigrationGraphId,
    NoMigrationPathError,
    ScriptVertexHasher,
    VertexHasher,
    load_graph,
    run_migration,
)
from ob_cli.thunk import update_thunk

from .handoff import (
    ProcessReplacer,
    decide_handoff,
    ensure_clean_project,
    hand_off_to_project_tool,
)

__all__ = ["UpgradeResult", "migrate_tool", "update_tool", "upgrade_tool"]

logger = logging.getLogger(__name__)


@dataclass
class UpgradeResult:
    """Outcome of the migration step."""

    from_hash: Hash
    to_hash: Hash
    actions: list[tuple[Hash, str]] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.actions

    @property
    def summary(self) -> str:
        if self.from_hash == self.to_hash:
            return "No upgrade available (new ob is the same)"
        if not self.actions:
            return f"No migrations necessary between {self.from_hash} and {self.to_hash}"
        return (
            f"Migrated from {self.from_hash} to {self.to_hash} "
            f"({len(self.actions)} actions)"
        )


def update_tool(
    project: Path,
    branch: str,
    *,
    hasher: VertexHasher,
    settings: ObSettings,
) -> Hash:
    """Point the vendored ob at *branch*, returning its upgrade hash from before the update."""
    with spinner("Updating ob thunk") as step:
        with update_thunk(impl_dir(project)) as ob_impl:
            # The ambient ob's script hashes the old checkout; the checkout's
            # own script may not exist yet.
            ambient = settings.resolved_ambient_dir()
            from_hash = hasher.compute_hash(ambient, MigrationGraphId.UPGRADE, ob_impl)
            git_checkout(ob_impl, branch)
            git_pull(ob_impl)
        step.done = f"Updated ob thunk to hash {from_hash}"
    return from_hash


def migrate_tool(
    project: Path,
    branch: str,
    from_hash: Hash,
    *,
    hasher: VertexHasher,
) -> UpgradeResult:
    """Report the migrations between *from_hash* and the updated vendored ob."""
    with spinner("Migrating to new ob") as step:
        with update_thunk(impl_dir(project)) as ob_impl:
            graph = load_graph(ob_impl, MigrationGraphId.UPGRADE)
            if graph is None:
                raise GraphInconsistencyError("New ob has no migration metadata")
            to_hash = hasher.compute_hash(ob_impl, MigrationGraphId.UPGRADE, ob_impl)

        if not graph.has_vertex(from_hash):
            raise GraphInconsistencyError(
                f"Current ob hash {from_hash} missing in migration graph of new ob"
            )
        if not graph.has_vertex(to_hash):
            # Usually the target branch's latest commit was never given a
            # migration vertex.
            raise GraphInconsistencyError(
                f"New ob hash {to_hash} missing in its migration graph"
            )

        result = UpgradeResult(from_hash=from_hash, to_hash=to_hash)
        if from_hash != to_hash:
            logger.debug("Migrating from %s to %s", from_hash, to_hash)
            actions = run_migration(graph, from_hash, to_hash)
            if actions is None:
                raise NoMigrationPathError(
                    f"Unable to find migration path from {from_hash} to {to_hash}"
                )
            result.actions = actions
        step.done = result.summary

    if result.actions:
        _print_actions(branch, result.actions)
    return result


def _print_actions(branch: str, actions: list[tuple[Hash, str]]) -> None:
    console.print(f"Migrations from '{branch}' are shown below:\n", markup=False)
    for vertex, action in actions:
        console.print(f"==== [{vertex}] ===", style="bold cyan", markup=False)
        console.print(action.rstrip("\n"), markup=False, highlight=False)
    console.print()
    console.print(
        "Please commit the changes to the project, and manually perform the above "
        "migrations to make your project work with the upgraded ob.",
        style="yellow",
        markup=False,
    )


def upgrade_tool(
    project: Path,
    branch: str,
    migrate_only_from_hash: Hash | None = None,
    *,
    handoff: bool = True,
    hasher: VertexHasher | None = None,
    settings: ObSettings | None = None,
    replace_process: ProcessReplacer | None = None,
) -> UpgradeResult:
    """Upgrade the vendored ob of *project* to *branch*.

    Returns the migration outcome. When the ambient ob hands off to the
    project ob this function does not return: the process is replaced.
    """
    hasher = hasher or ScriptVertexHasher()
    settings = settings or load_settings(project)

    if migrate_only_from_hash is not None:
        return migrate_tool(project, branch, migrate_only_from_hash, hasher=hasher)

    ensure_clean_project(project)
    from_hash = update_tool(project, branch, hasher=hasher, settings=settings)

    # The tree was verified clean above; the thunk update itself is the only change since.
    if handoff and decide_handoff(project, hasher=hasher, settings=settings, check_clean=False):
        hand_off_to_project_tool(
            project,
            branch,
            from_hash,
            settings=settings,
            replace_process=replace_process,
        )

    return migrate_tool(project, branch, from_hash, hasher=hasher)
