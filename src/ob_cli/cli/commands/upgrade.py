"""Upgrade command implementation for the ob CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ob_cli.cli.helpers import configure_logging, console
from ob_cli.core.config import load_settings
from ob_cli.core.errors import NotAProjectError, ObCliError
from ob_cli.core.paths import locate_project_root


def upgrade(
    ctx: typer.Context,
    branch: str = typer.Argument(..., help="Branch of ob to upgrade the project to"),
    migrate_only_from_hash: Optional[str] = typer.Option(
        None,
        "--migrate-only-from-hash",
        help="Skip the thunk update and only report migrations from this hash",
    ),
) -> None:
    """Upgrade the ob vendored in this project to BRANCH.

    Updates .obelisk/impl, hands off to the new ob when required, and lists
    the manual migrations between the old and the new version.

    Examples:
        ob upgrade master
        ob upgrade develop
    """
    options = ctx.obj or {}
    try:
        project = locate_project_root(Path.cwd())
        if project is None:
            raise NotAProjectError("Not an ob project (no .obelisk/impl found)")

        settings = load_settings(project)
        if not options.get("verbose"):
            configure_logging(settings.log_level)

        # Import upgrade system lazily so `ob --help` stays cheap
        from ob_cli.migration import Hash
        from ob_cli.upgrade import upgrade_tool

        upgrade_tool(
            project,
            branch,
            Hash(migrate_only_from_hash) if migrate_only_from_hash else None,
            handoff=not options.get("no_handoff", False),
            settings=settings,
        )
    except ObCliError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(1) from exc
