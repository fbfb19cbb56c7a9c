"""
ob CLI - keeps the ob vendored in a project up to date.

Usage:
    ob upgrade <branch>
    ob --no-handoff upgrade --migrate-only-from-hash <hash> <branch>
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _package_version

import typer

from ob_cli.cli.commands import upgrade
from ob_cli.cli.helpers import configure_logging, console

try:
    __version__ = _package_version("ob-cli")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"


app = typer.Typer(
    name="ob",
    help="Manage the ob vendored in a project",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"ob {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    no_handoff: bool = typer.Option(
        False,
        "--no-handoff",
        help="Never hand off to the project's ob",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Global options shared by every command."""
    ctx.obj = {"no_handoff": no_handoff, "verbose": verbose}
    configure_logging("DEBUG" if verbose else "WARNING")


app.command()(upgrade)


def main():
    app()
