"""Shared console, spinner and logging setup for ob commands."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

console = Console()
err_console = Console(stderr=True)


@dataclass
class SpinnerStep:
    """Handle yielded by :func:`spinner`; set ``done`` to change the final line."""

    message: str
    done: str | None = None


@contextmanager
def spinner(message: str) -> Iterator[SpinnerStep]:
    """Show a spinner while the block runs, then a one-line outcome."""
    step = SpinnerStep(message)
    try:
        with console.status(f"[cyan]{message}...[/cyan]"):
            yield step
    except BaseException:
        console.print(f"[red]✗[/red] {message}")
        raise
    console.print(f"[green]✓[/green] {step.done or message}")


def configure_logging(level: str = "WARNING") -> None:
    """Route log records through Rich on stderr."""
    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    logging.getLogger("ob_cli").setLevel(getattr(logging, level.upper(), logging.WARNING))
