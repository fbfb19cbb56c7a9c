"""Path conventions for ob projects and tool instances."""

from __future__ import annotations

import os
from pathlib import Path

from .config import ObSettings

OBELISK_DIR = ".obelisk"
IMPL_DIR = "impl"
MIGRATION_DIR = "migration"


def impl_dir(project: Path) -> Path:
    """Return the vendored ob thunk of *project*."""
    return project / OBELISK_DIR / IMPL_DIR


def migration_dir(tool_dir: Path) -> Path:
    """Return the directory holding migration graphs of a tool instance."""
    return tool_dir / MIGRATION_DIR


def locate_project_root(start: Path | None = None) -> Path | None:
    """Walk up from *start* to the first directory containing ``.obelisk/impl``."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if impl_dir(candidate).exists():
            return candidate
    return None


def find_project_tool_command(project: Path, settings: ObSettings) -> Path | None:
    """Return the project-local ob executable, or None when it is not there."""
    command = impl_dir(project) / settings.executable
    if command.is_file() and os.access(command, os.X_OK):
        return command
    return None
