"""Exception hierarchy shared by the ob CLI layers."""

from __future__ import annotations


class ObCliError(RuntimeError):
    """Base class for every failure the CLI reports to the user."""


class ConfigError(ObCliError):
    """Raised when ``.obelisk/config.yaml`` or an ``OB_*`` variable is invalid."""


class NotAProjectError(ObCliError):
    """Raised when no ob project (or no project-local ob) can be located."""


class GitError(ObCliError):
    """Raised when a git command fails."""


class DirtyWorkingTreeError(GitError):
    """Raised when the project has uncommitted changes."""

    def __init__(self, message: str, paths: list[str] | None = None):
        self.paths = list(paths or [])
        super().__init__(message)


class ThunkError(ObCliError):
    """Raised when the vendored thunk cannot be opened for update."""


class HandoffError(ObCliError):
    """Raised when the project ob cannot be started to take over an upgrade."""
