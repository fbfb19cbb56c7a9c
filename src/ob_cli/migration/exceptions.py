"""Exceptions raised by the migration graph layer."""

from __future__ import annotations

from ob_cli.core.errors import ObCliError


class MigrationError(ObCliError):
    """Base class for migration graph failures."""


class MalformedGraphError(MigrationError):
    """Raised when a migration graph resource exists but cannot be parsed."""


class GraphInconsistencyError(MigrationError):
    """Raised when a graph contradicts a hash or edge it is expected to hold."""


class NoMigrationPathError(MigrationError):
    """Raised when no migration path connects two known vertices."""


class VertexHashError(MigrationError):
    """Raised when a hash script is missing or fails."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)
