"""Migration graphs: model, loading, hashing and path finding."""

from __future__ import annotations

from .exceptions import (
    GraphInconsistencyError,
    MalformedGraphError,
    MigrationError,
    NoMigrationPathError,
    VertexHashError,
)
from .graph import Edge, Hash, MigrationGraph, find_path, run_migration
from .graphs import MigrationGraphId
from .hashing import ScriptVertexHasher, VertexHasher
from .loader import load_graph

__all__ = [
    "Edge",
    "GraphInconsistencyError",
    "Hash",
    "MalformedGraphError",
    "MigrationError",
    "MigrationGraph",
    "MigrationGraphId",
    "NoMigrationPathError",
    "ScriptVertexHasher",
    "VertexHashError",
    "VertexHasher",
    "find_path",
    "load_graph",
    "run_migration",
]
