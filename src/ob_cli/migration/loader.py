"""Read migration graphs from ``<tool>/migration/<graph-name>``.

The resource is a YAML document::

    first: 3f1c...        # optional, derived when omitted
    last: 9ab2...         # optional, derived when omitted
    edges:
      - from: 3f1c...
        to: 9ab2...
        action: |
          Rename default.nix to project.nix.

A missing resource means the tool instance predates migration graphs and
yields ``None``; anything present but unparseable is a hard failure.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ob_cli.core.paths import migration_dir

from .exceptions import MalformedGraphError
from .graph import Edge, Hash, MigrationGraph
from .graphs import MigrationGraphId

__all__ = ["graph_path", "load_graph", "parse_graph"]

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = frozenset({"first", "last", "edges"})
_EDGE_KEYS = frozenset({"from", "to", "action"})


def graph_path(tool_dir: Path, graph_id: MigrationGraphId) -> Path:
    return migration_dir(tool_dir) / graph_id.resource_name


def load_graph(tool_dir: Path, graph_id: MigrationGraphId) -> MigrationGraph | None:
    """Load *graph_id* from *tool_dir*, or None when the tool carries no such graph."""
    path = graph_path(tool_dir, graph_id)
    logger.debug("Reading migration graph %s from %s", graph_id.resource_name, tool_dir)
    if not path.exists():
        logger.debug("No migration graph at %s", path)
        return None
    if not path.is_file():
        raise MalformedGraphError(f"Migration graph {path} is not a file")

    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle)
    except (OSError, UnicodeDecodeError, YAMLError) as exc:
        raise MalformedGraphError(f"Failed to parse migration graph {path}: {exc}") from exc

    graph = parse_graph(payload, source=str(path))
    if graph.is_empty:
        logger.debug("Migration graph %s has no vertices; treating it as absent", path)
        return None
    return graph


def parse_graph(payload: object, source: str = "<graph>") -> MigrationGraph:
    """Validate a decoded YAML document and build the graph it describes."""
    if payload is None:
        return MigrationGraph()
    if not isinstance(payload, dict):
        raise MalformedGraphError(f"{source}: expected a mapping at the top level")

    unknown = sorted(str(key) for key in payload if key not in _TOP_LEVEL_KEYS)
    if unknown:
        raise MalformedGraphError(f"{source}: unknown keys {', '.join(unknown)}")

    raw_edges = payload.get("edges")
    if raw_edges is None:
        raw_edges = []
    if not isinstance(raw_edges, list):
        raise MalformedGraphError(f"{source}: 'edges' must be a list")

    edges: dict[Edge, str] = {}
    for index, entry in enumerate(raw_edges):
        where = f"{source}: edge #{index + 1}"
        if not isinstance(entry, dict):
            raise MalformedGraphError(f"{where} must be a mapping")
        missing = sorted(_EDGE_KEYS - set(entry))
        if missing:
            raise MalformedGraphError(f"{where} is missing {', '.join(missing)}")
        extra = sorted(str(key) for key in entry if key not in _EDGE_KEYS)
        if extra:
            raise MalformedGraphError(f"{where} has unknown keys {', '.join(extra)}")

        key = (_hash(entry["from"], f"{where} 'from'"), _hash(entry["to"], f"{where} 'to'"))
        if key in edges:
            raise MalformedGraphError(f"{where} duplicates edge {key}")
        edges[key] = _action(entry["action"], f"{where} 'action'")

    first = _optional_hash(payload.get("first"), f"{source}: 'first'")
    last = _optional_hash(payload.get("last"), f"{source}: 'last'")
    if edges or first is not None or last is not None:
        first, last = _resolve_endpoints(edges, first, last, source)
    return MigrationGraph(edges=edges, first=first, last=last)


def _hash(value: object, where: str) -> Hash:
    if not isinstance(value, str) or not value.strip():
        raise MalformedGraphError(
            f"{where} must be a non-empty string (quote hashes that look like numbers)"
        )
    return Hash(value.strip())


def _optional_hash(value: object, where: str) -> Hash | None:
    return None if value is None else _hash(value, where)


def _action(value: object, where: str) -> str:
    # A YAML boolean is kept as its Python spelling, so ``action: true`` on a
    # handoff edge reads the same as the literal text "True".
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value
    raise MalformedGraphError(f"{where} must be text or a boolean")


def _resolve_endpoints(
    edges: dict[Edge, str],
    first: Hash | None,
    last: Hash | None,
    source: str,
) -> tuple[Hash, Hash]:
    vertices: set[Hash] = {vertex for edge in edges for vertex in edge}
    vertices.update(v for v in (first, last) if v is not None)

    if first is None:
        sources = sorted(v for v in vertices if not any(dst == v for _, dst in edges))
        first = _single(sources, "first", source)
    if last is None:
        sinks = sorted(v for v in vertices if not any(src == v for src, _ in edges))
        last = _single(sinks, "last", source)
    return first, last


def _single(candidates: list[Hash], name: str, source: str) -> Hash:
    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise MalformedGraphError(
            f"{source}: cannot derive '{name}' vertex (every vertex is on a cycle); declare it"
        )
    raise MalformedGraphError(
        f"{source}: ambiguous '{name}' vertex ({', '.join(candidates)}); declare it"
    )
