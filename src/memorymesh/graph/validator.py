"""Structural and referential checks over graph data.

Each check returns ``None`` or raises :class:`IntegrityError` with a message
suitable for returning to the tool caller. Callers run the relevant checks
against the in-memory snapshot before saving, so a failed check never
reaches the memory file.

Checks accept either the pydantic models from :mod:`memorymesh.models.graph`
or raw mappings keyed by the wire field names (``nodeType``, ``from``,
``edgeType``), since update and delete payloads arrive from the tool layer
as plain JSON objects.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..errors import IntegrityError
from ..models.graph import WIRE_NAMES, Edge, Graph, Node
from .weights import validate_weight

__all__ = [
    "validate_edge_properties",
    "validate_edge_references",
    "validate_edge_uniqueness",
    "validate_graph_structure",
    "validate_node_does_not_exist",
    "validate_node_exists",
    "validate_node_name_property",
    "validate_node_names_array",
    "validate_node_properties",
    "validate_weight",
]

_MISSING = object()


def _field(obj: Any, attr: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        wire = WIRE_NAMES.get(attr, attr)
        if wire in obj:
            return obj[wire]
        return obj.get(attr, default)
    return getattr(obj, attr, default)


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _has_node(graph: Graph | Mapping[str, Any], name: str) -> bool:
    return any(_field(node, "name") == name for node in _field(graph, "nodes", ()))


# ---------------------------------------------------------------------------
# Node checks
# ---------------------------------------------------------------------------


def validate_node_exists(graph: Graph | Mapping[str, Any], name: str) -> None:
    if not _has_node(graph, name):
        raise IntegrityError(f"Node not found: {name}")


def validate_node_does_not_exist(graph: Graph | Mapping[str, Any], name: str) -> None:
    if _has_node(graph, name):
        raise IntegrityError(f"Node already exists: {name}")


def validate_node_properties(node: Node | Mapping[str, Any]) -> None:
    if not _field(node, "name"):
        raise IntegrityError("Node must have a 'name' property")
    if not _field(node, "node_type"):
        raise IntegrityError("Node must have a 'nodeType' property")
    if not _is_array(_field(node, "metadata")):
        raise IntegrityError("Node must have a 'metadata' array")


def validate_node_name_property(partial_node: Node | Mapping[str, Any]) -> None:
    if not _field(partial_node, "name"):
        raise IntegrityError("Node must have a 'name' property for updating")


def validate_node_names_array(value: Any, field: str = "nodeNames") -> None:
    if not _is_array(value):
        raise IntegrityError(f"{field} must be an array")
    if not all(isinstance(name, str) for name in value):
        raise IntegrityError("All node names must be strings")


# ---------------------------------------------------------------------------
# Edge checks
# ---------------------------------------------------------------------------


def validate_edge_properties(edge: Edge | Mapping[str, Any]) -> None:
    if not _field(edge, "from_"):
        raise IntegrityError("Edge must have a 'from' property")
    if not _field(edge, "to"):
        raise IntegrityError("Edge must have a 'to' property")
    if not _field(edge, "edge_type"):
        raise IntegrityError("Edge must have an 'edgeType' property")
    weight = _field(edge, "weight")
    if weight is not None:
        validate_weight(weight)


def validate_edge_uniqueness(graph: Graph | Mapping[str, Any], edge: Edge | Mapping[str, Any]) -> None:
    from_, to, edge_type = _field(edge, "from_"), _field(edge, "to"), _field(edge, "edge_type")
    for existing in _field(graph, "edges", ()):
        if (
            _field(existing, "from_") == from_
            and _field(existing, "to") == to
            and _field(existing, "edge_type") == edge_type
        ):
            raise IntegrityError(f"Edge already exists: {from_} -> {to} ({edge_type})")


def validate_edge_references(
    graph: Graph | Mapping[str, Any],
    edges: Iterable[Edge | Mapping[str, Any]],
) -> None:
    names = {_field(node, "name") for node in _field(graph, "nodes", ())}
    for edge in edges:
        for endpoint in (_field(edge, "from_"), _field(edge, "to")):
            if endpoint not in names:
                raise IntegrityError(f"Node not found: {endpoint}")


# ---------------------------------------------------------------------------
# Whole-graph check
# ---------------------------------------------------------------------------


def validate_graph_structure(graph: Graph | Mapping[str, Any]) -> None:
    nodes = _field(graph, "nodes", _MISSING)
    if not _is_array(nodes):
        raise IntegrityError("Graph must have a 'nodes' array")
    edges = _field(graph, "edges", _MISSING)
    if not _is_array(edges):
        raise IntegrityError("Graph must have an 'edges' array")

    for node in nodes:
        validate_node_properties(node)
    validate_edge_references(graph, edges)
