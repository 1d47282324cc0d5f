"""Data models for the knowledge graph and its operation inputs."""

from .graph import (
    RECORD_ADAPTER,
    WIRE_NAMES,
    Edge,
    EdgeFilter,
    EdgeUpdate,
    Graph,
    GraphRecord,
    MetadataAddition,
    MetadataDeletion,
    MetadataResult,
    Node,
    make_edge_id,
    to_wire_keys,
)

__all__ = [
    "RECORD_ADAPTER",
    "WIRE_NAMES",
    "Edge",
    "EdgeFilter",
    "EdgeUpdate",
    "Graph",
    "GraphRecord",
    "MetadataAddition",
    "MetadataDeletion",
    "MetadataResult",
    "Node",
    "make_edge_id",
    "to_wire_keys",
]
