# Copyright 2024 Heinrich Krupp
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Graph data models.

Pydantic v2 models for the records persisted in the JSON Lines memory file.
Field names on the wire are camelCase (``nodeType``, ``edgeType``, ``from``)
and are exposed here as aliases of snake_case attributes.

The models check types only. Graph invariants (unique names, resolvable edge
endpoints, weight range, non-empty fields) are enforced by
:mod:`memorymesh.graph.validator`, so a malformed-but-well-typed record can
still be constructed, inspected and rejected with a precise message.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

EDGE_ID_SEPARATOR = "|"

# Python attribute name -> persisted (wire) field name, where they differ
WIRE_NAMES: dict[str, str] = {
    "node_type": "nodeType",
    "from_": "from",
    "edge_type": "edgeType",
}


def make_edge_id(from_: str, to: str, edge_type: str) -> str:
    """Build the composite ``from|to|edgeType`` identifier used for lookups."""
    return EDGE_ID_SEPARATOR.join((from_, to, edge_type))


def to_wire_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Rename snake_case attribute keys in *data* to their wire names."""
    return {WIRE_NAMES.get(key, key): value for key, value in data.items()}


class Node(BaseModel):
    """A named entity with a type and an ordered list of metadata strings."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["node"] = "node"
    name: str
    node_type: str = Field(alias="nodeType")
    metadata: list[str] = Field(default_factory=list)


class Edge(BaseModel):
    """A directed, typed relationship between two node names.

    ``weight`` is optional on the wire; a missing weight means full strength
    (see :func:`memorymesh.graph.weights.ensure_weight`).
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["edge"] = "edge"
    from_: str = Field(alias="from")
    to: str
    edge_type: str = Field(alias="edgeType")
    weight: float | None = None

    @property
    def edge_id(self) -> str:
        return make_edge_id(self.from_, self.to, self.edge_type)

    def same_identity(self, other: Edge) -> bool:
        """Whether *other* has the same ``(from, to, edgeType)`` triple."""
        return self.edge_id == other.edge_id


class Graph(BaseModel):
    """A complete in-memory snapshot of the persisted graph."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def find_node(self, name: str) -> Node | None:
        return next((node for node in self.nodes if node.name == name), None)

    def node_names(self) -> set[str]:
        return {node.name for node in self.nodes}


GraphRecord = Annotated[Node | Edge, Field(discriminator="type")]
"""One persisted line: routed to Node or Edge by its ``type`` discriminant."""

RECORD_ADAPTER: TypeAdapter[Node | Edge] = TypeAdapter(GraphRecord)


# ---------------------------------------------------------------------------
# Operation inputs
# ---------------------------------------------------------------------------


class EdgeUpdate(BaseModel):
    """Identify an edge by its triple and describe the fields to change."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    edge_type: str = Field(alias="edgeType")
    new_from: str | None = Field(default=None, alias="newFrom")
    new_to: str | None = Field(default=None, alias="newTo")
    new_edge_type: str | None = Field(default=None, alias="newEdgeType")
    new_weight: float | None = Field(default=None, alias="newWeight")

    @property
    def edge_id(self) -> str:
        return make_edge_id(self.from_, self.to, self.edge_type)


class EdgeFilter(BaseModel):
    """Optional criteria for :meth:`EdgeManager.get_edges`; unset fields match anything."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    edge_type: str | None = Field(default=None, alias="edgeType")

    def matches(self, edge: Edge) -> bool:
        return (
            (self.from_ is None or edge.from_ == self.from_)
            and (self.to is None or edge.to == self.to)
            and (self.edge_type is None or edge.edge_type == self.edge_type)
        )


class MetadataAddition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    node_name: str = Field(alias="nodeName")
    contents: list[str] = Field(default_factory=list)


class MetadataDeletion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    node_name: str = Field(alias="nodeName")
    metadata: list[str] = Field(default_factory=list)


class MetadataResult(BaseModel):
    """Metadata entries actually added to a node (duplicates excluded)."""

    model_config = ConfigDict(populate_by_name=True)

    node_name: str = Field(alias="nodeName")
    added_metadata: list[str] = Field(default_factory=list, alias="addedMetadata")
