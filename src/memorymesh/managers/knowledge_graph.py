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

"""
Facade over the graph managers.

Wires one storage backend, one EventNotifier and one TransactionCoordinator
into the node, edge, metadata and search managers and exposes their
operations from a single object:

    kg = KnowledgeGraphManager()

    async def seed():
        await kg.add_nodes([{"name": "alice", "nodeType": "person", "metadata": []}])
        await kg.add_edges([{"from": "alice", "to": "alice", "edgeType": "knows"}])

    await kg.with_transaction(seed)
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar

from ..config import Settings
from ..events import EventNotifier
from ..models.graph import Edge, EdgeFilter, EdgeUpdate, Graph, MetadataAddition, MetadataDeletion, MetadataResult, Node
from ..storage.base import GraphStorage
from ..storage.factory import create_graph_storage
from ..transactions import TransactionCoordinator
from .edges import EdgeManager
from .metadata import MetadataManager
from .nodes import NodeManager
from .search import SearchManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KnowledgeGraphManager:
    """Single entry point for graph operations and transactions."""

    def __init__(
        self,
        storage: GraphStorage | None = None,
        events: EventNotifier | None = None,
        config: Settings | None = None,
    ):
        """
        Args:
            storage: Graph backend; built from ``config.storage`` when omitted
            events: Shared notifier; a fresh one when omitted
            config: Settings to wire from; defaults to the process-wide settings
        """
        if config is None:
            from ..config import settings

            config = settings
        config.log.apply()

        self.storage = storage if storage is not None else create_graph_storage(config.storage)
        self.events = events if events is not None else EventNotifier()
        self.coordinator = TransactionCoordinator(self.storage, self.events)

        shared = (self.storage, self.events, self.coordinator)
        self.nodes = NodeManager(*shared)
        self.edges = EdgeManager(*shared)
        self.metadata = MetadataManager(*shared)
        self.search = SearchManager(*shared)
        logger.debug("KnowledgeGraphManager wired to %s", type(self.storage).__name__)

    # Nodes

    async def add_nodes(self, nodes: Sequence[Node | Mapping[str, Any]]) -> list[Node]:
        return await self.nodes.add_nodes(nodes)

    async def update_nodes(self, nodes: Sequence[Node | Mapping[str, Any]]) -> list[Node]:
        return await self.nodes.update_nodes(nodes)

    async def delete_nodes(self, node_names: Sequence[str]) -> int:
        return await self.nodes.delete_nodes(node_names)

    async def get_nodes(self, node_names: Sequence[str]) -> list[Node]:
        return await self.nodes.get_nodes(node_names)

    # Edges

    async def add_edges(self, edges: Sequence[Edge | Mapping[str, Any]]) -> list[Edge]:
        return await self.edges.add_edges(edges)

    async def update_edges(self, updates: Sequence[EdgeUpdate | Mapping[str, Any]]) -> list[Edge]:
        return await self.edges.update_edges(updates)

    async def delete_edges(self, edges: Sequence[Edge | Mapping[str, Any]]) -> int:
        return await self.edges.delete_edges(edges)

    async def get_edges(self, edge_filter: EdgeFilter | Mapping[str, Any] | None = None) -> list[Edge]:
        return await self.edges.get_edges(edge_filter)

    async def get_edges_by_ids(self, edge_ids: Sequence[str]) -> list[Edge]:
        return await self.edges.get_edges_by_ids(edge_ids)

    async def reinforce_edges(self, observations: Sequence[Edge | Mapping[str, Any]]) -> list[Edge]:
        return await self.edges.reinforce_edges(observations)

    # Metadata

    async def add_metadata(self, additions: Sequence[MetadataAddition | Mapping[str, Any]]) -> list[MetadataResult]:
        return await self.metadata.add_metadata(additions)

    async def delete_metadata(self, deletions: Sequence[MetadataDeletion | Mapping[str, Any]]) -> None:
        await self.metadata.delete_metadata(deletions)

    async def get_metadata(self, node_name: str) -> list[str]:
        return await self.metadata.get_metadata(node_name)

    # Search

    async def search_nodes(self, query: str) -> Graph:
        return await self.search.search_nodes(query)

    async def open_nodes(self, node_names: Sequence[str]) -> Graph:
        return await self.search.open_nodes(node_names)

    async def read_graph(self) -> Graph:
        return await self.search.read_graph()

    # Transactions

    async def with_transaction(self, operation: Callable[[], Awaitable[T] | T]) -> T:
        """Run *operation* so that every mutation it makes is undone if it raises."""
        return await self.coordinator.with_transaction(operation)

    def transaction(self):
        return self.coordinator.transaction()
