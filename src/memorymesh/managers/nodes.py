"""Node operations: add, update, delete and fetch by name."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..errors import IntegrityError
from ..graph import validator
from ..models.graph import Node, to_wire_keys
from .base import GraphManager, coerce

logger = logging.getLogger(__name__)

NodeInput = Node | Mapping[str, Any]


class NodeManager(GraphManager):
    """Adds, updates, deletes and retrieves nodes in the persisted graph."""

    async def add_nodes(self, nodes: Sequence[NodeInput]) -> list[Node]:
        """
        Add new nodes.

        Raises:
            IntegrityError: a node is malformed or its name is already taken
                (including by an earlier node in the same batch)
        """
        self.emit("beforeAddNodes", {"nodes": list(nodes)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        added: list[Node] = []

        for raw in nodes:
            validator.validate_node_properties(raw)
            node = coerce(Node, raw)
            validator.validate_node_does_not_exist(graph, node.name)
            graph.nodes.append(node)
            added.append(node)

        await self._persist(graph, previous, f"addNodes({len(added)})")
        logger.debug("Added nodes: %s", [n.name for n in added])

        self.emit("afterAddNodes", {"nodes": added})
        return added

    async def update_nodes(self, nodes: Sequence[NodeInput]) -> list[Node]:
        """
        Merge partial node objects onto existing nodes, matched by name.

        Raises:
            IntegrityError: a partial lacks ``name``, names an unknown node, or
                the merged result is malformed
        """
        self.emit("beforeUpdateNodes", {"nodes": list(nodes)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        updated: list[Node] = []

        for raw in nodes:
            validator.validate_node_name_property(raw)
            changes = raw.model_dump(by_alias=True) if isinstance(raw, Node) else to_wire_keys(raw)
            name = changes["name"]

            index = next((i for i, n in enumerate(graph.nodes) if n.name == name), None)
            if index is None:
                raise IntegrityError(f"Node not found: {name}")

            merged = {**graph.nodes[index].model_dump(by_alias=True), **changes, "type": "node"}
            validator.validate_node_properties(merged)
            graph.nodes[index] = coerce(Node, merged)
            updated.append(graph.nodes[index])

        await self._persist(graph, previous, f"updateNodes({len(updated)})")

        self.emit("afterUpdateNodes", {"nodes": updated})
        return updated

    async def delete_nodes(self, node_names: Sequence[str]) -> int:
        """
        Delete nodes and every edge that touches them. Unknown names are ignored.

        Returns:
            Number of nodes actually removed
        """
        validator.validate_node_names_array(node_names)
        self.emit("beforeDeleteNodes", {"nodeNames": list(node_names)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        doomed = set(node_names)

        graph.nodes = [n for n in graph.nodes if n.name not in doomed]
        graph.edges = [e for e in graph.edges if e.from_ not in doomed and e.to not in doomed]
        deleted_count = len(previous.nodes) - len(graph.nodes)

        await self._persist(graph, previous, f"deleteNodes({deleted_count})")

        self.emit("afterDeleteNodes", {"deletedCount": deleted_count})
        return deleted_count

    async def get_nodes(self, node_names: Sequence[str]) -> list[Node]:
        """Return the nodes whose names are in *node_names* (graph order)."""
        validator.validate_node_names_array(node_names)
        wanted = set(node_names)
        graph = await self.storage.load()
        return [n for n in graph.nodes if n.name in wanted]
