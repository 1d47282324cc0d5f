"""Metadata operations on existing nodes."""

from collections.abc import Mapping, Sequence
from typing import Any

from ..graph import validator
from ..models.graph import Graph, MetadataAddition, MetadataDeletion, MetadataResult, Node
from .base import GraphManager, coerce


def _require_node(graph: Graph, name: str) -> Node:
    validator.validate_node_exists(graph, name)
    return graph.find_node(name)


class MetadataManager(GraphManager):
    """Appends to, removes from and reads the metadata list of nodes."""

    async def add_metadata(
        self, additions: Sequence[MetadataAddition | Mapping[str, Any]]
    ) -> list[MetadataResult]:
        """
        Append metadata entries, skipping ones the node already has.

        Raises:
            IntegrityError: a target node does not exist
        """
        self.emit("beforeAddMetadata", {"additions": list(additions)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        results: list[MetadataResult] = []

        for raw in additions:
            addition = coerce(MetadataAddition, raw)
            node = _require_node(graph, addition.node_name)
            added: list[str] = []
            for entry in addition.contents:
                if entry not in node.metadata:
                    node.metadata.append(entry)
                    added.append(entry)
            results.append(MetadataResult(node_name=node.name, added_metadata=added))

        await self._persist(graph, previous, f"addMetadata({len(results)})")

        self.emit("afterAddMetadata", {"results": results})
        return results

    async def delete_metadata(self, deletions: Sequence[MetadataDeletion | Mapping[str, Any]]) -> None:
        """
        Remove metadata entries; entries a node does not have are ignored.

        Raises:
            IntegrityError: a target node does not exist
        """
        self.emit("beforeDeleteMetadata", {"deletions": list(deletions)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)

        for raw in deletions:
            deletion = coerce(MetadataDeletion, raw)
            node = _require_node(graph, deletion.node_name)
            doomed = set(deletion.metadata)
            node.metadata = [entry for entry in node.metadata if entry not in doomed]

        await self._persist(graph, previous, f"deleteMetadata({len(deletions)})")

        self.emit("afterDeleteMetadata", {"deletions": list(deletions)})

    async def get_metadata(self, node_name: str) -> list[str]:
        """Return a copy of the node's metadata list."""
        graph = await self.storage.load()
        return list(_require_node(graph, node_name).metadata)
