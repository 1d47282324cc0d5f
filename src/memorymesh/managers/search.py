"""Read-side operations: text search, neighbourhood open and full read."""

import logging
from collections.abc import Iterable, Sequence

from ..errors import GraphOperationError, describe_error
from ..graph import validator
from ..models.graph import Graph, Node
from .base import GraphManager

logger = logging.getLogger(__name__)


def _matches(node: Node, needle: str) -> bool:
    return (
        needle in node.name.lower()
        or needle in node.node_type.lower()
        or any(needle in entry.lower() for entry in node.metadata)
    )


def _neighbourhood(graph: Graph, names: Iterable[str]) -> Graph:
    """Subgraph of *names*, their direct neighbours, and the edges touching *names*."""
    focus = set(names)
    edges = [e for e in graph.edges if e.from_ in focus or e.to in focus]
    keep = focus | {e.from_ for e in edges} | {e.to for e in edges}
    return Graph(nodes=[n for n in graph.nodes if n.name in keep], edges=edges)


class SearchManager(GraphManager):
    """Queries over the persisted graph. Never writes."""

    async def _load(self, operation: str) -> Graph:
        try:
            return await self.storage.load()
        except Exception as e:
            raise GraphOperationError(f"{operation} operation failed: {describe_error(e)}") from e

    async def search_nodes(self, query: str) -> Graph:
        """
        Case-insensitive substring search over node name, type and metadata.

        Returns:
            Matching nodes plus their neighbours and the edges incident to the matches
        """
        self.emit("beforeSearch", {"query": query})

        graph = await self._load("Search")
        needle = query.lower()
        matched = [n.name for n in graph.nodes if _matches(n, needle)]
        result = _neighbourhood(graph, matched)
        logger.debug("Search %r matched %d nodes", query, len(matched))

        self.emit("afterSearch", {"query": query, "matchCount": len(matched), "nodeCount": len(result.nodes)})
        return result

    async def open_nodes(self, node_names: Sequence[str]) -> Graph:
        """Named nodes with their neighbours and incident edges; unknown names are ignored."""
        validator.validate_node_names_array(node_names)
        self.emit("beforeOpenNodes", {"nodeNames": list(node_names)})

        graph = await self._load("Open nodes")
        present = graph.node_names().intersection(node_names)
        result = _neighbourhood(graph, present)

        self.emit("afterOpenNodes", {"nodeCount": len(result.nodes), "edgeCount": len(result.edges)})
        return result

    async def read_graph(self) -> Graph:
        self.emit("beforeReadGraph", {})
        graph = await self._load("Read graph")
        self.emit("afterReadGraph", {"nodeCount": len(graph.nodes), "edgeCount": len(graph.edges)})
        return graph
