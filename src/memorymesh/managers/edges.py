"""Edge operations: add, update, delete and filter."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..errors import IntegrityError
from ..graph import validator
from ..graph.weights import DEFAULT_WEIGHT, combine_weights, ensure_weight, update_weight, validate_weight
from ..models.graph import Edge, EdgeFilter, EdgeUpdate
from .base import GraphManager, coerce

logger = logging.getLogger(__name__)

EdgeInput = Edge | Mapping[str, Any]


class EdgeManager(GraphManager):
    """Adds, updates, deletes and queries edges in the persisted graph."""

    async def add_edges(self, edges: Sequence[EdgeInput]) -> list[Edge]:
        """
        Add new edges; a missing weight is stored as 1.0.

        Raises:
            IntegrityError: an edge is malformed, references a missing node,
                or duplicates an existing ``(from, to, edgeType)``
        """
        self.emit("beforeAddEdges", {"edges": list(edges)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        added: list[Edge] = []

        for raw in edges:
            validator.validate_edge_properties(raw)
            edge = ensure_weight(coerce(Edge, raw))
            validator.validate_edge_references(graph, [edge])
            validator.validate_edge_uniqueness(graph, edge)
            graph.edges.append(edge)
            added.append(edge)

        await self._persist(graph, previous, f"addEdges({len(added)})")
        logger.debug("Added edges: %s", [e.edge_id for e in added])

        self.emit("afterAddEdges", {"edges": added})
        return added

    async def update_edges(self, updates: Sequence[EdgeUpdate | Mapping[str, Any]]) -> list[Edge]:
        """
        Re-point, re-type or re-weight existing edges.

        Raises:
            IntegrityError: the edge does not exist, a new endpoint is missing,
                the new weight is out of range, or the result collides with
                another edge
        """
        self.emit("beforeUpdateEdges", {"updates": list(updates)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        updated: list[Edge] = []

        for raw in updates:
            update = coerce(EdgeUpdate, raw)
            index = next((i for i, e in enumerate(graph.edges) if e.edge_id == update.edge_id), None)
            if index is None:
                raise IntegrityError(f"Edge not found: {update.from_} -> {update.to} ({update.edge_type})")

            current = graph.edges[index]
            if update.new_weight is not None:
                validate_weight(update.new_weight)
            candidate = current.model_copy(
                update={
                    "from_": update.new_from or current.from_,
                    "to": update.new_to or current.to,
                    "edge_type": update.new_edge_type or current.edge_type,
                    "weight": update.new_weight if update.new_weight is not None else current.weight,
                }
            )

            validator.validate_edge_references(graph, [candidate])
            if candidate.edge_id != current.edge_id:
                validator.validate_edge_uniqueness(graph, candidate)

            graph.edges[index] = candidate
            updated.append(candidate)

        await self._persist(graph, previous, f"updateEdges({len(updated)})")

        self.emit("afterUpdateEdges", {"edges": updated})
        return updated

    async def reinforce_edges(self, observations: Sequence[EdgeInput]) -> list[Edge]:
        """
        Blend observed weights into existing edges.

        Observations of the same edge within one call are combined (strongest
        wins) and then averaged with the stored weight. A stored edge without
        a weight, and an observation without one, count as full strength.

        Raises:
            IntegrityError: an observation is malformed or names an unknown edge
        """
        evidence: dict[str, tuple[Edge, list[float]]] = {}
        for raw in observations:
            validator.validate_edge_properties(raw)
            edge = ensure_weight(coerce(Edge, raw))
            evidence.setdefault(edge.edge_id, (edge, []))[1].append(edge.weight)

        self.emit("beforeReinforceEdges", {"edges": list(observations)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        positions = {e.edge_id: i for i, e in enumerate(graph.edges)}
        reinforced: list[Edge] = []

        for edge_id, (observed, weights) in evidence.items():
            index = positions.get(edge_id)
            if index is None:
                raise IntegrityError(f"Edge not found: {observed.from_} -> {observed.to} ({observed.edge_type})")
            current = graph.edges[index]
            base = current.weight if current.weight is not None else DEFAULT_WEIGHT
            graph.edges[index] = current.model_copy(update={"weight": update_weight(base, combine_weights(weights))})
            reinforced.append(graph.edges[index])

        await self._persist(graph, previous, f"reinforceEdges({len(reinforced)})")

        self.emit("afterReinforceEdges", {"edges": reinforced})
        return reinforced

    async def delete_edges(self, edges: Sequence[EdgeInput]) -> int:
        """
        Delete edges by ``(from, to, edgeType)``; unknown edges are ignored.

        Returns:
            Number of edges actually removed
        """
        targets: set[str] = set()
        for raw in edges:
            validator.validate_edge_properties(raw)
            targets.add(coerce(Edge, raw).edge_id)

        self.emit("beforeDeleteEdges", {"edges": list(edges)})

        graph = await self.storage.load()
        previous = graph.model_copy(deep=True)
        graph.edges = [e for e in graph.edges if e.edge_id not in targets]
        deleted_count = len(previous.edges) - len(graph.edges)

        await self._persist(graph, previous, f"deleteEdges({deleted_count})")

        self.emit("afterDeleteEdges", {"deletedCount": deleted_count})
        return deleted_count

    async def get_edges(self, edge_filter: EdgeFilter | Mapping[str, Any] | None = None) -> list[Edge]:
        """Return all edges, or those matching every field set on *edge_filter*."""
        graph = await self.storage.load()
        if edge_filter is None:
            return graph.edges
        criteria = coerce(EdgeFilter, edge_filter)
        return [e for e in graph.edges if criteria.matches(e)]

    async def get_edges_by_ids(self, edge_ids: Sequence[str]) -> list[Edge]:
        """Point lookup by ``from|to|edgeType`` identifiers via the storage index."""
        return await self.storage.load_edges_by_ids(edge_ids)
