"""Shared plumbing for the graph managers."""

import logging
from collections.abc import Mapping
from functools import partial
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import IntegrityError
from ..events import EventNotifier
from ..models.graph import Graph
from ..storage.base import GraphStorage
from ..transactions import TransactionCoordinator

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce(model: type[ModelT], value: ModelT | Mapping[str, Any]) -> ModelT:
    """Return a private copy of *value* as *model*, mapping type errors to IntegrityError."""
    if isinstance(value, model):
        return value.model_copy(deep=True)
    try:
        return model.model_validate(value)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise IntegrityError(f"Invalid {model.__name__} '{location}': {first['msg']}") from e


class GraphManager:
    """
    Base for managers that read and mutate the persisted graph.

    Mutations follow one sequence: validate against a freshly loaded
    snapshot, mutate, save, and, when a transaction is active, register a
    compensation that restores the pre-mutation snapshot.
    """

    def __init__(
        self,
        storage: GraphStorage,
        events: EventNotifier | None = None,
        coordinator: TransactionCoordinator | None = None,
    ):
        self.storage = storage
        self.events = events if events is not None else EventNotifier()
        self.coordinator = coordinator

    def emit(self, event: str, payload: dict[str, Any] | None = None) -> bool:
        return self.events.emit(event, payload if payload is not None else {})

    async def _persist(self, graph: Graph, previous: Graph, label: str) -> None:
        """Save *graph*; inside a transaction, register restoring *previous* as its undo."""
        await self.storage.save(graph)
        if self.coordinator is not None and self.coordinator.is_in_transaction():
            self.coordinator.add_rollback_action(partial(self.storage.save, previous), label)
            logger.debug("Registered rollback for %s", label)
