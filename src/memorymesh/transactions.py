"""
Transaction coordination for graph mutations.

The storage layer has no atomic multi-step write, so a transaction here is a
logical boundary plus an undo log: callers persist as they go and register
compensating actions; commit discards the undo log, rollback replays it in
reverse order.

    async with coordinator.transaction() as graph:
        ...mutate graph, save, register compensations...
"""

import enum
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, NamedTuple, TypeVar

from .errors import CompensationError, EventDispatchError, TransactionError, TransactionStateError, describe_error
from .events import EventNotifier
from .models.graph import Graph
from .storage.base import GraphStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

RollbackAction = Callable[[], Awaitable[Any] | Any]


class TransactionState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class _Compensation(NamedTuple):
    action: RollbackAction
    label: str


async def _call(fn: Callable[[], Any]) -> Any:
    """Invoke a sync or async zero-argument callable and return its result."""
    result = fn()
    if inspect.isawaitable(result):
        result = await result
    return result


class TransactionCoordinator:
    """
    Begin/commit/rollback state machine over a GraphStorage snapshot.

    One coordinator allows a single active transaction; a second
    ``begin_transaction()`` while one is active fails immediately.
    """

    def __init__(self, storage: GraphStorage, events: EventNotifier | None = None):
        self.storage = storage
        self.events = events if events is not None else EventNotifier()
        self._state = TransactionState.IDLE
        self._graph: Graph | None = None
        self._rollback_actions: list[_Compensation] = []

    @property
    def state(self) -> TransactionState:
        return self._state

    def is_in_transaction(self) -> bool:
        return self._state is TransactionState.ACTIVE

    def get_current_graph(self) -> Graph | None:
        """Working snapshot of the active transaction (None when idle)."""
        return self._graph

    async def begin_transaction(self) -> None:
        """
        Start a transaction and load a fresh working snapshot.

        Raises:
            TransactionStateError: a transaction is already active
            TransactionError: the snapshot could not be loaded
        """
        if self.is_in_transaction():
            raise TransactionStateError("Transaction already in progress")

        self._notify("beforeBeginTransaction", {})
        try:
            graph = await self.storage.load()
        except Exception as e:
            raise TransactionError(f"Failed to begin transaction: {describe_error(e)}") from e

        self._graph = graph
        self._rollback_actions = []
        self._state = TransactionState.ACTIVE
        logger.debug("Transaction started (%d nodes, %d edges)", len(graph.nodes), len(graph.edges))
        self._notify("afterBeginTransaction", {})

    def add_rollback_action(self, action: RollbackAction, label: str) -> None:
        """Register a compensation to run if the transaction is rolled back."""
        if not self.is_in_transaction():
            raise TransactionStateError("No transaction in progress")
        if not callable(action):
            raise TypeError(f"Rollback action must be callable, got {type(action).__name__}")
        self._rollback_actions.append(_Compensation(action, label))

    async def commit(self) -> None:
        """
        Close the transaction and discard its compensations.

        Does not save: changes were persisted by the operations that made them.
        """
        if not self.is_in_transaction():
            raise TransactionStateError("No transaction to commit")

        self._notify("beforeCommit", {})
        discarded = len(self._rollback_actions)
        self._close()
        logger.info(f"Transaction committed ({discarded} rollback actions discarded)")
        self._notify("afterCommit", {})

    async def rollback(self) -> list[CompensationError]:
        """
        Run every compensation, newest first, then close the transaction.

        A failing compensation is logged and collected; the remaining ones
        still run and the transaction still closes.

        Returns:
            One CompensationError per failed action, in execution order
        """
        if not self.is_in_transaction():
            raise TransactionStateError("No transaction to rollback")

        actions = list(reversed(self._rollback_actions))
        failures: list[CompensationError] = []
        try:
            self._notify("beforeRollback", {"actions": [c.label for c in actions]})
            for compensation in actions:
                try:
                    await _call(compensation.action)
                except Exception as e:
                    failure = CompensationError(compensation.label, e)
                    logger.error(str(failure))
                    failures.append(failure)
        finally:
            self._close()

        logger.info(f"Transaction rolled back ({len(actions)} actions, {len(failures)} failed)")
        self._notify("afterRollback", {})
        return failures

    async def with_transaction(self, operation: Callable[[], Awaitable[T] | T]) -> T:
        """
        Run *operation* inside a transaction.

        Commits and returns the operation's result on success; on failure
        rolls back and re-raises the original exception.
        """
        async with self.transaction():
            return await _call(operation)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Graph]:
        """
        Context-manager form of :meth:`with_transaction` yielding the working snapshot.

        Cancellation (e.g. an ``asyncio.wait_for`` timeout around the block)
        rolls back like any other failure.
        """
        await self.begin_transaction()
        try:
            yield self._graph
        except BaseException:
            await self.rollback()
            raise
        await self.commit()

    def _notify(self, event: str, payload: dict[str, Any]) -> None:
        """Emit a lifecycle event; listener failures are logged, never propagated."""
        try:
            self.events.emit(event, payload)
        except EventDispatchError as e:
            logger.warning("Transaction listener for '%s' raised (non-fatal): %s", event, e)

    def _close(self) -> None:
        self._rollback_actions.clear()
        self._graph = None
        self._state = TransactionState.IDLE
