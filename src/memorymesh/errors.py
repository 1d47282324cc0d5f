"""Exception hierarchy for the graph persistence and transaction core.

Every failure the core surfaces derives from :class:`MemoryMeshError`, so
callers in the tool layer can catch one type and still branch on the
specific subclass when they need to.
"""

from typing import Any


def describe_error(error: BaseException) -> str:
    """Return a non-empty, uniform description of *error*.

    ``ValueError("bad")`` -> ``"ValueError: bad"``; an exception raised
    without a message is described by its type name alone.
    """
    message = str(error).strip()
    name = type(error).__name__
    return f"{name}: {message}" if message else name


class MemoryMeshError(Exception):
    """Base class for all graph core errors."""


class StorageError(MemoryMeshError):
    """The backing file could not be read or written."""


class StorageInitializationError(StorageError):
    """The backing directory or file could not be created."""


class IntegrityError(MemoryMeshError):
    """A structural or referential graph check failed."""


class TransactionError(MemoryMeshError):
    """A transaction could not be started or completed."""


class TransactionStateError(TransactionError):
    """begin/commit/rollback was invoked in the wrong state."""


class GraphOperationError(MemoryMeshError):
    """A manager-level read operation failed."""


class CompensationError(MemoryMeshError):
    """A single rollback action raised while a transaction was rolled back."""

    def __init__(self, label: str, cause: BaseException):
        self.label = label
        self.cause = cause
        super().__init__(f"Rollback action '{label}' failed: {describe_error(cause)}")


class EventDispatchError(MemoryMeshError):
    """One or more listeners raised while an event was being emitted."""

    def __init__(self, event: str, errors: list[Exception], payload: Any = None):
        self.event = event
        self.errors = list(errors)
        self.payload = payload
        details = "; ".join(describe_error(e) for e in self.errors)
        super().__init__(f"Multiple errors occurred while emitting '{event}': {details}")
