"""
MemoryMesh graph core.

Persistence, validation, transactions and notifications for the knowledge
graph served over MCP. The typical entry point is KnowledgeGraphManager.
"""

__version__ = "0.1.0"

from .errors import (
    CompensationError,
    EventDispatchError,
    GraphOperationError,
    IntegrityError,
    MemoryMeshError,
    StorageError,
    StorageInitializationError,
    TransactionError,
    TransactionStateError,
)
from .events import EventNotifier
from .managers import KnowledgeGraphManager
from .models import Edge, Graph, Node
from .storage import GraphStorage, JsonLineStorage, create_graph_storage
from .transactions import TransactionCoordinator, TransactionState

__all__ = [
    "CompensationError",
    "Edge",
    "EventDispatchError",
    "EventNotifier",
    "Graph",
    "GraphOperationError",
    "GraphStorage",
    "IntegrityError",
    "JsonLineStorage",
    "KnowledgeGraphManager",
    "MemoryMeshError",
    "Node",
    "StorageError",
    "StorageInitializationError",
    "TransactionCoordinator",
    "TransactionError",
    "TransactionState",
    "TransactionStateError",
    "create_graph_storage",
]
