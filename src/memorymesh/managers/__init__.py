"""Graph managers built on GraphStorage, EventNotifier and TransactionCoordinator."""

from .base import GraphManager
from .edges import EdgeManager
from .knowledge_graph import KnowledgeGraphManager
from .metadata import MetadataManager
from .nodes import NodeManager
from .search import SearchManager

__all__ = [
    "EdgeManager",
    "GraphManager",
    "KnowledgeGraphManager",
    "MetadataManager",
    "NodeManager",
    "SearchManager",
]
