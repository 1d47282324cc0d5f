"""Graph storage backends."""

from .base import GraphStorage
from .factory import create_graph_storage
from .jsonl_storage import JsonLineStorage

__all__ = ["GraphStorage", "JsonLineStorage", "create_graph_storage"]
