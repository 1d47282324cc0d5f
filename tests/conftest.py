import os
import sys

import pytest

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

from memorymesh.events import EventNotifier  # noqa: E402
from memorymesh.models.graph import Edge, Graph, Node  # noqa: E402
from memorymesh.storage.jsonl_storage import JsonLineStorage  # noqa: E402


@pytest.fixture
def memory_path(tmp_path):
    """Path to a memory file inside a not-yet-created directory."""
    return tmp_path / "memory" / "memory.jsonl"


@pytest.fixture
def storage(memory_path):
    return JsonLineStorage(memory_path)


@pytest.fixture
def events():
    return EventNotifier()


@pytest.fixture
def sample_graph():
    """alice -knows-> bob -works_with-> carol, plus an unconnected dave."""
    return Graph(
        nodes=[
            Node(name="alice", node_type="person", metadata=["likes tea"]),
            Node(name="bob", node_type="person", metadata=["plays chess"]),
            Node(name="carol", node_type="engineer", metadata=[]),
            Node(name="dave", node_type="robot", metadata=["beeps"]),
        ],
        edges=[
            Edge(from_="alice", to="bob", edge_type="knows", weight=0.8),
            Edge(from_="bob", to="carol", edge_type="works_with", weight=1.0),
        ],
    )


@pytest.fixture
async def seeded_storage(storage, sample_graph):
    await storage.save(sample_graph)
    return storage
