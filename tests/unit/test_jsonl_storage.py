"""Unit tests for the JSON Lines graph storage backend."""

import json
from unittest.mock import patch

import aiofiles.os
import pytest

from memorymesh.errors import StorageError, StorageInitializationError
from memorymesh.models.graph import Edge, Graph, Node
from memorymesh.storage.jsonl_storage import JsonLineStorage


class TestInitialization:
    """Directory and file creation."""

    @pytest.mark.asyncio
    async def test_load_creates_directory_and_file(self, storage, memory_path):
        assert not memory_path.parent.exists()

        graph = await storage.load()

        assert memory_path.exists()
        assert memory_path.read_text() == ""
        assert graph.nodes == []
        assert graph.edges == []

    @pytest.mark.asyncio
    async def test_initialization_runs_once(self, storage):
        """Two loads create the directory at most once."""
        with patch.object(aiofiles.os, "makedirs", wraps=aiofiles.os.makedirs) as makedirs:
            await storage.load()
            await storage.load()

        assert makedirs.call_count == 1

    @pytest.mark.asyncio
    async def test_missing_file_after_init_loads_empty_graph(self, storage, memory_path):
        await storage.ensure_ready()
        memory_path.unlink()

        graph = await storage.load()

        assert graph == Graph()

    @pytest.mark.asyncio
    async def test_initialization_failure(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("occupied")
        storage = JsonLineStorage(blocker / "memory.jsonl")

        with pytest.raises(StorageInitializationError, match="Failed to initialize storage"):
            await storage.load()

    @pytest.mark.asyncio
    async def test_initialization_error_is_storage_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        storage = JsonLineStorage(blocker / "memory.jsonl")

        with pytest.raises(StorageError):
            await storage.ensure_ready()


class TestLoad:
    """Decoding the memory file."""

    @pytest.mark.asyncio
    async def test_empty_file(self, storage, memory_path):
        memory_path.parent.mkdir(parents=True)
        memory_path.write_text("")

        graph = await storage.load()

        assert graph.nodes == []
        assert graph.edges == []

    @pytest.mark.asyncio
    async def test_skips_malformed_lines(self, storage, memory_path):
        memory_path.parent.mkdir(parents=True)
        memory_path.write_text(
            '{"type":"node","name":"a","nodeType":"t","metadata":[]}\n'
            "{not json\n"
            '{"type":"edge","from":"a","to":"a","edgeType":"self"}\n'
        )

        graph = await storage.load()

        assert [n.name for n in graph.nodes] == ["a"]
        assert len(graph.edges) == 1
        assert graph.edges[0].edge_type == "self"

    @pytest.mark.asyncio
    async def test_skips_unknown_record_types_and_bad_shapes(self, storage, memory_path):
        memory_path.parent.mkdir(parents=True)
        memory_path.write_text(
            '{"type":"widget","name":"w"}\n'
            '{"type":"node","name":"a","nodeType":"t","metadata":"not-a-list"}\n'
            '{"name":"no-type","nodeType":"t","metadata":[]}\n'
            '{"type":"node","name":"b","nodeType":"t","metadata":[]}\n'
        )

        graph = await storage.load()

        assert [n.name for n in graph.nodes] == ["b"]

    @pytest.mark.asyncio
    async def test_ignores_blank_lines(self, storage, memory_path):
        memory_path.parent.mkdir(parents=True)
        memory_path.write_text('\n\n{"type":"node","name":"a","nodeType":"t","metadata":[]}\n   \n')

        graph = await storage.load()

        assert len(graph.nodes) == 1

    @pytest.mark.asyncio
    async def test_edge_without_weight_loads_as_none(self, storage, memory_path):
        memory_path.parent.mkdir(parents=True)
        memory_path.write_text('{"type":"edge","from":"a","to":"b","edgeType":"knows"}')

        graph = await storage.load()

        assert graph.edges[0].weight is None

    @pytest.mark.asyncio
    async def test_invalid_bytes_only_lose_their_line(self, storage, memory_path):
        await storage.ensure_ready()
        memory_path.write_bytes(
            b'{"type":"node","name":"good","nodeType":"t","metadata":[]}\n'
            b"\xff\xfe garbage\n"
            b'{"type":"edge","from":"good","to":"good","edgeType":"self"}\n'
        )

        graph = await storage.load()

        assert [n.name for n in graph.nodes] == ["good"]
        assert [e.edge_id for e in graph.edges] == ["good|good|self"]

    @pytest.mark.asyncio
    async def test_read_failure_raises_storage_error(self, storage):
        await storage.ensure_ready()

        with patch("memorymesh.storage.jsonl_storage.aiofiles.open", side_effect=PermissionError("denied")):
            with pytest.raises(StorageError, match="Failed to load graph"):
                await storage.load()


class TestSave:
    """Encoding and writing the memory file."""

    @pytest.mark.asyncio
    async def test_round_trip(self, storage, sample_graph):
        await storage.save(sample_graph)
        loaded = await storage.load()

        assert loaded.nodes == sample_graph.nodes
        assert loaded.edges == sample_graph.edges

    @pytest.mark.asyncio
    async def test_single_node_round_trip(self, storage):
        await storage.save(Graph(nodes=[Node(name="n1", node_type="t", metadata=[])]))

        loaded = await storage.load()

        assert [n.name for n in loaded.nodes] == ["n1"]

    @pytest.mark.asyncio
    async def test_round_trip_keeps_unicode_line_separators(self, storage):
        graph = Graph(
            nodes=[
                Node(name="n1", node_type="t", metadata=["a\u2028b", "c\u2029d"]),
                Node(name="n2", node_type="t", metadata=["x\x85y"]),
            ],
            edges=[Edge(from_="n1", to="n2", edge_type="next\u2028line")],
        )

        await storage.save(graph)
        loaded = await storage.load()

        assert loaded.nodes == graph.nodes
        assert [e.edge_type for e in loaded.edges] == ["next\u2028line"]

    @pytest.mark.asyncio
    async def test_writes_nodes_then_edges_with_wire_names(self, storage, memory_path):
        graph = Graph(
            nodes=[Node(name="a", node_type="t", metadata=["m"]), Node(name="b", node_type="t")],
            edges=[Edge(from_="a", to="b", edge_type="knows", weight=0.5)],
        )

        await storage.save(graph)

        lines = memory_path.read_text().split("\n")
        assert len(lines) == 3
        assert json.loads(lines[0]) == {"type": "node", "name": "a", "nodeType": "t", "metadata": ["m"]}
        assert json.loads(lines[2]) == {"type": "edge", "from": "a", "to": "b", "edgeType": "knows", "weight": 0.5}

    @pytest.mark.asyncio
    async def test_omits_missing_weight(self, storage, memory_path):
        await storage.save(Graph(edges=[Edge(from_="a", to="b", edge_type="knows")]))

        assert "weight" not in json.loads(memory_path.read_text())

    @pytest.mark.asyncio
    async def test_empty_graph_writes_empty_file(self, storage, memory_path, sample_graph):
        await storage.save(sample_graph)
        await storage.save(Graph())

        assert memory_path.read_text() == ""

    @pytest.mark.asyncio
    async def test_atomic_writes_replace_file(self, memory_path, sample_graph):
        storage = JsonLineStorage(memory_path, atomic_writes=True)

        with patch.object(aiofiles.os, "replace", wraps=aiofiles.os.replace) as replace:
            await storage.save(sample_graph)

        replace.assert_called_once()
        assert not (memory_path.parent / f".{memory_path.name}.tmp").exists()
        loaded = await storage.load()
        assert loaded.nodes == sample_graph.nodes

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, storage, sample_graph):
        await storage.ensure_ready()

        with patch("memorymesh.storage.jsonl_storage.aiofiles.open", side_effect=PermissionError("read-only")):
            with pytest.raises(StorageError, match="Failed to save graph"):
                await storage.save(sample_graph)


class TestEdgeLookup:
    """Edge index and id-based lookups."""

    @pytest.mark.asyncio
    async def test_load_edges_by_ids(self, seeded_storage):
        edges = await seeded_storage.load_edges_by_ids(["alice|bob|knows"])

        assert len(edges) == 1
        assert edges[0].from_ == "alice"
        assert edges[0].to == "bob"
        assert edges[0].edge_type == "knows"

    @pytest.mark.asyncio
    async def test_load_edges_by_ids_preserves_request_order_and_drops_unknown(self, seeded_storage):
        edges = await seeded_storage.load_edges_by_ids(["bob|carol|works_with", "x|y|z", "alice|bob|knows"])

        assert [e.edge_id for e in edges] == ["bob|carol|works_with", "alice|bob|knows"]

    @pytest.mark.asyncio
    async def test_load_edges_by_ids_sees_external_changes(self, seeded_storage, memory_path):
        await seeded_storage.load()
        memory_path.write_text('{"type":"edge","from":"x","to":"y","edgeType":"z"}')

        edges = await seeded_storage.load_edges_by_ids(["alice|bob|knows", "x|y|z"])

        assert [e.edge_id for e in edges] == ["x|y|z"]

    @pytest.mark.asyncio
    async def test_get_edge_uses_latest_index(self, seeded_storage):
        assert seeded_storage.get_edge("alice|bob|knows") is None

        await seeded_storage.load()

        assert seeded_storage.get_edge("alice|bob|knows").weight == 0.8
        assert seeded_storage.get_edge("missing|edge|id") is None
