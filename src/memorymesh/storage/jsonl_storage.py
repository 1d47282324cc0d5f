# Copyright 2024 Heinrich Krupp
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
JSON Lines storage backend for the knowledge graph.

Each non-empty line of the memory file is one self-describing record:

    {"type":"node","name":"alice","nodeType":"character","metadata":["brave"]}
    {"type":"edge","from":"alice","to":"bob","edgeType":"knows","weight":0.8}

The whole file is read on every load and rewritten on every save. Lines that
cannot be decoded are skipped so that one corrupt record never makes the rest
of the memory unreadable. Bytes that are invalid in the configured encoding
are replaced, which at worst makes their own line undecodable.

Write safety: with ``atomic_writes`` off (the default) a save truncates and
rewrites the file in place, so a crash mid-write can leave a partial file;
the decode-skip policy then recovers every intact line. With
``atomic_writes`` on, content goes to a sibling temporary file that replaces
the memory file once fully written.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from ..errors import StorageError, StorageInitializationError, describe_error
from ..models.graph import RECORD_ADAPTER, Edge, Graph, Node
from .base import GraphStorage

logger = logging.getLogger(__name__)


class JsonLineStorage(GraphStorage):
    """
    File-backed graph storage using one JSON object per line.

    Also maintains an edge index (``from|to|edgeType`` -> Edge) that is
    rebuilt from scratch on every load and serves id-based point lookups.
    Rebuilding is O(number of edges) per load.
    """

    def __init__(
        self,
        memory_path: str | os.PathLike[str],
        encoding: str = "utf-8",
        atomic_writes: bool = False,
    ):
        """
        Args:
            memory_path: Path to the JSON Lines memory file
            encoding: Text encoding of the file
            atomic_writes: Write via temporary file + replace instead of in place
        """
        self.memory_path = Path(memory_path)
        self.encoding = encoding
        self.atomic_writes = atomic_writes

        self._edge_index: dict[str, Edge] = {}
        self._initialized = False

    async def ensure_ready(self) -> None:
        """Create the memory directory and file if missing (idempotent)."""
        if self._initialized:
            return

        directory = self.memory_path.parent
        try:
            if not await aiofiles.os.path.isdir(directory):
                await aiofiles.os.makedirs(directory, exist_ok=True)
                logger.info(f"Created memory directory {directory}")
            if not await aiofiles.os.path.exists(self.memory_path):
                async with aiofiles.open(self.memory_path, "w", encoding=self.encoding) as f:
                    await f.write("")
                logger.info(f"Created memory file {self.memory_path}")
        except OSError as e:
            raise StorageInitializationError(f"Failed to initialize storage: {describe_error(e)}") from e

        self._initialized = True

    async def load(self) -> Graph:
        """
        Read and decode the full graph.

        Returns:
            Fresh Graph snapshot; empty if the memory file does not exist

        Raises:
            StorageInitializationError: directory/file could not be created
            StorageError: the file exists but could not be read
        """
        await self.ensure_ready()

        try:
            async with aiofiles.open(self.memory_path, encoding=self.encoding, errors="replace") as f:
                content = await f.read()
        except FileNotFoundError:
            logger.debug(f"Memory file {self.memory_path} missing, returning empty graph")
            content = ""
        except OSError as e:
            raise StorageError(f"Failed to load graph from {self.memory_path}: {describe_error(e)}") from e

        graph = self._decode(content)
        self._rebuild_edge_index(graph.edges)
        return graph

    async def save(self, graph: Graph) -> None:
        """
        Overwrite the memory file with *graph* (nodes first, then edges).

        Raises:
            StorageError: the file could not be written
        """
        await self.ensure_ready()
        content = self._encode(graph)

        try:
            if self.atomic_writes:
                await self._replace_file(content)
            else:
                async with aiofiles.open(self.memory_path, "w", encoding=self.encoding) as f:
                    await f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to save graph to {self.memory_path}: {describe_error(e)}") from e

        logger.debug(f"Saved {len(graph.nodes)} nodes and {len(graph.edges)} edges to {self.memory_path}")

    async def load_edges_by_ids(self, ids: Sequence[str]) -> list[Edge]:
        """Reload the graph and return indexed edges matching *ids*, in *ids* order."""
        await self.load()
        return [self._edge_index[edge_id] for edge_id in ids if edge_id in self._edge_index]

    def get_edge(self, edge_id: str) -> Edge | None:
        """Look up an edge in the index built by the most recent load."""
        return self._edge_index.get(edge_id)

    # ── Codec ───────────────────────────────────────────────────────────

    @staticmethod
    def _decode(content: str) -> Graph:
        graph = Graph()
        for line_no, line in enumerate(content.split("\n"), start=1):
            if not line.strip():
                continue
            try:
                record = RECORD_ADAPTER.validate_json(line)
            except ValidationError as e:
                logger.debug("Skipping undecodable line %d: %s", line_no, e.errors()[0]["msg"])
                continue

            if isinstance(record, Node):
                graph.nodes.append(record)
            else:
                graph.edges.append(record)
        return graph

    @staticmethod
    def _encode(graph: Graph) -> str:
        records = [*graph.nodes, *graph.edges]
        return "\n".join(record.model_dump_json(by_alias=True, exclude_none=True) for record in records)

    def _rebuild_edge_index(self, edges: list[Edge]) -> None:
        self._edge_index.clear()
        for edge in edges:
            self._edge_index[edge.edge_id] = edge

    async def _replace_file(self, content: str) -> None:
        tmp_path = self.memory_path.with_name(f".{self.memory_path.name}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding=self.encoding) as f:
                await f.write(content)
                await f.flush()
            await aiofiles.os.replace(tmp_path, self.memory_path)
        except OSError:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise
