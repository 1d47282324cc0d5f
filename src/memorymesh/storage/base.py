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
Abstract storage interface for the knowledge graph.

Backends load and save the graph wholesale; there is no partial write path.
Higher-level managers and the transaction coordinator depend only on this
interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models.graph import Edge, Graph


class GraphStorage(ABC):
    """Wholesale load/save contract for a persisted graph snapshot."""

    @abstractmethod
    async def load(self) -> Graph:
        """Load a fresh snapshot of the full graph."""
        ...

    @abstractmethod
    async def save(self, graph: Graph) -> None:
        """Replace the persisted graph with *graph*."""
        ...

    @abstractmethod
    async def load_edges_by_ids(self, ids: Sequence[str]) -> list[Edge]:
        """Return the persisted edges whose ``from|to|edgeType`` id is in *ids*.

        Unknown ids are omitted rather than reported.
        """
        ...
