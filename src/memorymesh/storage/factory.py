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
Storage backend factory for MemoryMesh.

Creates the JSON Lines storage backend from StorageSettings. The backend
initializes lazily on first load/save, so nothing touches the filesystem here.
"""

import logging

from ..config import StorageSettings
from .base import GraphStorage
from .jsonl_storage import JsonLineStorage

logger = logging.getLogger(__name__)


def create_graph_storage(config: StorageSettings | None = None) -> GraphStorage:
    """
    Create the JSON Lines storage backend.

    Args:
        config: Storage settings; defaults to the process-wide settings

    Returns:
        Uninitialized JsonLineStorage instance
    """
    if config is None:
        from ..config import settings

        config = settings.storage

    storage = JsonLineStorage(
        memory_path=config.memory_path,
        encoding=config.encoding,
        atomic_writes=config.atomic_writes,
    )
    logger.info(f"Using JSON Lines graph storage at {config.memory_path} (atomic_writes={config.atomic_writes})")
    return storage
