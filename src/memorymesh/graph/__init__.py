"""
Graph rules for MemoryMesh.

Provides the structural/referential validator used as a pre-save gate and
the edge weight helpers shared by the validator and the edge manager.
"""

from . import validator
from .weights import DEFAULT_WEIGHT, combine_weights, ensure_weight, update_weight, validate_weight

__all__ = [
    "DEFAULT_WEIGHT",
    "combine_weights",
    "ensure_weight",
    "update_weight",
    "validate_weight",
    "validator",
]
