"""Edge weight helpers.

A weight expresses relationship strength in [0.0, 1.0]. Edges persisted
without one are treated as full strength.
"""

import math
from collections.abc import Iterable
from typing import Any

from ..errors import IntegrityError
from ..models.graph import Edge

DEFAULT_WEIGHT = 1.0
WEIGHT_RANGE_MESSAGE = "Edge weight must be between 0 and 1"


def validate_weight(weight: Any) -> None:
    """Raise IntegrityError unless *weight* is a real number in [0, 1]."""
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        raise IntegrityError(WEIGHT_RANGE_MESSAGE)
    if math.isnan(weight) or not 0 <= weight <= 1:
        raise IntegrityError(WEIGHT_RANGE_MESSAGE)


def ensure_weight(edge: Edge) -> Edge:
    """Return *edge* with the default weight filled in; the input is not mutated."""
    if edge.weight is not None:
        return edge.model_copy()
    return edge.model_copy(update={"weight": DEFAULT_WEIGHT})


def update_weight(current: float, new_evidence: float) -> float:
    """Blend a new observation into an existing weight (simple mean)."""
    validate_weight(new_evidence)
    return (current + new_evidence) / 2


def combine_weights(weights: Iterable[float]) -> float:
    """Strongest of several weights; an empty input counts as full strength."""
    return max(weights, default=DEFAULT_WEIGHT)
