"""Tests for edge weight helpers."""

import pytest

from memorymesh.errors import IntegrityError
from memorymesh.graph.weights import DEFAULT_WEIGHT, combine_weights, ensure_weight, update_weight
from memorymesh.models.graph import Edge


def test_ensure_weight_fills_default():
    edge = Edge(from_="a", to="b", edge_type="knows")

    weighted = ensure_weight(edge)

    assert weighted.weight == DEFAULT_WEIGHT == 1.0
    assert edge.weight is None


def test_ensure_weight_keeps_zero():
    edge = Edge(from_="a", to="b", edge_type="knows", weight=0.0)

    assert ensure_weight(edge).weight == 0.0


def test_ensure_weight_returns_copy():
    edge = Edge(from_="a", to="b", edge_type="knows", weight=0.3)

    weighted = ensure_weight(edge)

    assert weighted == edge
    assert weighted is not edge


def test_update_weight_averages():
    assert update_weight(0.4, 0.8) == pytest.approx(0.6)
    assert update_weight(1.0, 0.0) == pytest.approx(0.5)


def test_update_weight_validates_evidence():
    with pytest.raises(IntegrityError, match="Edge weight must be between 0 and 1"):
        update_weight(0.5, 2.0)


def test_combine_weights_takes_strongest():
    assert combine_weights([0.2, 0.9, 0.5]) == 0.9


def test_combine_weights_empty_is_full_strength():
    assert combine_weights([]) == 1.0
