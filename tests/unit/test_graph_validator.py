"""Unit tests for graph structural and referential checks."""

import math

import pytest

from memorymesh.errors import IntegrityError
from memorymesh.graph import validator
from memorymesh.models.graph import Edge, Graph, Node


@pytest.fixture
def graph():
    return Graph(
        nodes=[Node(name="a", node_type="t"), Node(name="b", node_type="t")],
        edges=[Edge(from_="a", to="b", edge_type="knows", weight=1.0)],
    )


class TestNodeChecks:
    def test_node_exists(self, graph):
        validator.validate_node_exists(graph, "a")

        with pytest.raises(IntegrityError, match="Node not found: zed"):
            validator.validate_node_exists(graph, "zed")

    def test_node_does_not_exist(self, graph):
        validator.validate_node_does_not_exist(graph, "zed")

        with pytest.raises(IntegrityError, match="Node already exists: a"):
            validator.validate_node_does_not_exist(graph, "a")

    def test_node_exists_on_raw_graph(self):
        raw = {"nodes": [{"name": "a", "nodeType": "t", "metadata": []}], "edges": []}

        validator.validate_node_exists(raw, "a")
        with pytest.raises(IntegrityError):
            validator.validate_node_exists(raw, "b")

    @pytest.mark.parametrize(
        "node, message",
        [
            ({"nodeType": "t", "metadata": []}, "Node must have a 'name' property"),
            ({"name": "", "nodeType": "t", "metadata": []}, "Node must have a 'name' property"),
            ({"name": "a", "metadata": []}, "Node must have a 'nodeType' property"),
            ({"name": "a", "nodeType": "t"}, "Node must have a 'metadata' array"),
            ({"name": "a", "nodeType": "t", "metadata": "oops"}, "Node must have a 'metadata' array"),
        ],
    )
    def test_node_properties_rejects(self, node, message):
        with pytest.raises(IntegrityError, match=message):
            validator.validate_node_properties(node)

    def test_node_properties_accepts_model_and_mapping(self):
        validator.validate_node_properties(Node(name="a", node_type="t"))
        validator.validate_node_properties({"name": "a", "nodeType": "t", "metadata": []})
        validator.validate_node_properties({"name": "a", "node_type": "t", "metadata": ["x"]})

    def test_node_name_property_for_update(self):
        validator.validate_node_name_property({"name": "a"})

        with pytest.raises(IntegrityError, match="Node must have a 'name' property for updating"):
            validator.validate_node_name_property({"nodeType": "t"})

    def test_node_names_array(self):
        validator.validate_node_names_array([])
        validator.validate_node_names_array(["a", "b"])
        validator.validate_node_names_array(("a",))

    def test_node_names_array_rejects_string(self):
        with pytest.raises(IntegrityError, match="nodeNames must be an array"):
            validator.validate_node_names_array("a")

    def test_node_names_array_custom_field_name(self):
        with pytest.raises(IntegrityError, match="names must be an array"):
            validator.validate_node_names_array(None, field="names")

    def test_node_names_array_rejects_non_strings(self):
        with pytest.raises(IntegrityError, match="All node names must be strings"):
            validator.validate_node_names_array(["a", 1])


class TestEdgeChecks:
    @pytest.mark.parametrize(
        "edge, message",
        [
            ({"to": "b", "edgeType": "x"}, "Edge must have a 'from' property"),
            ({"from": "a", "edgeType": "x"}, "Edge must have a 'to' property"),
            ({"from": "a", "to": "b"}, "Edge must have an 'edgeType' property"),
            ({"from": "a", "to": "b", "edgeType": "x", "weight": 1.5}, "Edge weight must be between 0 and 1"),
        ],
    )
    def test_edge_properties_rejects(self, edge, message):
        with pytest.raises(IntegrityError, match=message):
            validator.validate_edge_properties(edge)

    def test_edge_properties_weight_optional(self):
        validator.validate_edge_properties({"from": "a", "to": "b", "edgeType": "x"})
        validator.validate_edge_properties(Edge(from_="a", to="b", edge_type="x", weight=0))

    def test_duplicate_edge_rejected(self, graph):
        with pytest.raises(IntegrityError, match=r"Edge already exists: a -> b \(knows\)"):
            validator.validate_edge_uniqueness(graph, Edge(from_="a", to="b", edge_type="knows"))

    def test_same_endpoints_different_type_allowed(self, graph):
        validator.validate_edge_uniqueness(graph, Edge(from_="a", to="b", edge_type="likes"))

    def test_reverse_direction_allowed(self, graph):
        validator.validate_edge_uniqueness(graph, {"from": "b", "to": "a", "edgeType": "knows"})

    def test_edge_references(self, graph):
        validator.validate_edge_references(graph, [Edge(from_="b", to="a", edge_type="x")])

        with pytest.raises(IntegrityError, match="Node not found: c"):
            validator.validate_edge_references(graph, [Edge(from_="a", to="c", edge_type="x")])

    def test_edge_references_reports_first_missing(self, graph):
        edges = [Edge(from_="x", to="y", edge_type="e"), Edge(from_="a", to="z", edge_type="e")]

        with pytest.raises(IntegrityError, match="Node not found: x"):
            validator.validate_edge_references(graph, edges)


class TestWeightCheck:
    @pytest.mark.parametrize("weight", [0, 0.0, 0.5, 1, 1.0])
    def test_accepts_range(self, weight):
        validator.validate_weight(weight)

    @pytest.mark.parametrize("weight", [-0.1, 1.01, math.nan, "0.5", None, True])
    def test_rejects(self, weight):
        with pytest.raises(IntegrityError, match="Edge weight must be between 0 and 1"):
            validator.validate_weight(weight)


class TestGraphStructure:
    def test_valid_graph(self, graph):
        validator.validate_graph_structure(graph)

    def test_missing_nodes_array(self):
        with pytest.raises(IntegrityError, match="Graph must have a 'nodes' array"):
            validator.validate_graph_structure({"edges": []})

    def test_missing_edges_array(self):
        with pytest.raises(IntegrityError, match="Graph must have an 'edges' array"):
            validator.validate_graph_structure({"nodes": []})

    def test_invalid_node(self):
        raw = {"nodes": [{"name": "a", "metadata": []}], "edges": []}

        with pytest.raises(IntegrityError, match="nodeType"):
            validator.validate_graph_structure(raw)

    def test_dangling_edge(self):
        raw = {
            "nodes": [{"name": "a", "nodeType": "t", "metadata": []}],
            "edges": [{"from": "a", "to": "ghost", "edgeType": "haunts"}],
        }

        with pytest.raises(IntegrityError, match="Node not found: ghost"):
            validator.validate_graph_structure(raw)
