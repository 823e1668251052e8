#!/usr/bin/env python3
"""Unit tests for the graph model builder (merge/dedup)."""

from ivrflow.services.domain.graph.builder import build_graph, merge_edges, node_label
from ivrflow.services.domain.graph.model import MergedEdge
from ivrflow.services.domain.ivr_script.model import EXCEPTION_LABEL
from utils.converter_helpers import assert_edge_exists, assert_no_duplicate_edges
from utils.factories import EdgeFactory, ExceptionEdgeFactory, ModuleFactory


class TestNodeLabels:
    """Test node label construction."""

    def test_label_is_type_then_name(self):
        module = ModuleFactory(type="menu", display_name="MainMenu")

        assert node_label(module) == "menu\nMainMenu"

    def test_quotes_are_stripped(self):
        module = ModuleFactory(type="play", display_name='Say "hello"')

        assert node_label(module) == "play\nSay hello"

    def test_duplicate_module_id_keeps_first(self):
        first = ModuleFactory(id="A", display_name="First")
        second = ModuleFactory(id="A", display_name="Second")

        graph = build_graph([first, second], [])

        assert len(graph.nodes) == 1
        assert graph.node("A").label.endswith("First")


class TestEdgeMerge:
    """Test collapsing of parallel edges."""

    def test_parallel_edges_collapse(self):
        edges = [EdgeFactory(source="A", target="B") for _ in range(3)]

        merged = merge_edges(edges)

        assert merged == (MergedEdge("A", "B", (), False),)

    def test_labels_union_in_first_appearance_order(self):
        edges = [
            EdgeFactory(source="A", target="B", label="Open"),
            EdgeFactory(source="A", target="B", label=""),
            EdgeFactory(source="A", target="B", label="Holiday"),
            EdgeFactory(source="A", target="B", label="Open"),
        ]

        merged = merge_edges(edges)

        assert merged[0].labels == ("Open", "Holiday")
        assert merged[0].label == "Open/Holiday"

    def test_direction_matters(self):
        merged = merge_edges([EdgeFactory(source="A", target="B"), EdgeFactory(source="B", target="A")])

        assert [(e.source, e.target) for e in merged] == [("A", "B"), ("B", "A")]

    def test_exception_wins_over_plain(self):
        edges = [
            EdgeFactory(source="A", target="C", label="No Match"),
            ExceptionEdgeFactory(source="A", target="C"),
        ]

        merged = merge_edges(edges)

        assert merged[0].exception is True
        assert merged[0].labels == ("No Match", EXCEPTION_LABEL)

    def test_plain_after_exception_keeps_exception_style(self):
        edges = [ExceptionEdgeFactory(source="A", target="C"), EdgeFactory(source="A", target="C")]

        merged = merge_edges(edges)

        assert merged[0].exception is True
        assert merged[0].labels == (EXCEPTION_LABEL,)

    def test_pair_order_is_first_appearance(self):
        edges = [
            EdgeFactory(source="B", target="C"),
            EdgeFactory(source="A", target="B"),
            EdgeFactory(source="B", target="C", label="x"),
        ]

        merged = merge_edges(edges)

        assert [(e.source, e.target) for e in merged] == [("B", "C"), ("A", "B")]


def test_dangling_edge_is_kept():
    graph = build_graph([ModuleFactory(id="A")], [EdgeFactory(source="A", target="ghost")])

    assert_edge_exists(graph, "A", "ghost")
    assert graph.node("ghost") is None


def test_build_is_deterministic():
    modules = [ModuleFactory(id=f"M{i}") for i in range(5)]
    edges = [EdgeFactory(source=f"M{i}", target=f"M{(i + 1) % 5}", label=str(i)) for i in range(5)] * 2

    first = build_graph(modules, edges)
    second = build_graph(modules, edges)

    assert first == second
    assert_no_duplicate_edges(first)
