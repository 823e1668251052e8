#!/usr/bin/env python3
"""Graph model builder.

Merges modules and raw edges into a GraphModel. Parallel edges between the
same ordered pair collapse into one MergedEdge:

- labels are unioned in order of first appearance, empties dropped
- if any raw edge has exception style the merged edge is an exception edge;
  labels of plain edges on the same pair are kept in the union

Output depends only on input content and order.
"""
import logging
from typing import Iterable

from ..ivr_script.model import Edge, EdgeStyle, Module
from .model import GraphModel, MergedEdge, NodeEntry

logger = logging.getLogger(__name__)


def node_label(module: Module) -> str:
    """Build the display label of a module: type on the first line, name on the last."""
    label = f"{module.type}\n{module.display_name}"
    return label.replace('"', "")


def build_nodes(modules: Iterable[Module]) -> tuple[NodeEntry, ...]:
    """Build one NodeEntry per distinct module id, first occurrence wins."""
    nodes: dict[str, NodeEntry] = {}
    for module in modules:
        if module.id in nodes:
            logger.warning(f"Duplicate module id {module.id!r} ({module.type}); keeping first occurrence")
            continue
        nodes[module.id] = NodeEntry(id=module.id, type=module.type, label=node_label(module))
    return tuple(nodes.values())


def merge_edges(edges: Iterable[Edge]) -> tuple[MergedEdge, ...]:
    """Collapse raw edges into one MergedEdge per (source, target) pair."""
    labels: dict[tuple[str, str], list[str]] = {}
    exception_pairs: set[tuple[str, str]] = set()

    for edge in edges:
        pair = (edge.source, edge.target)
        pair_labels = labels.setdefault(pair, [])
        if edge.label and edge.label not in pair_labels:
            pair_labels.append(edge.label)
        if edge.style == EdgeStyle.EXCEPTION:
            exception_pairs.add(pair)

    return tuple(
        MergedEdge(
            source=source,
            target=target,
            labels=tuple(pair_labels),
            exception=(source, target) in exception_pairs,
        )
        for (source, target), pair_labels in labels.items()
    )


def build_graph(modules: Iterable[Module], edges: Iterable[Edge]) -> GraphModel:
    """Build the deduplicated graph model.

    Args:
        modules: Modules in document order
        edges: Raw edges from the edge deriver

    Returns:
        GraphModel with nodes in module order and edges in first-appearance order
    """
    graph = GraphModel(nodes=build_nodes(modules), edges=merge_edges(edges))
    logger.debug(f"Built graph with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
    return graph
