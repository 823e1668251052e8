#!/usr/bin/env python3
"""Mermaid flowchart emitter.

Mermaid node identifiers must be plain words, so every module id is mapped to
a safe identifier derived from the last line of its label (the display name).
"""
import logging
import re

from ..graph.model import GraphModel, MergedEdge

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")

# Words that terminate or alter a flowchart when used as a bare node id
_RESERVED_IDS = {"end", "graph", "flowchart", "subgraph", "style", "class", "classdef", "click", "linkstyle"}

EXCEPTION_LINK_STYLE = "stroke:red,color:red"


class SafeIdAllocator:
    """Hands out unique Mermaid identifiers for one document."""

    def __init__(self):
        self._by_original: dict[str, str] = {}
        self._used: set[str] = set()

    @staticmethod
    def base_id(text: str) -> str:
        safe = _UNSAFE_CHARS.sub("_", text)
        if not safe:
            return "node"
        if safe.lower() in _RESERVED_IDS:
            safe += "_"
        return safe

    def allocate(self, original_id: str, text: str) -> str:
        """Get the safe id of original_id, deriving it from text on first use."""
        if original_id in self._by_original:
            return self._by_original[original_id]

        candidate = self.base_id(text)
        if candidate in self._used:
            fragment = _UNSAFE_CHARS.sub("", original_id)[:6]
            base = f"{candidate}_{fragment}" if fragment else candidate
            candidate = base
            counter = 2
            while candidate in self._used:
                candidate = f"{base}_{counter}"
                counter += 1

        self._used.add(candidate)
        self._by_original[original_id] = candidate
        return candidate

    def get(self, original_id: str) -> str:
        # Dangling endpoints have no label, derive from the raw id
        return self.allocate(original_id, original_id)


def escape_node_text(text: str) -> str:
    return text.replace('"', "#quot;").replace("\n", "<br/>")


def escape_edge_label(text: str) -> str:
    # Pipes delimit edge labels
    return (
        text.replace("|", "¦")
        .replace("`", "'")
        .replace('"', "'")
        .replace("\n", " ")
    )


def edge_line(edge: MergedEdge, ids: SafeIdAllocator) -> str:
    arrow = "-.->" if edge.exception else "-->"
    label = escape_edge_label(edge.label)
    label_part = f"|{label}|" if label else ""
    return f"    {ids.get(edge.source)} {arrow}{label_part} {ids.get(edge.target)}"


def emit_mermaid(graph: GraphModel) -> str:
    """Serialize a graph model as a top-down Mermaid flowchart.

    Args:
        graph: Graph model

    Returns:
        Mermaid text ending with a newline
    """
    ids = SafeIdAllocator()
    lines = ["flowchart TD"]

    for node in graph.nodes:
        safe_id = ids.allocate(node.id, node.last_line)
        lines.append(f'    {safe_id}["{escape_node_text(node.label)}"]')

    exception_links = []
    for index, edge in enumerate(graph.edges):
        lines.append(edge_line(edge, ids))
        if edge.exception:
            exception_links.append(index)

    for index in exception_links:
        lines.append(f"    linkStyle {index} {EXCEPTION_LINK_STYLE}")

    logger.debug(f"Emitted Mermaid flowchart with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
    return "\n".join(lines) + "\n"
