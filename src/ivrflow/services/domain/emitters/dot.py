#!/usr/bin/env python3
"""Graphviz DOT emitter."""
import logging
from typing import Optional

from ..graph.model import GraphModel, MergedEdge, NodeEntry
from ..ivr_script.model import BRANCHING_TYPES, ModuleType

logger = logging.getLogger(__name__)

GRAPH_NAME = "IVR"

# Fixed visual attributes of exception edges
EXCEPTION_EDGE_ATTRS = {"color": "red", "fontcolor": "red", "style": "dashed,bold"}

SOURCE_NODE_ID = "__source__"

_SHAPE_BY_TYPE = {
    ModuleType.INCOMING_CALL: "ellipse",
    ModuleType.HANGUP: "octagon",
    **{module_type: "diamond" for module_type in BRANCHING_TYPES},
}
_DEFAULT_SHAPE = "box"


def escape_dot(text: str) -> str:
    """Escape text for a double-quoted DOT string. Newlines become DOT line breaks."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def quote(text: str) -> str:
    return f'"{escape_dot(text)}"'


def format_attrs(attrs: dict[str, str]) -> str:
    if not attrs:
        return ""
    return " [" + ", ".join(f"{key}={quote(value)}" for key, value in attrs.items()) + "]"


def node_shape(node: NodeEntry) -> str:
    module_type = ModuleType.from_tag(node.type)
    return _SHAPE_BY_TYPE.get(module_type, _DEFAULT_SHAPE)


def node_statement(node: NodeEntry) -> str:
    return f"  {quote(node.id)}{format_attrs({'label': node.label, 'shape': node_shape(node)})};"


def edge_statement(edge: MergedEdge) -> str:
    attrs = {}
    if edge.label:
        attrs["label"] = edge.label
    if edge.exception:
        attrs.update(EXCEPTION_EDGE_ATTRS)
    return f"  {quote(edge.source)} -> {quote(edge.target)}{format_attrs(attrs)};"


def source_node_id(graph: GraphModel) -> str:
    """Id for the source note that no module or edge endpoint already uses."""
    taken = set(graph.node_ids)
    for edge in graph.edges:
        taken.update((edge.source, edge.target))
    node_id = SOURCE_NODE_ID
    while node_id in taken:
        node_id += "_"
    return node_id


def source_annotation(graph: GraphModel, source_name: str) -> list[str]:
    """Note node showing the source filename, anchored by an invisible edge."""
    note_id = quote(source_node_id(graph))
    lines = [f"  {note_id}{format_attrs({'label': source_name, 'shape': 'note'})};"]
    if graph.nodes:
        anchor = graph.nodes[0].id
        lines.append(f"  {note_id} -> {quote(anchor)} [style=invis];")
    return lines


def emit_dot(graph: GraphModel, source_name: Optional[str] = None) -> str:
    """Serialize a graph model as a Graphviz digraph.

    Args:
        graph: Graph model
        source_name: Optional source filename shown as a note node

    Returns:
        DOT text ending with a newline
    """
    lines = [
        f"digraph {quote(GRAPH_NAME)} {{",
        "  rankdir=TB;",
        '  node [fontname="Helvetica", style="rounded"];',
        '  edge [fontname="Helvetica"];',
    ]
    if source_name:
        lines.extend(source_annotation(graph, source_name))
    lines.extend(node_statement(node) for node in graph.nodes)
    lines.extend(edge_statement(edge) for edge in graph.edges)
    lines.append("}")

    logger.debug(f"Emitted DOT with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
    return "\n".join(lines) + "\n"
