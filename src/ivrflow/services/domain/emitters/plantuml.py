#!/usr/bin/env python3
"""PlantUML state-diagram emitter.

Uses its own safe-identifier policy (independent from the Mermaid emitter):
state aliases may contain letters, digits and underscores but must not start
with a digit.
"""
import logging
import re

from ..graph.model import GraphModel, MergedEdge

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]")
_ALNUM_ONLY = re.compile(r"[^A-Za-z0-9]")

EXCEPTION_ARROW = "-[#red,dashed]->"
PLAIN_ARROW = "-->"


def state_alias(text: str) -> str:
    """Derive a PlantUML state alias from display text."""
    alias = _UNSAFE_CHARS.sub("_", text)
    if not alias:
        return "state"
    if alias[0].isdigit():
        alias = f"S_{alias}"
    return alias


def allocate_aliases(graph: GraphModel) -> dict[str, str]:
    """Map every node id and dangling edge endpoint to a unique alias.

    Args:
        graph: Graph model

    Returns:
        Dictionary mapping original id to alias
    """
    aliases: dict[str, str] = {}
    used: set[str] = set()

    def allocate(original_id: str, text: str):
        if original_id in aliases:
            return
        alias = state_alias(text)
        if alias in used:
            fragment = _ALNUM_ONLY.sub("", original_id)[:6]
            base = f"{alias}_{fragment}" if fragment else alias
            alias = base
            counter = 2
            while alias in used:
                alias = f"{base}_{counter}"
                counter += 1
        used.add(alias)
        aliases[original_id] = alias

    for node in graph.nodes:
        allocate(node.id, node.last_line)
    for edge in graph.edges:
        allocate(edge.source, edge.source)
        allocate(edge.target, edge.target)
    return aliases


def escape_state_label(text: str) -> str:
    return text.replace('"', "'").replace("\n", "\\n")


def transition_line(edge: MergedEdge, aliases: dict[str, str]) -> str:
    arrow = EXCEPTION_ARROW if edge.exception else PLAIN_ARROW
    line = f"{aliases[edge.source]} {arrow} {aliases[edge.target]}"
    label = edge.label.replace("\n", " ")
    if label:
        line += f" : {label}"
    return line


def clean_for_storage(text: str) -> str:
    """Strip a leading byte-order mark and leading whitespace."""
    return text.lstrip("\ufeff").lstrip()


def emit_plantuml(graph: GraphModel) -> str:
    """Serialize a graph model as a PlantUML state diagram.

    Args:
        graph: Graph model

    Returns:
        PlantUML text from @startuml to @enduml, ending with a newline
    """
    aliases = allocate_aliases(graph)
    lines = ["@startuml", "hide empty description"]

    for node in graph.nodes:
        lines.append(f'state "{escape_state_label(node.label)}" as {aliases[node.id]}')

    for edge in graph.edges:
        lines.append(transition_line(edge, aliases))

    lines.append("@enduml")

    logger.debug(f"Emitted PlantUML with {len(graph.nodes)} states and {len(graph.edges)} transitions")
    return clean_for_storage("\n".join(lines) + "\n")
