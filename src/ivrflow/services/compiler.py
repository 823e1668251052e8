#!/usr/bin/env python3
"""IVR-graph compiler service.

Entry points used by the batch handler and the CLI:

- compile(xml_text) -> GraphModel
- emit(graph, fmt) -> text

compile raises MalformedInputError or SchemaError for bad input; emit raises
UnsupportedFormatError for format names it cannot serialize.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from .domain.emitters import emit_dot, emit_mermaid, emit_plantuml
from .domain.graph import GraphModel, build_graph
from .domain.ivr_script import UnsupportedFormatError, derive_edges, extract_modules, parse_xml

logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    """Artifacts produced per source document."""
    DOT = "dot"
    SVG = "svg"            # rendered from DOT by the render delegate
    MERMAID = "mermaid"
    PLANTUML = "plantuml"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def is_rendered(self) -> bool:
        return self is OutputFormat.SVG


_EXTENSIONS = {
    OutputFormat.DOT: "dot",
    OutputFormat.SVG: "svg",
    OutputFormat.MERMAID: "mmd",
    OutputFormat.PLANTUML: "puml",
}

_ALIASES = {
    "gv": OutputFormat.DOT,
    "graphviz": OutputFormat.DOT,
    "mmd": OutputFormat.MERMAID,
    "puml": OutputFormat.PLANTUML,
    "uml": OutputFormat.PLANTUML,
}


def format_names() -> list[str]:
    """Every accepted format name, aliases included."""
    return [f.value for f in OutputFormat] + list(_ALIASES)


def parse_format(name: "str | OutputFormat") -> OutputFormat:
    """Resolve a format name or alias.

    Args:
        name: Format value ("dot", "svg", "mermaid", "plantuml") or alias
            ("gv", "graphviz", "mmd", "puml", "uml")

    Returns:
        OutputFormat member

    Raises:
        UnsupportedFormatError: If the name is unknown
    """
    if isinstance(name, OutputFormat):
        return name
    key = str(name).strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return OutputFormat(key)
    except ValueError:
        raise UnsupportedFormatError(str(name), [f.value for f in OutputFormat]) from None


def compile(xml_text: str | bytes) -> GraphModel:
    """Compile IVR script XML into a graph model.

    Args:
        xml_text: IVR script XML

    Returns:
        Deduplicated GraphModel

    Raises:
        MalformedInputError: If the XML is not well-formed
        SchemaError: If the module collection is missing
    """
    tree = parse_xml(xml_text)
    modules = extract_modules(tree)
    edges = derive_edges(modules)
    return build_graph(modules, edges)


_EMITTERS: dict[OutputFormat, Callable[..., str]] = {
    OutputFormat.DOT: lambda graph, source_name: emit_dot(graph, source_name=source_name),
    OutputFormat.MERMAID: lambda graph, source_name: emit_mermaid(graph),
    OutputFormat.PLANTUML: lambda graph, source_name: emit_plantuml(graph),
}


def emit(graph: GraphModel, fmt: "str | OutputFormat", source_name: Optional[str] = None) -> str:
    """Serialize a graph model to a textual format.

    Args:
        graph: Graph model from compile()
        fmt: Textual output format (dot, mermaid, plantuml or an alias)
        source_name: Source filename annotation (DOT only)

    Returns:
        Format-specific text

    Raises:
        UnsupportedFormatError: If fmt is unknown or is not a textual format (svg)
    """
    output_format = parse_format(fmt)
    emitter = _EMITTERS.get(output_format)
    if emitter is None:
        raise UnsupportedFormatError(output_format.value, [f.value for f in _EMITTERS])
    return emitter(graph, source_name)
