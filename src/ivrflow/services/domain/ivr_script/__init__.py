"""
IVR Script Domain

Parses IVR script XML into typed modules and derives the raw control-flow
edges between them.
"""

from .edges import derive_edges
from .errors import IvrCompileError, MalformedInputError, SchemaError, UnsupportedFormatError
from .extractor import extract_modules
from .ingestor import parse_xml
from .model import EXCEPTION_LABEL, BranchEntry, Edge, EdgeStyle, Module, ModulePayload, ModuleType

__all__ = [
    "parse_xml",
    "extract_modules",
    "derive_edges",
    "Module",
    "ModulePayload",
    "ModuleType",
    "BranchEntry",
    "Edge",
    "EdgeStyle",
    "EXCEPTION_LABEL",
    "IvrCompileError",
    "MalformedInputError",
    "SchemaError",
    "UnsupportedFormatError",
]
