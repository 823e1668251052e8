"""
Graph Model Domain

Deduplicated, serialization-ready graph built from IVR modules and edges.
"""

from .builder import build_graph
from .model import GraphModel, MergedEdge, NodeEntry

__all__ = ["build_graph", "GraphModel", "MergedEdge", "NodeEntry"]
