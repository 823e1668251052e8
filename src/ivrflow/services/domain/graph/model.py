#!/usr/bin/env python3
"""Serialization-ready graph model shared by every format emitter."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class NodeEntry:
    """Label metadata for one module."""
    id: str
    type: str
    label: str  # "<type>\n<display name>", quote characters removed

    @property
    def last_line(self) -> str:
        return self.label.split("\n")[-1]


@dataclass(frozen=True)
class MergedEdge:
    """All raw edges between one ordered (source, target) pair."""
    source: str
    target: str
    labels: tuple[str, ...] = ()
    exception: bool = False

    @property
    def label(self) -> str:
        """Label union joined for display."""
        return "/".join(self.labels)


@dataclass(frozen=True)
class GraphModel:
    """Deduplicated graph: at most one node per id, one edge per pair."""
    nodes: tuple[NodeEntry, ...] = ()
    edges: tuple[MergedEdge, ...] = ()

    def node(self, node_id: str) -> Optional[NodeEntry]:
        for entry in self.nodes:
            if entry.id == node_id:
                return entry
        return None

    def edge(self, source: str, target: str) -> Optional[MergedEdge]:
        for entry in self.edges:
            if entry.source == source and entry.target == target:
                return entry
        return None

    @property
    def node_ids(self) -> list[str]:
        return [entry.id for entry in self.nodes]
