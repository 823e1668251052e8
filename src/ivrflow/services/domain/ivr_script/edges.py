#!/usr/bin/env python3
"""Edge deriver.

Turns each Module into zero or more raw Edge records. The list may hold
several edges for the same (source, target) pair; merging happens in the
graph builder.

Rules run in a fixed order and may all fire for the same module:

1. single-next: unlabeled edge to the single descendant
2. exception: edge to the exceptional descendant, labeled "Exception"
3. branch: one edge per branch table target (branching types only)
4. ascendant: unlabeled edge from every predecessor the module lists

Which rules apply is decided by RULES_BY_TYPE. Unrecognized module types
have no rules and yield no edges.
"""
import logging
from typing import Callable, Iterable

from .model import (
    BRANCHING_TYPES,
    EXCEPTION_LABEL,
    BranchEntry,
    Edge,
    EdgeStyle,
    Module,
    ModuleType,
)

logger = logging.getLogger(__name__)

EdgeRule = Callable[[Module], Iterable[Edge]]


def single_next_rule(module: Module) -> Iterable[Edge]:
    if module.payload.single_next:
        yield Edge(source=module.id, target=module.payload.single_next)


def exception_rule(module: Module) -> Iterable[Edge]:
    if module.payload.exceptional_next:
        yield Edge(
            source=module.id,
            target=module.payload.exceptional_next,
            label=EXCEPTION_LABEL,
            style=EdgeStyle.EXCEPTION,
        )


def branch_labels(entry: BranchEntry) -> list[tuple[str, str]]:
    """Pair each target of a branch entry with its label.

    A single-target entry is labeled by its key (falling back to its name).
    Multi-valued entries pair names and targets by position; a target with no
    name at its position takes the first name, then the key.

    Args:
        entry: Branch table row

    Returns:
        List of (target, label) tuples; empty when the entry has no target
    """
    if not entry.targets:
        return []

    fallback = entry.names[0] if entry.names else (entry.key or "")

    if len(entry.targets) == 1 and len(entry.names) <= 1:
        return [(entry.targets[0], entry.key or fallback)]

    pairs = []
    for i, target in enumerate(entry.targets):
        label = entry.names[i] if i < len(entry.names) else fallback
        pairs.append((target, label))
    return pairs


def branch_rule(module: Module) -> Iterable[Edge]:
    for entry in module.payload.branches:
        pairs = branch_labels(entry)
        if not pairs:
            logger.debug(f"Dropping branch {entry.key!r} of module {module.id}: no target")
        for target, label in pairs:
            yield Edge(source=module.id, target=target, label=label)


def ascendant_rule(module: Module) -> Iterable[Edge]:
    for predecessor in module.payload.ascendants:
        yield Edge(source=predecessor, target=module.id)


STANDARD_RULES: tuple[EdgeRule, ...] = (single_next_rule, exception_rule, ascendant_rule)
BRANCHING_RULES: tuple[EdgeRule, ...] = (single_next_rule, exception_rule, branch_rule, ascendant_rule)

RULES_BY_TYPE: dict[ModuleType, tuple[EdgeRule, ...]] = {
    module_type: BRANCHING_RULES if module_type in BRANCHING_TYPES else STANDARD_RULES
    for module_type in ModuleType
}


def rules_for(module: Module) -> tuple[EdgeRule, ...]:
    """Get the edge rules for a module's type (empty for unrecognized types)."""
    module_type = module.module_type
    if module_type is None:
        return ()
    return RULES_BY_TYPE[module_type]


def derive_module_edges(module: Module) -> list[Edge]:
    """Apply every rule of the module's type, in order."""
    rules = rules_for(module)
    if not rules:
        logger.debug(f"No edge rules for module type {module.type!r} (module {module.id})")
        return []

    edges: list[Edge] = []
    for rule in rules:
        edges.extend(rule(module))
    return edges


def derive_edges(modules: Iterable[Module]) -> list[Edge]:
    """Derive the flat, possibly redundant, edge list for a document.

    Args:
        modules: Modules in document order

    Returns:
        Raw edges in module order, then rule order
    """
    edges: list[Edge] = []
    for module in modules:
        edges.extend(derive_module_edges(module))
    logger.debug(f"Derived {len(edges)} raw edges")
    return edges
