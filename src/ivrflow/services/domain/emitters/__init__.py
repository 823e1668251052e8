"""
Format Emitters

Each emitter consumes a GraphModel and owns its own identifier-safety and
escaping rules for its target grammar.
"""

from .dot import emit_dot
from .mermaid import emit_mermaid
from .plantuml import emit_plantuml

__all__ = ["emit_dot", "emit_mermaid", "emit_plantuml"]
