"""
Clients Layer

This package contains low-level infrastructure clients for external services.
Clients handle connection management, protocol details, and basic operations
but contain no business logic.

Clients:
- graphviz_client: Graphviz layout engines (DOT to SVG)
"""

from .graphviz_client import GraphvizRenderer, RenderDelegate, RenderError, is_graphviz_available

__all__ = ["GraphvizRenderer", "RenderDelegate", "RenderError", "is_graphviz_available"]
