#!/usr/bin/env python3
"""
Graphviz Render Client

A low-level client wrapper around the Graphviz layout engines (via the
`graphviz` Python package). Turns DOT text into SVG text.

This client is pure infrastructure - it contains no business logic.
Graph construction and DOT emission live in services/.
"""

import logging
from typing import Protocol

import graphviz

from ..core.config import render_config

logger = logging.getLogger(__name__)

RENDER_FORMAT = "svg"


class RenderError(Exception):
    """
    Exception raised when the render backend fails.

    Used for:
    - Graphviz executables not found/unavailable
    - Layout engine exiting with an error (e.g. invalid DOT)
    - Unknown layout engine names

    Kept separate from compile errors so callers can tell bad input apart
    from a rendering backend problem.
    """
    pass


class RenderDelegate(Protocol):
    """Anything that turns DOT text into rendered SVG text."""

    def render(self, dot_text: str) -> str:
        ...


def is_graphviz_available() -> bool:
    """
    Check if the Graphviz executables are installed.

    Returns:
        True if `dot -V` can be executed, False otherwise
    """
    try:
        graphviz.version()
        return True
    except graphviz.ExecutableNotFound:
        logger.debug("Graphviz executables not found on PATH")
        return False
    except (graphviz.CalledProcessError, RuntimeError) as e:
        logger.debug(f"Graphviz version check failed: {e}")
        return False


def get_graphviz_version() -> str:
    """
    Get the version of the installed Graphviz.

    Returns:
        Version string (e.g., "2.43.0")

    Raises:
        RenderError: If Graphviz is not available
    """
    try:
        return ".".join(str(part) for part in graphviz.version())
    except graphviz.ExecutableNotFound as e:
        raise RenderError("Graphviz executables not found on PATH") from e
    except (graphviz.CalledProcessError, RuntimeError) as e:
        raise RenderError(f"Failed to get Graphviz version: {e}") from e


class GraphvizRenderer:
    """Render delegate backed by a Graphviz layout engine.

    Example:
        ```python
        renderer = GraphvizRenderer(engine="dot")
        svg = renderer.render('digraph { "A" -> "B"; }')
        ```
    """

    def __init__(self, engine: str | None = None):
        self.engine = engine or render_config.GRAPHVIZ_ENGINE
        if self.engine not in graphviz.ENGINES:
            raise RenderError(f"Unknown Graphviz engine: {self.engine!r}")

    def render(self, dot_text: str) -> str:
        """
        Lay out DOT text and return SVG text.

        Args:
            dot_text: Graphviz DOT source

        Returns:
            SVG document text

        Raises:
            RenderError: If Graphviz is missing or fails on the input
        """
        logger.debug(f"Rendering DOT with engine {self.engine} ({len(dot_text)} chars)")
        try:
            svg_bytes = graphviz.pipe(self.engine, RENDER_FORMAT, dot_text.encode("utf-8"), quiet=True)
        except graphviz.ExecutableNotFound as e:
            logger.error("Graphviz executables not found on PATH")
            raise RenderError("Graphviz executables not found on PATH") from e
        except graphviz.CalledProcessError as e:
            stderr = e.stderr or b""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            stderr = stderr.strip()
            logger.error(f"Graphviz {self.engine} failed with exit code {e.returncode}: {stderr}")
            raise RenderError(f"Graphviz {self.engine} failed: {stderr or e}") from e

        return svg_bytes.decode("utf-8")
