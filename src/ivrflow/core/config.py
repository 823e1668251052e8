#!/usr/bin/env python3
"""
Configuration settings for batch processing and graph rendering.

These settings can be overridden via environment variables to adjust
resource limits and output defaults per deployment (local CLI vs server).
"""

import logging
from pathlib import Path

from ..services.compiler import format_names
from .env_utils import getenv_bool, getenv_clean, getenv_int, getenv_list

logger = logging.getLogger(__name__)


class BatchConfig:
    """Batch processing configuration.

    All values can be overridden via environment variables.
    Defaults are conservative for a developer workstation.
    """

    def __init__(self):
        # Concurrency: max documents compiled/rendered at the same time
        self.MAX_CONCURRENT_OPERATIONS = getenv_int("BATCH_MAX_CONCURRENT_OPERATIONS", 3, minimum=1)

        # Timeout: max seconds per document (read + compile + render)
        self.OPERATION_TIMEOUT = getenv_int("BATCH_OPERATION_TIMEOUT", 60, minimum=1)

        # Max IVR script files accepted in one batch
        self.MAX_DOCUMENT_FILES = getenv_int("BATCH_MAX_DOCUMENT_FILES", 50, minimum=1)

    def get_batch_limit(self, operation_type: str) -> int:
        """Get batch size limit for specific operation type.

        Args:
            operation_type: Currently only 'document'

        Returns:
            Maximum files allowed for this operation
        """
        limits = {
            "document": self.MAX_DOCUMENT_FILES,
        }
        return limits.get(operation_type, 10)  # Default fallback


# Singleton instance
batch_config = BatchConfig()


class RenderConfig:
    """Output and render backend configuration."""

    def __init__(self):
        # Graphviz layout engine fed with the DOT text (dot, neato, fdp, ...)
        self.GRAPHVIZ_ENGINE = getenv_clean("IVRFLOW_GRAPHVIZ_ENGINE", "dot")

        # Directory artifacts are written to
        self.OUTPUT_DIR = Path(getenv_clean("IVRFLOW_OUTPUT_DIR", "output"))

        # Formats produced when the caller does not ask for specific ones
        self.DEFAULT_FORMATS = getenv_list(
            "IVRFLOW_FORMATS", ["dot", "svg", "mermaid", "plantuml"], allowed=format_names()
        )

        # Add a source filename note to DOT output
        self.ANNOTATE_SOURCE = getenv_bool("IVRFLOW_ANNOTATE_SOURCE", False)


# Singleton instance
render_config = RenderConfig()
