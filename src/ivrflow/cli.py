#!/usr/bin/env python3
"""Command-line interface for the IVR flowchart generator."""
import argparse
import asyncio
import logging
import sys

from .clients.graphviz_client import GraphvizRenderer, RenderError
from .core.config import render_config
from .core.logging import setup_logging
from .handlers.convert import handle_ivr_batch
from .services.compiler import OutputFormat
from .services.domain.ivr_script import UnsupportedFormatError

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ivrflow",
        description="Generate flowcharts (DOT, SVG, Mermaid, PlantUML) from IVR script XML files",
    )
    parser.add_argument("files", nargs="+", help="One or more IVR script XML files")
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help=f"Directory for generated artifacts (default: {render_config.OUTPUT_DIR})",
    )
    parser.add_argument(
        "-f", "--format",
        dest="formats",
        nargs="+",
        default=None,
        help=(
            f"Artifact formats: {', '.join(f.value for f in OutputFormat)} "
            f"(default: {','.join(render_config.DEFAULT_FORMATS)})"
        ),
    )
    parser.add_argument(
        "--annotate-source",
        action="store_true",
        default=None,
        help="Show the source filename as a note in DOT/SVG output",
    )
    parser.add_argument(
        "--engine",
        default=None,
        help=f"Graphviz layout engine for SVG (default: {render_config.GRAPHVIZ_ENGINE})",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a batch conversion and print the report as JSON.

    Returns:
        0 when every document succeeded, 1 when any failed, 2 on usage errors
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, stream="ext://sys.stderr")

    try:
        renderer = GraphvizRenderer(args.engine) if args.engine else None
        report = asyncio.run(
            handle_ivr_batch(
                args.files,
                formats=args.formats,
                output_dir=args.output_dir,
                renderer=renderer,
                annotate_source=args.annotate_source,
            )
        )
    except (UnsupportedFormatError, RenderError, ValueError) as e:
        print(f"ivrflow: error: {e}", file=sys.stderr)  # noqa: T201
        return 2

    print(report.model_dump_json(indent=2))  # noqa: T201
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
