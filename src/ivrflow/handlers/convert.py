#!/usr/bin/env python3
"""
Handlers for IVR script conversion operations.

Compiles a batch of IVR script XML files into graph artifacts (DOT, SVG,
Mermaid, PlantUML). Documents are processed concurrently with bounded
concurrency; a failure in one document is reported in its own result and
never aborts the rest of the batch.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from ..clients.graphviz_client import GraphvizRenderer, RenderDelegate, RenderError
from ..core.config import BatchConfig, render_config
from ..models.models import BatchReport, DocumentResult
from ..services import compiler
from ..services.compiler import OutputFormat
from ..services.domain.graph import GraphModel
from ..services.domain.ivr_script import IvrCompileError
from ..services.storage import unique_base_names, write_artifact

logger = logging.getLogger(__name__)


def _create_success_result(filename: str, outputs: dict[str, str], graph: GraphModel) -> DocumentResult:
    """Create success result for a single file.

    Args:
        filename: Original XML filename
        outputs: Format → written artifact path
        graph: Compiled graph model

    Returns:
        Success result
    """
    return DocumentResult(
        filename=filename,
        status="success",
        outputs=outputs,
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
    )


def _create_error_result(
    filename: str,
    error_message: str,
    error_stage: str,
    outputs: Optional[dict[str, str]] = None
) -> DocumentResult:
    """Create error result for a single file.

    Args:
        filename: Original XML filename
        error_message: Error message
        error_stage: 'read', 'compile', 'write', 'render' or 'timeout'
        outputs: Artifacts already written before the failure

    Returns:
        Error result
    """
    return DocumentResult(
        filename=filename,
        status="failed",
        outputs=outputs or {},
        error=error_message,
        error_stage=error_stage,
    )


def resolve_formats(formats: Optional[Iterable[str]]) -> list[OutputFormat]:
    """Parse requested format names, dropping duplicates and keeping order.

    Raises:
        UnsupportedFormatError: If any name is unknown
    """
    names = list(formats) if formats else render_config.DEFAULT_FORMATS
    resolved: list[OutputFormat] = []
    for name in names:
        fmt = compiler.parse_format(name)
        if fmt not in resolved:
            resolved.append(fmt)
    return resolved


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


async def _convert_single_file(
    path: Path,
    formats: list[OutputFormat],
    output_dir: Path,
    renderer: Optional[RenderDelegate],
    annotate_source: bool,
    base_name: str,
) -> DocumentResult:
    """Compile one IVR script and write its artifacts.

    Args:
        path: IVR script XML file
        formats: Requested artifact formats
        output_dir: Directory artifacts are written to
        renderer: Render delegate, required when SVG is requested
        annotate_source: Add the source filename note to DOT output
        base_name: Artifact name, unique within the batch

    Returns:
        Result with success or error status
    """
    filename = path.name
    log_extra = {"document": filename}
    outputs: dict[str, str] = {}

    logger.info(f"Starting conversion for: {filename}", extra=log_extra)

    try:
        xml_text = await asyncio.to_thread(_read_text, path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read IVR file {filename}: {e}", extra=log_extra)
        return _create_error_result(filename, f"Failed to read file: {str(e)}", "read")

    try:
        graph = compiler.compile(xml_text)
    except IvrCompileError as e:
        logger.error(f"Failed to compile {filename}: {e}", extra=log_extra)
        return _create_error_result(filename, str(e), "compile")
    except Exception as e:
        logger.error(f"Unexpected compile error for {filename}: {e}", extra=log_extra)
        return _create_error_result(filename, f"Unexpected error: {str(e)}", "compile")

    source_name = filename if annotate_source else None

    try:
        for fmt in formats:
            if fmt.is_rendered:
                continue
            text = compiler.emit(graph, fmt, source_name=source_name)
            outputs[fmt.value] = await write_artifact(output_dir, base_name, fmt, text)

        if OutputFormat.SVG in formats:
            dot_text = compiler.emit(graph, OutputFormat.DOT, source_name=source_name)
            try:
                svg_text = await asyncio.to_thread(renderer.render, dot_text)
            except RenderError as e:
                logger.error(f"Failed to render {filename}: {e}", extra=log_extra)
                return _create_error_result(filename, str(e), "render", outputs)
            except Exception as e:
                logger.error(f"Unexpected render error for {filename}: {e}", extra=log_extra)
                return _create_error_result(filename, f"Unexpected error: {str(e)}", "render", outputs)
            outputs[OutputFormat.SVG.value] = await write_artifact(output_dir, base_name, OutputFormat.SVG, svg_text)
    except OSError as e:
        logger.error(f"Failed to store artifacts for {filename}: {e}", extra=log_extra)
        return _create_error_result(filename, f"Failed to write artifact: {str(e)}", "write", outputs)

    logger.info(
        f"Converted {filename}: {len(graph.nodes)} nodes, {len(graph.edges)} edges, "
        f"{len(outputs)} artifacts",
        extra=log_extra,
    )
    return _create_success_result(filename, outputs, graph)


async def handle_ivr_batch(
    files: list[str | Path],
    formats: Optional[Iterable[str]] = None,
    output_dir: Optional[str | Path] = None,
    renderer: Optional[RenderDelegate] = None,
    annotate_source: Optional[bool] = None,
    timestamp_ms: Optional[int] = None,
) -> BatchReport:
    """Convert multiple IVR script files with controlled concurrency.

    Args:
        files: IVR script XML paths
        formats: Artifact formats (names or aliases), defaults from config
        output_dir: Output directory, defaults from config
        renderer: Render delegate for SVG, defaults to a GraphvizRenderer
        annotate_source: Add source filename note to DOT, defaults from config
        timestamp_ms: Fixed timestamp for artifact names (defaults to now)

    Returns:
        BatchReport with one result per file, in input order

    Raises:
        ValueError: If no files are given or the batch exceeds the configured limit
        UnsupportedFormatError: If a requested format is unknown
        RenderError: If SVG is requested and the default renderer cannot be configured
    """
    config = BatchConfig()

    if not files:
        raise ValueError("No files provided")

    max_files = config.get_batch_limit("document")
    if len(files) > max_files:
        raise ValueError(
            f"Batch size exceeds maximum of {max_files} files. "
            f"Received {len(files)} files. "
            f"Configure via BATCH_MAX_DOCUMENT_FILES environment variable."
        )

    resolved_formats = resolve_formats(formats)
    if OutputFormat.SVG in resolved_formats and renderer is None:
        renderer = GraphvizRenderer(render_config.GRAPHVIZ_ENGINE)

    target_dir = Path(output_dir) if output_dir else render_config.OUTPUT_DIR
    annotate = render_config.ANNOTATE_SOURCE if annotate_source is None else annotate_source

    semaphore = asyncio.Semaphore(config.MAX_CONCURRENT_OPERATIONS)
    paths = [Path(f) for f in files]
    base_names = unique_base_names([p.name for p in paths], timestamp_ms)

    async def _guarded(path: Path, base_name: str) -> DocumentResult:
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    _convert_single_file(path, resolved_formats, target_dir, renderer, annotate, base_name),
                    timeout=config.OPERATION_TIMEOUT,
                )
            except asyncio.TimeoutError:
                logger.error(f"Conversion of {path.name} timed out after {config.OPERATION_TIMEOUT}s")
                return _create_error_result(
                    path.name, f"Operation timed out after {config.OPERATION_TIMEOUT} seconds", "timeout"
                )
            except Exception as e:
                logger.error(f"Unexpected error processing {path.name}: {e}")
                return _create_error_result(path.name, f"Unexpected error: {str(e)}", "compile")

    logger.info(f"Processing batch of {len(paths)} IVR files (formats: {[f.value for f in resolved_formats]})")
    results = await asyncio.gather(*(_guarded(p, name) for p, name in zip(paths, base_names)))

    succeeded = sum(1 for r in results if r.status == "success")
    report = BatchReport(
        results=list(results),
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
    )
    logger.info(f"Batch complete: {report.succeeded} succeeded, {report.failed} failed")
    return report
