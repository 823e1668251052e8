#!/usr/bin/env python3

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from .compiler import OutputFormat

logger = logging.getLogger(__name__)


def ensure_output_dir(output_dir: Path) -> Path:
    """Create the artifact directory if needed"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def artifact_base_name(filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Base name shared by every artifact of one source document.

    Args:
        filename: Original source filename (directories are dropped)
        timestamp_ms: Milliseconds since the epoch, defaults to now

    Returns:
        "<filename>_<timestamp>"
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{Path(filename).name}_{timestamp_ms}"


def unique_base_names(filenames: list[str], timestamp_ms: Optional[int] = None) -> list[str]:
    """Base names for a whole batch, one timestamp shared by every document.

    Documents with the same filename (from different directories) get a
    ``_2``, ``_3``... suffix so their artifacts never overwrite each other.

    Args:
        filenames: Source filenames in batch order
        timestamp_ms: Milliseconds since the epoch, defaults to now

    Returns:
        One distinct base name per filename, in the same order
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    names = []
    used: set[str] = set()
    for filename in filenames:
        base = artifact_base_name(filename, timestamp_ms)
        name = base
        counter = 2
        while name in used:
            name = f"{base}_{counter}"
            counter += 1
        if name != base:
            logger.info(f"Duplicate filename {filename} in batch, writing artifacts as {name}")
        used.add(name)
        names.append(name)
    return names


def _write_text(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


async def write_artifact(output_dir: Path, base_name: str, fmt: OutputFormat, text: str) -> str:
    """Write one artifact to the output directory.

    Args:
        output_dir: Target directory
        base_name: Name from artifact_base_name()
        fmt: Artifact format, decides the file extension
        text: Artifact content

    Returns:
        Path of the written file
    """
    path = ensure_output_dir(output_dir) / f"{base_name}.{fmt.extension}"
    try:
        await asyncio.to_thread(_write_text, path, text)
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        raise
    logger.info(f"Wrote {fmt.value} artifact to {path}")
    return str(path)
