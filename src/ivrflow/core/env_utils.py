#!/usr/bin/env python3
"""
Typed readers for ivrflow environment settings.

Values are cleaned of surrounding whitespace and CRLF line endings (a .env
file saved on Windows would otherwise turn "dot\r" into an unknown Graphviz
engine). A value that cannot be used is logged and replaced by the default,
so a bad setting never stops a batch from starting.
"""

import logging
import os
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off", "")


def _read(key: str) -> Optional[str]:
    raw_value = os.getenv(key)
    if raw_value is None:
        return None

    cleaned = raw_value.strip()
    if cleaned != raw_value:
        logger.warning(f"Environment variable {key} had surrounding whitespace/line endings: {raw_value!r}")
    return cleaned


def getenv_clean(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get a string setting with whitespace and line endings removed.

    Args:
        key: Environment variable name
        default: Value when the variable is not set

    Returns:
        Cleaned value, or default
    """
    value = _read(key)
    return default if value is None else value


def getenv_bool(key: str, default: bool = False) -> bool:
    """Get a flag such as IVRFLOW_ANNOTATE_SOURCE.

    "true"/"1"/"yes"/"on" are True, "false"/"0"/"no"/"off"/"" are False
    (case-insensitive). Anything else logs a warning and gives default.
    """
    value = _read(key)
    if value is None:
        return default

    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False

    logger.warning(f"Environment variable {key} is not a boolean: {value!r}. Using default: {default}")
    return default


def getenv_int(key: str, default: int, minimum: Optional[int] = None) -> int:
    """Get an integer limit such as BATCH_MAX_CONCURRENT_OPERATIONS.

    Args:
        key: Environment variable name
        default: Value when the variable is unset, not an integer, or below minimum
        minimum: Smallest accepted value

    Returns:
        Integer value
    """
    value = _read(key)
    if value is None:
        return default

    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Environment variable {key} is not an integer: {value!r}. Using default: {default}")
        return default

    if minimum is not None and number < minimum:
        logger.warning(f"Environment variable {key}={number} is below {minimum}. Using default: {default}")
        return default
    return number


def getenv_list(
    key: str,
    default: Optional[list[str]] = None,
    allowed: Optional[Iterable[str]] = None,
) -> list[str]:
    """Get a comma-separated list such as IVRFLOW_FORMATS.

    Empty items are dropped. When ``allowed`` is given, items are compared
    case-insensitively and unknown ones are dropped with a warning.

    Args:
        key: Environment variable name
        default: Value when the variable is unset or no usable item remains
        allowed: Accepted item values

    Returns:
        List of items in the order given
    """
    default = list(default or [])
    value = _read(key)
    if not value:
        return default

    items = [item.strip() for item in value.split(",") if item.strip()]

    if allowed is not None:
        accepted = {name.lower() for name in allowed}
        unknown = [item for item in items if item.lower() not in accepted]
        if unknown:
            logger.warning(f"Environment variable {key} has unknown entries {unknown}; ignoring them")
        items = [item.lower() for item in items if item.lower() in accepted]

    return items or default
