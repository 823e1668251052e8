#!/usr/bin/env python3
"""IVR script XML ingestor.

Parses raw XML text into a generic nested key/value tree using the common
"explicit array" XML-to-object convention:

- the result is ``{root_tag: root_node}``
- an element without attributes and without child elements becomes its text
- any other element becomes a dict where ``"$"`` holds the attributes,
  ``"_"`` holds non-whitespace text, and every child tag maps to a list of
  child nodes (even when the child occurs once)

Example:
    <ivrScript><modules><play><moduleId>A</moduleId></play></modules></ivrScript>

    {"ivrScript": {"modules": [{"play": [{"moduleId": ["A"]}]}]}}
"""
import logging
from typing import Any

# Use defusedxml for secure XML parsing (prevents XXE and entity expansion attacks)
import defusedxml
import defusedxml.ElementTree as ET

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from .errors import MalformedInputError

logger = logging.getLogger(__name__)

ATTR_KEY = "$"
TEXT_KEY = "_"

_BOM = "\ufeff"


def local_name(tag: str) -> str:
    """Strip a ``{namespace-uri}`` prefix from an element or attribute name.

    Args:
        tag: ElementTree tag, possibly namespace qualified

    Returns:
        Local part of the name
    """
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _element_text(elem: Element) -> str:
    # Mixed content: element text plus the tails of its children
    parts = [elem.text or ""]
    for child in elem:
        parts.append(child.tail or "")
    return "".join(parts)


def element_to_node(elem: Element) -> Any:
    """Convert an element (recursively) to its nested tree node.

    Args:
        elem: Parsed XML element

    Returns:
        Text for attribute-less leaf elements, otherwise a dict
    """
    children = list(elem)
    text = _element_text(elem)

    if not children and not elem.attrib:
        return text

    node: dict[str, Any] = {}
    if elem.attrib:
        node[ATTR_KEY] = {local_name(k): v for k, v in elem.attrib.items()}
    if text.strip():
        node[TEXT_KEY] = text

    for child in children:
        # Comments and processing instructions carry a non-string tag
        if not isinstance(child.tag, str):
            continue
        node.setdefault(local_name(child.tag), []).append(element_to_node(child))

    return node


def parse_xml(xml_text: str | bytes) -> dict[str, Any]:
    """Parse XML text into the nested array-wrapped tree.

    Args:
        xml_text: XML document as text or UTF-8 bytes

    Returns:
        Dictionary with a single key (the root tag) mapping to the root node

    Raises:
        MalformedInputError: If the text is empty, not well-formed, nested too
            deeply to convert, or uses forbidden DTD/entity constructs
    """
    if isinstance(xml_text, str):
        xml_text = xml_text.lstrip(_BOM)

    if not xml_text or not xml_text.strip():
        raise MalformedInputError("Empty XML document")

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MalformedInputError(f"Malformed XML: {e}") from e
    except defusedxml.DefusedXmlException as e:
        raise MalformedInputError(f"Forbidden XML construct: {e}") from e

    try:
        node = element_to_node(root)
    except RecursionError as e:
        raise MalformedInputError("XML nesting too deep to convert") from e

    logger.debug(f"Parsed XML document with root element <{local_name(root.tag)}>")
    return {local_name(root.tag): node}
