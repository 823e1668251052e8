#!/usr/bin/env python3
"""Module extractor.

Walks the nested tree produced by the ingestor and turns every module
instance into a typed Module record. Expected shape (Five9-style script):

    <ivrScript>
      <modules>
        <incomingCall>
          <moduleId>A</moduleId>
          <moduleName>Start</moduleName>
          <singleDescendant>B</singleDescendant>
          <exceptionalDescendant>C</exceptionalDescendant>
        </incomingCall>
        <case>
          <moduleId>D</moduleId>
          <ascendants>B</ascendants>
          <data>
            <branches>
              <entry>
                <key>Sales</key>
                <value><name>Sales</name><nextModule>E</nextModule></value>
              </entry>
            </branches>
          </data>
        </case>
      </modules>
    </ivrScript>

The module type is the tag of the group an instance was found under.
"""
import logging
from typing import Any, Optional

from .errors import SchemaError
from .ingestor import TEXT_KEY
from .model import BranchEntry, Module, ModulePayload

logger = logging.getLogger(__name__)

MODULES_KEY = "modules"
ID_KEY = "moduleId"
NAME_KEY = "moduleName"
SINGLE_NEXT_KEY = "singleDescendant"
EXCEPTIONAL_NEXT_KEY = "exceptionalDescendant"
ASCENDANTS_KEY = "ascendants"
DATA_KEY = "data"
BRANCHES_KEY = "branches"
ENTRY_KEY = "entry"
KEY_KEY = "key"
VALUE_KEY = "value"
BRANCH_NAME_KEY = "name"
BRANCH_TARGET_KEY = "nextModule"


def node_text(node: Any) -> Optional[str]:
    """Get the stripped text of a tree node.

    Accepts a bare string or a dict carrying its text under ``_``.

    Args:
        node: Tree node

    Returns:
        Stripped text, or None when the node has no non-empty text
    """
    if isinstance(node, dict):
        node = node.get(TEXT_KEY)
    if isinstance(node, str):
        text = node.strip()
        return text or None
    return None


def child_texts(node: Any, key: str) -> list[str]:
    """Collect the non-empty texts of every ``key`` child of a dict node."""
    if not isinstance(node, dict):
        return []
    texts = []
    for child in node.get(key, []):
        text = node_text(child)
        if text:
            texts.append(text)
    return texts


def first_child_text(node: Any, key: str) -> Optional[str]:
    """Get the text of the first ``key`` child carrying text, or None."""
    texts = child_texts(node, key)
    return texts[0] if texts else None


def first_child(node: Any, key: str) -> Any:
    """Get the first ``key`` child of a dict node, or None."""
    if not isinstance(node, dict):
        return None
    children = node.get(key) or []
    return children[0] if children else None


def _extract_branches(instance: dict) -> tuple[BranchEntry, ...]:
    branches = first_child(first_child(instance, DATA_KEY), BRANCHES_KEY)
    if not isinstance(branches, dict):
        return ()

    entries = []
    for entry in branches.get(ENTRY_KEY, []):
        names: list[str] = []
        targets: list[str] = []
        for value in entry.get(VALUE_KEY, []) if isinstance(entry, dict) else []:
            names.extend(child_texts(value, BRANCH_NAME_KEY))
            targets.extend(child_texts(value, BRANCH_TARGET_KEY))
        entries.append(
            BranchEntry(
                key=first_child_text(entry, KEY_KEY),
                names=tuple(names),
                targets=tuple(targets),
            )
        )
    return tuple(entries)


def extract_payload(instance: dict) -> ModulePayload:
    """Read the control-flow fields of one module instance.

    Args:
        instance: Module element node

    Returns:
        ModulePayload with next-step references, branch table and ascendants
    """
    return ModulePayload(
        single_next=first_child_text(instance, SINGLE_NEXT_KEY),
        exceptional_next=first_child_text(instance, EXCEPTIONAL_NEXT_KEY),
        branches=_extract_branches(instance),
        ascendants=tuple(child_texts(instance, ASCENDANTS_KEY)),
    )


def get_modules_root(tree: dict[str, Any]) -> Any:
    """Locate the ``document.modules`` collection.

    Args:
        tree: Nested tree from parse_xml

    Returns:
        The first ``modules`` node under the root element

    Raises:
        SchemaError: If the root element has no ``modules`` child
    """
    document = next(iter(tree.values()), None) if isinstance(tree, dict) else None
    if not isinstance(document, dict) or not document.get(MODULES_KEY):
        raise SchemaError("expected top-level module collection missing")
    return document[MODULES_KEY][0]


def extract_modules(tree: dict[str, Any]) -> list[Module]:
    """Produce one Module per module instance that carries an id.

    Instances without an id are skipped, not reported as errors.

    Args:
        tree: Nested tree from parse_xml

    Returns:
        Modules in document order (group order, then instance order)

    Raises:
        SchemaError: If the top-level module collection is missing
    """
    modules_root = get_modules_root(tree)

    # <modules/> parses to an empty string
    if not isinstance(modules_root, dict):
        logger.info("Module collection is empty")
        return []

    modules = []
    skipped = 0
    for group_tag, instances in modules_root.items():
        if group_tag.startswith(("$", "_")):
            continue

        for instance in instances:
            module_id = first_child_text(instance, ID_KEY)
            if not module_id:
                skipped += 1
                logger.debug(f"Skipping <{group_tag}> module without {ID_KEY}")
                continue

            modules.append(
                Module(
                    id=module_id,
                    type=group_tag,
                    display_name=first_child_text(instance, NAME_KEY) or group_tag,
                    payload=extract_payload(instance),
                )
            )

    logger.info(f"Extracted {len(modules)} modules ({skipped} skipped without id)")
    return modules
