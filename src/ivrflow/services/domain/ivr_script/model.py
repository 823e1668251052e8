#!/usr/bin/env python3
"""Typed records for IVR script modules and the control-flow edges between them."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Literal label carried by exceptional transitions
EXCEPTION_LABEL = "Exception"


class ModuleType(str, Enum):
    """Known IVR module tags. Unknown tags are kept on Module.type as plain strings."""
    INCOMING_CALL = "incomingCall"
    PLAY = "play"
    INPUT = "input"
    VOICE_INPUT = "voiceInput"
    MENU = "menu"
    CASE = "case"
    IF_ELSE = "ifElse"
    QUERY = "query"
    SET_VARIABLES = "setVariables"
    SKILL_TRANSFER = "skillTransfer"
    AGENT_TRANSFER = "agentTransfer"
    THIRD_PARTY_TRANSFER = "thirdPartyTransfer"
    VOICEMAIL_TRANSFER = "voicemailTransfer"
    FOREIGN_SCRIPT = "foreignScript"
    LANGUAGE_SWITCH = "languageSwitch"
    RECORDING = "recording"
    HANGUP = "hangup"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["ModuleType"]:
        """Look up a module tag, returning None for unrecognized tags."""
        try:
            return cls(tag)
        except ValueError:
            return None


# Module types whose payload carries a branch table
BRANCHING_TYPES = frozenset({
    ModuleType.MENU,
    ModuleType.CASE,
    ModuleType.IF_ELSE,
    ModuleType.INPUT,
    ModuleType.VOICE_INPUT,
    ModuleType.QUERY,
})


class EdgeStyle(str, Enum):
    """Rendering hint for an edge."""
    PLAIN = "plain"
    EXCEPTION = "exception"  # dashed/red


@dataclass(frozen=True)
class BranchEntry:
    """One row of a module's branch table.

    names and targets are collected from every value of the entry, in order.
    """
    key: Optional[str] = None
    names: tuple[str, ...] = ()
    targets: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModulePayload:
    """Type-specific control-flow data of a module."""
    single_next: Optional[str] = None       # singleDescendant
    exceptional_next: Optional[str] = None  # exceptionalDescendant
    branches: tuple[BranchEntry, ...] = ()
    ascendants: tuple[str, ...] = ()        # predecessors listed by the module itself


@dataclass(frozen=True)
class Module:
    """One IVR call-flow step."""
    id: str
    type: str
    display_name: str
    payload: ModulePayload = field(default_factory=ModulePayload)

    @property
    def module_type(self) -> Optional[ModuleType]:
        return ModuleType.from_tag(self.type)


@dataclass(frozen=True)
class Edge:
    """One directed control-flow transition. The target may reference no module."""
    source: str
    target: str
    label: str = ""
    style: EdgeStyle = EdgeStyle.PLAIN
