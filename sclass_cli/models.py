"""Core data models shared by extraction, filtering and rendering."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Tuple

if TYPE_CHECKING:
    from .syntax import DeclarationHandle, SyntaxKind

Visibility = Literal["external", "public", "internal", "private"]
StateMutability = Literal["mutative", "view", "pure", "constant", "payable"]

VISIBILITY_GLYPHS: Dict[str, str] = {
    "external": "❗",
    "public": "❗",
    "internal": "⚙️",
    "private": "🔒",
}

MUTABILITY_GLYPHS: Dict[str, str] = {
    "mutative": "",
    "view": "👀",
    "pure": "🧮",
    "constant": "ℏ",
    "payable": "💰",
}


# ===================================================================
# Parsed declarations (discarded after model building)
# ===================================================================

@dataclass(frozen=True)
class ParsedDefinition:
    name: Optional[str]
    kind: SyntaxKind
    handle: DeclarationHandle


@dataclass(frozen=True)
class ParsedContractDefinition(ParsedDefinition):
    """A contract, interface or library with its own (non-inherited) members."""
    variables: Tuple[ParsedDefinition, ...] = ()
    functions: Tuple[ParsedDefinition, ...] = ()
    inherits_from: Tuple[DeclarationHandle, ...] = ()


# ===================================================================
# Rendering-ready model
# ===================================================================

@dataclass
class Field:
    name: str
    type: str
    visibility: Visibility


@dataclass
class Mapping:
    name: str
    key: str
    value: str
    visibility: Visibility


@dataclass
class Declaration:
    """One function parameter as rendered inside a method signature."""
    type: str
    name: str


@dataclass
class Method:
    name: str
    params: List[Declaration]
    return_type: str
    visibility: Visibility
    state_mutability: StateMutability = "mutative"


@dataclass
class Contract:
    class_name: str
    fields: List[Field] = field(default_factory=list)
    mappings: List[Mapping] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)
    inherits_from: List[DeclarationHandle] = field(default_factory=list)

    def add_field(self, item: Field) -> None:
        self.fields.append(item)

    def add_mapping(self, item: Mapping) -> None:
        self.mappings.append(item)

    def add_method(self, item: Method) -> None:
        self.methods.append(item)


# ===================================================================
# Exclusion configuration (immutable for a run)
# ===================================================================

@dataclass(frozen=True)
class ContractExclusions:
    interfaces: bool = False
    libraries: bool = False
    collections: Tuple[str, ...] = ()
    contracts: Tuple[str, ...] = ()
    exceptions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionExclusions:
    regexps: Tuple[re.Pattern, ...] = ()
    exceptions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExcludeConfig:
    contracts: ContractExclusions = field(default_factory=ContractExclusions)
    functions: FunctionExclusions = field(default_factory=FunctionExclusions)
