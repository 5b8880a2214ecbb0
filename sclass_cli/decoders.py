"""Decode type names, visibility and state mutability into render vocabulary."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .errors import UnhandledTypeNameError
from .models import Declaration, StateMutability, Visibility
from .syntax import (
    ArrayTypeName,
    Attribute,
    ElementaryTypeName,
    MappingTypeName,
    OtherTypeName,
    ParameterNode,
    TypeName,
    UserDefinedTypeName,
)

EMPTY_TYPE = "empty"

_VISIBILITIES = {"external", "public", "internal", "private"}
_MUTABILITIES = {"view", "pure", "payable", "constant"}


def parse_type_name(type_name: Optional[TypeName]) -> str:
    """Render a type name; user-defined types lose their qualification."""
    if type_name is None:
        return EMPTY_TYPE

    if isinstance(type_name, ElementaryTypeName):
        return type_name.spelling

    if isinstance(type_name, MappingTypeName):
        key = parse_mapping_key(type_name.key)
        value = parse_type_name(type_name.value)
        return f"mapping({key} => {value})"

    if isinstance(type_name, UserDefinedTypeName):
        return type_name.path[-1] if type_name.path else EMPTY_TYPE

    if isinstance(type_name, ArrayTypeName):
        return parse_type_name(type_name.element) + "[]"

    kind = type_name.kind if isinstance(type_name, OtherTypeName) else type(type_name).__name__
    raise UnhandledTypeNameError(kind)


def parse_mapping_key(key: Optional[TypeName]) -> str:
    """Mapping keys keep their dotted path (``Lib.Enum``)."""
    if isinstance(key, ElementaryTypeName):
        return key.spelling
    if isinstance(key, UserDefinedTypeName):
        return ".".join(key.path)
    if key is None:
        return EMPTY_TYPE
    kind = key.kind if isinstance(key, OtherTypeName) else type(key).__name__
    raise UnhandledTypeNameError(kind)


def parse_visibility(raw: Optional[str]) -> Visibility:
    """Map a visibility keyword; anything else is Solidity's default ``internal``."""
    if raw in _VISIBILITIES:
        return raw  # type: ignore[return-value]
    return "internal"


def decode_visibility(attributes: Sequence[Attribute]) -> Visibility:
    # Scanned left to right: with redundant keywords the last one wins.
    raw: Optional[str] = None
    for attribute in attributes:
        if attribute.kind == "visibility":
            raw = attribute.text
    return parse_visibility(raw)


def decode_state_mutability(attributes: Sequence[Attribute]) -> StateMutability:
    mutability: StateMutability = "mutative"
    for attribute in attributes:
        if attribute.kind not in ("mutability", "constant"):
            continue
        if attribute.text in _MUTABILITIES:
            mutability = attribute.text  # type: ignore[assignment]
    return mutability


def parse_parameters(parameters: Sequence[ParameterNode]) -> List[Declaration]:
    return [
        Declaration(type=parse_type_name(p.type_name), name=p.name or "")
        for p in parameters
    ]


def parse_return_type(return_parameters: Sequence[ParameterNode]) -> str:
    """``returns (a, uint256)``: named returns show their name, unnamed their type."""
    if not return_parameters:
        return ""
    names = [p.name or parse_type_name(p.type_name) for p in return_parameters]
    return f"returns ({', '.join(names)})"
