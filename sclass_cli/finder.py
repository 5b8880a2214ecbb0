"""Declaration discovery over a compilation unit.

Every finder performs one forward walk over the anchor tokens under a scope
and asks the binding graph which declaration each token defines.  Results
come back in source order and each declaration appears once.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Any, List, Optional, Tuple, Union

from .errors import PreconditionError
from .models import ParsedContractDefinition, ParsedDefinition
from .syntax import (
    CompilationUnit,
    DeclarationHandle,
    SourceFile,
    SyntaxKind,
    iter_anchor_tokens,
)

logger = logging.getLogger(__name__)

CONTRACT_KINDS: AbstractSet[str] = frozenset({"contract", "interface", "library"})
FUNCTION_KINDS: AbstractSet[str] = frozenset({"function", "constructor", "receive", "fallback"})

Scope = Union[SourceFile, DeclarationHandle]


# ===================================================================
# Name / kind resolver
# ===================================================================

def get_name(definition: DeclarationHandle) -> Optional[str]:
    """Return the declared name, or None for unnamed declarations (constructors)."""
    return definition.name


def get_kind(definition: DeclarationHandle) -> SyntaxKind:
    return definition.kind


# ===================================================================
# Generic finder
# ===================================================================

def _scope_root(scope: Scope) -> Tuple[str, Any]:
    if isinstance(scope, SourceFile):
        return scope.id, scope.root
    return scope.file_id, scope.node


def find_definitions_of_kinds(
    unit: CompilationUnit,
    scope: Scope,
    kinds: AbstractSet[str],
) -> List[DeclarationHandle]:
    """Return declarations of *kinds* found under *scope*, in source order."""
    if not kinds:
        raise PreconditionError("At least one definition kind is required")

    file_id, root = _scope_root(scope)
    found: List[DeclarationHandle] = []
    seen = set()

    for token in iter_anchor_tokens(root):
        definition = unit.binding_graph.definition_at(token)
        if definition is None:
            continue
        if definition.kind not in kinds:
            continue
        # Only declarations whose name and body both live in the analysed file.
        if (
            definition.name_location.file_id != file_id
            or definition.body_location.file_id != file_id
        ):
            logger.debug("Skipping %s declared outside %s", definition.name, file_id)
            continue
        if definition in seen:
            continue
        seen.add(definition)
        found.append(definition)

    return found


def _require_kind(definition: DeclarationHandle, expected: AbstractSet[str], what: str) -> None:
    if definition.kind not in expected:
        raise PreconditionError(
            f"Definition must be a {what} definition, got {definition.kind!r}"
        )


# ===================================================================
# Scoped finders
# ===================================================================

def find_state_variable_definitions(
    unit: CompilationUnit,
    contract: DeclarationHandle,
) -> List[DeclarationHandle]:
    _require_kind(contract, CONTRACT_KINDS, "Contract/Interface/Library")
    return find_definitions_of_kinds(unit, contract, {"state_variable"})


def find_function_definitions(
    unit: CompilationUnit,
    contract: DeclarationHandle,
) -> List[DeclarationHandle]:
    _require_kind(contract, CONTRACT_KINDS, "Contract/Interface/Library")
    return find_definitions_of_kinds(unit, contract, FUNCTION_KINDS)


def find_function_parameter_definitions(
    unit: CompilationUnit,
    function: DeclarationHandle,
) -> List[DeclarationHandle]:
    """Named parameters (inputs and named returns) of a function."""
    _require_kind(function, FUNCTION_KINDS, "Function")
    return find_definitions_of_kinds(unit, function, {"parameter"})


def _inheritance_ancestors(node: Any) -> List[Any]:
    ancestors = []
    for child in node.children:
        if child.type != "inheritance_specifier":
            continue
        ancestor = child.child_by_field_name("ancestor")
        ancestors.append(ancestor if ancestor is not None else child)
    return ancestors


def find_inheritance_identifiers(
    unit: CompilationUnit,
    contract: DeclarationHandle,
) -> List[DeclarationHandle]:
    """Resolve the names in a contract/interface header's ``is`` list.

    Each name must resolve to exactly one declaration; names declared in
    another (unflattened) file resolve to nothing and are skipped.
    """
    _require_kind(contract, CONTRACT_KINDS, "Contract/Interface/Library")

    inherited: List[DeclarationHandle] = []
    for ancestor in _inheritance_ancestors(contract.node):
        # ``A.B`` names B; the qualifier is not a separate parent.
        identifiers = [t for t in iter_anchor_tokens(ancestor) if t.type == "identifier"]
        if not identifiers:
            continue
        reference = unit.binding_graph.reference_at(identifiers[-1])
        if reference is None:
            continue

        definitions = reference.definitions()
        if len(definitions) > 1:
            raise PreconditionError(
                f"Expected 1 definition for reference {reference.name!r}, "
                f"found {len(definitions)}"
            )
        if not definitions:
            logger.debug(
                "Inheritance reference %s of %s is not declared in this file",
                reference.name, contract.name,
            )
            continue
        inherited.append(definitions[0])

    return inherited


# ===================================================================
# Parsed definitions
# ===================================================================

def parse_definitions(definitions: List[DeclarationHandle]) -> List[ParsedDefinition]:
    return [
        ParsedDefinition(name=get_name(d), kind=get_kind(d), handle=d)
        for d in definitions
    ]


def parse_contract_definition(
    unit: CompilationUnit,
    definition: DeclarationHandle,
) -> ParsedContractDefinition:
    """Collect a contract's own members and its resolved parents."""
    _require_kind(definition, CONTRACT_KINDS, "Contract/Interface/Library")

    variables = parse_definitions(find_state_variable_definitions(unit, definition))
    functions = parse_definitions(find_function_definitions(unit, definition))
    inherits_from = find_inheritance_identifiers(unit, definition)

    return ParsedContractDefinition(
        name=get_name(definition),
        kind=get_kind(definition),
        handle=definition,
        variables=tuple(variables),
        functions=tuple(functions),
        inherits_from=tuple(inherits_from),
    )
