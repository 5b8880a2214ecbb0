"""Tree-sitter front end for flattened Solidity files.

Everything the extraction pipeline knows about Solidity syntax goes through
this module:

- ``CompilationUnit`` parses one file and owns its ``BindingGraph``.
- ``BindingGraph.definition_at`` / ``reference_at`` answer "which declaration
  does this token define / refer to?".
- ``DeclarationHandle`` is the stable identity of one declaration
  (``file_id`` plus its byte span).
- ``FunctionNode``, ``StateVariableNode`` and ``ParameterNode`` wrap raw
  tree-sitter nodes and convert type names and attributes into closed sum
  types so the decoders never inspect grammar node types themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

import tree_sitter_solidity
from tree_sitter import Language, Parser as TSParser

logger = logging.getLogger(__name__)

SyntaxKind = Literal[
    "contract",
    "interface",
    "library",
    "function",
    "constructor",
    "receive",
    "fallback",
    "modifier",
    "state_variable",
    "parameter",
    "struct",
    "enum",
    "event",
    "error",
    "user_defined_value_type",
]

# Grammar node type -> declaration kind.  Receive/fallback share one node
# type and are told apart by their keyword.
_DECLARATION_NODE_KINDS: Dict[str, SyntaxKind] = {
    "contract_declaration": "contract",
    "interface_declaration": "interface",
    "library_declaration": "library",
    "function_definition": "function",
    "constructor_definition": "constructor",
    "modifier_definition": "modifier",
    "state_variable_declaration": "state_variable",
    "parameter": "parameter",
    "struct_declaration": "struct",
    "enum_declaration": "enum",
    "event_definition": "event",
    "error_declaration": "error",
    "user_defined_type_definition": "user_defined_value_type",
}

_UNNAMED_ANCHORS: Dict[str, str] = {
    "constructor": "constructor_definition",
    "receive": "fallback_receive_definition",
    "fallback": "fallback_receive_definition",
}

TYPE_DECLARATION_KINDS = frozenset(
    {"contract", "interface", "library", "struct", "enum", "user_defined_value_type"}
)

# An `is` list may only name these.
INHERITABLE_KINDS = frozenset({"contract", "interface", "library"})


def _text(node: Any) -> str:
    return node.text.decode("utf-8")


def _same_span(a: Any, b: Any) -> bool:
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte


@lru_cache(maxsize=1)
def _solidity_parser() -> TSParser:
    language = Language(tree_sitter_solidity.language())
    logger.debug("Loaded tree-sitter grammar for solidity")
    return TSParser(language)


# ===================================================================
# Token traversal
# ===================================================================

def iter_tokens(node: Any) -> Iterator[Any]:
    """Yield every leaf under *node* in source order."""
    cursor = node.walk()
    depth = 0
    while True:
        current = cursor.node
        if current.child_count == 0:
            yield current
        if cursor.goto_first_child():
            depth += 1
            continue
        while depth > 0 and not cursor.goto_next_sibling():
            cursor.goto_parent()
            depth -= 1
        if depth == 0:
            return


def is_anchor_token(token: Any) -> bool:
    """True for tokens that can be the defining occurrence of a declaration."""
    if token.type == "identifier":
        return True
    parent = token.parent
    return (
        token.type in _UNNAMED_ANCHORS
        and parent is not None
        and parent.type == _UNNAMED_ANCHORS[token.type]
    )


def iter_anchor_tokens(node: Any) -> Iterator[Any]:
    for token in iter_tokens(node):
        if is_anchor_token(token):
            yield token


# ===================================================================
# Declaration handles
# ===================================================================

@dataclass(frozen=True)
class Location:
    file_id: str
    start_byte: int
    end_byte: int


@dataclass(frozen=True)
class DeclarationHandle:
    """Stable identity of one declaration: equality is ``(file_id, span)``."""

    file_id: str
    start_byte: int
    end_byte: int
    kind: SyntaxKind = field(compare=False)
    node: Any = field(compare=False, repr=False)
    anchor: Any = field(compare=False, repr=False)

    @property
    def name(self) -> Optional[str]:
        if self.kind == "constructor":
            return None
        return _text(self.anchor)

    @property
    def name_location(self) -> Location:
        return Location(self.file_id, self.anchor.start_byte, self.anchor.end_byte)

    @property
    def body_location(self) -> Location:
        return Location(self.file_id, self.start_byte, self.end_byte)

    def unparse(self) -> str:
        return _text(self.node)


@dataclass(frozen=True)
class Reference:
    token: Any = field(repr=False)
    name: str
    _definitions: Tuple[DeclarationHandle, ...] = ()

    def definitions(self) -> List[DeclarationHandle]:
        return list(self._definitions)


def _in_inheritance_list(token: Any) -> bool:
    node = token.parent
    while node is not None and node.type == "user_defined_type":
        node = node.parent
    return node is not None and node.type == "inheritance_specifier"


# ===================================================================
# Binding graph
# ===================================================================

class BindingGraph:
    """Name resolution for a single flattened file.

    Only defining occurrences produce definitions; references resolve type
    names against the file-level type declarations (contracts, interfaces,
    libraries, structs, enums, user-defined value types).  Names in an `is`
    list only match contracts, interfaces and libraries.
    """

    def __init__(self, file_id: str, root: Any) -> None:
        self.file_id = file_id
        self._types_by_name: Dict[str, List[DeclarationHandle]] = {}
        for token in iter_anchor_tokens(root):
            definition = self.definition_at(token)
            if definition is not None and definition.kind in TYPE_DECLARATION_KINDS:
                self._types_by_name.setdefault(definition.name or "", []).append(definition)

    def definition_at(self, token: Any) -> Optional[DeclarationHandle]:
        parent = token.parent
        if parent is None:
            return None

        if token.type == "identifier":
            kind = _DECLARATION_NODE_KINDS.get(parent.type)
            if kind is None:
                return None
            name_node = parent.child_by_field_name("name")
            if name_node is None or not _same_span(name_node, token):
                return None
        elif token.type in _UNNAMED_ANCHORS and parent.type == _UNNAMED_ANCHORS[token.type]:
            kind = "constructor" if token.type == "constructor" else token.type
        else:
            return None

        return DeclarationHandle(
            file_id=self.file_id,
            start_byte=parent.start_byte,
            end_byte=parent.end_byte,
            kind=kind,
            node=parent,
            anchor=token,
        )

    def reference_at(self, token: Any) -> Optional[Reference]:
        if token.type != "identifier":
            return None
        parent = token.parent
        if parent is None or parent.type not in ("user_defined_type", "inheritance_specifier"):
            return None
        name = _text(token)
        definitions = self._types_by_name.get(name, [])
        if _in_inheritance_list(token):
            definitions = [d for d in definitions if d.kind in INHERITABLE_KINDS]
        return Reference(token=token, name=name, _definitions=tuple(definitions))


# ===================================================================
# Compilation unit
# ===================================================================

@dataclass
class SourceFile:
    id: str
    source: bytes = field(repr=False)
    tree: Any = field(repr=False)

    @property
    def root(self) -> Any:
        return self.tree.root_node


class CompilationUnit:
    """One already-flattened Solidity file and its bindings."""

    def __init__(self, source_file: SourceFile) -> None:
        self._files: Dict[str, SourceFile] = {source_file.id: source_file}
        self.binding_graph = BindingGraph(source_file.id, source_file.root)

    @classmethod
    def build(cls, file_id: str, source: str) -> "CompilationUnit":
        source_bytes = source.encode("utf-8")
        tree = _solidity_parser().parse(source_bytes)
        if tree.root_node.has_error:
            logger.warning("%s contains syntax errors; the diagram may be incomplete", file_id)
        return cls(SourceFile(id=file_id, source=source_bytes, tree=tree))

    def file(self, file_id: str) -> Optional[SourceFile]:
        return self._files.get(file_id)

    def files(self) -> List[SourceFile]:
        return list(self._files.values())


# ===================================================================
# Type names (closed sum type)
# ===================================================================

@dataclass(frozen=True)
class ElementaryTypeName:
    spelling: str


@dataclass(frozen=True)
class UserDefinedTypeName:
    path: Tuple[str, ...]


@dataclass(frozen=True)
class MappingTypeName:
    key: Optional[Union[ElementaryTypeName, UserDefinedTypeName, "OtherTypeName"]]
    value: Optional["TypeName"]


@dataclass(frozen=True)
class ArrayTypeName:
    element: Optional["TypeName"]


@dataclass(frozen=True)
class OtherTypeName:
    kind: str


TypeName = Union[
    ElementaryTypeName, UserDefinedTypeName, MappingTypeName, ArrayTypeName, OtherTypeName
]


def convert_type_name(node: Any) -> Optional[TypeName]:
    """Convert a grammar type node into a ``TypeName`` variant."""
    if node is None:
        return None
    if node.type == "primitive_type":
        return ElementaryTypeName(_text(node))
    if node.type == "user_defined_type":
        return UserDefinedTypeName(
            tuple(_text(c) for c in node.named_children if c.type == "identifier")
        )
    if node.type == "identifier":
        return UserDefinedTypeName((_text(node),))
    if node.type != "type_name":
        return OtherTypeName(node.type)

    key = node.child_by_field_name("key_type")
    if key is not None:
        key_type = convert_type_name(key)
        if isinstance(key_type, (MappingTypeName, ArrayTypeName)):
            key_type = OtherTypeName(key.type)
        return MappingTypeName(
            key=key_type,
            value=convert_type_name(node.child_by_field_name("value_type")),
        )

    anonymous = [c.type for c in node.children if not c.is_named]
    named = node.named_children
    if "[" in anonymous and named:
        return ArrayTypeName(convert_type_name(named[0]))
    if "function" in anonymous:
        return OtherTypeName("function_type")
    if len(named) == 1:
        return convert_type_name(named[0])
    return OtherTypeName(node.type)


# ===================================================================
# Attributes (closed sum type)
# ===================================================================

AttributeKind = Literal[
    "visibility",
    "mutability",
    "constant",
    "immutable",
    "virtual",
    "override",
    "modifier_invocation",
]

_ATTRIBUTE_NODE_KINDS: Dict[str, AttributeKind] = {
    "visibility": "visibility",
    "state_mutability": "mutability",
    "constant": "constant",
    "immutable": "immutable",
    "virtual": "virtual",
    "override_specifier": "override",
    "modifier_invocation": "modifier_invocation",
}

# Bare keyword tokens some grammar rules emit without a wrapping node.
_KEYWORD_ATTRIBUTE_KINDS: Dict[str, AttributeKind] = {
    "public": "visibility",
    "external": "visibility",
    "internal": "visibility",
    "private": "visibility",
    "view": "mutability",
    "pure": "mutability",
    "payable": "mutability",
}


@dataclass(frozen=True)
class Attribute:
    kind: AttributeKind
    text: str


def convert_attributes(node: Any) -> List[Attribute]:
    """Return the specifiers of a function/variable declaration in source order."""
    attributes: List[Attribute] = []
    for child in node.children:
        kind = _ATTRIBUTE_NODE_KINDS.get(child.type)
        if kind == "modifier_invocation" and _text(child).strip() == "constant":
            # Legacy `constant` functions parse as a modifier invocation.
            kind = "constant"
        if kind is None and not child.is_named:
            kind = _KEYWORD_ATTRIBUTE_KINDS.get(child.type)
        if kind is None:
            continue
        attributes.append(Attribute(kind=kind, text=_text(child).strip()))
    return attributes


# ===================================================================
# Typed node wrappers
# ===================================================================

class ParameterNode:
    def __init__(self, node: Any) -> None:
        self.node = node

    @property
    def name(self) -> Optional[str]:
        name_node = self.node.child_by_field_name("name")
        return _text(name_node) if name_node is not None else None

    @property
    def type_name(self) -> Optional[TypeName]:
        return convert_type_name(self.node.child_by_field_name("type"))

    def unparse(self) -> str:
        return _text(self.node)


def _collect_parameters(node: Any) -> List[ParameterNode]:
    params: List[ParameterNode] = []
    for child in node.children:
        if child.type == "parameter":
            params.append(ParameterNode(child))
        elif child.type == "parameter_list":
            params.extend(ParameterNode(c) for c in child.named_children if c.type == "parameter")
    return params


class FunctionNode:
    """Function, constructor, receive or fallback declaration."""

    def __init__(self, node: Any) -> None:
        self.node = node

    @property
    def attributes(self) -> List[Attribute]:
        return convert_attributes(self.node)

    @property
    def parameters(self) -> List[ParameterNode]:
        return _collect_parameters(self.node)

    @property
    def return_parameters(self) -> List[ParameterNode]:
        returns = self.node.child_by_field_name("return_type")
        if returns is None:
            returns = next(
                (c for c in self.node.children if c.type == "return_type_definition"), None
            )
        if returns is None:
            return []
        return _collect_parameters(returns)

    def unparse(self) -> str:
        return _text(self.node)


class StateVariableNode:
    def __init__(self, node: Any) -> None:
        self.node = node

    @property
    def name(self) -> str:
        return _text(self.node.child_by_field_name("name")).strip()

    @property
    def type_name(self) -> Optional[TypeName]:
        return convert_type_name(self.node.child_by_field_name("type"))

    @property
    def attributes(self) -> List[Attribute]:
        return convert_attributes(self.node)

    def unparse(self) -> str:
        return _text(self.node)
