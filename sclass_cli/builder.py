"""Turn parsed contract declarations into rendering-ready ``Contract`` models."""

from __future__ import annotations

import logging
from typing import Optional

from .decoders import (
    decode_state_mutability,
    decode_visibility,
    parse_mapping_key,
    parse_parameters,
    parse_return_type,
    parse_type_name,
)
from .filters import FilterPolicy
from .models import Contract, Field, Mapping, Method, ParsedContractDefinition, ParsedDefinition
from .syntax import FunctionNode, MappingTypeName, StateVariableNode

logger = logging.getLogger(__name__)


class ContractModelBuilder:
    """Stateless between calls; callers build each declaration at most once."""

    def __init__(self, policy: FilterPolicy) -> None:
        self.policy = policy

    def build(self, definition: ParsedContractDefinition) -> Contract:
        contract = Contract(class_name=definition.name or "")

        for variable in definition.variables:
            node = StateVariableNode(variable.handle.node)
            if isinstance(node.type_name, MappingTypeName):
                contract.add_mapping(self._parse_mapping(node))
            else:
                contract.add_field(self._parse_field(node))

        for function in definition.functions:
            method = self._parse_function(function)
            if self.policy.should_filter_method(method):
                if method is not None:
                    logger.debug("Filtered method %s.%s", contract.class_name, method.name)
                continue
            contract.add_method(method)

        contract.inherits_from = list(definition.inherits_from)
        return contract

    @staticmethod
    def _parse_field(node: StateVariableNode) -> Field:
        return Field(
            name=node.name,
            type=parse_type_name(node.type_name).strip(),
            visibility=decode_visibility(node.attributes),
        )

    @staticmethod
    def _parse_mapping(node: StateVariableNode) -> Mapping:
        mapping = node.type_name
        assert isinstance(mapping, MappingTypeName)
        return Mapping(
            name=node.name,
            key=parse_mapping_key(mapping.key),
            value=parse_type_name(mapping.value),
            visibility=decode_visibility(node.attributes),
        )

    @staticmethod
    def _parse_function(function: ParsedDefinition) -> Optional[Method]:
        # Constructors have no name and never become methods.
        if not function.name:
            return None

        node = FunctionNode(function.handle.node)
        attributes = node.attributes
        return Method(
            name=function.name,
            params=parse_parameters(node.parameters),
            return_type=parse_return_type(node.return_parameters),
            visibility=decode_visibility(attributes),
            state_mutability=decode_state_mutability(attributes),
        )
