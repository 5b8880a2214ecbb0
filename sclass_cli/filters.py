"""Inclusion policy for contracts and methods.

Both checks are pure: they read the exclusion config and the collection
tables captured at construction and nothing else.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from .models import ExcludeConfig, Method, ParsedDefinition

logger = logging.getLogger(__name__)


class FilterPolicy:
    def __init__(
        self,
        exclude: ExcludeConfig,
        collections: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.exclude = exclude
        self.collections = collections or {}

    # ------------------------------------------------------------------
    # Contracts / interfaces / libraries
    # ------------------------------------------------------------------

    def should_include_contract(self, definition: ParsedDefinition) -> bool:
        """First matching rule decides; ``exceptions`` overrides everything."""
        rules = self.exclude.contracts
        name = definition.name or ""

        if name in rules.exceptions:
            return True

        if rules.libraries and definition.kind == "library":
            return False

        if rules.interfaces and definition.kind == "interface":
            return False

        if self.is_contract_from_collections(name):
            return False

        if name in rules.contracts:
            return False

        return True

    should_include_interface = should_include_contract
    should_include_library = should_include_contract

    def is_contract_from_collections(self, name: str) -> bool:
        for collection_name in self.exclude.contracts.collections:
            members = self.collections.get(collection_name)
            if members is None:
                # Unknown collections exclude nothing.
                logger.debug("Collection %r is not loaded; ignoring it", collection_name)
                continue
            if name in members:
                return True
        return False

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def should_filter_method(self, method: Optional[Method]) -> bool:
        """True means the method is dropped from the diagram."""
        # Constructors arrive as None.
        if method is None:
            return True

        rules = self.exclude.functions
        if method.name in rules.exceptions:
            return False

        return any(pattern.search(method.name) for pattern in rules.regexps)
