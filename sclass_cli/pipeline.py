"""Pipeline coordinating discovery, filtering, model building and rendering."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .builder import ContractModelBuilder
from .config_manager import Settings
from .diagram import diagram_title, format_edge, render_diagram
from .errors import PreconditionError, SourceError
from .filters import FilterPolicy
from .finder import (
    CONTRACT_KINDS,
    find_definitions_of_kinds,
    parse_contract_definition,
    parse_definitions,
)
from .models import Contract, ParsedDefinition
from .syntax import CompilationUnit, DeclarationHandle
from .validation import check_naming

logger = logging.getLogger(__name__)


def read_source(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceError(f"{file_path} is not valid UTF-8: {exc}") from exc


@dataclass
class DiagramResult:
    title: str
    contracts: List[Contract] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class DiagramPipeline:
    """One run over one file with one configuration snapshot."""

    def __init__(
        self,
        settings: Settings,
        collections: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.settings = settings
        self.policy = FilterPolicy(settings.exclude, collections)
        self.builder = ContractModelBuilder(self.policy)

    def run(self, file_path: Path) -> str:
        source = read_source(file_path)
        return self.render(self.collect(str(file_path), source))

    def run_source(self, file_id: str, source: str) -> str:
        return self.render(self.collect(file_id, source))

    def render(self, result: DiagramResult) -> str:
        return render_diagram(
            result.contracts,
            result.edges,
            result.title,
            self.settings.disable_function_param_type,
        )

    def collect(self, file_id: str, source: str) -> DiagramResult:
        unit = CompilationUnit.build(file_id, source)
        source_file = unit.file(file_id)
        if source_file is None:
            raise PreconditionError(f"File with id {file_id} not found")

        result = DiagramResult(title=diagram_title(file_id))

        # Discovery + filtering
        declarations = parse_definitions(
            find_definitions_of_kinds(unit, source_file, CONTRACT_KINDS)
        )
        kept: List[ParsedDefinition] = []
        for definition in declarations:
            if self.policy.should_include_contract(definition):
                kept.append(definition)
            else:
                logger.debug("Excluded %s %s", definition.kind, definition.name)
                result.excluded.append(definition.name or "")
        kept_handles = {d.handle for d in kept}

        # Model building, once per declaration and once per class name
        built: Dict[DeclarationHandle, Contract] = {}
        names = set()
        for definition in kept:
            if definition.handle in built:
                continue
            if definition.name in names:
                logger.warning("Duplicate declaration of %s ignored", definition.name)
                continue
            names.add(definition.name)
            contract = self.builder.build(parse_contract_definition(unit, definition.handle))
            built[definition.handle] = contract
            result.contracts.append(contract)

        # Inheritance edges against the kept set
        for contract in result.contracts:
            for parent in contract.inherits_from:
                if parent not in kept_handles:
                    continue
                edge = format_edge(parent.name or "", contract.class_name)
                if edge not in result.edges:
                    result.edges.append(edge)

        if self.settings.check_naming:
            for contract in result.contracts:
                result.warnings.extend(check_naming(contract))

        logger.info(
            "%s: %d classes, %d edges, %d excluded",
            file_id, len(result.contracts), len(result.edges), len(result.excluded),
        )
        return result
