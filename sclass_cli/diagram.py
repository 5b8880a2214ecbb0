"""Mermaid ``classDiagram`` rendering."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

from .models import MUTABILITY_GLYPHS, VISIBILITY_GLYPHS, Contract, Declaration

MARGIN = "\t"


def diagram_title(input_path: str) -> str:
    return Path(input_path).name.split(".")[0]


def format_edge(parent: str, child: str) -> str:
    return f"{parent} <|-- {child}"


def params_to_string(params: Sequence[Declaration], disable_function_param_type: bool) -> str:
    if disable_function_param_type:
        return ", ".join(p.name or p.type for p in params)
    return ", ".join(f"{p.type} {p.name}".strip() for p in params)


def contract_to_mermaid(contract: Contract, disable_function_param_type: bool = False) -> str:
    lines = [f"{MARGIN}class {contract.class_name} {{"]

    for field in contract.fields:
        lines.append(
            f"{MARGIN}\t{VISIBILITY_GLYPHS[field.visibility]} {field.type} {field.name}"
        )

    for mapping in contract.mappings:
        lines.append(
            f"{MARGIN}\t{VISIBILITY_GLYPHS[mapping.visibility]} "
            f"mapping({mapping.key} => {mapping.value}) {mapping.name}"
        )

    for method in contract.methods:
        glyphs = VISIBILITY_GLYPHS[method.visibility] + MUTABILITY_GLYPHS[method.state_mutability]
        params = params_to_string(method.params, disable_function_param_type)
        line = f"{MARGIN}\t{glyphs} {method.name}({params})"
        if method.return_type:
            line += f" {method.return_type}"
        lines.append(line)

    lines.append(f"{MARGIN}}}")
    return "\n".join(lines) + "\n"


def render_diagram(
    contracts: Iterable[Contract],
    edges: Iterable[str],
    title: str,
    disable_function_param_type: bool = False,
) -> str:
    """Header, class blocks in input order, then one line per edge."""
    parts: List[str] = [
        "---",
        f"title: {title} Class Diagram",
        "---",
        "classDiagram",
        "",
    ]
    for contract in contracts:
        parts.append(contract_to_mermaid(contract, disable_function_param_type))
    for edge in edges:
        parts.append(f"{MARGIN}{edge}")
    return "\n".join(parts).rstrip() + "\n"
