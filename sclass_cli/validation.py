"""Naming checks: internal members are expected to start with ``_``."""

from __future__ import annotations

import logging
from typing import List

from .models import Contract

logger = logging.getLogger(__name__)


def _check(kind: str, owner: str, name: str, visibility: str) -> List[str]:
    if visibility == "internal" and not name.startswith("_"):
        return [f"Internal {kind} with name not starting with '_': {owner}.{name}"]
    return []


def check_naming(contract: Contract) -> List[str]:
    warnings: List[str] = []
    for item in contract.fields:
        warnings += _check("variable", contract.class_name, item.name, item.visibility)
    for item in contract.mappings:
        warnings += _check("mapping", contract.class_name, item.name, item.visibility)
    for item in contract.methods:
        warnings += _check("function", contract.class_name, item.name, item.visibility)

    for warning in warnings:
        logger.info(warning)
    return warnings
