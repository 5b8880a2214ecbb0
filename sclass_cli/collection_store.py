"""Named collections of well-known library contracts."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from . import config
from .errors import CollectionError

logger = logging.getLogger(__name__)


def read_collection(path: Path) -> List[str]:
    """Read one collection file: a JSON array of contract names."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CollectionError(f"Could not read collection {path}: {exc}") from exc

    if not isinstance(data, list) or not all(isinstance(name, str) for name in data):
        raise CollectionError(f"Collection {path} must be a JSON array of strings")
    return data


def load_collections(extra_dirs: Iterable[Path] = ()) -> Dict[str, List[str]]:
    """Load built-in collections, then user directories (later names win)."""
    tables: Dict[str, List[str]] = {}
    for directory in (config.BUILTIN_COLLECTIONS_DIR, *extra_dirs):
        if not directory.is_dir():
            logger.warning("Collections directory %s does not exist", directory)
            continue
        for path in sorted(directory.glob("*.json")):
            if path.stem in tables:
                logger.debug("Collection %s overridden by %s", path.stem, path)
            tables[path.stem] = read_collection(path)
    return tables
