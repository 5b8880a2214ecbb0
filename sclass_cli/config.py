"""Configuration paths and fixed vocabularies for sclass."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("SCLASS_HOME", str(Path.home() / ".sclass"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
LOCAL_CONFIG_NAME = "sclass.toml"
BUILTIN_COLLECTIONS_DIR = Path(__file__).parent / "data" / "collections"

SOLIDITY_EXTENSION = ".sol"
FORMATS = ("mmd", "svg", "png", "pdf", "md")
RASTER_FORMATS = {"svg", "png", "pdf"}
THEMES = ("default", "forest", "dark", "neutral")
DEFAULT_FORMAT = "mmd"
DEFAULT_THEME = "default"
