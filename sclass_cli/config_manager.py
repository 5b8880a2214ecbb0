"""Load and save sclass settings from TOML files.

Lookup order: an explicit ``--config`` path, then ``./sclass.toml``, then
``$SCLASS_HOME/config.toml``.  Missing files mean defaults.  Example::

    [exclude.contracts]
    interfaces = false
    libraries = true
    collections = ["openzeppelin"]
    contracts = ["Migrations"]
    exceptions = ["Ownable"]

    [exclude.functions]
    regexps = ["^_", "(?i)test"]
    exceptions = ["_beforeTokenTransfer"]

    [output]
    format = "mmd"
    theme = "default"

    [diagram]
    disable_function_param_type = false

    [collections]
    dirs = ["./my-collections"]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import toml

from . import config
from .errors import ConfigError
from .models import ContractExclusions, ExcludeConfig, FunctionExclusions


@dataclass(frozen=True)
class OutputConfig:
    file_path: Optional[Path] = None
    format: str = config.DEFAULT_FORMAT
    theme: str = config.DEFAULT_THEME


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of everything a run needs."""
    exclude: ExcludeConfig = field(default_factory=ExcludeConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    disable_function_param_type: bool = False
    check_naming: bool = False
    collections_dirs: Tuple[Path, ...] = ()


# ------------------------------------------------------------------
# Value parsing
# ------------------------------------------------------------------

def parse_format(value: str) -> str:
    value = value.lower()
    if value not in config.FORMATS:
        raise ConfigError(f"Invalid format: {value}")
    return value


def parse_theme(value: str) -> str:
    value = value.lower()
    if value not in config.THEMES:
        raise ConfigError(f"Invalid theme: {value}")
    return value


def compile_patterns(patterns: Iterable[str]) -> Tuple[re.Pattern, ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"Invalid function pattern {pattern!r}: {exc}") from exc
    return tuple(compiled)


def _string_list(section: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = section.get(key, [])
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(value)


# ------------------------------------------------------------------
# dict <-> Settings
# ------------------------------------------------------------------

def settings_from_dict(data: Dict[str, Any], base_dir: Optional[Path] = None) -> Settings:
    exclude = data.get("exclude", {})
    contracts = exclude.get("contracts", {})
    functions = exclude.get("functions", {})
    output = data.get("output", {})
    diagram = data.get("diagram", {})
    collections = data.get("collections", {})

    file_path = output.get("file")
    dirs = [Path(d).expanduser() for d in _string_list(collections, "dirs")]
    if base_dir is not None:
        dirs = [d if d.is_absolute() else base_dir / d for d in dirs]

    return Settings(
        exclude=ExcludeConfig(
            contracts=ContractExclusions(
                interfaces=bool(contracts.get("interfaces", False)),
                libraries=bool(contracts.get("libraries", False)),
                collections=_string_list(contracts, "collections"),
                contracts=_string_list(contracts, "contracts"),
                exceptions=_string_list(contracts, "exceptions"),
            ),
            functions=FunctionExclusions(
                regexps=compile_patterns(_string_list(functions, "regexps")),
                exceptions=_string_list(functions, "exceptions"),
            ),
        ),
        output=OutputConfig(
            file_path=Path(file_path) if file_path else None,
            format=parse_format(output.get("format", config.DEFAULT_FORMAT)),
            theme=parse_theme(output.get("theme", config.DEFAULT_THEME)),
        ),
        disable_function_param_type=bool(diagram.get("disable_function_param_type", False)),
        check_naming=bool(diagram.get("check_naming", False)),
        collections_dirs=tuple(dirs),
    )


def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    contracts = settings.exclude.contracts
    functions = settings.exclude.functions
    output: Dict[str, Any] = {
        "format": settings.output.format,
        "theme": settings.output.theme,
    }
    if settings.output.file_path is not None:
        output["file"] = str(settings.output.file_path)

    return {
        "exclude": {
            "contracts": {
                "interfaces": contracts.interfaces,
                "libraries": contracts.libraries,
                "collections": list(contracts.collections),
                "contracts": list(contracts.contracts),
                "exceptions": list(contracts.exceptions),
            },
            "functions": {
                "regexps": [p.pattern for p in functions.regexps],
                "exceptions": list(functions.exceptions),
            },
        },
        "output": output,
        "diagram": {
            "disable_function_param_type": settings.disable_function_param_type,
            "check_naming": settings.check_naming,
        },
        "collections": {"dirs": [str(d) for d in settings.collections_dirs]},
    }


# ------------------------------------------------------------------
# Files
# ------------------------------------------------------------------

def find_config_file(explicit: Optional[Path] = None, cwd: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit

    local = (cwd or Path.cwd()) / config.LOCAL_CONFIG_NAME
    if local.is_file():
        return local
    if config.CONFIG_FILE.is_file():
        return config.CONFIG_FILE
    return None


def load_settings(explicit: Optional[Path] = None, cwd: Optional[Path] = None) -> Settings:
    """Load settings from the first config file found, or defaults."""
    path = find_config_file(explicit, cwd)
    if path is None:
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc

    return settings_from_dict(data, base_dir=path.parent)


def save_settings(settings: Settings, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        toml.dump(settings_to_dict(settings), f)
    return path
