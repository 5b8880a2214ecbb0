"""Write diagrams as Mermaid text, Markdown, or images rendered by ``mmdc``."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from . import config
from .config_manager import OutputConfig
from .errors import RenderError

logger = logging.getLogger(__name__)


def resolve_output_path(output: OutputConfig, input_path: Path) -> Optional[Path]:
    """Where to write, or None for stdout (plain Mermaid without ``--output``)."""
    file_path = output.file_path
    if file_path is None:
        if output.format == config.DEFAULT_FORMAT:
            return None
        file_path = Path(f"{input_path.name.split('.')[0]}.{output.format}")
    if file_path.suffix == "":
        file_path = file_path.with_name(f"{file_path.name}.{output.format}")
    return file_path


def to_markdown(diagram: str) -> str:
    return f"```mermaid\n{diagram.rstrip()}\n```\n"


def _mmdc_command() -> List[str]:
    mmdc = shutil.which("mmdc")
    if mmdc:
        return [mmdc]
    return ["npx", "--yes", "-p", "@mermaid-js/mermaid-cli", "mmdc"]


def render_image(diagram: str, output_file: Path, theme: str) -> None:
    """Rasterise *diagram* with the Mermaid CLI, reading the text from stdin."""
    command = _mmdc_command() + [
        "--input", "-",
        "--output", str(output_file),
        "--theme", theme,
    ]
    logger.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            input=diagram,
            capture_output=True,
            text=True,
            timeout=180,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise RenderError(f"Could not run the Mermaid CLI: {exc}") from exc

    if result.returncode != 0:
        raise RenderError(result.stderr.strip() or f"mmdc exited with code {result.returncode}")
    if result.stderr:
        logger.warning(result.stderr.strip())


def write_output(diagram: str, output: OutputConfig, input_path: Path) -> Optional[Path]:
    """Write *diagram* according to *output*; returns the path written, if any."""
    output_file = resolve_output_path(output, input_path)
    if output_file is None:
        return None

    output_file.parent.mkdir(parents=True, exist_ok=True)
    if output.format in config.RASTER_FORMATS:
        render_image(diagram, output_file, output.theme)
    elif output.format == "md":
        output_file.write_text(to_markdown(diagram), encoding="utf-8")
    else:
        output_file.write_text(diagram, encoding="utf-8")
    return output_file
