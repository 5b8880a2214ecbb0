"""Tests for writing diagrams to disk and the Mermaid CLI bridge."""

import subprocess
from pathlib import Path

import pytest

from sclass_cli import exporter
from sclass_cli.config_manager import OutputConfig
from sclass_cli.errors import RenderError

DIAGRAM = "---\ntitle: T Class Diagram\n---\nclassDiagram\n"


class TestResolveOutputPath:

    def test_plain_mermaid_goes_to_stdout(self):
        assert exporter.resolve_output_path(OutputConfig(), Path("a/Vault.sol")) is None

    def test_other_formats_default_to_stem(self):
        path = exporter.resolve_output_path(OutputConfig(format="svg"), Path("a/Vault.sol"))
        assert path == Path("Vault.svg")

    def test_missing_suffix_is_added(self):
        output = OutputConfig(file_path=Path("out/diagram"), format="png")
        assert exporter.resolve_output_path(output, Path("Vault.sol")) == Path("out/diagram.png")

    def test_explicit_path_kept(self):
        output = OutputConfig(file_path=Path("d.mmd"))
        assert exporter.resolve_output_path(output, Path("Vault.sol")) == Path("d.mmd")


def test_markdown_fence():
    assert exporter.to_markdown(DIAGRAM) == f"```mermaid\n{DIAGRAM.rstrip()}\n```\n"


def test_write_text_formats(temp_dir: Path):
    target = temp_dir / "nested" / "out.mmd"
    written = exporter.write_output(DIAGRAM, OutputConfig(file_path=target), Path("T.sol"))
    assert written == target
    assert target.read_text(encoding="utf-8") == DIAGRAM

    md = temp_dir / "out.md"
    exporter.write_output(DIAGRAM, OutputConfig(file_path=md, format="md"), Path("T.sol"))
    assert md.read_text(encoding="utf-8").startswith("```mermaid\n")


def test_stdout_writes_nothing(temp_dir: Path):
    assert exporter.write_output(DIAGRAM, OutputConfig(), Path("T.sol")) is None
    assert list(Path.cwd().iterdir()) == []


class TestRenderImage:
    """Tests for the mmdc subprocess call."""

    def test_passes_diagram_on_stdin(self, temp_dir: Path, monkeypatch):
        calls = []

        def fake_run(command, **kwargs):
            calls.append((command, kwargs))
            return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

        monkeypatch.setattr(exporter.shutil, "which", lambda name: "/usr/bin/mmdc")
        monkeypatch.setattr(exporter.subprocess, "run", fake_run)

        output = OutputConfig(file_path=temp_dir / "d.svg", format="svg", theme="dark")
        exporter.write_output(DIAGRAM, output, Path("T.sol"))

        command, kwargs = calls[0]
        assert command[0] == "/usr/bin/mmdc"
        assert command[command.index("--theme") + 1] == "dark"
        assert command[command.index("--output") + 1] == str(temp_dir / "d.svg")
        assert kwargs["input"] == DIAGRAM

    def test_falls_back_to_npx(self, monkeypatch):
        monkeypatch.setattr(exporter.shutil, "which", lambda name: None)
        assert exporter._mmdc_command()[0] == "npx"

    def test_nonzero_exit_raises(self, temp_dir: Path, monkeypatch):
        monkeypatch.setattr(
            exporter.subprocess, "run",
            lambda command, **kwargs: subprocess.CompletedProcess(command, 1, "", "parse error"),
        )
        with pytest.raises(RenderError, match="parse error"):
            exporter.render_image(DIAGRAM, temp_dir / "d.png", "default")

    def test_missing_binary_raises(self, temp_dir: Path, monkeypatch):
        def fake_run(command, **kwargs):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(exporter.subprocess, "run", fake_run)
        with pytest.raises(RenderError, match="Could not run"):
            exporter.render_image(DIAGRAM, temp_dir / "d.pdf", "default")
