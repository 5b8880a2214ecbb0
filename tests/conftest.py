"""Pytest configuration and fixtures for sclass tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from sclass_cli.config_manager import Settings
from sclass_cli.syntax import CompilationUnit

SOL_DIR = Path(__file__).parent / "fixtures" / "solidity"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(autouse=True)
def _isolated_config(temp_dir: Path, monkeypatch):
    """Keep tests away from the user's ~/.sclass and any ./sclass.toml."""
    home = temp_dir / "home"
    monkeypatch.setattr("sclass_cli.config.BASE_DIR", home)
    monkeypatch.setattr("sclass_cli.config.CONFIG_FILE", home / "config.toml")
    work = temp_dir / "work"
    work.mkdir()
    monkeypatch.chdir(work)


@pytest.fixture
def test_contract_path() -> Path:
    return SOL_DIR / "TestContract.sol"


@pytest.fixture
def vault_path() -> Path:
    return SOL_DIR / "Vault.sol"


@pytest.fixture
def build_unit() -> Callable[[str, str], CompilationUnit]:
    """Build a compilation unit from inline Solidity source."""
    def _build(source: str, file_id: str = "Inline.sol") -> CompilationUnit:
        return CompilationUnit.build(file_id, source)
    return _build


@pytest.fixture
def default_settings() -> Settings:
    return Settings()


@pytest.fixture
def base_child_source() -> str:
    return '''pragma solidity ^0.8.0;

contract Base {
    function baseFunc() public pure returns(uint256) {}
}

contract Child is Base {}
'''
