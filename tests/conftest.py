"""Pytest configuration and fixtures for analyzer tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from tsa_analyzer.models import SourceUnit
from tsa_analyzer.parser import TreeSitterParser


@pytest.fixture(autouse=True)
def _isolate_user_config(monkeypatch, tmp_path_factory):
    """Keep a developer's ~/.tsa/config.toml out of the tests."""
    home = tmp_path_factory.mktemp("tsa_home")
    monkeypatch.setattr("tsa_analyzer.config.BASE_DIR", home)
    monkeypatch.setattr("tsa_analyzer.config.CONFIG_FILE", home / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp.resolve()
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def ts_parser() -> TreeSitterParser:
    return TreeSitterParser()


@pytest.fixture
def make_unit(ts_parser) -> Callable[..., SourceUnit]:
    """Build a SourceUnit from inline TypeScript without touching disk."""

    def _make(source: str, name: str = "sample.ts") -> SourceUnit:
        path = Path("/project") / name
        return SourceUnit(
            path=path,
            root=ts_parser.parse_source(path, source),
            text_length=len(source),
            line_count=source.count("\n") + 1,
        )

    return _make


@pytest.fixture
def make_project(temp_dir: Path) -> Callable[..., Path]:
    """Write a project tree (optionally with tsconfig.json) and return its root."""

    def _make(files: Dict[str, str], tsconfig: bool = True) -> Path:
        root = temp_dir / "project"
        root.mkdir(parents=True, exist_ok=True)
        if tsconfig:
            (root / "tsconfig.json").write_text('{"compilerOptions": {"strict": true}}')
        for rel, content in files.items():
            file_path = root / rel
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
        return root

    return _make


@pytest.fixture
def sample_project_path() -> Path:
    """Path to the checked-in sample TypeScript project."""
    return Path(__file__).parent / "fixtures" / "sample_project"
