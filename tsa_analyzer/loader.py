"""Resolve a project root and load its source files as syntax trees."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from . import config
from .config_manager import load_config, merge_settings
from .errors import ConfigNotFound, ParseError, ProjectNotFound
from .models import FileParseResult, LoadResult, SourceUnit
from .parser import Parser, TreeSitterParser
from .tsconfig import TsConfigScope

logger = logging.getLogger(__name__)


def find_manifest(project_root: Path) -> Path:
    """Walk upward from *project_root* until a ``tsconfig.json`` is found."""
    for directory in [project_root, *project_root.parents]:
        candidate = directory / config.MANIFEST_NAME
        if candidate.is_file():
            return candidate
    raise ConfigNotFound(project_root)


def _is_excluded(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatch(rel_path, p) for p in patterns)


def discover_files(
    project_root: Path,
    extensions: Iterable[str],
    exclude: Iterable[str] = (),
    scope: Optional[TsConfigScope] = None,
) -> List[Path]:
    """Return in-scope source files under *project_root*, sorted.

    A file must pass ``SKIP_DIRS``, the *exclude* globs and, when given,
    the tsconfig *scope*.
    """
    extensions = set(extensions)
    exclude = list(exclude)
    files: List[Path] = []
    for file_path in sorted(project_root.rglob("*")):
        if not file_path.is_file() or file_path.suffix not in extensions:
            continue
        rel = file_path.relative_to(project_root)
        if any(part in config.SKIP_DIRS for part in rel.parts[:-1]):
            continue
        if _is_excluded(rel.as_posix(), exclude):
            logger.debug("Excluded by pattern: %s", rel)
            continue
        if scope is not None and not scope.contains(file_path):
            logger.debug("Outside tsconfig scope: %s", rel)
            continue
        files.append(file_path)
    return files


def load_file(parser: Parser, file_path: Path) -> FileParseResult:
    """Parse one file into a :class:`SourceUnit`, or record why it was skipped."""
    try:
        source = parser.read_source(file_path)
        root = parser.parse_source(file_path, source)
    except ParseError as exc:
        logger.warning("Skipping %s: %s", file_path, exc.reason)
        return FileParseResult(path=file_path, error=exc.reason)

    unit = SourceUnit(
        path=file_path,
        root=root,
        text_length=len(source),
        line_count=source.count("\n") + 1,
    )
    return FileParseResult(path=file_path, unit=unit)


def load_project(
    project_root: Path,
    settings: Optional[Dict[str, Any]] = None,
    parser: Optional[Parser] = None,
) -> LoadResult:
    """Load every in-scope source file of the project at *project_root*.

    Raises:
        ProjectNotFound: *project_root* does not exist.
        ConfigNotFound: no ``tsconfig.json`` at or above *project_root*.
    """
    project_root = Path(project_root)
    if not project_root.is_dir():
        raise ProjectNotFound(project_root)
    project_root = project_root.resolve()

    manifest = find_manifest(project_root)
    logger.info("Using tsconfig from: %s", manifest)

    if settings is None:
        settings = load_config(project_root)
    else:
        settings = merge_settings(settings)
    if parser is None:
        parser = TreeSitterParser(strict=bool(settings["skip_syntax_errors"]))

    scope = TsConfigScope.from_manifest(manifest)
    result = LoadResult(manifest=manifest)
    for file_path in discover_files(
        project_root, settings["extensions"], settings["exclude"], scope=scope,
    ):
        parsed = load_file(parser, file_path)
        if parsed.ok:
            result.units.append(parsed.unit)
        else:
            result.skipped.append(parsed)

    logger.info(
        "Loaded %d source file(s), skipped %d", len(result.units), len(result.skipped),
    )
    return result
