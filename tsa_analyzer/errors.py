"""Error taxonomy for the analysis pipeline."""

from __future__ import annotations

from pathlib import Path


class AnalyzerError(Exception):
    """Base class for analyzer failures."""


class ProjectNotFound(AnalyzerError):
    """The project root does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Project path does not exist: {path}")


class ConfigNotFound(AnalyzerError):
    """No tsconfig.json was found walking upward from the project root."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No tsconfig.json found in project: {path}")


class ParseError(AnalyzerError):
    """A single source file could not be parsed.

    Raised by the parser and absorbed by the loader, which drops the file
    from the run.
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")
