"""TypeScript project analyzer: performance, memory-leak and dependency checks."""

from __future__ import annotations

__version__ = "2.0.0"

from .analyzer import CodeAnalyzer, analyze_project  # noqa: E402

__all__ = ["CodeAnalyzer", "analyze_project", "__version__"]
