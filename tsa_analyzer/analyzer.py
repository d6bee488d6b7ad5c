"""Project analysis entry point coordinating the loader and detectors."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from . import config
from .config_manager import load_config, merge_settings
from .dependency_analyzer import DependencyAnalyzer
from .leak_detector import MemoryLeakDetector
from .loader import load_project
from .models import (
    AnalysisResult,
    DependencyResult,
    Health,
    MemoryLeakResult,
    PerformanceResult,
    Severity,
    Summary,
)
from .performance_analyzer import PerformanceAnalyzer

logger = logging.getLogger(__name__)


def generate_summary(
    performance: PerformanceResult,
    memory_leaks: MemoryLeakResult,
    dependencies: DependencyResult,
) -> Summary:
    """Derive issue totals and overall health.

    Circular dependencies are reported in *dependencies* but do not count
    toward the totals.
    """
    issues = performance.issues + memory_leaks.potential_leaks
    total_issues = len(issues)
    critical_issues = sum(1 for i in issues if i.severity is Severity.HIGH)

    if critical_issues > 0:
        health = Health.POOR
    elif total_issues > config.MODERATE_HEALTH_THRESHOLD:
        health = Health.MODERATE
    else:
        health = Health.GOOD

    return Summary(
        total_issues=total_issues,
        critical_issues=critical_issues,
        overall_health=health,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


class CodeAnalyzer:
    """Runs the performance, memory-leak and dependency detectors on a project."""

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        # None defers to the TOML files of the analysed project
        self.settings = merge_settings(settings) if settings is not None else None
        self.performance_analyzer = PerformanceAnalyzer()
        self.memory_leak_detector = MemoryLeakDetector()

    def analyze_project(self, project_path: Union[str, Path]) -> AnalysisResult:
        """Analyze the TypeScript project at *project_path*.

        Raises:
            ProjectNotFound: the path does not exist.
            ConfigNotFound: no tsconfig.json at or above the path.
        """
        project_path = Path(project_path)
        settings = self.settings
        if settings is None and project_path.is_dir():
            settings = load_config(project_path.resolve())

        loaded = load_project(project_path, settings=settings)
        units = loaded.units
        max_workers = settings["max_workers"] if settings else config.MAX_WORKERS
        dependency_analyzer = DependencyAnalyzer(max_workers=max_workers)

        # The detectors share only the immutable units; join all before summarising
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            perf_future = executor.submit(self.performance_analyzer.analyze, units)
            memory_future = executor.submit(self.memory_leak_detector.detect, units)
            deps_future = executor.submit(dependency_analyzer.analyze, units)
            performance = perf_future.result()
            memory_leaks = memory_future.result()
            dependencies = deps_future.result()

        summary = generate_summary(performance, memory_leaks, dependencies)
        logger.info(
            "Analysis complete: %d issue(s), %d critical, health %s",
            summary.total_issues, summary.critical_issues, summary.overall_health.value,
        )

        return AnalysisResult(
            performance=performance,
            memory_leaks=memory_leaks,
            dependencies=dependencies,
            summary=summary,
            skipped_files=[str(s.path) for s in loaded.skipped],
        )


def analyze_project(project_path: Union[str, Path]) -> AnalysisResult:
    """Convenience wrapper around :meth:`CodeAnalyzer.analyze_project`."""
    return CodeAnalyzer().analyze_project(project_path)


def filter_results(
    result: AnalysisResult,
    performance: bool = False,
    memory: bool = False,
    dependencies: bool = False,
) -> Dict[str, Any]:
    """Output mapping restricted to the requested sections.

    With no section requested everything is returned. The summary is always
    included and always reflects the full run.
    """
    full = result.to_dict()
    if not (performance or memory or dependencies):
        return full

    filtered: Dict[str, Any] = {}
    if performance:
        filtered["performance"] = full["performance"]
    if memory:
        filtered["memoryLeaks"] = full["memoryLeaks"]
    if dependencies:
        filtered["dependencies"] = full["dependencies"]
    filtered["summary"] = full["summary"]
    return filtered
