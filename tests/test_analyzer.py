"""Tests for the project-level aggregator."""

from datetime import datetime
from pathlib import Path

import pytest

from tsa_analyzer import analyze_project
from tsa_analyzer.analyzer import CodeAnalyzer, filter_results, generate_summary
from tsa_analyzer.errors import ConfigNotFound, ProjectNotFound
from tsa_analyzer.models import (
    DependencyResult,
    Health,
    Issue,
    IssueKind,
    MemoryLeakResult,
    PerformanceResult,
    Severity,
)


def _issues(count: int, severity: Severity = Severity.LOW, kind: IssueKind = IssueKind.PERFORMANCE):
    return [
        Issue(
            kind=kind,
            category="memory",
            severity=severity,
            file="a.ts",
            line=i + 1,
            description="d",
            suggestion="s",
        )
        for i in range(count)
    ]


class TestSummary:
    """Test totals and health classification."""

    def test_good(self):
        summary = generate_summary(
            PerformanceResult(issues=_issues(4)),
            MemoryLeakResult(potential_leaks=_issues(6, kind=IssueKind.MEMORY)),
            DependencyResult(),
        )
        assert summary.total_issues == 10
        assert summary.critical_issues == 0
        assert summary.overall_health is Health.GOOD

    def test_moderate_above_ten(self):
        summary = generate_summary(
            PerformanceResult(issues=_issues(5, Severity.MEDIUM)),
            MemoryLeakResult(potential_leaks=_issues(6, kind=IssueKind.MEMORY)),
            DependencyResult(),
        )
        assert summary.total_issues == 11
        assert summary.overall_health is Health.MODERATE

    def test_poor_with_single_high(self):
        summary = generate_summary(
            PerformanceResult(),
            MemoryLeakResult(potential_leaks=_issues(1, Severity.HIGH, IssueKind.MEMORY)),
            DependencyResult(),
        )
        assert summary.total_issues == 1
        assert summary.critical_issues == 1
        assert summary.overall_health is Health.POOR

    def test_cycles_not_counted(self):
        summary = generate_summary(
            PerformanceResult(),
            MemoryLeakResult(),
            DependencyResult(circular_dependencies=[["a.ts", "b.ts"]] * 20),
        )
        assert summary.total_issues == 0
        assert summary.overall_health is Health.GOOD

    def test_timestamp_is_iso(self):
        summary = generate_summary(PerformanceResult(), MemoryLeakResult(), DependencyResult())
        assert datetime.fromisoformat(summary.timestamp).tzinfo is not None


class TestAnalyzeProject:
    """End-to-end analysis runs."""

    def test_sample_project(self, sample_project_path: Path):
        result = analyze_project(sample_project_path)
        root = sample_project_path.resolve()

        store = str(root / "src" / "store.ts")
        fmt = str(root / "src" / "utils" / "format.ts")
        assert result.dependencies.circular_dependencies == [[store, fmt]]
        assert result.dependencies.metrics.total_files == 3

        assert [i.category for i in result.performance.issues] == ["loop"]
        assert [i.category for i in result.memory_leaks.potential_leaks] == ["ObjectAccumulation"]
        assert result.performance.metrics.cyclomatic_complexity == 6

        summary = result.summary
        assert summary.total_issues == 2
        assert summary.critical_issues == 1
        assert summary.overall_health is Health.POOR

    def test_total_issues_invariant(self, make_project):
        root = make_project({
            "a.ts": "import { b } from './b';\nsetTimeout(run, 10);\nlist.push(1);\n",
            "b.ts": "import { a } from './a';\nconst c = x.concat(y);\n",
        })

        result = CodeAnalyzer().analyze_project(root)

        assert result.summary.total_issues == (
            len(result.performance.issues) + len(result.memory_leaks.potential_leaks)
        )
        assert result.dependencies.circular_dependencies == [
            [str(root / "a.ts"), str(root / "b.ts")]
        ]

    def test_missing_project(self, temp_dir: Path):
        with pytest.raises(ProjectNotFound):
            analyze_project(temp_dir / "missing")

    def test_missing_tsconfig(self, make_project):
        root = make_project({"a.ts": "export const a = 1;\n"}, tsconfig=False)
        with pytest.raises(ConfigNotFound):
            analyze_project(root)

    def test_bad_file_does_not_abort_run(self, make_project):
        root = make_project({"good.ts": "setInterval(tick, 5);\n"})
        (root / "bad.ts").write_bytes(b"\xff\xff\xff")

        result = analyze_project(root)

        assert result.skipped_files == [str(root / "bad.ts")]
        assert len(result.memory_leaks.potential_leaks) == 1

    def test_partial_settings(self, make_project):
        root = make_project({
            "a.ts": "export const a = 1;\n",
            "b.ts": "setInterval(tick, 5);\n",
        })

        result = CodeAnalyzer(settings={"exclude": ["b.ts"]}).analyze_project(root)

        assert result.memory_leaks.potential_leaks == []
        assert result.dependencies.metrics.total_files == 1

    def test_tsconfig_exclude_hides_spec_files(self, make_project):
        root = make_project({
            "tsconfig.json": '{"include": ["src"], "exclude": ["**/*.spec.ts"]}',
            "src/a.ts": "export const a = 1;\n",
            "src/a.spec.ts": "setInterval(tick, 5);\n",
        })

        result = analyze_project(root)

        assert result.memory_leaks.potential_leaks == []
        assert [n.name for n in result.dependencies.graph] == [str(root / "src" / "a.ts")]


class TestOutputShape:
    """Test the serialized result record."""

    def test_to_dict_keys(self, sample_project_path: Path):
        data = analyze_project(sample_project_path).to_dict()

        assert set(data) == {"performance", "memoryLeaks", "dependencies", "summary"}
        assert set(data["performance"]["metrics"]) == {
            "cyclomaticComplexity", "maintainabilityIndex", "linesOfCode",
        }
        assert set(data["dependencies"]["metrics"]) == {
            "totalFiles", "averageDependencies", "maxDependencies",
        }
        assert data["summary"]["overallHealth"] == "poor"
        assert data["memoryLeaks"]["severity"] == "low"
        issue = data["performance"]["issues"][0]
        assert issue["type"] == "loop"
        assert issue["severity"] == "high"

    def test_filter_results(self, sample_project_path: Path):
        result = analyze_project(sample_project_path)

        only_deps = filter_results(result, dependencies=True)
        assert set(only_deps) == {"dependencies", "summary"}

        everything = filter_results(result)
        assert set(everything) == {"performance", "memoryLeaks", "dependencies", "summary"}
