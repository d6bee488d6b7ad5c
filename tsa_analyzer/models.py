"""Core data models shared by the loader, detectors and aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .parser import SyntaxNode


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IssueKind(str, Enum):
    PERFORMANCE = "performance"
    MEMORY = "memory"


class Health(str, Enum):
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


@dataclass(frozen=True)
class SourceUnit:
    """One parsed source file. Identity is the resolved path."""

    path: Path
    root: "SyntaxNode"
    text_length: int
    line_count: int


@dataclass(frozen=True)
class FileParseResult:
    """Success-or-skip outcome of loading a single file."""

    path: Path
    unit: Optional[SourceUnit] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.unit is not None


@dataclass
class LoadResult:
    manifest: Path
    units: List[SourceUnit] = field(default_factory=list)
    skipped: List[FileParseResult] = field(default_factory=list)


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    category: str
    severity: Severity
    file: str
    line: int
    description: str
    suggestion: str
    code: Optional[str] = None

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.category,
            "severity": self.severity.value,
            "location": self.location,
            "file": self.file,
            "line": self.line,
            "description": self.description,
            "suggestion": self.suggestion,
        }
        if self.code is not None:
            data["code"] = self.code
        return data


@dataclass
class PerformanceMetrics:
    cyclomatic_complexity: int = 0
    maintainability_index: int = 0
    lines_of_code: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "cyclomaticComplexity": self.cyclomatic_complexity,
            "maintainabilityIndex": self.maintainability_index,
            "linesOfCode": self.lines_of_code,
        }


@dataclass
class PerformanceResult:
    issues: List[Issue] = field(default_factory=list)
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": [i.to_dict() for i in self.issues],
            "metrics": self.metrics.to_dict(),
            "recommendations": list(self.recommendations),
        }


@dataclass
class MemoryLeakResult:
    potential_leaks: List[Issue] = field(default_factory=list)
    severity: Severity = Severity.LOW
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "potentialLeaks": [i.to_dict() for i in self.potential_leaks],
            "severity": self.severity.value,
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class DependencyEdge:
    source: str
    target: str


@dataclass
class DependencyNode:
    name: str
    dependencies: List[str] = field(default_factory=list)

    @property
    def weight(self) -> int:
        return len(self.dependencies)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.name, "dependencies": list(self.dependencies), "weight": self.weight}


@dataclass
class DependencyMetrics:
    total_files: int = 0
    average_dependencies: float = 0.0
    max_dependencies: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "averageDependencies": self.average_dependencies,
            "maxDependencies": self.max_dependencies,
        }


@dataclass
class DependencyResult:
    graph: List[DependencyNode] = field(default_factory=list)
    circular_dependencies: List[List[str]] = field(default_factory=list)
    metrics: DependencyMetrics = field(default_factory=DependencyMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graph": [n.to_dict() for n in self.graph],
            "circularDependencies": [list(c) for c in self.circular_dependencies],
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class Summary:
    total_issues: int
    critical_issues: int
    overall_health: Health
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalIssues": self.total_issues,
            "criticalIssues": self.critical_issues,
            "overallHealth": self.overall_health.value,
            "timestamp": self.timestamp,
        }


@dataclass
class AnalysisResult:
    performance: PerformanceResult
    memory_leaks: MemoryLeakResult
    dependencies: DependencyResult
    summary: Summary
    skipped_files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "performance": self.performance.to_dict(),
            "memoryLeaks": self.memory_leaks.to_dict(),
            "dependencies": self.dependencies.to_dict(),
            "summary": self.summary.to_dict(),
        }
