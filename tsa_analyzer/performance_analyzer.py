"""Performance issue analyzer."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Tuple

from . import config
from .models import Issue, IssueKind, PerformanceMetrics, PerformanceResult, Severity, SourceUnit
from .parser import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

# Descendant kinds that add a branch to a function's control flow
DECISION_KINDS = {
    NodeKind.CONDITIONAL,
    NodeKind.LOOP,
    NodeKind.SWITCH_CASE,
    NodeKind.CATCH_CLAUSE,
    NodeKind.TERNARY,
}
LOGICAL_OPERATORS = {"&&", "||"}
CHURN_CALLS = ("concat", "splice")

RECOMMENDATIONS: Dict[str, Tuple[str, ...]] = {
    "loop": (
        "Consider using array methods (map, filter, reduce) instead of loops where possible",
        "Review nested loops for potential optimization opportunities",
    ),
    "memory": (
        "Implement pagination for large data sets",
        "Use memory-efficient data structures for large collections",
    ),
    "complexity": (
        "Break down complex functions into smaller, more manageable pieces",
        "Consider implementing a service layer to better separate concerns",
    ),
}


def maintainability_index(lines_of_code: int, complexity: int) -> int:
    """Simplified maintainability index, 0 (worst) to 100 (best)."""
    if lines_of_code <= 0:
        return 100
    hv = math.log(lines_of_code) * 5.2
    cc = complexity * 0.23
    index = max(0.0, (171 - hv - cc) * 100 / 171)
    return int(math.floor(index + 0.5))


def cyclomatic_complexity(func: SyntaxNode) -> int:
    """1 plus the number of decision points anywhere below *func*."""
    complexity = 1
    for child in func.descendants():
        kind = child.kind
        if kind in DECISION_KINDS:
            complexity += 1
        elif kind is NodeKind.BINARY:
            operator = child.field("operator")
            if operator is not None and operator.text in LOGICAL_OPERATORS:
                complexity += 1
    return complexity


class PerformanceAnalyzer:
    """Analyze syntax trees for performance issues."""

    def analyze(self, units: Iterable[SourceUnit]) -> PerformanceResult:
        """Analyze every unit and aggregate project-wide metrics.

        Args:
            units: Parsed source files

        Returns:
            Issues, metrics and canned recommendations
        """
        logger.info("Starting performance analysis")
        issues: List[Issue] = []
        metrics = PerformanceMetrics()

        for unit in units:
            try:
                unit_issues, complexity = self.analyze_unit(unit)
            except Exception as exc:
                logger.error("Error analyzing file %s: %s", unit.path, exc, exc_info=True)
                continue
            issues.extend(unit_issues)
            metrics.cyclomatic_complexity += complexity
            metrics.lines_of_code += unit.line_count

        metrics.maintainability_index = maintainability_index(
            metrics.lines_of_code, metrics.cyclomatic_complexity,
        )

        return PerformanceResult(
            issues=issues,
            metrics=metrics,
            recommendations=self.generate_recommendations(issues),
        )

    def analyze_unit(self, unit: SourceUnit) -> Tuple[List[Issue], int]:
        """Return the issues found in *unit* and its summed function complexity."""
        file = str(unit.path)
        issues = self._detect_nested_loops(unit.root, file)
        issues += self._detect_memory_usage(unit.root, file)
        complexity_issues, complexity = self._analyze_function_complexity(unit.root, file)
        issues += complexity_issues
        return issues, complexity

    def _detect_nested_loops(self, root: SyntaxNode, file: str) -> List[Issue]:
        issues = []

        for node in root.descendants():
            if node.kind is not NodeKind.LOOP:
                continue
            # One report per nested loop, at the inner loop
            if any(a.kind is NodeKind.LOOP for a in node.ancestors()):
                issues.append(Issue(
                    kind=IssueKind.PERFORMANCE,
                    category="loop",
                    severity=Severity.HIGH,
                    file=file,
                    line=node.line,
                    description="Nested loop detected - potential performance issue",
                    suggestion="Consider restructuring to avoid nested loops or use array methods",
                    code=node.text,
                ))

        return issues

    def _detect_memory_usage(self, root: SyntaxNode, file: str) -> List[Issue]:
        """Detect large array literals and memory-churning array calls."""
        issues = []

        for node in root.descendants():
            kind = node.kind

            if kind is NodeKind.ARRAY_LITERAL:
                if len(node.named_children) > config.LARGE_ARRAY_THRESHOLD:
                    issues.append(Issue(
                        kind=IssueKind.PERFORMANCE,
                        category="memory",
                        severity=Severity.MEDIUM,
                        file=file,
                        line=node.line,
                        description="Large array literal detected",
                        suggestion="Consider loading large arrays dynamically or paginating",
                        code=node.text[:config.CODE_EXCERPT_LIMIT] + "...",
                    ))

            elif kind is NodeKind.CALL:
                call = node.text
                if any(name in call for name in CHURN_CALLS):
                    issues.append(Issue(
                        kind=IssueKind.PERFORMANCE,
                        category="memory",
                        severity=Severity.LOW,
                        file=file,
                        line=node.line,
                        description="Memory-intensive array operation detected",
                        suggestion="Consider using more efficient array operations",
                        code=call,
                    ))

        return issues

    def _analyze_function_complexity(self, root: SyntaxNode, file: str) -> Tuple[List[Issue], int]:
        issues = []
        total = 0

        for node in root.descendants():
            if node.kind not in (NodeKind.FUNCTION_DECLARATION, NodeKind.METHOD):
                continue

            complexity = cyclomatic_complexity(node)
            total += complexity

            if complexity > config.COMPLEXITY_THRESHOLD:
                name = node.field("name")
                issues.append(Issue(
                    kind=IssueKind.PERFORMANCE,
                    category="complexity",
                    severity=(
                        Severity.HIGH
                        if complexity > config.HIGH_COMPLEXITY_THRESHOLD
                        else Severity.MEDIUM
                    ),
                    file=file,
                    line=node.line,
                    description=f"High cyclomatic complexity ({complexity})",
                    suggestion="Consider breaking down this function into smaller functions",
                    code=name.text if name is not None else "anonymous function",
                ))

        return issues, total

    @staticmethod
    def generate_recommendations(issues: Iterable[Issue]) -> List[str]:
        categories = {issue.category for issue in issues}
        recommendations: List[str] = []
        for category, texts in RECOMMENDATIONS.items():
            if category in categories:
                recommendations.extend(texts)
        return recommendations
