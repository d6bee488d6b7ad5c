"""Memory-leak pattern detection over TypeScript syntax trees.

Every check is a textual heuristic on the shape of a node: a listener is
"leaked" if its callee mentions ``addEventListener``, a closure if its body
mentions ``this.``/``state``/``props``. Nothing here proves a real leak.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from .models import Issue, IssueKind, MemoryLeakResult, Severity, SourceUnit
from .parser import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

GENERAL_SUGGESTIONS = (
    "Implement proper cleanup in component lifecycle methods",
    "Use weak references for cache implementations",
    "Consider using a memory profiler for detailed analysis",
)

CLOSURE_CAPTURE_MARKERS = ("this.", "state", "props")
TIMER_CALLS = ("setInterval", "setTimeout")
ACCUMULATION_MARKERS = (".push", ".unshift")


def _callee_text(call: SyntaxNode) -> str:
    callee = call.field("function")
    return callee.text if callee is not None else ""


class MemoryLeakDetector:
    """Detect constructs that commonly keep memory alive."""

    def detect(self, units: Iterable[SourceUnit]) -> MemoryLeakResult:
        logger.info("Starting memory leak detection")
        issues: List[Issue] = []

        for unit in units:
            issues.extend(self.detect_unit(unit))

        return MemoryLeakResult(
            potential_leaks=issues,
            severity=self.overall_severity(issues),
            suggestions=self.generate_suggestions(issues),
        )

    def detect_unit(self, unit: SourceUnit) -> List[Issue]:
        file = str(unit.path)
        return (
            self._detect_event_listener_leaks(unit.root, file)
            + self._detect_closure_leaks(unit.root, file)
            + self._detect_timer_leaks(unit.root, file)
            + self._detect_object_accumulation(unit.root, file)
        )

    def _detect_event_listener_leaks(self, root: SyntaxNode, file: str) -> List[Issue]:
        issues = []
        for node in root.descendants():
            if node.kind is NodeKind.CALL and "addEventListener" in _callee_text(node):
                issues.append(Issue(
                    kind=IssueKind.MEMORY,
                    category="EventListenerLeak",
                    severity=Severity.MEDIUM,
                    file=file,
                    line=node.line,
                    description="Potential event listener leak detected",
                    suggestion="Ensure event listener is removed when component is destroyed",
                ))
        return issues

    def _detect_closure_leaks(self, root: SyntaxNode, file: str) -> List[Issue]:
        """Flag closures whose text references component state or ``this``."""
        issues = []
        for node in root.descendants():
            if node.kind not in (NodeKind.ARROW_FUNCTION, NodeKind.FUNCTION_DECLARATION):
                continue
            text = node.text
            if any(marker in text for marker in CLOSURE_CAPTURE_MARKERS):
                issues.append(Issue(
                    kind=IssueKind.MEMORY,
                    category="ClosureLeak",
                    severity=Severity.LOW,
                    file=file,
                    line=node.line,
                    description="Potential closure leak detected",
                    suggestion="Be careful with closures that capture component state or props",
                ))
        return issues

    def _detect_timer_leaks(self, root: SyntaxNode, file: str) -> List[Issue]:
        issues = []
        for node in root.descendants():
            if node.kind is not NodeKind.CALL:
                continue
            callee = _callee_text(node)
            if any(name in callee for name in TIMER_CALLS):
                issues.append(Issue(
                    kind=IssueKind.MEMORY,
                    category="TimerLeak",
                    severity=Severity.MEDIUM,
                    file=file,
                    line=node.line,
                    description="Potential timer leak detected",
                    suggestion="Ensure timer is cleared when component unmounts",
                ))
        return issues

    def _detect_object_accumulation(self, root: SyntaxNode, file: str) -> List[Issue]:
        issues = []
        for node in root.descendants():
            if node.kind is not NodeKind.PROPERTY_ACCESS:
                continue
            text = node.text
            if any(marker in text for marker in ACCUMULATION_MARKERS):
                issues.append(Issue(
                    kind=IssueKind.MEMORY,
                    category="ObjectAccumulation",
                    severity=Severity.LOW,
                    file=file,
                    line=node.line,
                    description="Potential object accumulation detected",
                    suggestion="Consider implementing a cleanup mechanism for accumulated objects",
                ))
        return issues

    @staticmethod
    def overall_severity(issues: Iterable[Issue]) -> Severity:
        issues = list(issues)
        if any(i.severity is Severity.HIGH for i in issues):
            return Severity.HIGH
        if sum(1 for i in issues if i.severity is Severity.MEDIUM) > 2:
            return Severity.MEDIUM
        return Severity.LOW

    @staticmethod
    def generate_suggestions(issues: Iterable[Issue]) -> List[str]:
        # dict keeps first-seen order while de-duplicating
        suggestions = dict.fromkeys(i.suggestion for i in issues)
        suggestions.update(dict.fromkeys(GENERAL_SUGGESTIONS))
        return list(suggestions)
