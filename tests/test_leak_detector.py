"""Tests for memory leak detection."""

from tsa_analyzer.leak_detector import GENERAL_SUGGESTIONS, MemoryLeakDetector
from tsa_analyzer.models import Issue, IssueKind, Severity


def _issue(severity: Severity, suggestion: str = "fix it") -> Issue:
    return Issue(
        kind=IssueKind.MEMORY,
        category="TimerLeak",
        severity=severity,
        file="a.ts",
        line=1,
        description="test",
        suggestion=suggestion,
    )


class TestMemoryLeakDetector:
    """Test MemoryLeakDetector sweeps."""

    def test_event_listener(self, make_unit):
        unit = make_unit("window.addEventListener('resize', onResize);\n")
        issues = MemoryLeakDetector().detect_unit(unit)

        assert [i.category for i in issues] == ["EventListenerLeak"]
        assert issues[0].severity is Severity.MEDIUM
        assert "removed" in issues[0].suggestion

    def test_timers(self, make_unit):
        unit = make_unit("setInterval(tick, 1000);\nwindow.setTimeout(done, 5);\nclearInterval(id);\n")
        issues = MemoryLeakDetector().detect_unit(unit)

        timers = [i for i in issues if i.category == "TimerLeak"]
        assert [i.line for i in timers] == [1, 2]
        assert all(i.severity is Severity.MEDIUM for i in timers)

    def test_closure_capturing_this_or_props(self, make_unit):
        unit = make_unit(
            "const onClick = () => this.count++;\n"
            "function render(props) { return props.title; }\n"
            "const pure = (a: number) => a * 2;\n"
        )
        issues = MemoryLeakDetector().detect_unit(unit)

        closures = [i for i in issues if i.category == "ClosureLeak"]
        assert [i.line for i in closures] == [1, 2]
        assert all(i.severity is Severity.LOW for i in closures)

    def test_closure_check_is_textual(self, make_unit):
        """A mention of 'state' anywhere in the body is enough."""
        unit = make_unit("function f() { const restated = 1; return restated; }\n")
        issues = MemoryLeakDetector().detect_unit(unit)
        assert [i.category for i in issues] == ["ClosureLeak"]

    def test_object_accumulation(self, make_unit):
        unit = make_unit("cache.push(item);\nqueue.unshift(job);\nlist.pop();\n")
        issues = MemoryLeakDetector().detect_unit(unit)

        accumulation = [i for i in issues if i.category == "ObjectAccumulation"]
        assert [i.line for i in accumulation] == [1, 2]

    def test_clean_code(self, make_unit):
        unit = make_unit("export const add = (a: number, b: number) => a + b;\n")
        assert MemoryLeakDetector().detect_unit(unit) == []


class TestSeverityAndSuggestions:
    """Test overall severity and suggestion aggregation."""

    def test_low_when_empty(self):
        assert MemoryLeakDetector.overall_severity([]) is Severity.LOW

    def test_two_medium_is_still_low(self):
        issues = [_issue(Severity.MEDIUM), _issue(Severity.MEDIUM)]
        assert MemoryLeakDetector.overall_severity(issues) is Severity.LOW

    def test_three_medium_is_medium(self):
        issues = [_issue(Severity.MEDIUM)] * 3
        assert MemoryLeakDetector.overall_severity(issues) is Severity.MEDIUM

    def test_any_high_is_high(self):
        issues = [_issue(Severity.LOW), _issue(Severity.HIGH)]
        assert MemoryLeakDetector.overall_severity(issues) is Severity.HIGH

    def test_suggestions_deduplicated_with_general_tail(self):
        issues = [_issue(Severity.LOW, "a"), _issue(Severity.LOW, "b"), _issue(Severity.LOW, "a")]
        suggestions = MemoryLeakDetector.generate_suggestions(issues)
        assert suggestions == ["a", "b", *GENERAL_SUGGESTIONS]

    def test_general_suggestions_always_present(self):
        assert MemoryLeakDetector.generate_suggestions([]) == list(GENERAL_SUGGESTIONS)

    def test_detect_aggregates_units(self, make_unit):
        units = [
            make_unit("el.addEventListener('click', h);\n", "a.ts"),
            make_unit("setTimeout(f, 1);\nsetInterval(g, 2);\n", "b.ts"),
        ]
        result = MemoryLeakDetector().detect(units)

        assert len(result.potential_leaks) == 3
        assert result.severity is Severity.MEDIUM
        assert result.suggestions[-3:] == list(GENERAL_SUGGESTIONS)
