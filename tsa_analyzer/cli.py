"""Typer-based CLI for the TypeScript analyzer."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .analyzer import CodeAnalyzer, filter_results
from .errors import AnalyzerError

console = Console()

app = typer.Typer(
    help="🔍 TypeScript Analyzer — performance, memory-leak and dependency checks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


class OutputFormat(str, Enum):
    terminal = "terminal"
    json = "json"


_HEALTH_COLORS = {"good": "green", "moderate": "yellow", "poor": "red"}
_SEVERITY_COLORS = {"low": "cyan", "medium": "yellow", "high": "red"}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"TypeScript Analyzer v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Static analysis for TypeScript projects."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _render_issues(title: str, issues: list, icon: str) -> None:
    console.print(f"\n[bold]{title}[/bold]")
    if not issues:
        console.print("  [green]None found.[/green]")
        return
    for issue in issues:
        color = _SEVERITY_COLORS.get(issue["severity"], "white")
        console.print(f"  {icon}  [{color}]{issue['description']}[/{color}]")
        console.print(f"     [dim]{issue['location']}[/dim]")
        console.print(f"     [green]Suggestion:[/green] {issue['suggestion']}\n")


def _render_terminal(results: Dict[str, Any]) -> None:
    console.print("\n[bold]📊 Analysis Results:[/bold]")

    if "performance" in results:
        perf = results["performance"]
        _render_issues("[blue]Performance Issues:[/blue]", perf["issues"], "⚠️")
        metrics = perf["metrics"]
        console.print(
            f"  Complexity: {metrics['cyclomaticComplexity']} | "
            f"Maintainability: {metrics['maintainabilityIndex']} | "
            f"Lines: {metrics['linesOfCode']}"
        )

    if "memoryLeaks" in results:
        _render_issues("[red]Memory Leak Risks:[/red]", results["memoryLeaks"]["potentialLeaks"], "🔍")

    if "dependencies" in results:
        deps = results["dependencies"]
        console.print("\n[bold magenta]Dependency Analysis:[/bold magenta]")
        cycles = deps["circularDependencies"]
        if cycles:
            console.print("  [yellow]⭕ Circular Dependencies Found:[/yellow]")
            for cycle in cycles:
                console.print(f"     {' → '.join(cycle)}")
        else:
            console.print("  [green]No circular dependencies.[/green]")
        metrics = deps["metrics"]
        console.print(
            f"  Files: {metrics['totalFiles']} | "
            f"Avg deps: {metrics['averageDependencies']:.2f} | "
            f"Max deps: {metrics['maxDependencies']}"
        )

    summary = results["summary"]
    health = summary["overallHealth"]
    table = Table(show_header=False, box=None)
    table.add_row("Total Issues", str(summary["totalIssues"]))
    table.add_row("Critical Issues", f"[red]{summary['criticalIssues']}[/red]")
    table.add_row("Overall Health", f"[{_HEALTH_COLORS[health]}]{health}[/{_HEALTH_COLORS[health]}]")
    console.print(Panel(table, title="📝 Summary", expand=False))


@app.command("analyze")
def analyze(
    path: Path = typer.Argument(Path("."), help="Path to the TypeScript project."),
    perf: bool = typer.Option(False, "--perf", help="Show performance analysis."),
    memory: bool = typer.Option(False, "--memory", help="Show memory leak detection."),
    deps: bool = typer.Option(False, "--deps", help="Show dependency analysis."),
    output: OutputFormat = typer.Option(OutputFormat.terminal, "--output", "-o", help="Output format."),
    out_file: Optional[Path] = typer.Option(None, "--out-file", help="Write JSON output to this file."),
):
    """Analyze a TypeScript project for performance, memory and dependency issues."""
    try:
        result = CodeAnalyzer().analyze_project(path)
    except AnalyzerError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)

    results = filter_results(result, performance=perf, memory=memory, dependencies=deps)

    if output is OutputFormat.json:
        payload = json.dumps(results, indent=2)
        if out_file is not None:
            out_file.write_text(payload, encoding="utf-8")
            console.print(f"[green]JSON report generated: {out_file}[/green]")
        else:
            typer.echo(payload)
        return

    _render_terminal(results)
    if result.skipped_files:
        console.print(f"[yellow]Skipped {len(result.skipped_files)} file(s) that failed to parse.[/yellow]")


if __name__ == "__main__":
    app()
