"""Gate verdict and report rendering.

``evaluate`` is the only place the pass/fail decision is made:

    passed = score >= threshold and ratchet.passed

Both the JSON document and the console report read ``outcome.passed``, so
they cannot disagree.
"""

from typing import Any

from rich.console import Console
from rich.table import Table

from qualitygate.core.models import GateOutcome, GateReport, RatchetComparison

# Error lines shown per check in the console report
MAX_ERRORS_SHOWN = 5


def evaluate(report: GateReport, ratchet: RatchetComparison, threshold: float) -> GateOutcome:
    """Decide whether the gate passed.

    Args:
        report: Aggregated verify-pass report
        ratchet: Result of comparing the report with the baseline
        threshold: Minimum composite score

    Returns:
        GateOutcome carrying the single pass/fail decision
    """
    passed = report.total_weighted_score >= threshold and ratchet.passed
    return GateOutcome(report=report, threshold=threshold, ratchet=ratchet, passed=passed)


def exit_code(outcome: GateOutcome) -> int:
    """Process exit code for an outcome: 0 if passed, else 1."""
    return 0 if outcome.passed else 1


def to_json(outcome: GateOutcome) -> dict[str, Any]:
    """Build the machine-readable report for CI."""
    report = outcome.report
    return {
        "score": report.total_weighted_score,
        "threshold": outcome.threshold,
        "passed": outcome.passed,
        "ratchet": {
            "passed": outcome.ratchet.passed,
            "regressions": list(outcome.ratchet.regressions),
        },
        "checks": [
            {
                "name": r.name,
                "score": r.score,
                "weight": r.weight,
                "weightedScore": r.weighted_score,
                "errors": len(r.errors),
                "warnings": len(r.warnings),
            }
            for r in report.results
        ],
        "totalErrors": report.total_errors,
        "totalWarnings": report.total_warnings,
        "timestamp": outcome.timestamp.isoformat(),
    }


def _score_style(score: float) -> str:
    if score >= 90:
        return "green"
    if score >= 70:
        return "yellow"
    return "red"


def render_console(outcome: GateOutcome, console: Console) -> None:
    """Print the human-readable report."""
    report = outcome.report

    console.print("\n[bold]Quality Gate[/bold]\n")

    table = Table(show_header=True)
    table.add_column("Check", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Weighted", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")

    for r in report.results:
        style = _score_style(r.score)
        table.add_row(
            r.name,
            f"[{style}]{r.score:g}[/{style}]",
            str(r.weight),
            f"{r.weighted_score}/{r.weight}",
            f"[red]{len(r.errors)}[/red]" if r.errors else "0",
            f"[yellow]{len(r.warnings)}[/yellow]" if r.warnings else "0",
        )

    console.print(table)

    for r in report.results:
        if not r.errors:
            continue
        console.print(f"\n[bold red]✗ {r.name}[/bold red]")
        for error in r.errors[:MAX_ERRORS_SHOWN]:
            console.print(f"  • {error}", markup=False, highlight=False)
        if len(r.errors) > MAX_ERRORS_SHOWN:
            console.print(f"  ... and {len(r.errors) - MAX_ERRORS_SHOWN} more")

    if not outcome.ratchet.passed:
        console.print("\n[bold red]Ratchet regressions:[/bold red]")
        for regression in outcome.ratchet.regressions:
            console.print(f"  • {regression}", markup=False, highlight=False)

    score_style = "green" if outcome.threshold_passed else "red"
    console.print(
        f"\nScore: [{score_style}]{report.total_weighted_score}/100[/{score_style}] "
        f"(threshold {outcome.threshold:g})"
    )
    console.print(f"Errors: {report.total_errors}  Warnings: {report.total_warnings}")

    if outcome.passed:
        console.print("Status: [bold green]PASSED[/bold green]")
    else:
        console.print("Status: [bold red]FAILED[/bold red]")
