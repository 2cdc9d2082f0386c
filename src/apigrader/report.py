"""Rich, JSON and porcelain formatters for grading results.

Every formatter returns a string; printing is left to the caller. The rich
variants render through a :class:`rich.console.Console` writing into a
buffer, so they are safe to call without a terminal.
"""

from __future__ import annotations

import json
from io import StringIO
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apigrader.checkpoints.model import CheckpointReport
    from apigrader.detection.patterns import Classification
    from apigrader.detection.profiles import GradingProfile
    from apigrader.pipeline import DocumentComparison, GradingOutcome
    from apigrader.rules.model import Finding
    from apigrader.scoring.prerequisites import PrerequisiteResult

_WIDTH = 100
_MAX_FINDINGS = 25

_SEVERITY_STYLES: dict[str, str] = {
    "critical": "bold red",
    "error": "bold red",
    "major": "yellow",
    "warn": "yellow",
    "minor": "cyan",
    "info": "dim",
}


def _console() -> tuple[Console, StringIO]:
    buf = StringIO()
    return Console(file=buf, force_terminal=True, width=_WIDTH), buf


def _grade_style(score: int, passed: bool) -> str:
    if passed and score >= 90:
        return "bold green"
    if passed:
        return "green"
    return "bold red" if score < 60 else "yellow"


def _dump(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)


def _clean(text: str | None) -> str:
    """Collapse tabs and newlines so one record stays on one line."""
    if not text:
        return ""
    return " ".join(text.split())


def _print_findings(console: Console, findings: Iterable[Finding], title: str) -> None:
    findings = list(findings)
    if not findings:
        return
    console.rule(title, style="dim")
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Severity", width=9)
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Message")
    for finding in findings[:_MAX_FINDINGS]:
        style = _SEVERITY_STYLES.get(finding.severity, "white")
        message = escape(finding.message)
        if finding.fix_hint:
            message += f"\n[dim]fix: {escape(finding.fix_hint)}[/dim]"
        table.add_row(f"[{style}]{finding.severity}[/{style}]", finding.rule_id, message)
    console.print(table)
    if len(findings) > _MAX_FINDINGS:
        console.print(f"  [dim]... and {len(findings) - _MAX_FINDINGS} more[/dim]")
    console.print()


def _print_gate(console: Console, result: PrerequisiteResult) -> None:
    console.print(Text(f"  {result.blocked_reason}", style="bold red"))
    console.print()
    _print_findings(console, result.failures, "Prerequisite Failures")
    if result.required_fixes:
        console.rule("Required Fixes", style="dim")
        for i, fix in enumerate(result.required_fixes, start=1):
            console.print(f"  {i}. {escape(fix)}")
        console.print()


# ---------------------------------------------------------------------------
# Registry grading
# ---------------------------------------------------------------------------


def format_rich(outcome: GradingOutcome) -> str:
    """Header, score line, category table and findings, or the blocked gate."""
    console, buf = _console()
    console.print()
    console.rule(f"[bold]API Grade: {escape(outcome.api_id)}[/bold]", style="blue")
    console.print()
    if outcome.profile is not None:
        console.print(f"  Profile: [bold]{escape(outcome.profile.name)}[/bold]")
    console.print(
        f"  Detected: {outcome.classification.primary} "
        f"(confidence {outcome.classification.confidence:.2f})"
    )
    console.print()

    grade = outcome.grade
    if grade is None:
        _print_gate(console, outcome.prerequisites)
        return buf.getvalue()

    verdict = "PASS" if grade.passed else "FAIL"
    score = Text()
    score.append("  Score: ", style="bold")
    score.append(f"{grade.score}/100 ({grade.letter_grade})", style=_grade_style(grade.score, grade.passed))
    score.append(f"  {verdict}", style="green" if grade.passed else "red")
    console.print(score)
    console.print()

    console.rule("Category Breakdown", style="dim")
    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Category", style="bold")
    table.add_column("Weight", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Percent", justify="right")
    table.add_column("Weighted", justify="right")
    for cat in grade.breakdown:
        table.add_row(
            cat.category,
            f"{cat.weight:.0%}",
            f"{cat.earned_points:.1f}/{cat.max_points:g}",
            f"{cat.percentage * 100:.1f}%",
            f"{cat.weighted_score:.1f}",
        )
    console.print(table)
    console.print()

    _print_findings(console, grade.findings, f"Findings ({grade.total_findings})")
    if not grade.findings:
        console.print("  [green]No findings.[/green]")
    return buf.getvalue()


def format_json(outcome: GradingOutcome) -> str:
    return _dump(outcome.to_dict())


def format_porcelain(outcome: GradingOutcome) -> str:
    """One ``severity<TAB>rule_id<TAB>location<TAB>message`` line per finding.

    A blocked outcome lists its prerequisite failures instead.
    """
    findings = outcome.grade.findings if outcome.grade is not None else outcome.prerequisites.failures
    return "\n".join(
        f"{f.severity}\t{f.rule_id}\t{f.location}\t{_clean(f.message)}" for f in findings
    )


# ---------------------------------------------------------------------------
# Checkpoints
# ---------------------------------------------------------------------------


def format_checkpoints_rich(report: CheckpointReport) -> str:
    console, buf = _console()
    console.print()
    console.rule(f"[bold]Checkpoint Grade: {escape(report.api_id)}[/bold]", style="blue")
    console.print()

    passed = not report.auto_failed and report.score >= 70
    score = Text()
    score.append("  Score: ", style="bold")
    score.append(
        f"{report.score}/{report.total_possible} ({report.letter_grade})",
        style=_grade_style(report.score, passed),
    )
    console.print(score)
    if report.auto_failed:
        console.print(Text(f"  Auto-fail: {', '.join(report.auto_fail_ids)}", style="bold red"))
    console.print()

    console.rule("Categories", style="dim")
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Category", style="bold")
    table.add_column("Points", justify="right")
    for name, tally in report.category_scores.items():
        style = "green" if tally.earned == tally.total else "yellow"
        table.add_row(name, f"[{style}]{tally.earned}/{tally.total}[/{style}]")
    console.print(table)
    console.print()

    failures = report.failures
    if failures:
        console.rule(f"Failed Checkpoints ({len(failures)})", style="dim")
        fail_table = Table(show_header=False, box=None, padding=(0, 1))
        fail_table.add_column("Severity", width=6)
        fail_table.add_column("Checkpoint", style="cyan", no_wrap=True)
        fail_table.add_column("Message")
        for finding in failures:
            style = _SEVERITY_STYLES.get(finding.severity, "white")
            fail_table.add_row(
                f"[{style}]{finding.severity}[/{style}]",
                finding.checkpoint,
                escape(finding.message or ""),
            )
        console.print(fail_table)
        console.print()
    return buf.getvalue()


def format_checkpoints_json(report: CheckpointReport) -> str:
    return _dump(report.to_dict())


def format_checkpoints_porcelain(report: CheckpointReport) -> str:
    """One line per failed checkpoint: ``severity<TAB>id<TAB>json_path<TAB>message``."""
    return "\n".join(
        f"{f.severity}\t{f.checkpoint}\t{f.json_path}\t{_clean(f.message)}" for f in report.failures
    )


# ---------------------------------------------------------------------------
# Prerequisite gate
# ---------------------------------------------------------------------------


def format_prereqs_rich(result: PrerequisiteResult) -> str:
    console, buf = _console()
    console.print()
    console.rule("[bold]Prerequisites[/bold]", style="blue")
    console.print()
    if result.profile is not None:
        console.print(f"  Profile: [bold]{escape(result.profile.name)}[/bold]")
    if result.passed:
        console.print(Text("  All prerequisites passed", style="bold green"))
    else:
        _print_gate(console, result)
    if result.skipped_prerequisites:
        console.print(f"  [dim]Skipped: {', '.join(result.skipped_prerequisites)}[/dim]")
    return buf.getvalue()


def format_prereqs_json(result: PrerequisiteResult) -> str:
    return _dump(result.to_dict())


def format_prereqs_porcelain(result: PrerequisiteResult) -> str:
    return "\n".join(
        f"{f.severity}\t{f.rule_id}\t{f.location}\t{_clean(f.message)}" for f in result.failures
    )


# ---------------------------------------------------------------------------
# Classification and comparison
# ---------------------------------------------------------------------------


def format_classification_rich(classification: Classification, profile: GradingProfile) -> str:
    console, buf = _console()
    console.print()
    console.rule("[bold]API Classification[/bold]", style="blue")
    console.print()
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Family", style="bold")
    table.add_column("Score", justify="right")
    for name, value in sorted(classification.scores.items(), key=lambda kv: -kv[1]):
        style = "green" if name == classification.primary else "white"
        table.add_row(name, f"[{style}]{value:.1f}[/{style}]")
    console.print(table)
    console.print()
    console.print(
        f"  Primary: [bold]{classification.primary}[/bold] "
        f"(confidence {classification.confidence:.2f})"
    )
    console.print(f"  Suggested profile: [bold]{escape(profile.name)}[/bold] ({profile.id})")
    evidence = classification.evidence.get(classification.primary, ())
    if evidence:
        console.print()
        console.rule("Evidence", style="dim")
        for line in evidence:
            console.print(f"  - {escape(line)}")
    return buf.getvalue()


def format_classification_json(classification: Classification, profile: GradingProfile) -> str:
    data = classification.to_dict()
    data["suggested_profile"] = profile.to_dict()
    return _dump(data)


def format_comparison_rich(result: DocumentComparison) -> str:
    console, buf = _console()
    console.print()
    console.rule("[bold]Grade Comparison[/bold]", style="blue")
    console.print()
    for label, side in (("Baseline", result.baseline), ("Current", result.current)):
        detail = side.grade.letter_grade if side.grade is not None else "blocked"
        console.print(f"  {label}: {side.score}/100 ({detail})")
    console.print()
    if result.comparison is not None:
        style = "green" if result.comparison.improved else ("red" if result.comparison.score_delta < 0 else "white")
        console.print(Text(f"  {result.comparison.message}", style=style))
        console.print(f"  Grade: {result.comparison.grade_delta}")
    else:
        delta = result.current.score - result.baseline.score
        console.print(f"  Score delta: {delta:+d} (a blocked document counts as 0)")
    return buf.getvalue()


def format_comparison_json(result: DocumentComparison) -> str:
    return _dump(result.to_dict())
