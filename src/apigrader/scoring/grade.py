"""Category-weighted grade calculation, letter grades, and grade comparison."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from apigrader.config import DEFAULT_CATEGORY_WEIGHTS, DEFAULT_PASSING_SCORE

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from apigrader.rules.model import Finding
    from apigrader.scoring.coverage import RuleScore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)
EXCELLENCE_THRESHOLD = 90

# Pass thresholds per release profile; "standard" keeps the configured one.
RELEASE_PROFILES: frozenset[str] = frozenset({"standard", "public", "internal", "prototype"})

LEGACY_AUTO_FAIL_RULES: frozenset[str] = frozenset(
    {"PREREQ-001", "PREREQ-002", "PREREQ-003", "NAME-NAMESPACE", "PAG-NO-OFFSET"}
)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryBreakdown:
    """One category's contribution to the final score."""

    category: str
    weight: float
    max_points: float
    earned_points: float
    percentage: float  # 0.0 - 1.0
    weighted_score: float  # percentage x weight x 100


@dataclass(frozen=True)
class GradeResult:
    """Final score, letter, verdict and the complete sorted finding list."""

    score: int  # 0-100
    letter_grade: str
    passed: bool
    breakdown: tuple[CategoryBreakdown, ...]
    findings: tuple[Finding, ...]
    total_findings: int
    critical_findings: int
    major_findings: int
    minor_findings: int  # includes info
    excellence: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "letter_grade": self.letter_grade,
            "passed": self.passed,
            "excellence": self.excellence,
            "breakdown": [
                {
                    "category": b.category,
                    "weight": b.weight,
                    "max_points": b.max_points,
                    "earned_points": round(b.earned_points, 4),
                    "percentage": round(b.percentage, 4),
                    "weighted_score": round(b.weighted_score, 4),
                }
                for b in self.breakdown
            ],
            "findings": [f.to_dict() for f in self.findings],
            "total_findings": self.total_findings,
            "critical_findings": self.critical_findings,
            "major_findings": self.major_findings,
            "minor_findings": self.minor_findings,
        }


@dataclass(frozen=True)
class GradeComparison:
    score_delta: int
    grade_delta: str
    improved: bool
    fixed_findings: int
    new_findings: int
    message: str


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------


def letter_grade(score: float) -> str:
    """Letter for a 0-100 score; the first threshold met wins, else ``F``."""
    for minimum, letter in GRADE_THRESHOLDS:
        if score >= minimum:
            return letter
    return "F"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def sort_findings(findings: Iterable[Finding]) -> tuple[Finding, ...]:
    """Severity, then category, then rule id, then location."""
    return tuple(sorted(findings, key=lambda f: f.sort_key()))


def calculate_final_grade(
    scores: Mapping[str, RuleScore],
    *,
    weights: Mapping[str, float] = DEFAULT_CATEGORY_WEIGHTS,
    passing_score: int = DEFAULT_PASSING_SCORE,
    prerequisites_passed: bool = True,
) -> GradeResult:
    """Roll rule scores up into a weighted 0-100 grade.

    *weights* are assumed valid (see :func:`apigrader.config.validate_weights`).
    Scores in a category without a weight are logged and ignored.
    """
    earned: dict[str, float] = {c: 0.0 for c in weights}
    maximum: dict[str, float] = {c: 0.0 for c in weights}
    findings: list[Finding] = []

    for score in scores.values():
        if score.category not in weights:
            logger.warning("Unknown category %s for rule %s", score.category, score.rule_id)
            continue
        earned[score.category] += score.score
        maximum[score.category] += score.max_score
        findings.extend(score.findings)

    breakdown: list[CategoryBreakdown] = []
    total = 0.0
    for category, weight in weights.items():
        pct = earned[category] / maximum[category] if maximum[category] > 0 else 0.0
        weighted = pct * weight * 100
        total += weighted
        breakdown.append(
            CategoryBreakdown(
                category=category,
                weight=weight,
                max_points=maximum[category],
                earned_points=earned[category],
                percentage=pct,
                weighted_score=weighted,
            )
        )

    final = max(0, min(100, _round_half_up(total)))
    ordered = sort_findings(findings)
    critical = sum(1 for f in ordered if f.severity == "critical")
    major = sum(1 for f in ordered if f.severity == "major")
    return GradeResult(
        score=final,
        letter_grade=letter_grade(final),
        passed=final >= passing_score and prerequisites_passed,
        breakdown=tuple(breakdown),
        findings=ordered,
        total_findings=len(ordered),
        critical_findings=critical,
        major_findings=major,
        minor_findings=len(ordered) - critical - major,
        excellence=final >= EXCELLENCE_THRESHOLD,
    )


def apply_release_profile(result: GradeResult, profile: str) -> GradeResult:
    """Re-judge ``passed`` for a release profile.

    ``public`` fails anything under 80; ``internal`` passes from 65;
    ``prototype`` passes from 50; ``standard`` leaves the verdict alone.
    """
    if profile not in RELEASE_PROFILES:
        msg = f"Unknown release profile '{profile}', expected one of {sorted(RELEASE_PROFILES)}"
        raise ValueError(msg)
    passed = result.passed
    if profile == "public" and result.score < 80:
        passed = False
    elif profile == "internal" and result.score >= 65:
        passed = True
    elif profile == "prototype" and result.score >= 50:
        passed = True
    return replace(result, passed=passed)


def would_legacy_auto_fail(result: GradeResult) -> bool:
    """True if any finding comes from a rule that used to fail a grade outright."""
    return any(f.rule_id in LEGACY_AUTO_FAIL_RULES for f in result.findings)


def compare_grades(baseline: GradeResult, current: GradeResult) -> GradeComparison:
    delta = current.score - baseline.score
    before = {f"{f.rule_id}:{f.location}" for f in baseline.findings}
    after = {f"{f.rule_id}:{f.location}" for f in current.findings}
    fixed = len(before - after)
    new = len(after - before)

    if delta > 0:
        message = f"Improved by {delta} points."
        if fixed:
            message += f" Fixed {fixed} issue(s)."
    elif delta < 0:
        message = f"Decreased by {abs(delta)} points."
        if new:
            message += f" {new} new issue(s) found."
    else:
        message = "No change in score."

    return GradeComparison(
        score_delta=delta,
        grade_delta=f"{baseline.letter_grade} → {current.letter_grade}",
        improved=delta > 0,
        fixed_findings=fixed,
        new_findings=new,
        message=message,
    )


def grade_summary(result: GradeResult) -> str:
    """Plain-text summary: verdict, category breakdown, and issue counts."""
    lines = [f"API Grade: {result.score}/100 ({result.letter_grade})", ""]
    if result.excellence:
        lines.append("Excellent API. This is a reference implementation.")
    elif result.passed:
        lines.append("API meets standards and is production-ready.")
    elif result.score >= 60:
        lines.append("API needs improvements before production deployment.")
    else:
        lines.append("API has critical issues that must be addressed.")

    lines.extend(["", "Category Breakdown:"])
    for cat in result.breakdown:
        lines.append(
            f"  {cat.category}: {cat.percentage * 100:.1f}% "
            f"({cat.earned_points:.1f}/{cat.max_points:g} points)"
        )

    if result.total_findings:
        lines.extend(["", "Issues Found:"])
        if result.critical_findings:
            lines.append(f"  Critical: {result.critical_findings}")
        if result.major_findings:
            lines.append(f"  Major: {result.major_findings}")
        if result.minor_findings:
            lines.append(f"  Minor: {result.minor_findings}")
    return "\n".join(lines)
