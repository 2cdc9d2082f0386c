"""Coverage-based rule scoring: points earned scale with the fraction of passing targets.

Scoring by coverage instead of violation count keeps large documents from
being penalized for their size and never counts the same defect twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from apigrader.config import SCORED_CATEGORIES
from apigrader.rules.evaluator import evaluate
from apigrader.rules.model import EFFORT_LEVELS, Finding
from apigrader.rules.registry import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from apigrader.rules.model import Rule, Target
    from apigrader.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleScore:
    """Score of one rule against one document."""

    rule_id: str
    rule_name: str
    category: str
    severity: str
    applicable: bool
    coverage: float  # 0.0 - 1.0
    score: float
    max_score: float
    targets_checked: int
    targets_passed: int
    findings: tuple[Finding, ...] = ()
    skipped: bool = False
    failed_dependencies: tuple[str, ...] = ()
    note: str | None = None

    @property
    def failed(self) -> bool:
        """Applicable with imperfect coverage, or skipped."""
        return self.skipped or (self.applicable and self.coverage < 1.0)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "category": self.category,
            "severity": self.severity,
            "applicable": self.applicable,
            "coverage": round(self.coverage, 4),
            "score": round(self.score, 4),
            "max_score": self.max_score,
            "targets_checked": self.targets_checked,
            "targets_passed": self.targets_passed,
            "findings": [f.to_dict() for f in self.findings],
        }
        if self.skipped:
            data["skipped"] = True
            data["failed_dependencies"] = list(self.failed_dependencies)
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class CategoryScore:
    """Aggregated coverage view of one category."""

    category: str
    earned: float
    maximum: float
    percentage: float  # 0.0 - 1.0
    rule_count: int
    rules_applicable: int
    rules_passed: int


@dataclass(frozen=True)
class ImprovementOpportunity:
    rule_id: str
    rule_name: str
    category: str
    current_coverage: float
    potential_points: float
    fix_count: int
    effort: str | None


@dataclass(frozen=True)
class CoverageStats:
    total_rules: int
    applicable_rules: int
    perfect_rules: int
    average_coverage: float
    worst_rule: str | None
    worst_coverage: float
    best_partial_rule: str | None
    best_partial_coverage: float


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def finding_severity(rule_severity: str) -> str:
    """Map a rule severity onto the finding severity scale."""
    if rule_severity in ("prerequisite", "critical"):
        return "critical"
    if rule_severity in ("major", "minor"):
        return rule_severity
    return "info"


def target_weights(rule: Rule, targets: tuple[Target, ...], doc: Any) -> list[float]:
    """Relative importance of each target within a rule.

    Every target currently weighs 1.0; this is the single place to change
    that.
    """
    return [1.0 for _ in targets]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def score_rule(rule: Rule, doc: Any) -> RuleScore:
    """Score *rule* as ``coverage x points``; no targets means full credit."""
    evaluation = evaluate(rule, doc)

    if evaluation.fault is not None:
        return RuleScore(
            rule_id=rule.id,
            rule_name=rule.description,
            category=rule.category,
            severity=rule.severity,
            applicable=True,
            coverage=0.0,
            score=0.0,
            max_score=rule.points,
            targets_checked=len(evaluation.targets),
            targets_passed=evaluation.passed,
            findings=(evaluation.fault,),
        )

    if not evaluation.targets:
        return RuleScore(
            rule_id=rule.id,
            rule_name=rule.description,
            category=rule.category,
            severity=rule.severity,
            applicable=False,
            coverage=1.0,
            score=rule.points,
            max_score=rule.points,
            targets_checked=0,
            targets_passed=0,
        )

    results = evaluation.results
    weights = target_weights(rule, evaluation.targets, doc)
    passed = evaluation.passed
    if all(w == 1.0 for w in weights):
        coverage = passed / len(results)
    else:
        total_weight = sum(weights)
        earned = sum(w for w, (_, r) in zip(weights, results) if r.passed)
        coverage = earned / total_weight if total_weight > 0 else 0.0
    coverage = _clamp(coverage, 0.0, 1.0)

    severity = finding_severity(rule.severity)
    findings = tuple(
        Finding(
            rule_id=rule.id,
            severity=severity,
            message=f"{target.identifier}: {result.message}",
            location=target.location,
            category=rule.category,
            fix_hint=result.fix_hint,
        )
        for target, result in results
        if not result.passed
    )
    return RuleScore(
        rule_id=rule.id,
        rule_name=rule.description,
        category=rule.category,
        severity=rule.severity,
        applicable=True,
        coverage=coverage,
        score=coverage * rule.points,
        max_score=rule.points,
        targets_checked=len(results),
        targets_passed=passed,
        findings=findings,
    )


def excluded_score(rule: Rule, reason: str) -> RuleScore:
    """Full-credit, not-applicable score for a rule the active profile excludes."""
    return RuleScore(
        rule_id=rule.id,
        rule_name=rule.description,
        category=rule.category,
        severity=rule.severity,
        applicable=False,
        coverage=1.0,
        score=rule.points,
        max_score=rule.points,
        targets_checked=0,
        targets_passed=0,
        note=reason,
    )


def score_all_rules(
    doc: Any,
    rule_ids: Iterable[str] | None = None,
    registry: RuleRegistry = DEFAULT_REGISTRY,
    excluded: Mapping[str, str] | None = None,
) -> dict[str, RuleScore]:
    """Score every non-prerequisite rule (or the given subset) in registry order.

    Rules named in *excluded* are not evaluated; they score as not applicable
    with the mapped reason as their note.
    """
    if rule_ids is None:
        rules = list(registry.values())
    else:
        rules = [registry[rid] for rid in rule_ids if rid in registry]
    excluded = excluded or {}
    return {
        rule.id: excluded_score(rule, excluded[rule.id]) if rule.id in excluded else score_rule(rule, doc)
        for rule in rules
        if not rule.is_prerequisite
    }


def calculate_category_scores(scores: Mapping[str, RuleScore]) -> dict[str, CategoryScore]:
    totals: dict[str, list[float]] = {c: [0.0, 0.0, 0, 0, 0] for c in SCORED_CATEGORIES}
    for score in scores.values():
        bucket = totals.get(score.category)
        if bucket is None:
            logger.debug("Ignoring %s: unknown category %s", score.rule_id, score.category)
            continue
        bucket[0] += score.score
        bucket[1] += score.max_score
        bucket[2] += 1
        if score.applicable:
            bucket[3] += 1
            if score.coverage == 1.0:
                bucket[4] += 1
    return {
        category: CategoryScore(
            category=category,
            earned=earned,
            maximum=maximum,
            percentage=earned / maximum if maximum > 0 else 0.0,
            rule_count=int(count),
            rules_applicable=int(applicable),
            rules_passed=int(passed),
        )
        for category, (earned, maximum, count, applicable, passed) in totals.items()
    }


# ---------------------------------------------------------------------------
# Analysis helpers
# ---------------------------------------------------------------------------


def improvement_opportunities(
    scores: Mapping[str, RuleScore],
    registry: RuleRegistry = DEFAULT_REGISTRY,
) -> list[ImprovementOpportunity]:
    """Applicable rules short of full coverage, largest point gain first."""
    opportunities: list[ImprovementOpportunity] = []
    for score in scores.values():
        if not score.applicable or score.coverage == 1.0:
            continue
        rule = registry.get(score.rule_id)
        opportunities.append(
            ImprovementOpportunity(
                rule_id=score.rule_id,
                rule_name=score.rule_name,
                category=score.category,
                current_coverage=score.coverage,
                potential_points=score.max_score - score.score,
                fix_count=score.targets_checked - score.targets_passed,
                effort=rule.effort if rule is not None else None,
            )
        )
    opportunities.sort(key=lambda o: (-o.potential_points, o.rule_id))
    return opportunities


def optimal_improvements(
    scores: Mapping[str, RuleScore],
    target_gain: float,
    registry: RuleRegistry = DEFAULT_REGISTRY,
) -> list[ImprovementOpportunity]:
    """Cheapest-first set of fixes whose potential points reach *target_gain*."""
    effort_rank = {level: i for i, level in enumerate(EFFORT_LEVELS)}
    candidates = sorted(
        improvement_opportunities(scores, registry),
        key=lambda o: (effort_rank.get(o.effort or "", len(effort_rank)), -o.potential_points, o.rule_id),
    )
    chosen: list[ImprovementOpportunity] = []
    gained = 0.0
    for opportunity in candidates:
        if gained >= target_gain:
            break
        chosen.append(opportunity)
        gained += opportunity.potential_points
    return chosen


def coverage_stats(scores: Mapping[str, RuleScore]) -> CoverageStats:
    applicable = [s for s in scores.values() if s.applicable]
    partial = [s for s in applicable if s.coverage < 1.0]
    worst = min(partial, key=lambda s: s.coverage, default=None)
    best = max(partial, key=lambda s: s.coverage, default=None)
    return CoverageStats(
        total_rules=len(scores),
        applicable_rules=len(applicable),
        perfect_rules=len(applicable) - len(partial),
        average_coverage=(
            sum(s.coverage for s in applicable) / len(applicable) if applicable else 0.0
        ),
        worst_rule=worst.rule_id if worst is not None else None,
        worst_coverage=worst.coverage if worst is not None else 1.0,
        best_partial_rule=best.rule_id if best is not None else None,
        best_partial_coverage=best.coverage if best is not None else 0.0,
    )


def coverage_report(scores: Mapping[str, RuleScore]) -> str:
    """Plain-text per-category coverage breakdown for debugging."""
    by_category: dict[str, list[RuleScore]] = {}
    for score in scores.values():
        by_category.setdefault(score.category, []).append(score)

    lines = ["=== Coverage-Based Scoring Report ===", ""]
    for category, items in by_category.items():
        earned = sum(s.score for s in items)
        maximum = sum(s.max_score for s in items)
        pct = earned / maximum * 100 if maximum > 0 else 0.0
        lines.append(f"{category.upper()} ({earned:.1f}/{maximum:g} = {pct:.1f}%)")
        for s in items:
            if not s.applicable:
                status = "skipped" if s.skipped else "n/a"
                lines.append(f"  [{status}] {s.rule_name}")
                continue
            mark = "ok" if s.coverage == 1.0 else ("fail" if s.coverage == 0.0 else "partial")
            lines.append(f"  [{mark}] {s.rule_name}")
            lines.append(
                f"      Coverage: {s.targets_passed}/{s.targets_checked} = {s.coverage * 100:.1f}%"
            )
            lines.append(f"      Points: {s.score:.1f}/{s.max_score:g}")
        lines.append("")

    stats = coverage_stats(scores)
    lines.append("=== Summary ===")
    lines.append(f"Total Rules: {stats.total_rules}")
    lines.append(f"Applicable: {stats.applicable_rules}")
    lines.append(f"Perfect Coverage: {stats.perfect_rules}")
    lines.append(f"Average Coverage: {stats.average_coverage * 100:.1f}%")
    if stats.worst_rule is not None:
        lines.append(f"Worst Coverage: {stats.worst_rule} ({stats.worst_coverage * 100:.1f}%)")
    return "\n".join(lines)
