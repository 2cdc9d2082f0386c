"""Dependency-aware score adjustment.

Rules may declare ``depends_on``. When a dependency fails, the dependent
rule is skipped: its score drops to zero and it is marked failed in turn,
so failures cascade down the graph. Externally supplied overrides cap a
rule's coverage.

:func:`adjust_scores` is pure and idempotent: feeding its output back in
returns an equal result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from apigrader.config import DependencyCycleError
from apigrader.rules.model import Finding
from apigrader.rules.registry import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from apigrader.rules.model import Rule
    from apigrader.rules.registry import RuleRegistry
    from apigrader.scoring.coverage import RuleScore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyGraph:
    """Rule nodes and their dependency edges (rule id -> ids it depends on)."""

    nodes: Mapping[str, Rule]
    edges: Mapping[str, frozenset[str]]


@dataclass(frozen=True)
class ScoreOverride:
    """Caller-supplied cap on a rule's coverage."""

    max_coverage: float
    reason: str = "Adjusted by override"


@dataclass(frozen=True)
class DependencyAnalysis:
    root_causes: tuple[str, ...]
    cascading_failures: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    affected_rules: int = 0


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


def build_dependency_graph(rules: Iterable[Rule]) -> DependencyGraph:
    nodes: dict[str, Rule] = {}
    edges: dict[str, frozenset[str]] = {}
    for rule in rules:
        nodes[rule.id] = rule
        edges[rule.id] = frozenset(rule.depends_on)
    return DependencyGraph(nodes=MappingProxyType(nodes), edges=MappingProxyType(edges))


def topological_sort(graph: DependencyGraph) -> list[str]:
    """Order rule ids so each comes after the dependencies present in the graph.

    Ties keep insertion order. Dependencies on ids outside the graph are
    ignored here.

    Raises:
        DependencyCycleError: If the dependencies form a cycle.
    """
    order: list[str] = []
    done: set[str] = set()
    visiting: list[str] = []

    def visit(rule_id: str) -> None:
        if rule_id in done:
            return
        if rule_id in visiting:
            cycle = " -> ".join([*visiting[visiting.index(rule_id):], rule_id])
            msg = f"Dependency graph contains cycles: {cycle}"
            raise DependencyCycleError(msg)
        visiting.append(rule_id)
        for dep in sorted(graph.edges.get(rule_id, frozenset())):
            if dep in graph.nodes:
                visit(dep)
        visiting.pop()
        done.add(rule_id)
        order.append(rule_id)

    for rule_id in graph.nodes:
        visit(rule_id)
    return order


def validate_dependencies(registry: RuleRegistry = DEFAULT_REGISTRY) -> list[str]:
    """Return dependency problems in *registry*; an empty list means valid."""
    issues: list[str] = []
    for rule in registry.values():
        for dep in rule.depends_on:
            if dep not in registry:
                issues.append(f"Rule {rule.id} depends on non-existent rule {dep}")
    try:
        topological_sort(build_dependency_graph(registry.values()))
    except DependencyCycleError:
        issues.append("Dependency graph contains cycles")
    return issues


def evaluation_order(registry: RuleRegistry = DEFAULT_REGISTRY) -> list[str]:
    return topological_sort(build_dependency_graph(registry.values()))


# ---------------------------------------------------------------------------
# Adjustment
# ---------------------------------------------------------------------------


def _apply_override(score: RuleScore, override: ScoreOverride) -> RuleScore:
    cap = max(0.0, min(1.0, override.max_coverage))
    coverage = min(score.coverage, cap)
    return replace(
        score,
        coverage=coverage,
        score=coverage * score.max_score,
        note=override.reason,
    )


def _skip(score: RuleScore, failed_deps: list[str]) -> RuleScore:
    deps = tuple(failed_deps)
    return replace(
        score,
        applicable=False,
        coverage=0.0,
        score=0.0,
        targets_checked=0,
        targets_passed=0,
        findings=(
            Finding(
                rule_id=score.rule_id,
                severity="info",
                message=f"Skipped due to failed dependencies: {', '.join(deps)}",
                location="$",
                category=score.category,
            ),
        ),
        skipped=True,
        failed_dependencies=deps,
        note=None,
    )


def adjust_scores(
    scores: Mapping[str, RuleScore],
    *,
    graph: DependencyGraph | None = None,
    failed_external: Iterable[str] = (),
    overrides: Mapping[str, ScoreOverride] | None = None,
) -> dict[str, RuleScore]:
    """Revise *scores* for overrides and failed dependencies.

    Rule ids, categories and max scores are preserved. Overrides are applied
    first, then skips are propagated in dependency order, so that a capped
    rule can block its dependents and a second pass changes nothing.

    Args:
        scores: Per-rule scores keyed by rule id.
        graph: Dependency graph; defaults to the built-in registry's.
        failed_external: Ids to treat as failed even though they are not
            scored here (for example prerequisites).
        overrides: Coverage caps keyed by rule id.
    """
    if graph is None:
        graph = build_dependency_graph(DEFAULT_REGISTRY.values())
    overrides = overrides or {}

    revised: dict[str, RuleScore] = {}
    for rule_id, score in scores.items():
        override = overrides.get(rule_id)
        revised[rule_id] = _apply_override(score, override) if override is not None else score

    failed: set[str] = set(failed_external)
    in_graph = [rid for rid in topological_sort(graph) if rid in revised]
    rest = [rid for rid in revised if rid not in graph.nodes]
    for rule_id in in_graph + rest:
        score = revised[rule_id]
        deps = sorted(graph.edges.get(rule_id, frozenset()))
        failed_deps = [d for d in deps if d in failed]
        if failed_deps:
            logger.debug("Skipping %s: failed dependencies %s", rule_id, failed_deps)
            score = _skip(score, failed_deps)
            revised[rule_id] = score
        if score.failed:
            failed.add(rule_id)

    return {rule_id: revised[rule_id] for rule_id in scores}


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_dependency_chains(scores: Mapping[str, RuleScore]) -> DependencyAnalysis:
    """Separate root-cause failures from failures that merely cascaded."""
    root_causes: list[str] = []
    cascading: dict[str, list[str]] = {}
    affected = 0
    for rule_id, score in scores.items():
        if score.skipped:
            for dep in score.failed_dependencies:
                cascading.setdefault(dep, []).append(rule_id)
            affected += 1
        elif score.applicable and score.coverage < 1.0:
            root_causes.append(rule_id)
    return DependencyAnalysis(
        root_causes=tuple(root_causes),
        cascading_failures={k: tuple(v) for k, v in cascading.items()},
        affected_rules=affected,
    )


def unblocked_rules(rule_id: str, scores: Mapping[str, RuleScore]) -> list[str]:
    """Skipped rules that fixing *rule_id* alone would unblock."""
    unblocked: list[str] = []
    for other_id, score in scores.items():
        if not score.skipped or rule_id not in score.failed_dependencies:
            continue
        others = [d for d in score.failed_dependencies if d != rule_id]
        if all(d not in scores or not scores[d].failed for d in others):
            unblocked.append(other_id)
    return unblocked


def dependency_report(
    scores: Mapping[str, RuleScore],
    registry: RuleRegistry = DEFAULT_REGISTRY,
) -> str:
    analysis = analyze_dependency_chains(scores)
    lines = ["=== Dependency Analysis Report ===", ""]
    if analysis.root_causes:
        lines.append("Root Cause Failures:")
        for rule_id in analysis.root_causes:
            score = scores[rule_id]
            lines.append(f"  - {score.rule_name} ({score.coverage * 100:.1f}% coverage)")
        lines.append("")
    if analysis.cascading_failures:
        lines.append("Cascading Failures:")
        for cause, affected in analysis.cascading_failures.items():
            cause_rule = registry.get(cause)
            lines.append(f"  {cause_rule.description if cause_rule else cause} caused:")
            for affected_id in affected:
                affected_rule = registry.get(affected_id)
                lines.append(f"    -> {affected_rule.description if affected_rule else affected_id}")
        lines.append("")
    lines.append("=== Summary ===")
    lines.append(f"Root Causes: {len(analysis.root_causes)}")
    lines.append(f"Cascading Failures: {analysis.affected_rules}")
    lines.append(f"Total Rules Affected: {len(analysis.root_causes) + analysis.affected_rules}")
    return "\n".join(lines)
