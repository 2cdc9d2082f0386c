"""Tests for apigrader.scoring — coverage scoring, dependency adjustment, final grade."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

import pytest

from apigrader.config import DependencyCycleError
from apigrader.rules.model import PASS, Rule, Target, ValidationResult, fail
from apigrader.rules.registry import DEFAULT_REGISTRY, build_registry
from apigrader.scoring.coverage import (
    RuleScore,
    calculate_category_scores,
    coverage_report,
    coverage_stats,
    finding_severity,
    improvement_opportunities,
    optimal_improvements,
    score_all_rules,
    score_rule,
)
from apigrader.scoring.dependencies import (
    ScoreOverride,
    adjust_scores,
    analyze_dependency_chains,
    build_dependency_graph,
    evaluation_order,
    topological_sort,
    unblocked_rules,
    validate_dependencies,
)
from apigrader.scoring.grade import (
    apply_release_profile,
    calculate_final_grade,
    compare_grades,
    grade_summary,
    letter_grade,
    would_legacy_auto_fail,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _targets(count: int) -> Any:
    def detect(doc: Any) -> list[Target]:
        return [Target(kind="document", location=f"$.t{i}", identifier=f"T{i}") for i in range(count)]

    return detect


def _pass_first(passing: int) -> Any:
    def validate(target: Target, doc: Any) -> ValidationResult:
        index = int(target.identifier[1:])
        return PASS if index < passing else fail("bad", "fix it")

    return validate


def _rule(
    rule_id: str,
    *,
    targets: int = 4,
    passing: int = 4,
    points: float = 10,
    category: str = "functionality",
    depends_on: tuple[str, ...] = (),
    severity: str = "major",
) -> Rule:
    return Rule(
        id=rule_id,
        category=category,
        severity=severity,
        points=points,
        description=f"Rule {rule_id}",
        detect=_targets(targets),
        validate=_pass_first(passing),
        depends_on=depends_on,
    )


def _score(
    rule_id: str,
    coverage: float,
    *,
    max_score: float = 10,
    category: str = "functionality",
    applicable: bool = True,
) -> RuleScore:
    return RuleScore(
        rule_id=rule_id,
        rule_name=rule_id,
        category=category,
        severity="major",
        applicable=applicable,
        coverage=coverage,
        score=coverage * max_score,
        max_score=max_score,
        targets_checked=4,
        targets_passed=int(coverage * 4),
    )


# ===========================================================================
# Coverage
# ===========================================================================


class TestScoreRule:
    def test_partial_coverage(self) -> None:
        score = score_rule(_rule("A", passing=3), {})
        assert score.coverage == pytest.approx(0.75)
        assert score.score == pytest.approx(7.5)
        assert score.targets_checked == 4
        assert score.targets_passed == 3
        assert len(score.findings) == 1
        assert score.findings[0].message == "T3: bad"
        assert score.findings[0].severity == "major"
        assert score.failed

    def test_no_targets_full_credit(self) -> None:
        score = score_rule(_rule("A", targets=0), {})
        assert not score.applicable
        assert score.coverage == 1.0
        assert score.score == 10
        assert not score.failed

    def test_fault_scores_zero(self) -> None:
        def boom(doc: Any) -> list[Target]:
            raise RuntimeError("nope")

        rule = replace(_rule("A"), detect=boom)
        score = score_rule(rule, {})
        assert score.score == 0
        assert score.coverage == 0
        assert score.findings[0].severity == "critical"
        assert score.findings[0].message.startswith("Rule execution failed")

    @pytest.mark.parametrize(
        ("rule_severity", "expected"),
        [("prerequisite", "critical"), ("critical", "critical"), ("major", "major"), ("minor", "minor"), ("x", "info")],
    )
    def test_finding_severity(self, rule_severity: str, expected: str) -> None:
        assert finding_severity(rule_severity) == expected


class TestScoreAllRules:
    def test_prerequisites_excluded(self, best_practice_doc: dict[str, Any]) -> None:
        scores = score_all_rules(best_practice_doc)
        assert len(scores) == 20
        assert not any(rid.startswith("PREREQ") for rid in scores)

    def test_best_practice_full_coverage(self, best_practice_doc: dict[str, Any]) -> None:
        scores = score_all_rules(best_practice_doc)
        assert {rid for rid, s in scores.items() if s.coverage < 1.0} == set()

    def test_subset(self, best_practice_doc: dict[str, Any]) -> None:
        scores = score_all_rules(best_practice_doc, ["FUNC-001", "NOPE", "PREREQ-001"])
        assert list(scores) == ["FUNC-001"]

    def test_excluded_rules_not_evaluated(self, minimal_doc: dict[str, Any]) -> None:
        scores = score_all_rules(minimal_doc, excluded={"SEC-002": "Disabled by the Simple REST API profile"})
        excluded = scores["SEC-002"]
        assert not excluded.applicable
        assert excluded.coverage == 1.0
        assert excluded.score == excluded.max_score == 5
        assert excluded.findings == ()
        assert excluded.note == "Disabled by the Simple REST API profile"
        assert not excluded.failed
        assert scores["SEC-001"].applicable

    def test_category_scores(self) -> None:
        scores = {
            "A": _score("A", 1.0),
            "B": _score("B", 0.5),
            "C": _score("C", 1.0, category="security", applicable=False),
        }
        categories = calculate_category_scores(scores)
        assert categories["functionality"].earned == pytest.approx(15)
        assert categories["functionality"].percentage == pytest.approx(0.75)
        assert categories["functionality"].rules_passed == 1
        assert categories["security"].rules_applicable == 0
        assert categories["excellence"].percentage == 0.0


class TestCoverageAnalysis:
    def test_opportunities_sorted_by_gain(self) -> None:
        scores = {"A": _score("A", 0.5, max_score=4), "B": _score("B", 0.0), "C": _score("C", 1.0)}
        opportunities = improvement_opportunities(scores)
        assert [o.rule_id for o in opportunities] == ["B", "A"]
        assert opportunities[0].potential_points == 10

    def test_optimal_improvements_prefer_low_effort(self) -> None:
        scores = {
            "FUNC-001": _score("FUNC-001", 0.0),  # effort medium
            "MAINT-003": _score("MAINT-003", 0.0, max_score=3),  # effort trivial
        }
        chosen = optimal_improvements(scores, target_gain=3)
        assert [o.rule_id for o in chosen] == ["MAINT-003"]

    def test_stats(self) -> None:
        scores = {"A": _score("A", 0.25), "B": _score("B", 0.75), "C": _score("C", 1.0)}
        stats = coverage_stats(scores)
        assert stats.applicable_rules == 3
        assert stats.perfect_rules == 1
        assert stats.worst_rule == "A"
        assert stats.best_partial_rule == "B"
        assert stats.average_coverage == pytest.approx(2 / 3)

    def test_report_mentions_categories(self) -> None:
        report = coverage_report({"A": _score("A", 0.5)})
        assert "FUNCTIONALITY (5.0/10 = 50.0%)" in report
        assert "[partial] A" in report


# ===========================================================================
# Dependencies
# ===========================================================================


class TestTopologicalSort:
    def test_dependencies_first(self) -> None:
        graph = build_dependency_graph([_rule("B", depends_on=("A",)), _rule("A")])
        assert topological_sort(graph) == ["A", "B"]

    def test_cycle_detected(self) -> None:
        graph = build_dependency_graph(
            [_rule("A", depends_on=("B",)), _rule("B", depends_on=("A",))]
        )
        with pytest.raises(DependencyCycleError, match="cycles"):
            topological_sort(graph)

    def test_builtin_order_valid(self) -> None:
        order = evaluation_order()
        assert order.index("PREREQ-003") < order.index("SEC-001")
        assert validate_dependencies() == []

    def test_external_dependencies_ignored(self) -> None:
        graph = build_dependency_graph([_rule("A", depends_on=("EXTERNAL",))])
        assert topological_sort(graph) == ["A"]


class TestAdjustScores:
    def test_failed_dependency_cascades(self) -> None:
        rules = [
            _rule("A"),
            _rule("B", depends_on=("A",)),
            _rule("C", depends_on=("B",)),
        ]
        graph = build_dependency_graph(rules)
        scores = {"A": _score("A", 0.5), "B": _score("B", 1.0), "C": _score("C", 1.0)}
        adjusted = adjust_scores(scores, graph=graph)
        assert adjusted["A"].score == pytest.approx(5)
        assert adjusted["B"].skipped
        assert adjusted["B"].failed_dependencies == ("A",)
        assert adjusted["B"].score == 0
        assert adjusted["C"].skipped
        assert adjusted["C"].failed_dependencies == ("B",)
        assert adjusted["C"].findings[0].severity == "info"

    def test_failed_external(self) -> None:
        graph = build_dependency_graph([_rule("A", depends_on=("PRE",))])
        adjusted = adjust_scores({"A": _score("A", 1.0)}, graph=graph, failed_external=["PRE"])
        assert adjusted["A"].skipped

    def test_override_caps_coverage_and_blocks_dependents(self) -> None:
        graph = build_dependency_graph([_rule("A"), _rule("B", depends_on=("A",))])
        scores = {"A": _score("A", 1.0), "B": _score("B", 1.0)}
        adjusted = adjust_scores(
            scores,
            graph=graph,
            overrides={"A": ScoreOverride(max_coverage=0.4, reason="manual review")},
        )
        assert adjusted["A"].coverage == pytest.approx(0.4)
        assert adjusted["A"].note == "manual review"
        assert adjusted["B"].skipped

    def test_override_never_raises_coverage(self) -> None:
        graph = build_dependency_graph([_rule("A")])
        adjusted = adjust_scores(
            {"A": _score("A", 0.5)}, graph=graph, overrides={"A": ScoreOverride(max_coverage=2.0)}
        )
        assert adjusted["A"].coverage == pytest.approx(0.5)

    def test_idempotent(self) -> None:
        graph = build_dependency_graph([_rule("A"), _rule("B", depends_on=("A",))])
        scores = {"A": _score("A", 0.5), "B": _score("B", 1.0)}
        once = adjust_scores(scores, graph=graph)
        assert adjust_scores(once, graph=graph) == once

    def test_preserves_ids_categories_and_max(self) -> None:
        graph = build_dependency_graph([_rule("A"), _rule("B", depends_on=("A",))])
        scores = {"B": _score("B", 1.0, category="security"), "A": _score("A", 0.0)}
        adjusted = adjust_scores(scores, graph=graph)
        assert list(adjusted) == ["B", "A"]
        assert adjusted["B"].category == "security"
        assert adjusted["B"].max_score == 10

    def test_best_practice_unchanged(self, best_practice_doc: dict[str, Any]) -> None:
        scores = score_all_rules(best_practice_doc)
        assert adjust_scores(scores) == scores


class TestDependencyAnalysis:
    def test_root_causes_and_unblocking(self) -> None:
        graph = build_dependency_graph([_rule("A"), _rule("B", depends_on=("A",))])
        adjusted = adjust_scores({"A": _score("A", 0.0), "B": _score("B", 1.0)}, graph=graph)
        analysis = analyze_dependency_chains(adjusted)
        assert analysis.root_causes == ("A",)
        assert analysis.cascading_failures == {"A": ("B",)}
        assert unblocked_rules("A", adjusted) == ["B"]


# ===========================================================================
# Grade
# ===========================================================================


class TestLetterGrade:
    @pytest.mark.parametrize(
        ("score", "letter"),
        [(100, "A+"), (97, "A+"), (96, "A"), (90, "A-"), (85, "B"), (70, "C-"), (60, "D-"), (59, "F"), (0, "F")],
    )
    def test_thresholds(self, score: int, letter: str) -> None:
        assert letter_grade(score) == letter


class TestFinalGrade:
    def test_perfect(self) -> None:
        scores = {
            c: _score(c, 1.0, category=c)
            for c in ("functionality", "security", "scalability", "maintainability", "excellence")
        }
        grade = calculate_final_grade(scores)
        assert grade.score == 100
        assert grade.letter_grade == "A+"
        assert grade.passed
        assert grade.excellence

    def test_weighted_and_rounded_half_up(self) -> None:
        # functionality 50% of 0.30 weight = 15 points, nothing else scored
        grade = calculate_final_grade({"A": _score("A", 0.5)})
        assert grade.score == 15
        assert not grade.passed
        weights = {"functionality": 0.25, "security": 0.75, "scalability": 0.0,
                   "maintainability": 0.0, "excellence": 0.0}
        # 0.25 * 0.5 * 100 = 12.5 rounds up to 13
        assert calculate_final_grade({"A": _score("A", 0.5)}, weights=weights).score == 13

    def test_empty_category_contributes_zero(self) -> None:
        grade = calculate_final_grade({})
        assert grade.score == 0
        assert all(b.percentage == 0.0 for b in grade.breakdown)

    def test_prerequisites_failed_never_passes(self) -> None:
        scores = {
            c: _score(c, 1.0, category=c)
            for c in ("functionality", "security", "scalability", "maintainability", "excellence")
        }
        assert not calculate_final_grade(scores, prerequisites_passed=False).passed

    def test_findings_sorted(self) -> None:
        registry = build_registry(
            [
                _rule("M", passing=3, severity="minor", category="security"),
                _rule("C", passing=3, severity="critical"),
            ]
        )
        scores = {r.id: score_rule(r, {}) for r in registry.values()}
        grade = calculate_final_grade(scores)
        assert [f.rule_id for f in grade.findings] == ["C", "M"]
        assert grade.critical_findings == 1
        assert grade.minor_findings == 1

    def test_unknown_category_ignored(self) -> None:
        grade = calculate_final_grade({"A": _score("A", 1.0, category="style")})
        assert grade.score == 0

    def test_to_dict(self) -> None:
        data = calculate_final_grade({"A": _score("A", 1.0)}).to_dict()
        assert data["score"] == 30
        assert len(data["breakdown"]) == 5


class TestGradeHelpers:
    def test_release_profiles(self) -> None:
        grade = calculate_final_grade({"A": _score("A", 1.0)})  # 30, failing
        assert apply_release_profile(grade, "standard").passed is False
        assert apply_release_profile(grade, "prototype").passed is False
        with pytest.raises(ValueError, match="Unknown release profile"):
            apply_release_profile(grade, "beta")

    def test_public_profile_is_stricter(self) -> None:
        scores = {
            "f": _score("f", 1.0, category="functionality"),
            "s": _score("s", 1.0, category="security"),
            "c": _score("c", 1.0, category="scalability"),
        }
        grade = calculate_final_grade(scores)  # 75
        assert grade.passed
        assert not apply_release_profile(grade, "public").passed

    def test_legacy_auto_fail(self) -> None:
        grade = calculate_final_grade({"A": replace(_score("A", 1.0), findings=())})
        assert not would_legacy_auto_fail(grade)

    def test_compare(self) -> None:
        before = calculate_final_grade({"A": _score("A", 0.5)})
        after = calculate_final_grade({"A": _score("A", 1.0)})
        comparison = compare_grades(before, after)
        assert comparison.score_delta == 15
        assert comparison.improved
        assert comparison.grade_delta == "F → F"
        assert comparison.message.startswith("Improved by 15 points.")

    def test_compare_no_change(self) -> None:
        grade = calculate_final_grade({"A": _score("A", 1.0)})
        assert compare_grades(grade, grade).message == "No change in score."

    def test_summary(self) -> None:
        text = grade_summary(calculate_final_grade({"A": _score("A", 1.0)}))
        assert text.startswith("API Grade: 30/100 (F)")
        assert "critical issues" in text


def test_default_registry_builds_graph() -> None:
    graph = build_dependency_graph(DEFAULT_REGISTRY.values())
    assert graph.edges["SEC-001"] == frozenset({"PREREQ-003"})
