"""Registry-based grading: classify, gate, score, adjust, grade.

:func:`grade_document` is the single entry point the CLI and library callers
use. It never raises for problems found in the document; those come back as
findings or as a blocked :class:`~apigrader.scoring.prerequisites.PrerequisiteResult`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from apigrader.checkpoints.engine import get_api_id
from apigrader.config import GradingConfig
from apigrader.detection.patterns import classify, unclassified
from apigrader.detection.profiles import (
    GradingProfile,
    excluded_rules,
    get_profile,
    profile_for_classification,
)
from apigrader.rules.registry import DEFAULT_REGISTRY
from apigrader.scoring.coverage import score_all_rules
from apigrader.scoring.dependencies import adjust_scores, build_dependency_graph
from apigrader.scoring.grade import calculate_final_grade, compare_grades
from apigrader.scoring.prerequisites import check_prerequisites

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from apigrader.detection.patterns import Classification
    from apigrader.rules.registry import RuleRegistry
    from apigrader.scoring.coverage import RuleScore
    from apigrader.scoring.dependencies import ScoreOverride
    from apigrader.scoring.grade import GradeComparison, GradeResult
    from apigrader.scoring.prerequisites import PrerequisiteResult

    ProgressCallback = Callable[[str, int, str | None], None]

logger = logging.getLogger(__name__)

AUTO_PROFILE = "auto"

STAGES: tuple[tuple[str, int], ...] = (
    ("classification", 20),
    ("prerequisites", 35),
    ("scoring", 70),
    ("adjustment", 85),
    ("grade", 100),
)
_STAGE_PERCENT = dict(STAGES)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GradingOutcome:
    """Everything one grading run produced. ``grade`` is ``None`` when blocked."""

    api_id: str
    prerequisites: PrerequisiteResult
    grade: GradeResult | None
    rule_scores: Mapping[str, RuleScore]
    profile: GradingProfile | None
    classification: Classification

    @property
    def blocked(self) -> bool:
        return not self.prerequisites.passed

    @property
    def passed(self) -> bool:
        return self.grade is not None and self.grade.passed

    @property
    def score(self) -> int:
        """Final score; a blocked run counts as zero."""
        return self.grade.score if self.grade is not None else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "api_id": self.api_id,
            "blocked": self.blocked,
            "passed": self.passed,
            "profile": self.profile.to_dict() if self.profile is not None else None,
            "classification": self.classification.to_dict(),
            "prerequisites": self.prerequisites.to_dict(),
            "grade": self.grade.to_dict() if self.grade is not None else None,
            "rule_scores": {rid: s.to_dict() for rid, s in self.rule_scores.items()},
        }


@dataclass(frozen=True)
class DocumentComparison:
    baseline: GradingOutcome
    current: GradingOutcome
    comparison: GradeComparison | None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "baseline": {"score": self.baseline.score, "blocked": self.baseline.blocked},
            "current": {"score": self.current.score, "blocked": self.current.blocked},
        }
        if self.comparison is not None:
            data.update(
                {
                    "score_delta": self.comparison.score_delta,
                    "grade_delta": self.comparison.grade_delta,
                    "improved": self.comparison.improved,
                    "fixed_findings": self.comparison.fixed_findings,
                    "new_findings": self.comparison.new_findings,
                    "message": self.comparison.message,
                }
            )
        else:
            delta = self.current.score - self.baseline.score
            data.update({"score_delta": delta, "improved": delta > 0})
        return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _notify(progress: ProgressCallback | None, stage: str, note: str | None = None) -> None:
    if progress is None:
        return
    try:
        progress(stage, _STAGE_PERCENT[stage], note)
    except Exception as exc:  # progress reporting must not break grading
        logger.debug("Progress callback failed at %s: %s", stage, exc)


def _classify(doc: Any) -> Classification:
    try:
        return classify(doc)
    except Exception as exc:  # the classifier is advisory; grade without it
        logger.warning("Classification failed, grading unclassified: %s", exc)
        return unclassified()


def resolve_profile(
    profile: str | GradingProfile | None,
    classification: Classification,
) -> GradingProfile | None:
    """Turn the ``profile`` argument into a profile object.

    Raises:
        KeyError: If *profile* names an unknown profile id.
    """
    if profile is None or isinstance(profile, GradingProfile):
        return profile
    if profile == AUTO_PROFILE:
        return profile_for_classification(classification)
    return get_profile(profile)


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------


def grade_document(
    doc: Any,
    *,
    profile: str | GradingProfile | None = None,
    config: GradingConfig | None = None,
    registry: RuleRegistry = DEFAULT_REGISTRY,
    overrides: Mapping[str, ScoreOverride] | None = None,
    progress: ProgressCallback | None = None,
) -> GradingOutcome:
    """Grade *doc* against *registry*.

    Args:
        doc: Parsed specification tree; never mutated.
        profile: ``None`` for the fixed prerequisite gate, ``"auto"`` to let
            the classifier pick, a profile id, or a profile object.
        config: Category weights and passing score; defaults when omitted.
        registry: Rules to evaluate.
        overrides: Coverage caps keyed by rule id.
        progress: Called as ``progress(stage, percent, note)`` after each stage.

    Raises:
        KeyError: If *profile* names an unknown profile id.
    """
    config = config or GradingConfig()
    classification = _classify(doc)
    _notify(progress, "classification", classification.primary)
    active = resolve_profile(profile, classification)

    gate = check_prerequisites(doc, active, registry)
    _notify(progress, "prerequisites", None if gate.passed else gate.blocked_reason)

    api_id = get_api_id(doc)
    if not gate.passed:
        logger.debug("Grading blocked for %s: %s", api_id, gate.blocked_reason)
        _notify(progress, "grade", "blocked")
        return GradingOutcome(
            api_id=api_id,
            prerequisites=gate,
            grade=None,
            rule_scores=MappingProxyType({}),
            profile=active,
            classification=classification,
        )

    excluded = excluded_rules(active, registry.values(), gate.skipped_prerequisites)
    scores = score_all_rules(doc, registry=registry, excluded=excluded)
    _notify(progress, "scoring", f"{len(scores)} rules")

    adjusted = adjust_scores(
        scores,
        graph=build_dependency_graph(registry.values()),
        overrides=overrides,
    )
    _notify(progress, "adjustment")

    grade = calculate_final_grade(
        adjusted,
        weights=config.category_weights,
        passing_score=config.passing_score,
        prerequisites_passed=gate.passed,
    )
    _notify(progress, "grade", grade.letter_grade)

    return GradingOutcome(
        api_id=api_id,
        prerequisites=gate,
        grade=grade,
        rule_scores=MappingProxyType(adjusted),
        profile=active,
        classification=classification,
    )


def compare_documents(
    baseline: Any,
    current: Any,
    **kwargs: Any,
) -> DocumentComparison:
    """Grade two documents independently and diff the results.

    Keyword arguments are passed to :func:`grade_document` for both sides.
    When either side is blocked there is no grade to diff; the comparison
    then reports scores only, with the blocked side at zero.
    """
    before = grade_document(baseline, **kwargs)
    after = grade_document(current, **kwargs)
    comparison = None
    if before.grade is not None and after.grade is not None:
        comparison = compare_grades(before.grade, after.grade)
    return DocumentComparison(baseline=before, current=after, comparison=comparison)
