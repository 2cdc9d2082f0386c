"""Scoring: prerequisite gate, coverage scoring, dependency adjustment, grading."""

from apigrader.scoring.coverage import (
    CategoryScore,
    RuleScore,
    calculate_category_scores,
    score_all_rules,
    score_rule,
)
from apigrader.scoring.dependencies import (
    DependencyGraph,
    ScoreOverride,
    adjust_scores,
    build_dependency_graph,
    topological_sort,
)
from apigrader.scoring.grade import (
    CategoryBreakdown,
    GradeResult,
    calculate_final_grade,
    letter_grade,
)
from apigrader.scoring.prerequisites import PrerequisiteResult, check_prerequisites

__all__ = [
    "CategoryBreakdown",
    "CategoryScore",
    "DependencyGraph",
    "GradeResult",
    "PrerequisiteResult",
    "RuleScore",
    "ScoreOverride",
    "adjust_scores",
    "build_dependency_graph",
    "calculate_category_scores",
    "calculate_final_grade",
    "check_prerequisites",
    "letter_grade",
    "score_all_rules",
    "score_rule",
    "topological_sort",
]
