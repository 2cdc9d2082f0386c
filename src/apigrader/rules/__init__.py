"""Rules: value objects, the built-in catalogue, the registry, and the evaluator."""

from apigrader.rules.evaluator import RuleEvaluation, evaluate, evaluate_all
from apigrader.rules.model import Finding, Rule, Target, ValidationResult
from apigrader.rules.registry import DEFAULT_REGISTRY, RuleRegistry, build_registry

__all__ = [
    "DEFAULT_REGISTRY",
    "Finding",
    "Rule",
    "RuleEvaluation",
    "RuleRegistry",
    "Target",
    "ValidationResult",
    "build_registry",
    "evaluate",
    "evaluate_all",
]
