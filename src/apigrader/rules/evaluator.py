"""Run a rule's detect/validate pair against a document with fault isolation.

A rule that raises, or returns something other than the expected value
objects, is reported as a synthetic critical :class:`Finding` for that rule.
It never aborts evaluation of the other rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from apigrader.rules.model import Finding, Target, ValidationResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apigrader.rules.model import Rule

logger = logging.getLogger(__name__)


class RuleExecutionFault(Exception):
    """A rule implementation raised or returned malformed data."""


@dataclass(frozen=True)
class RuleEvaluation:
    """Per-target outcomes of one rule, or the fault that stopped it."""

    rule: Rule
    targets: tuple[Target, ...]
    results: tuple[tuple[Target, ValidationResult], ...]
    fault: Finding | None = None

    @property
    def passed(self) -> int:
        return sum(1 for _, r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def faulted(self) -> bool:
        return self.fault is not None


def fault_finding(rule: Rule, detail: str) -> Finding:
    """Synthetic critical finding naming the rule whose implementation broke."""
    return Finding(
        rule_id=rule.id,
        severity="critical",
        message=f"Rule execution failed: {detail}",
        location="$",
        category=rule.category,
        fix_hint="Report this rule failure; other rules were still evaluated",
    )


def _detect(rule: Rule, doc: Any) -> tuple[Target, ...]:
    targets = rule.detect(doc)
    if not isinstance(targets, (list, tuple)):
        msg = f"detect returned {type(targets).__name__}, expected a list of targets"
        raise RuleExecutionFault(msg)
    for target in targets:
        if not isinstance(target, Target):
            msg = f"detect returned a {type(target).__name__} instead of a Target"
            raise RuleExecutionFault(msg)
    return tuple(targets)


def _validate(rule: Rule, target: Target, doc: Any) -> ValidationResult:
    result = rule.validate(target, doc)
    if not isinstance(result, ValidationResult):
        msg = (
            f"validate returned {type(result).__name__} for {target.identifier}, "
            "expected a ValidationResult"
        )
        raise RuleExecutionFault(msg)
    return result


def evaluate(rule: Rule, doc: Any) -> RuleEvaluation:
    """Detect targets and validate each one; never raises for rule faults."""
    targets: tuple[Target, ...] = ()
    results: list[tuple[Target, ValidationResult]] = []
    try:
        targets = _detect(rule, doc)
        for target in targets:
            results.append((target, _validate(rule, target, doc)))
    except Exception as exc:  # any rule bug becomes a finding
        detail = str(exc) or type(exc).__name__
        logger.warning("Rule %s failed: %s", rule.id, detail)
        return RuleEvaluation(
            rule=rule,
            targets=targets,
            results=tuple(results),
            fault=fault_finding(rule, detail),
        )
    return RuleEvaluation(rule=rule, targets=targets, results=tuple(results))


def evaluate_all(rules: Iterable[Rule], doc: Any) -> list[RuleEvaluation]:
    return [evaluate(rule, doc) for rule in rules]
