"""Immutable rule registry, validated once at construction."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from apigrader.config import VALID_CATEGORIES, ConfigurationError
from apigrader.rules.builtin import BUILTIN_RULES
from apigrader.rules.model import EFFORT_LEVELS, RULE_SEVERITIES, Rule

if TYPE_CHECKING:
    from collections.abc import Iterable


class RuleRegistry(Mapping[str, Rule]):
    """Read-only id -> :class:`Rule` lookup preserving registration order.

    Safe to share across concurrent grading runs: nothing mutates it after
    :func:`build_registry` returns.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Mapping[str, Rule]) -> None:
        self._rules: Mapping[str, Rule] = MappingProxyType(dict(rules))

    def __getitem__(self, rule_id: str) -> Rule:
        return self._rules[rule_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry({len(self)} rules)"

    def by_category(self, category: str) -> list[Rule]:
        return [r for r in self._rules.values() if r.category == category]

    def by_severity(self, severity: str) -> list[Rule]:
        return [r for r in self._rules.values() if r.severity == severity]

    def prerequisite_rules(self) -> list[Rule]:
        return [r for r in self._rules.values() if r.is_prerequisite]

    def scored_rules(self) -> list[Rule]:
        return [r for r in self._rules.values() if not r.is_prerequisite]

    def total_points(self, category: str | None = None) -> float:
        return sum(
            r.points
            for r in self._rules.values()
            if category is None or r.category == category
        )


def _check_rule(rule: Rule) -> None:
    if rule.category not in VALID_CATEGORIES:
        msg = f"Rule '{rule.id}': unknown category '{rule.category}'"
        raise ConfigurationError(msg)
    if rule.severity not in RULE_SEVERITIES:
        msg = f"Rule '{rule.id}': unknown severity '{rule.severity}'"
        raise ConfigurationError(msg)
    if rule.points < 0:
        msg = f"Rule '{rule.id}': points must be >= 0, got {rule.points}"
        raise ConfigurationError(msg)
    if rule.is_prerequisite and rule.points != 0:
        msg = f"Rule '{rule.id}': prerequisites carry no points, got {rule.points}"
        raise ConfigurationError(msg)
    if rule.effort not in EFFORT_LEVELS:
        msg = f"Rule '{rule.id}': unknown effort '{rule.effort}'"
        raise ConfigurationError(msg)


def build_registry(rules: Iterable[Rule]) -> RuleRegistry:
    """Validate *rules* and freeze them into a :class:`RuleRegistry`.

    Raises:
        ConfigurationError: On duplicate ids, unknown categories, severities
            or effort levels, negative points, or a dependency on a rule
            that is not registered.
    """
    collected: dict[str, Rule] = {}
    for rule in rules:
        if rule.id in collected:
            msg = f"Duplicate rule id '{rule.id}'"
            raise ConfigurationError(msg)
        _check_rule(rule)
        collected[rule.id] = rule

    for rule in collected.values():
        unknown = [dep for dep in rule.depends_on if dep not in collected]
        if unknown:
            msg = f"Rule '{rule.id}' depends on unknown rule(s): {', '.join(unknown)}"
            raise ConfigurationError(msg)

    return RuleRegistry(collected)


DEFAULT_REGISTRY: RuleRegistry = build_registry(BUILTIN_RULES)
