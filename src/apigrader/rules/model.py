"""Value objects shared by the rule registry, evaluator, and scorers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RULE_SEVERITIES: frozenset[str] = frozenset({"prerequisite", "critical", "major", "minor"})
FINDING_SEVERITIES: frozenset[str] = frozenset({"critical", "major", "minor", "info"})
TARGET_KINDS: frozenset[str] = frozenset(
    {"path", "operation", "schema", "parameter", "response", "security", "document"}
)
EFFORT_LEVELS: tuple[str, ...] = ("trivial", "easy", "medium", "hard")

# Sort rank for findings; lower sorts first.
SEVERITY_RANK: dict[str, int] = {"critical": 0, "major": 1, "minor": 2, "info": 3}

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Target:
    """One addressable unit of the document that a rule validates."""

    kind: str  # see TARGET_KINDS
    location: str  # e.g. "$.paths['/api/v2/items'].get"
    identifier: str  # e.g. "GET /api/v2/items"
    method: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one target."""

    passed: bool
    message: str | None = None
    fix_hint: str | None = None
    confidence: float = 1.0


PASS = ValidationResult(passed=True)


def fail(message: str, fix_hint: str | None = None) -> ValidationResult:
    return ValidationResult(passed=False, message=message, fix_hint=fix_hint)


@dataclass(frozen=True)
class Finding:
    """A reported failure with location and remediation hint."""

    rule_id: str
    severity: str  # critical | major | minor | info
    message: str
    location: str
    category: str
    fix_hint: str | None = None

    def sort_key(self) -> tuple[int, str, str, str]:
        return (
            SEVERITY_RANK.get(self.severity, len(SEVERITY_RANK)),
            self.category,
            self.rule_id,
            self.location,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "rule_id": self.rule_id,
            "severity": self.severity,
            "message": self.message,
            "location": self.location,
            "category": self.category,
        }
        if self.fix_hint is not None:
            data["fix_hint"] = self.fix_hint
        return data


@dataclass(frozen=True)
class Rule:
    """A categorized, weighted check: ``detect`` finds targets, ``validate`` judges each."""

    id: str
    category: str
    severity: str  # see RULE_SEVERITIES
    points: float
    description: str
    detect: Callable[[Any], list[Target]] = field(repr=False, compare=False)
    validate: Callable[[Target, Any], ValidationResult] = field(repr=False, compare=False)
    rationale: str = ""
    depends_on: tuple[str, ...] = ()
    effort: str = "easy"
    auto_fixable: bool = False

    @property
    def is_prerequisite(self) -> bool:
        return self.severity == "prerequisite"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "severity": self.severity,
            "points": self.points,
            "description": self.description,
            "rationale": self.rationale,
            "depends_on": list(self.depends_on),
            "effort": self.effort,
            "auto_fixable": self.auto_fixable,
        }
