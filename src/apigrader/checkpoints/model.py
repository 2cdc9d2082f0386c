"""Value objects for the standalone checkpoint engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

CHECKPOINT_CATEGORIES: tuple[str, ...] = (
    "openapi",
    "servers",
    "tags",
    "naming",
    "security",
    "tenancy",
    "http",
    "ratelimit",
    "caching",
    "envelope",
    "pagination",
    "async",
    "content",
    "i18n",
    "webhooks",
    "docs",
    "extensions",
)
CHECKPOINT_SEVERITIES: tuple[str, ...] = ("error", "warn", "info")

# Ceiling applied to the score when any auto-fail checkpoint fails.
AUTO_FAIL_CAP = 59


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check. A passing result may still carry advice."""

    passed: bool
    message: str | None = None


@dataclass(frozen=True)
class Checkpoint:
    id: str
    category: str
    description: str
    weight: int
    auto_fail: bool
    check: Callable[[Any], CheckResult] = field(compare=False, repr=False)


@dataclass(frozen=True)
class CheckpointFinding:
    checkpoint: str
    category: str
    passed: bool
    weight: int
    auto_fail: bool
    severity: str  # error | warn | info
    message: str | None
    json_path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkpoint": self.checkpoint,
            "category": self.category,
            "passed": self.passed,
            "weight": self.weight,
            "auto_fail": self.auto_fail,
            "severity": self.severity,
            "message": self.message,
            "json_path": self.json_path,
        }


@dataclass(frozen=True)
class CategoryTally:
    earned: int
    total: int


@dataclass(frozen=True)
class CheckpointReport:
    """Result of running the checkpoint catalogue against one document."""

    api_id: str
    score: int
    letter_grade: str
    findings: tuple[CheckpointFinding, ...]
    auto_fail_reasons: tuple[str, ...]
    auto_fail_ids: tuple[str, ...]
    total_possible: int
    category_scores: Mapping[str, CategoryTally]

    @property
    def auto_failed(self) -> bool:
        return bool(self.auto_fail_ids)

    @property
    def failures(self) -> tuple[CheckpointFinding, ...]:
        return tuple(f for f in self.findings if not f.passed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "api_id": self.api_id,
            "score": self.score,
            "letter_grade": self.letter_grade,
            "total_possible": self.total_possible,
            "auto_fail_reasons": list(self.auto_fail_reasons),
            "auto_fail_ids": list(self.auto_fail_ids),
            "category_scores": {
                name: {"earned": tally.earned, "total": tally.total}
                for name, tally in self.category_scores.items()
            },
            "findings": [f.to_dict() for f in self.findings],
        }
