"""Run the checkpoint catalogue against a document and total the points."""

from __future__ import annotations

import hashlib
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from apigrader.checkpoints.catalog import CHECKPOINTS
from apigrader.checkpoints.model import (
    AUTO_FAIL_CAP,
    CategoryTally,
    CheckpointFinding,
    CheckpointReport,
    CheckResult,
)
from apigrader.document.resolver import get_in
from apigrader.scoring.grade import letter_grade

if TYPE_CHECKING:
    from collections.abc import Iterable

    from apigrader.checkpoints.model import Checkpoint

logger = logging.getLogger(__name__)


def get_api_id(doc: Any) -> str:
    """Stable identifier for *doc*.

    Uses ``info.x-api-id`` or a top-level ``x-api-id`` when present,
    otherwise the first 12 hex digits of ``sha256("title@version")``.
    """
    for candidate in (get_in(doc, "info", "x-api-id"), get_in(doc, "x-api-id")):
        if isinstance(candidate, str) and candidate:
            return candidate
    title = get_in(doc, "info", "title") or "unknown"
    version = get_in(doc, "info", "version") or "0.0.0"
    return hashlib.sha256(f"{title}@{version}".encode()).hexdigest()[:12]


def _run(checkpoint: Checkpoint, doc: Any) -> tuple[CheckResult, bool]:
    """Run one check; the flag is true when the check itself raised."""
    try:
        return checkpoint.check(doc), False
    except Exception as exc:  # a malformed document must not abort the run
        logger.warning("Checkpoint %s raised: %s", checkpoint.id, exc)
        return CheckResult(passed=False, message=f"Validation error: {exc}"), True


def _severity(checkpoint: Checkpoint, result: CheckResult, errored: bool) -> str:
    if result.passed:
        return "info"
    if checkpoint.auto_fail or errored:
        return "error"
    return "warn"


def grade_api(doc: Any, checkpoints: Iterable[Checkpoint] = CHECKPOINTS) -> CheckpointReport:
    """Score *doc* against *checkpoints*.

    Passing checkpoints earn their weight. Any failing auto-fail checkpoint
    caps the score at :data:`AUTO_FAIL_CAP`.
    """
    findings: list[CheckpointFinding] = []
    reasons: list[str] = []
    auto_fail_ids: list[str] = []
    tallies: dict[str, list[int]] = {}
    score = 0
    total = 0

    for checkpoint in checkpoints:
        result, errored = _run(checkpoint, doc)
        total += checkpoint.weight
        tally = tallies.setdefault(checkpoint.category, [0, 0])
        tally[1] += checkpoint.weight
        if result.passed:
            score += checkpoint.weight
            tally[0] += checkpoint.weight
        elif checkpoint.auto_fail:
            auto_fail_ids.append(checkpoint.id)
            reasons.append(f"{checkpoint.description}: {result.message}")
        findings.append(
            CheckpointFinding(
                checkpoint=checkpoint.id,
                category=checkpoint.category,
                passed=result.passed,
                weight=checkpoint.weight,
                auto_fail=checkpoint.auto_fail,
                severity=_severity(checkpoint, result, errored),
                message=result.message,
                json_path=f"$.{checkpoint.category}",
            )
        )

    if auto_fail_ids:
        logger.debug("Auto-fail triggered by %s", ", ".join(auto_fail_ids))
        score = min(score, AUTO_FAIL_CAP)

    return CheckpointReport(
        api_id=get_api_id(doc),
        score=score,
        letter_grade=letter_grade(score),
        findings=tuple(findings),
        auto_fail_reasons=tuple(reasons),
        auto_fail_ids=tuple(auto_fail_ids),
        total_possible=total,
        category_scores=MappingProxyType(
            {name: CategoryTally(earned=e, total=t) for name, (e, t) in tallies.items()}
        ),
    )
