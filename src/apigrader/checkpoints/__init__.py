"""Checkpoint grading: a fixed catalogue of weighted pass/fail checks."""

from apigrader.checkpoints.catalog import CHECKPOINTS, forbidden_technologies
from apigrader.checkpoints.engine import get_api_id, grade_api
from apigrader.checkpoints.model import (
    AUTO_FAIL_CAP,
    CHECKPOINT_CATEGORIES,
    CategoryTally,
    Checkpoint,
    CheckpointFinding,
    CheckpointReport,
    CheckResult,
)

__all__ = [
    "AUTO_FAIL_CAP",
    "CHECKPOINTS",
    "CHECKPOINT_CATEGORIES",
    "CategoryTally",
    "CheckResult",
    "Checkpoint",
    "CheckpointFinding",
    "CheckpointReport",
    "forbidden_technologies",
    "get_api_id",
    "grade_api",
]
