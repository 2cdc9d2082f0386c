"""Tests for apigrader.report — rich, JSON and porcelain formatters."""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest
from rich.text import Text

from apigrader.checkpoints import Checkpoint, CheckResult, grade_api
from apigrader.detection.patterns import classify
from apigrader.detection.profiles import REST_API, profile_for_classification
from apigrader.pipeline import compare_documents, grade_document
from apigrader.report import (
    format_checkpoints_json,
    format_checkpoints_porcelain,
    format_checkpoints_rich,
    format_classification_json,
    format_classification_rich,
    format_comparison_json,
    format_comparison_rich,
    format_json,
    format_porcelain,
    format_prereqs_json,
    format_prereqs_porcelain,
    format_prereqs_rich,
    format_rich,
)
from apigrader.scoring.prerequisites import check_prerequisites


def _plain(output: str) -> str:
    return Text.from_ansi(output).plain


@pytest.fixture()
def regressed_doc(best_practice_doc: dict[str, Any]) -> dict[str, Any]:
    doc = copy.deepcopy(best_practice_doc)
    doc["info"]["version"] = "v1"
    return doc


# ===========================================================================
# Registry grading
# ===========================================================================


class TestGradeFormatters:
    def test_rich_clean(self, best_practice_doc: dict[str, Any]) -> None:
        text = _plain(format_rich(grade_document(best_practice_doc)))
        assert "API Grade: inventory_1712345678901_0123456789abcdef" in text
        assert "Score: 100/100 (A+)  PASS" in text
        assert "Category Breakdown" in text
        assert "No findings." in text

    def test_rich_with_findings(self, regressed_doc: dict[str, Any]) -> None:
        text = _plain(format_rich(grade_document(regressed_doc, profile="rest")))
        assert "Profile: Simple REST API" in text
        assert "Findings (1)" in text
        assert "MAINT-003" in text
        assert "Invalid semantic version" in text

    def test_rich_blocked(self, minimal_doc: dict[str, Any]) -> None:
        text = _plain(format_rich(grade_document(minimal_doc)))
        assert "Failed 1 prerequisite check(s). These must be fixed before scoring can begin." in text
        assert "Prerequisite Failures" in text
        assert "1. Add x-api-id using generate_api_id tool" in text
        assert "Category Breakdown" not in text

    def test_json(self, best_practice_doc: dict[str, Any]) -> None:
        data = json.loads(format_json(grade_document(best_practice_doc)))
        assert data["grade"]["score"] == 100
        assert data["blocked"] is False

    def test_porcelain_clean(self, best_practice_doc: dict[str, Any]) -> None:
        assert format_porcelain(grade_document(best_practice_doc)) == ""

    def test_porcelain_findings(self, regressed_doc: dict[str, Any]) -> None:
        lines = format_porcelain(grade_document(regressed_doc)).splitlines()
        assert lines == ["minor\tMAINT-003\t$.info.version\tAPI Version: Invalid semantic version"]

    def test_porcelain_blocked(self, minimal_doc: dict[str, Any]) -> None:
        (line,) = format_porcelain(grade_document(minimal_doc)).splitlines()
        assert line.split("\t") == [
            "critical",
            "PREREQ-API-ID",
            "$.info",
            "API specification missing required x-api-id",
        ]


# ===========================================================================
# Checkpoints
# ===========================================================================


class TestCheckpointFormatters:
    def test_rich_clean(self, best_practice_doc: dict[str, Any]) -> None:
        text = _plain(format_checkpoints_rich(grade_api(best_practice_doc)))
        assert "Checkpoint Grade: inventory_1712345678901_0123456789abcdef" in text
        assert "Score: 100/100 (A+)" in text
        assert "Failed Checkpoints" not in text

    def test_rich_auto_fail(self, best_practice_doc: dict[str, Any]) -> None:
        best_practice_doc["openapi"] = "3.1.0"
        text = _plain(format_checkpoints_rich(grade_api(best_practice_doc)))
        assert "Score: 59/100 (F)" in text
        assert "Auto-fail: OAS-VERSION" in text
        assert "Failed Checkpoints (1)" in text

    def test_json(self, best_practice_doc: dict[str, Any]) -> None:
        data = json.loads(format_checkpoints_json(grade_api(best_practice_doc)))
        assert data["score"] == 100
        assert data["auto_fail_ids"] == []

    def test_porcelain_lists_failures_only(self, best_practice_doc: dict[str, Any]) -> None:
        del best_practice_doc["tags"]
        output = format_checkpoints_porcelain(grade_api(best_practice_doc))
        assert output == "warn\tTAGS-LOGICAL-GROUPS\t$.tags\tTags must be defined"

    def test_porcelain_collapses_whitespace(self) -> None:
        def multiline(doc: Any) -> CheckResult:
            return CheckResult(passed=False, message="first line\n\tsecond line")

        report = grade_api({}, [Checkpoint("X-1", "docs", "multi", 1, False, multiline)])
        assert format_checkpoints_porcelain(report) == "warn\tX-1\t$.docs\tfirst line second line"


# ===========================================================================
# Prerequisites
# ===========================================================================


class TestPrereqFormatters:
    def test_rich_passed(self, best_practice_doc: dict[str, Any]) -> None:
        text = _plain(format_prereqs_rich(check_prerequisites(best_practice_doc, REST_API)))
        assert "Prerequisites" in text
        assert "Profile: Simple REST API" in text
        assert "All prerequisites passed" in text
        assert "Skipped: PREREQ-003" in text

    def test_rich_blocked(self, minimal_doc: dict[str, Any]) -> None:
        text = _plain(format_prereqs_rich(check_prerequisites(minimal_doc)))
        assert "All prerequisites passed" not in text
        assert "PREREQ-API-ID" in text

    def test_json(self, minimal_doc: dict[str, Any]) -> None:
        data = json.loads(format_prereqs_json(check_prerequisites(minimal_doc)))
        assert data["passed"] is False

    def test_porcelain(self, best_practice_doc: dict[str, Any], minimal_doc: dict[str, Any]) -> None:
        assert format_prereqs_porcelain(check_prerequisites(best_practice_doc)) == ""
        assert format_prereqs_porcelain(check_prerequisites(minimal_doc)).startswith(
            "critical\tPREREQ-API-ID\t$.info\t"
        )


# ===========================================================================
# Classification and comparison
# ===========================================================================


class TestClassificationFormatters:
    def test_rich(self, best_practice_doc: dict[str, Any]) -> None:
        classification = classify(best_practice_doc)
        profile = profile_for_classification(classification)
        text = _plain(format_classification_rich(classification, profile))
        assert "API Classification" in text
        assert "Primary: rest" in text
        assert "Suggested profile: Simple REST API (rest)" in text

    def test_json(self, best_practice_doc: dict[str, Any]) -> None:
        classification = classify(best_practice_doc)
        data = json.loads(format_classification_json(classification, REST_API))
        assert data["primary"] == "rest"
        assert data["suggested_profile"]["id"] == "rest"


class TestComparisonFormatters:
    def test_rich(self, regressed_doc: dict[str, Any], best_practice_doc: dict[str, Any]) -> None:
        text = _plain(format_comparison_rich(compare_documents(regressed_doc, best_practice_doc)))
        assert "Grade Comparison" in text
        assert "Baseline: 97/100 (A+)" in text
        assert "Current: 100/100 (A+)" in text
        assert "Improved by 3 points. Fixed 1 issue(s)." in text
        assert "Grade: A+ → A+" in text

    def test_rich_blocked_side(self, minimal_doc: dict[str, Any], best_practice_doc: dict[str, Any]) -> None:
        text = _plain(format_comparison_rich(compare_documents(minimal_doc, best_practice_doc)))
        assert "Baseline: 0/100 (blocked)" in text
        assert "Score delta: +100 (a blocked document counts as 0)" in text

    def test_json(self, regressed_doc: dict[str, Any], best_practice_doc: dict[str, Any]) -> None:
        data = json.loads(format_comparison_json(compare_documents(best_practice_doc, regressed_doc)))
        assert data["score_delta"] == -3
        assert data["grade_delta"] == "A+ → A+"
        assert data["improved"] is False
