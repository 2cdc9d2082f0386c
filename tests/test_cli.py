"""Tests for the apigrader CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
from click.testing import CliRunner

from apigrader import __version__, pipeline
from apigrader.cli import main

if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep a stray ./apigrader.yml out of the default config lookup.
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture()
def regressed_path(best_practice_doc: dict[str, Any], write_spec: Any) -> Path:
    best_practice_doc["info"]["version"] = "v1"
    return write_spec(best_practice_doc, "regressed.yaml")


@pytest.fixture()
def minimal_path(minimal_doc: dict[str, Any], write_spec: Any) -> Path:
    return write_spec(minimal_doc, "minimal.yaml")


# ===========================================================================
# main
# ===========================================================================


class TestMain:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("grade", "checkpoints", "prereqs", "classify", "rules", "compare"):
            assert command in result.output


# ===========================================================================
# grade
# ===========================================================================


class TestGrade:
    def test_clean_document_porcelain(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(best_practice_path)])
        assert result.exit_code == 0, result.output
        assert result.output == ""

    def test_json(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(best_practice_path), "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["grade"]["score"] == 100
        assert data["grade"]["letter_grade"] == "A+"

    def test_rich(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(best_practice_path), "--format", "rich"])
        assert result.exit_code == 0
        assert "API Grade" in result.output

    def test_blocked_exits_1(self, runner: CliRunner, minimal_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(minimal_path)])
        assert result.exit_code == 1
        assert "critical\tPREREQ-API-ID\t$.info\t" in result.output

    def test_findings_listed(self, runner: CliRunner, regressed_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(regressed_path)])
        assert result.exit_code == 0
        assert "minor\tMAINT-003\t$.info.version\t" in result.output

    def test_strict_uses_configured_passing_score(
        self, runner: CliRunner, regressed_path: Path, tmp_path: Path
    ) -> None:
        config = tmp_path / "grading.yml"
        config.write_text("grading:\n  passing_score: 98\n")
        args = ["grade", str(regressed_path), "--config", str(config)]
        assert runner.invoke(main, args).exit_code == 0
        assert runner.invoke(main, [*args, "--strict"]).exit_code == 1

    def test_auto_profile(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(
            main, ["grade", str(best_practice_path), "--profile", "auto", "--format", "json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["profile"]["id"] == "rest"

    def test_unknown_profile_exits_2(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(best_practice_path), "--profile", "soap"])
        assert result.exit_code == 2
        assert "Error: Unknown profile 'soap'" in result.output

    def test_internal_key_error_not_reported_as_profile(
        self, runner: CliRunner, best_practice_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(doc: Any, **kwargs: Any) -> Any:
            msg = "rule_scores"
            raise KeyError(msg)

        monkeypatch.setattr(pipeline, "grade_document", broken)
        result = runner.invoke(main, ["grade", str(best_practice_path), "--profile", "rest"])
        assert isinstance(result.exception, KeyError)
        assert "Unknown profile" not in result.output
        assert result.exit_code != 2

    def test_bad_config_exits_2(self, runner: CliRunner, best_practice_path: Path, tmp_path: Path) -> None:
        config = tmp_path / "grading.yml"
        config.write_text("grading: nope\n")
        result = runner.invoke(main, ["grade", str(best_practice_path), "--config", str(config)])
        assert result.exit_code == 2
        assert "'grading' must be a mapping" in result.output

    def test_non_mapping_document_exits_2(self, runner: CliRunner, tmp_path: Path) -> None:
        spec = tmp_path / "list.yaml"
        spec.write_text("- a\n- b\n")
        result = runner.invoke(main, ["grade", str(spec)])
        assert result.exit_code == 2
        assert "document root must be a mapping" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(main, ["grade", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 2


# ===========================================================================
# checkpoints
# ===========================================================================


class TestCheckpoints:
    def test_json(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["checkpoints", str(best_practice_path), "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["score"] == 100
        assert len(data["findings"]) == 70

    def test_strict_auto_fail(
        self, runner: CliRunner, best_practice_doc: dict[str, Any], write_spec: Any
    ) -> None:
        best_practice_doc["openapi"] = "3.1.0"
        spec = write_spec(best_practice_doc)
        assert runner.invoke(main, ["checkpoints", str(spec)]).exit_code == 0
        result = runner.invoke(main, ["checkpoints", str(spec), "--strict"])
        assert result.exit_code == 1
        assert result.output.startswith("error\tOAS-VERSION\t$.openapi\t")

    def test_strict_clean(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["checkpoints", str(best_practice_path), "--strict"])
        assert result.exit_code == 0


# ===========================================================================
# prereqs
# ===========================================================================


class TestPrereqs:
    def test_passed(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["prereqs", str(best_practice_path)])
        assert result.exit_code == 0
        assert "All prerequisites passed" in result.output

    def test_blocked_json(self, runner: CliRunner, minimal_path: Path) -> None:
        result = runner.invoke(main, ["prereqs", str(minimal_path), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["passed"] is False
        assert data["failures"][0]["rule_id"] == "PREREQ-API-ID"

    def test_profile(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["prereqs", str(best_practice_path), "--profile", "rest", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["skipped_prerequisites"] == ["PREREQ-003"]

    def test_unknown_profile(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["prereqs", str(best_practice_path), "--profile", "soap"])
        assert result.exit_code == 2


# ===========================================================================
# classify
# ===========================================================================


class TestClassify:
    def test_rich_with_advice(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["classify", str(best_practice_path)])
        assert result.exit_code == 0
        assert "API Classification" in result.output
        assert "REST advice:" in result.output
        assert "collection name 'batch' should be plural" in result.output

    def test_json(self, runner: CliRunner, best_practice_path: Path) -> None:
        result = runner.invoke(main, ["classify", str(best_practice_path), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["primary"] == "rest"
        assert data["suggested_profile"]["id"] == "rest"


# ===========================================================================
# rules
# ===========================================================================


class TestRules:
    def test_json(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["rules", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data) == 23
        assert data[0]["id"] == "PREREQ-001"

    def test_category_filter(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["rules", "--category", "security"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert [line.split()[0] for line in lines] == [
            "PREREQ-002",
            "PREREQ-003",
            "SEC-001",
            "SEC-002",
            "SEC-003",
            "SEC-004",
        ]

    def test_prerequisites_shown_as_gates(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["rules", "--category", "functionality"])
        assert result.exit_code == 0
        first, *rest = result.output.splitlines()
        assert first.startswith("PREREQ-001") and "gate" in first
        assert all("pts" in line for line in rest)

    def test_empty_category(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["rules", "--category", "style"])
        assert result.exit_code == 0
        assert result.output.strip() == "No rules in category 'style'."


# ===========================================================================
# compare
# ===========================================================================


class TestCompare:
    def test_json(self, runner: CliRunner, best_practice_path: Path, regressed_path: Path) -> None:
        result = runner.invoke(main, ["compare", str(best_practice_path), str(regressed_path), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["score_delta"] == -3
        assert data["improved"] is False

    def test_rich(self, runner: CliRunner, best_practice_path: Path, regressed_path: Path) -> None:
        result = runner.invoke(main, ["compare", str(regressed_path), str(best_practice_path)])
        assert result.exit_code == 0
        assert "Grade Comparison" in result.output
