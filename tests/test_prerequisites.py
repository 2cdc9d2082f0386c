"""Tests for apigrader.scoring.prerequisites — fixed and profile-aware gates."""

from __future__ import annotations

from typing import Any

from apigrader.detection.profiles import ENTERPRISE_SAAS, INTERNAL_TOOL, REST_API
from apigrader.scoring.prerequisites import (
    PREREQUISITE_IDS,
    applicable_prerequisites,
    check_api_id,
    check_prerequisites,
    check_single_prerequisite,
    check_structure,
    explain_skipped_prerequisites,
    prerequisite_quick_fixes,
    summarize_prerequisite_failures,
)

VALID_API_ID = "widgets_1712345678901_0123456789abcdef"


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


class TestApiId:
    def test_missing(self, minimal_doc: dict[str, Any]) -> None:
        (finding,) = check_api_id(minimal_doc)
        assert finding.rule_id == "PREREQ-API-ID"
        assert finding.location == "$.info"

    def test_bad_format(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["info"]["x-api-id"] = "widgets-api"
        (finding,) = check_api_id(minimal_doc)
        assert finding.rule_id == "PREREQ-API-ID-FORMAT"

    def test_uppercase_hex_rejected(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["info"]["x-api-id"] = "widgets_1712345678901_0123456789ABCDEF"
        assert check_api_id(minimal_doc)

    def test_valid(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["info"]["x-api-id"] = VALID_API_ID
        assert check_api_id(minimal_doc) == []


class TestStructure:
    def test_minimal_is_structurally_valid(self, minimal_doc: dict[str, Any]) -> None:
        assert check_structure(minimal_doc) == []

    def test_empty_document(self) -> None:
        messages = [f.message for f in check_structure({})]
        assert messages == ["Missing openapi field", "Missing info object", "No paths defined"]

    def test_paths_without_operations(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["paths"] = {"/api/v2/widgets": {"summary": "nothing here"}}
        messages = [f.message for f in check_structure(minimal_doc)]
        assert messages == ["No operations defined in any path"]

    def test_missing_title(self, minimal_doc: dict[str, Any]) -> None:
        del minimal_doc["info"]["title"]
        (finding,) = check_structure(minimal_doc)
        assert finding.rule_id == "PREREQ-STRUCT"
        assert finding.message == "Missing API title"


# ---------------------------------------------------------------------------
# Fixed gate
# ---------------------------------------------------------------------------


class TestFixedGate:
    def test_best_practice_passes(self, best_practice_doc: dict[str, Any]) -> None:
        result = check_prerequisites(best_practice_doc)
        assert result.passed
        assert result.failures == ()
        assert result.blocked_reason is None
        assert result.skipped_prerequisites == ()

    def test_missing_api_id_blocks(self, minimal_doc: dict[str, Any]) -> None:
        result = check_prerequisites(minimal_doc)
        assert not result.passed
        assert [f.rule_id for f in result.failures] == ["PREREQ-API-ID"]
        assert result.blocked_reason == (
            "Failed 1 prerequisite check(s). These must be fixed before scoring can begin."
        )
        assert result.required_fixes == ("Add x-api-id using generate_api_id tool",)

    def test_failures_in_order(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["openapi"] = "3.1.0"
        del minimal_doc["components"]["securitySchemes"]
        result = check_prerequisites(minimal_doc)
        assert [f.rule_id for f in result.failures] == ["PREREQ-001", "PREREQ-002", "PREREQ-API-ID"]
        assert all(f.severity == "critical" for f in result.failures)

    def test_fixes_deduplicated(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["info"]["x-api-id"] = VALID_API_ID
        for path in ("/api/v2/a", "/api/v2/b"):
            minimal_doc["paths"][path] = {"post": {"responses": {"201": {"description": "ok"}}}}
        result = check_prerequisites(minimal_doc)
        assert len(result.failures) == 2
        assert len(result.required_fixes) == 1

    def test_to_dict(self, minimal_doc: dict[str, Any]) -> None:
        data = check_prerequisites(minimal_doc).to_dict()
        assert data["passed"] is False
        assert data["profile"] is None
        assert data["failures"][0]["rule_id"] == "PREREQ-API-ID"


# ---------------------------------------------------------------------------
# Profile-aware gate
# ---------------------------------------------------------------------------


class TestProfileGate:
    def test_applicable_for_enterprise(self) -> None:
        assert applicable_prerequisites(ENTERPRISE_SAAS) == [
            "PREREQ-001",
            "PREREQ-002",
            "PREREQ-003",
            "PREREQ-API-ID",
            "multi-tenant-isolation",
            "rbac-scopes",
        ]

    def test_internal_skips_auth_and_tenancy(self, minimal_doc: dict[str, Any]) -> None:
        del minimal_doc["components"]["securitySchemes"]
        minimal_doc["info"]["x-api-id"] = VALID_API_ID
        result = check_prerequisites(minimal_doc, INTERNAL_TOOL)
        assert result.passed
        assert set(result.skipped_prerequisites) == {"PREREQ-002", "PREREQ-003"}
        assert result.profile is INTERNAL_TOOL

    def test_unregistered_custom_prerequisites_skipped(self, best_practice_doc: dict[str, Any]) -> None:
        result = check_prerequisites(best_practice_doc, ENTERPRISE_SAAS)
        assert result.passed
        assert result.skipped_prerequisites == ("multi-tenant-isolation", "rbac-scopes")

    def test_enterprise_message_customized(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["info"]["x-api-id"] = VALID_API_ID
        minimal_doc["paths"]["/api/v2/widgets"]["post"] = {"responses": {"201": {"description": "ok"}}}
        result = check_prerequisites(minimal_doc, ENTERPRISE_SAAS)
        (failure,) = result.failures
        assert failure.message.endswith("(Required for multi-tenant SaaS applications)")
        assert "for Enterprise Multi-Tenant SaaS profile" in (result.blocked_reason or "")

    def test_rest_does_not_require_tenant_header(self, minimal_doc: dict[str, Any]) -> None:
        minimal_doc["info"]["x-api-id"] = VALID_API_ID
        minimal_doc["paths"]["/api/v2/widgets"]["post"] = {"responses": {"201": {"description": "ok"}}}
        result = check_prerequisites(minimal_doc, REST_API)
        assert result.passed
        assert result.skipped_prerequisites == ("PREREQ-003",)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_prerequisite_ids(self) -> None:
        assert PREREQUISITE_IDS == ("PREREQ-001", "PREREQ-002", "PREREQ-003", "PREREQ-API-ID")

    def test_single_prerequisite(self, minimal_doc: dict[str, Any]) -> None:
        assert check_single_prerequisite(minimal_doc, "PREREQ-001")
        assert not check_single_prerequisite(minimal_doc, "PREREQ-API-ID")
        assert check_single_prerequisite(minimal_doc, "SEC-001")
        assert check_single_prerequisite(minimal_doc, "UNKNOWN")

    def test_quick_fixes(self, minimal_doc: dict[str, Any]) -> None:
        result = check_prerequisites(minimal_doc)
        fixes = prerequisite_quick_fixes(result.failures)
        assert list(fixes) == ["PREREQ-API-ID"]
        assert fixes["PREREQ-API-ID"][-1] == (
            "Generate a unique API identifier and add it to info.x-api-id"
        )

    def test_summary(self, minimal_doc: dict[str, Any]) -> None:
        summary = summarize_prerequisite_failures(check_prerequisites(minimal_doc))
        assert summary.startswith("1 prerequisite(s) failed:")
        assert "API specification missing required x-api-id" in summary

    def test_summary_passed(self, best_practice_doc: dict[str, Any]) -> None:
        result = check_prerequisites(best_practice_doc)
        assert summarize_prerequisite_failures(result) == "All prerequisites passed"

    def test_explain_skipped(self) -> None:
        text = explain_skipped_prerequisites(("PREREQ-003",), REST_API)
        assert "not a multi-tenant API" in text
        assert explain_skipped_prerequisites((), REST_API).startswith("All standard prerequisites")
