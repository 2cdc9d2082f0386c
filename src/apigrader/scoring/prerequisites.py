"""Prerequisite gate: hard checks that must pass before any scoring happens.

Two variants share one implementation:

- fixed: every id in :data:`PREREQUISITE_IDS` plus structural integrity;
- profile-aware: only the prerequisites the active
  :class:`~apigrader.detection.profiles.GradingProfile` asks for, with the
  rest recorded in ``skipped_prerequisites``.

A failed gate is an outcome, not an exception: callers check ``passed``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from apigrader.document.resolver import HTTP_METHODS, get_in, iter_paths
from apigrader.rules.evaluator import evaluate
from apigrader.rules.model import Finding
from apigrader.rules.registry import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from apigrader.detection.profiles import GradingProfile
    from apigrader.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PREREQUISITE_IDS: tuple[str, ...] = ("PREREQ-001", "PREREQ-002", "PREREQ-003", "PREREQ-API-ID")

API_ID_PATTERN = re.compile(r"^[a-z0-9]+_\d{13}_[a-f0-9]{16}$")
API_ID_FIX = "Add x-api-id using generate_api_id tool"

_STRUCTURE_METHODS: frozenset[str] = frozenset(HTTP_METHODS) - {"trace"}

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PrerequisiteResult:
    """Gate outcome. ``profile`` is ``None`` for the fixed variant."""

    passed: bool
    failures: tuple[Finding, ...]
    required_fixes: tuple[str, ...]
    blocked_reason: str | None = None
    skipped_prerequisites: tuple[str, ...] = ()
    profile: GradingProfile | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "blocked_reason": self.blocked_reason,
            "failures": [f.to_dict() for f in self.failures],
            "required_fixes": list(self.required_fixes),
            "skipped_prerequisites": list(self.skipped_prerequisites),
            "profile": self.profile.id if self.profile is not None else None,
        }


class _Collector:
    """Accumulates failures and de-duplicated fixes in first-seen order."""

    def __init__(self) -> None:
        self.failures: list[Finding] = []
        self.fixes: list[str] = []

    def add(self, finding: Finding, fix: str | None = None) -> None:
        self.failures.append(finding)
        self.fix(fix if fix is not None else finding.fix_hint)

    def fix(self, text: str | None) -> None:
        if text and text not in self.fixes:
            self.fixes.append(text)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def check_api_id(doc: Any) -> list[Finding]:
    """Validate ``info.x-api-id`` presence and format."""
    api_id = get_in(doc, "info", "x-api-id")
    if not api_id:
        return [
            Finding(
                rule_id="PREREQ-API-ID",
                severity="critical",
                message="API specification missing required x-api-id",
                location="$.info",
                category="prerequisite",
                fix_hint="Generate a unique API identifier and add it to info.x-api-id",
            )
        ]
    if not isinstance(api_id, str) or not API_ID_PATTERN.match(api_id):
        return [
            Finding(
                rule_id="PREREQ-API-ID-FORMAT",
                severity="critical",
                message=f"Invalid x-api-id format: {api_id!r}",
                location="$.info.x-api-id",
                category="prerequisite",
                fix_hint="The x-api-id must follow the format {prefix}_{13-digit-timestamp}_{16-hex}",
            )
        ]
    return []


def _struct(message: str, location: str, fix_hint: str) -> Finding:
    return Finding(
        rule_id="PREREQ-STRUCT",
        severity="critical",
        message=message,
        location=location,
        category="prerequisite",
        fix_hint=fix_hint,
    )


def check_structure(doc: Any) -> list[Finding]:
    """Minimal structural integrity: openapi, info.title/version, an operation."""
    failures: list[Finding] = []
    if not get_in(doc, "openapi"):
        failures.append(
            _struct("Missing openapi field", "$", "Add 'openapi: 3.0.3' to the root of your specification")
        )

    info = get_in(doc, "info")
    if not isinstance(info, dict):
        failures.append(_struct("Missing info object", "$", "Add info object with title and version"))
    else:
        if not info.get("title"):
            failures.append(_struct("Missing API title", "$.info", "Add title to info object"))
        if not info.get("version"):
            failures.append(_struct("Missing API version", "$.info", "Add version to info object"))

    paths = get_in(doc, "paths")
    if not isinstance(paths, dict) or not paths:
        failures.append(_struct("No paths defined", "$", "Add at least one path with an operation"))

    if isinstance(paths, dict):
        has_operation = any(
            any(isinstance(item.get(m), dict) for m in _STRUCTURE_METHODS)
            for _, item in iter_paths(doc)
        )
        if not has_operation:
            failures.append(
                _struct(
                    "No operations defined in any path",
                    "$.paths",
                    "Add at least one HTTP operation (GET, POST, etc.) to a path",
                )
            )
    return failures


def _run_rule(
    doc: Any,
    rule_id: str,
    registry: RuleRegistry,
    out: _Collector,
    profile: GradingProfile | None = None,
) -> None:
    rule = registry[rule_id]
    evaluation = evaluate(rule, doc)
    if evaluation.fault is not None:
        out.add(evaluation.fault)
        return
    for target, result in evaluation.results:
        if result.passed:
            continue
        message = f"{target.identifier}: {result.message}"
        if profile is not None:
            message = _customize_message(message, rule_id, profile)
        out.add(
            Finding(
                rule_id=rule_id,
                severity="critical",
                message=message,
                location=target.location,
                category=rule.category,
                fix_hint=result.fix_hint,
            )
        )


def _customize_message(message: str, rule_id: str, profile: GradingProfile) -> str:
    if rule_id == "PREREQ-003" and profile.type == "Enterprise_SaaS":
        return message + " (Required for multi-tenant SaaS applications)"
    if rule_id == "PREREQ-002" and profile.type == "Custom":
        return message + " (Consider if authentication is needed for your use case)"
    return message


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------


def applicable_prerequisites(profile: GradingProfile) -> list[str]:
    """Prerequisite ids a profile enforces, in evaluation order."""
    flags = profile.prerequisites
    ids = ["PREREQ-001"]
    if flags.requires_authentication:
        ids.append("PREREQ-002")
    if flags.requires_multi_tenant_headers:
        ids.append("PREREQ-003")
    if flags.requires_api_id:
        ids.append("PREREQ-API-ID")
    ids.extend(p for p in flags.custom_prerequisites if p not in ids)
    return ids


def check_prerequisites(
    doc: Any,
    profile: GradingProfile | None = None,
    registry: RuleRegistry = DEFAULT_REGISTRY,
) -> PrerequisiteResult:
    """Run the prerequisite gate.

    Without a profile every id in :data:`PREREQUISITE_IDS` applies. With a
    profile only :func:`applicable_prerequisites` run; standard ids left out
    and custom ids with no registered prerequisite rule are reported in
    ``skipped_prerequisites``.
    """
    out = _Collector()
    applicable = list(PREREQUISITE_IDS) if profile is None else applicable_prerequisites(profile)
    skipped = [p for p in PREREQUISITE_IDS if p not in applicable]

    for prereq_id in applicable:
        if prereq_id == "PREREQ-API-ID":
            for finding in check_api_id(doc):
                out.add(finding, API_ID_FIX)
            continue
        rule = registry.get(prereq_id)
        if rule is None or not rule.is_prerequisite:
            logger.debug("No prerequisite check registered for %s, skipping", prereq_id)
            skipped.append(prereq_id)
            continue
        _run_rule(doc, prereq_id, registry, out, profile)

    for finding in check_structure(doc):
        out.add(finding)

    passed = not out.failures
    blocked_reason = None
    if not passed:
        scope = "" if profile is None else f" for {profile.name} profile"
        blocked_reason = (
            f"Failed {len(out.failures)} prerequisite check(s){scope}. "
            "These must be fixed before scoring can begin."
        )
    if profile is not None:
        logger.debug(
            "Prerequisites for %s: %d failure(s), skipped %s",
            profile.id, len(out.failures), skipped,
        )
    return PrerequisiteResult(
        passed=passed,
        failures=tuple(out.failures),
        required_fixes=tuple(out.fixes),
        blocked_reason=blocked_reason,
        skipped_prerequisites=tuple(skipped),
        profile=profile,
    )


def check_single_prerequisite(
    doc: Any,
    rule_id: str,
    registry: RuleRegistry = DEFAULT_REGISTRY,
) -> bool:
    """True if one prerequisite passes; unknown or non-prerequisite ids pass."""
    if rule_id == "PREREQ-API-ID":
        return not check_api_id(doc)
    rule = registry.get(rule_id)
    if rule is None or not rule.is_prerequisite:
        return True
    evaluation = evaluate(rule, doc)
    return evaluation.fault is None and evaluation.failed == 0


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

_QUICK_FIX_SNIPPETS: dict[str, tuple[str, ...]] = {
    "PREREQ-001": ("Change 'openapi' field to '3.0.3'",),
    "PREREQ-002": (
        "components:\n"
        "  securitySchemes:\n"
        "    OAuth2:\n"
        "      type: oauth2\n"
        "      flows:\n"
        "        authorizationCode:\n"
        "          authorizationUrl: https://auth.example.com/oauth/authorize\n"
        "          tokenUrl: https://auth.example.com/oauth/token\n"
        "          scopes:\n"
        "            read: Read access\n"
        "            write: Write access",
    ),
    "PREREQ-003": (
        "components:\n"
        "  parameters:\n"
        "    OrganizationHeader:\n"
        "      name: X-Organization-ID\n"
        "      in: header\n"
        "      required: true\n"
        "      schema:\n"
        "        type: integer\n"
        "        format: int64\n"
        "      description: Organization identifier for multi-tenancy",
    ),
    "PREREQ-API-ID": (
        "Generate a unique API identifier ({prefix}_{timestamp}_{random})",
        "Add the generated ID to info.x-api-id in your OpenAPI spec",
    ),
}
_QUICK_FIX_SNIPPETS["PREREQ-API-ID-FORMAT"] = _QUICK_FIX_SNIPPETS["PREREQ-API-ID"]


def prerequisite_quick_fixes(failures: tuple[Finding, ...] | list[Finding]) -> dict[str, list[str]]:
    """Map each failing rule id to concrete fix snippets plus its fix hints."""
    fixes: dict[str, list[str]] = {}
    for failure in failures:
        rule_fixes = fixes.get(failure.rule_id)
        if rule_fixes is None:
            rule_fixes = list(_QUICK_FIX_SNIPPETS.get(failure.rule_id, ()))
            fixes[failure.rule_id] = rule_fixes
        if failure.fix_hint and failure.fix_hint not in rule_fixes:
            rule_fixes.append(failure.fix_hint)
    return fixes


def summarize_prerequisite_failures(
    result: PrerequisiteResult,
    registry: RuleRegistry = DEFAULT_REGISTRY,
) -> str:
    """Plain-text summary grouped by rule, at most three issues per rule."""
    if result.passed:
        return "All prerequisites passed"

    by_rule: dict[str, list[Finding]] = {}
    for failure in result.failures:
        by_rule.setdefault(failure.rule_id, []).append(failure)

    lines = [f"{len(result.failures)} prerequisite(s) failed:", ""]
    for rule_id, failures in by_rule.items():
        rule = registry.get(rule_id)
        name = rule.description if rule is not None else rule_id
        plural = "s" if len(failures) > 1 else ""
        lines.append(f"{name} ({len(failures)} issue{plural}):")
        for failure in failures[:3]:
            lines.append(f"  - {failure.message}")
            if failure.fix_hint:
                lines.append(f"    fix: {failure.fix_hint}")
        if len(failures) > 3:
            lines.append(f"  ... and {len(failures) - 3} more")
        lines.append("")
    lines.append("These must be fixed before the API can be scored.")
    return "\n".join(lines)


def explain_skipped_prerequisites(
    skipped: tuple[str, ...] | list[str],
    profile: GradingProfile,
) -> str:
    if not skipped:
        return f"All standard prerequisites apply to {profile.name} profile."
    lines: list[str] = []
    for prereq_id in skipped:
        if prereq_id == "PREREQ-003":
            lines.append(
                f"X-Organization-ID headers not required ({profile.name} is not a multi-tenant API)"
            )
        elif prereq_id == "PREREQ-002":
            lines.append(
                f"Authentication not strictly required ({profile.name} may use network-level security)"
            )
        else:
            lines.append(f"{prereq_id} not applicable to {profile.name}")
    return "\n".join(lines)
