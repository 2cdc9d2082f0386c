"""Built-in rule catalogue: prerequisites plus the five scored categories.

Category point totals: functionality 30, security 25, scalability 20,
maintainability 15, excellence 10. Prerequisites carry no points; they gate
scoring instead.

Every ``validate`` looks the operation up again from ``target.path`` and
``target.method`` and reads parameters through the effective-parameter view,
so path-level and ``$ref`` parameters count.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from apigrader.document.resolver import (
    MISSING,
    WRITE_METHODS,
    find_operation,
    get_in,
    has_parameter,
    has_problem_json,
    has_response_header,
    iter_operations,
    iter_paths,
    iter_responses,
    json_schema,
    media_type,
    responses_of,
)
from apigrader.rules.model import PASS, Rule, Target, ValidationResult, fail

if TYPE_CHECKING:
    from collections.abc import Iterable

CRUD_METHODS: tuple[str, ...] = ("get", "post", "put", "patch", "delete")

ORG_HEADER = "X-Organization-ID"
BRANCH_HEADER = "X-Branch-ID"
ORG_HEADER_FIX = "Add parameter: - $ref: '#/components/parameters/OrganizationHeader'"
BRANCH_HEADER_FIX = "Add parameter: - $ref: '#/components/parameters/BranchHeader'"

_VERSIONED_RESOURCE = re.compile(r"^/api/v\d+/([^/]+)")
_SEMVER = re.compile(r"^\d+\.\d+\.\d+$")

# ---------------------------------------------------------------------------
# Target helpers
# ---------------------------------------------------------------------------


def operation_target(path: str, method: str, suffix: str = "") -> Target:
    return Target(
        kind="operation",
        location=f"$.paths['{path}'].{method}{suffix}",
        identifier=f"{method.upper()} {path}",
        method=method,
        path=path,
    )


def _operation_targets(doc: Any, methods: Iterable[str]) -> list[Target]:
    return [operation_target(path, method) for path, method, _, _ in iter_operations(doc, methods)]


def _lookup(doc: Any, target: Target) -> tuple[dict[str, Any], dict[str, Any]] | None:
    if target.path is None or target.method is None:
        return None
    return find_operation(doc, target.path, target.method)


_NOT_FOUND = ValidationResult(passed=False, message="Operation not found")


def _require_header(name: str, fix_hint: str, confidence: float) -> Any:
    def validate(target: Target, doc: Any) -> ValidationResult:
        found = _lookup(doc, target)
        if found is None:
            return _NOT_FOUND
        item, operation = found
        if has_parameter(doc, item, operation, name, "header"):
            return PASS
        return ValidationResult(
            passed=False,
            message=f"Missing {name} header",
            fix_hint=fix_hint,
            confidence=confidence,
        )

    return validate


def _document_target(location: str, identifier: str) -> Any:
    def detect(doc: Any) -> list[Target]:
        return [Target(kind="document", location=location, identifier=identifier)]

    return detect


# ---------------------------------------------------------------------------
# Prerequisites
# ---------------------------------------------------------------------------


def _validate_openapi_version(target: Target, doc: Any) -> ValidationResult:
    version = get_in(doc, "openapi")
    shown = "missing" if version is MISSING else version
    if version == "3.0.3":
        return PASS
    return fail(
        f"OpenAPI version is {shown}, must be 3.0.3",
        f"Change 'openapi: {shown}' to 'openapi: 3.0.3'",
    )


def _validate_security_schemes(target: Target, doc: Any) -> ValidationResult:
    schemes = get_in(doc, "components", "securitySchemes")
    if isinstance(schemes, dict) and schemes:
        return PASS
    return fail(
        "No security schemes defined",
        "Add OAuth2 or API key security scheme to components.securitySchemes",
    )


PREREQ_OPENAPI_VERSION = Rule(
    id="PREREQ-001",
    category="functionality",
    severity="prerequisite",
    points=0,
    description="OpenAPI version must be 3.0.3",
    rationale="The grading template targets exactly one OpenAPI version",
    detect=_document_target("$.openapi", "OpenAPI Version"),
    validate=_validate_openapi_version,
    effort="trivial",
    auto_fixable=True,
)

PREREQ_AUTH_DEFINED = Rule(
    id="PREREQ-002",
    category="security",
    severity="prerequisite",
    points=0,
    description="Authentication must be defined",
    rationale="APIs must declare some form of authentication",
    detect=_document_target("$.components.securitySchemes", "Security Schemes"),
    validate=_validate_security_schemes,
    effort="easy",
)

PREREQ_TENANT_WRITE = Rule(
    id="PREREQ-003",
    category="security",
    severity="prerequisite",
    points=0,
    description="X-Organization-ID required on all write operations",
    rationale="Prevents cross-tenant data contamination",
    detect=lambda doc: _operation_targets(doc, WRITE_METHODS),
    validate=_require_header(ORG_HEADER, ORG_HEADER_FIX, 1.0),
    effort="trivial",
    auto_fixable=True,
)

# ---------------------------------------------------------------------------
# Functionality (30 points)
# ---------------------------------------------------------------------------


def _detect_resources(doc: Any) -> list[Target]:
    first_path: dict[str, str] = {}
    for path, _item in iter_paths(doc):
        match = _VERSIONED_RESOURCE.match(path)
        if match and match.group(1) not in first_path:
            first_path[match.group(1)] = path
    return [
        Target(
            kind="path",
            location=f"$.paths['{path}']",
            identifier=f"Resource: {resource}",
            path=path,
        )
        for resource, path in first_path.items()
    ]


def _validate_crud(target: Target, doc: Any) -> ValidationResult:
    match = _VERSIONED_RESOURCE.match(target.path or "")
    if match is None:
        return fail("Not a versioned resource path")
    resource = match.group(1)
    seen: set[str] = set()
    for path, item in iter_paths(doc):
        other = _VERSIONED_RESOURCE.match(path)
        if other and other.group(1) == resource:
            seen.update(m for m in ("get", "post") if isinstance(item.get(m), dict))
    missing = [m for m in ("get", "post") if m not in seen]
    if not missing:
        return PASS
    return ValidationResult(
        passed=False,
        message=f"Missing operations: {', '.join(missing)}",
        fix_hint="Add missing CRUD operations",
        confidence=0.9,
    )


_COMMON_ERROR_CODES: tuple[str, ...] = ("400", "401", "403", "404", "409", "500")


def _validate_error_responses(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    responses = responses_of(found[1])
    if not responses:
        return fail("No responses defined")

    coverage = sum(1 for code in _COMMON_ERROR_CODES if code in responses) / len(
        _COMMON_ERROR_CODES
    )
    uses_problem_json = any(has_problem_json(doc, r) for r in responses.values())
    if coverage > 0.5 and uses_problem_json:
        return PASS
    message = (
        "Missing common error responses" if coverage <= 0.5 else "Not using application/problem+json"
    )
    return ValidationResult(
        passed=False,
        message=message,
        fix_hint="Add error responses with problem+json format",
        confidence=0.85,
    )


def _detect_success_responses(doc: Any) -> list[Target]:
    targets: list[Target] = []
    for path, method, _, operation in iter_operations(doc, ("get", "post", "put", "patch")):
        responses = responses_of(operation)
        if "200" in responses or "201" in responses:
            target = operation_target(path, method, ".responses")
            targets.append(
                Target(
                    kind="response",
                    location=target.location,
                    identifier=target.identifier,
                    method=method,
                    path=path,
                )
            )
    return targets


def _is_envelope(schema: Any) -> bool:
    if not isinstance(schema, dict):
        return False
    ref = schema.get("$ref")
    if isinstance(ref, str) and "ResponseEnvelope" in ref:
        return True
    parts = schema.get("allOf")
    if isinstance(parts, list):
        return any(
            isinstance(p, dict) and "ResponseEnvelope" in str(p.get("$ref", "")) for p in parts
        )
    return False


def _validate_envelope(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    responses = responses_of(found[1])
    success = responses.get("200", responses.get("201"))
    if success is None:
        return PASS
    if _is_envelope(json_schema(doc, success)):
        return PASS
    return ValidationResult(
        passed=False,
        message="Success response not using ResponseEnvelope",
        fix_hint="Wrap response in ResponseEnvelope schema",
        confidence=0.9,
    )


_EXPECTED_CODES: dict[str, tuple[str, ...]] = {
    "get": ("200", "404"),
    "post": ("201", "400"),
    "put": ("200", "404"),
    "patch": ("200", "404"),
    "delete": ("204", "404"),
}


def _validate_status_codes(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    responses = responses_of(found[1])
    expected = _EXPECTED_CODES.get(target.method or "", ())
    if not expected:
        return PASS
    missing = [code for code in expected if code not in responses]
    if (len(expected) - len(missing)) / len(expected) >= 0.5:
        return PASS
    return ValidationResult(
        passed=False,
        message=f"Missing expected status codes: {', '.join(missing)}",
        fix_hint="Add appropriate status code responses",
        confidence=0.8,
    )


FUNC_CRUD = Rule(
    id="FUNC-001",
    category="functionality",
    severity="major",
    points=10,
    description="Complete CRUD operations for resources",
    rationale="Resources should support full lifecycle management",
    detect=_detect_resources,
    validate=_validate_crud,
    effort="medium",
)

FUNC_ERROR_RESPONSES = Rule(
    id="FUNC-002",
    category="functionality",
    severity="major",
    points=8,
    description="Proper error response handling",
    rationale="Consistent error responses improve debugging",
    detect=lambda doc: [
        operation_target(path, method, ".responses")
        for path, method, _, op in iter_operations(doc, CRUD_METHODS)
        if op.get("responses")
    ],
    validate=_validate_error_responses,
    effort="easy",
)

FUNC_RESPONSE_ENVELOPE = Rule(
    id="FUNC-003",
    category="functionality",
    severity="major",
    points=7,
    description="ResponseEnvelope for all success responses",
    rationale="Consistent response structure across the API",
    detect=_detect_success_responses,
    validate=_validate_envelope,
    effort="easy",
    auto_fixable=True,
)

FUNC_STATUS_CODES = Rule(
    id="FUNC-004",
    category="functionality",
    severity="minor",
    points=5,
    description="Appropriate HTTP status codes",
    rationale="Correct status codes improve API usability",
    detect=lambda doc: _operation_targets(doc, CRUD_METHODS),
    validate=_validate_status_codes,
    effort="trivial",
)

# ---------------------------------------------------------------------------
# Security (25 points)
# ---------------------------------------------------------------------------


def _validate_operation_security(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    security = found[1].get("security")
    if isinstance(security, list) and security:
        return PASS
    return ValidationResult(
        passed=False,
        message="No security requirements defined",
        fix_hint="Add security requirements to operation",
        confidence=0.9,
    )


def _validate_request_schema(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    body = found[1].get("requestBody")
    if body is None:
        return PASS
    schema = json_schema(doc, body)
    if isinstance(schema, dict) and ("required" in schema or "properties" in schema or "$ref" in schema):
        return PASS
    return ValidationResult(
        passed=False,
        message="Request body lacks validation schema",
        fix_hint="Add schema with required fields and validation rules",
        confidence=0.85,
    )


SEC_TENANT_READ = Rule(
    id="SEC-001",
    category="security",
    severity="critical",
    points=7,
    description="X-Organization-ID on GET operations",
    rationale="Ensures data isolation for read operations",
    detect=lambda doc: _operation_targets(doc, ("get",)),
    validate=_require_header(ORG_HEADER, ORG_HEADER_FIX, 1.0),
    depends_on=("PREREQ-003",),
    effort="trivial",
    auto_fixable=True,
)

SEC_BRANCH_HEADERS = Rule(
    id="SEC-002",
    category="security",
    severity="major",
    points=5,
    description="X-Branch-ID headers for branch isolation",
    rationale="Enables branch-level data isolation",
    detect=lambda doc: _operation_targets(doc, CRUD_METHODS),
    validate=_require_header(BRANCH_HEADER, BRANCH_HEADER_FIX, 0.95),
    effort="trivial",
    auto_fixable=True,
)

SEC_AUTHORIZATION = Rule(
    id="SEC-003",
    category="security",
    severity="major",
    points=5,
    description="Proper authorization on operations",
    rationale="Prevents unauthorized access",
    detect=lambda doc: _operation_targets(doc, WRITE_METHODS),
    validate=_validate_operation_security,
    depends_on=("PREREQ-002",),
    effort="easy",
)

SEC_INPUT_VALIDATION = Rule(
    id="SEC-004",
    category="security",
    severity="major",
    points=8,
    description="Input validation schemas",
    rationale="Prevents injection attacks and data corruption",
    detect=lambda doc: _operation_targets(doc, ("post", "put", "patch")),
    validate=_validate_request_schema,
    effort="medium",
)

# ---------------------------------------------------------------------------
# Scalability (20 points)
# ---------------------------------------------------------------------------

KEYSET_CURSORS: tuple[str, ...] = ("AfterKey", "BeforeKey")
FORBIDDEN_PAGINATION: tuple[str, ...] = ("offset", "page", "pageNumber", "page_size")


def _is_list_path(path: str) -> bool:
    return path.endswith("/") or path.endswith("s")


def _validate_keyset_pagination(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    item, operation = found
    has_cursor = any(has_parameter(doc, item, operation, n, "query") for n in KEYSET_CURSORS)
    has_limit = has_parameter(doc, item, operation, "Limit", "query")
    has_offset = any(
        has_parameter(doc, item, operation, n, "query") for n in FORBIDDEN_PAGINATION
    )
    keyset = has_cursor and has_limit
    if keyset and not has_offset:
        return PASS
    return ValidationResult(
        passed=False,
        message=(
            "Missing key-set pagination parameters"
            if not keyset
            else "Using forbidden offset/page pagination"
        ),
        fix_hint="Add AfterKey/BeforeKey/Limit parameters, remove offset/page",
        confidence=0.95,
    )


def _validate_caching_headers(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    success = responses_of(found[1]).get("200")
    if success is None:
        return PASS
    if has_response_header(doc, success, "ETag") or has_response_header(doc, success, "Cache-Control"):
        return PASS
    return ValidationResult(
        passed=False,
        message="Missing caching headers",
        fix_hint="Add ETag and Cache-Control headers to response",
        confidence=0.8,
    )


def _detect_long_running(doc: Any) -> list[Target]:
    return [
        operation_target(path, method)
        for path, method, _, _ in iter_operations(doc, ("post", "put"))
        if any(word in path for word in ("import", "export", "batch"))
    ]


def _validate_async(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    if "202" in responses_of(found[1]):
        return PASS
    return ValidationResult(
        passed=False,
        message="Long operation should return 202 Accepted",
        fix_hint="Add 202 response with status URL",
        confidence=0.7,
    )


def _detect_rate_limited(doc: Any) -> list[Target]:
    targets: list[Target] = []
    for path, item in iter_paths(doc):
        for method in ("post", "put", "delete"):
            if isinstance(item.get(method), dict):
                targets.append(operation_target(path, method))
                break
    return targets[:5]


def _validate_rate_limit(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    for _code, response in iter_responses(doc, found[1]):
        headers = get_in(response, "headers")
        if isinstance(headers, dict) and (
            "X-RateLimit-Limit" in headers or "X-RateLimit-Remaining" in headers
        ):
            return PASS
    return ValidationResult(
        passed=False,
        message="Missing rate limit headers",
        fix_hint="Add X-RateLimit-Limit and X-RateLimit-Remaining headers",
        confidence=0.6,
    )


SCALE_PAGINATION = Rule(
    id="SCALE-001",
    category="scalability",
    severity="critical",
    points=8,
    description="Key-set pagination for list operations",
    rationale="Offset pagination degrades on large datasets",
    detect=lambda doc: [
        operation_target(path, "get")
        for path, _, _, _ in iter_operations(doc, ("get",))
        if _is_list_path(path)
    ],
    validate=_validate_keyset_pagination,
    effort="medium",
)

SCALE_CACHING = Rule(
    id="SCALE-002",
    category="scalability",
    severity="minor",
    points=6,
    description="Caching headers on cacheable resources",
    rationale="Improves performance and reduces server load",
    detect=lambda doc: _operation_targets(doc, ("get",)),
    validate=_validate_caching_headers,
    effort="easy",
)

SCALE_ASYNC = Rule(
    id="SCALE-003",
    category="scalability",
    severity="minor",
    points=4,
    description="Async patterns for long operations",
    rationale="Prevents timeout issues",
    detect=_detect_long_running,
    validate=_validate_async,
    effort="medium",
)

SCALE_RATE_LIMITING = Rule(
    id="SCALE-004",
    category="scalability",
    severity="minor",
    points=2,
    description="Rate limiting headers",
    rationale="Prevents API abuse",
    detect=_detect_rate_limited,
    validate=_validate_rate_limit,
    effort="easy",
)

# ---------------------------------------------------------------------------
# Maintainability (15 points)
# ---------------------------------------------------------------------------


def _validate_naming(target: Target, doc: Any) -> ValidationResult:
    path = target.path or ""
    if not path.startswith("/api/v2/"):
        return ValidationResult(
            passed=False,
            message="Path must start with /api/v2/",
            fix_hint="Follow RESTful naming conventions",
            confidence=0.9,
        )
    segments = [s for s in path.split("/") if s and not s.startswith("{")][2:]
    if all(s == s.lower() and "_" not in s for s in segments):
        return PASS
    return ValidationResult(
        passed=False,
        message="Use lowercase, hyphenated resource names",
        fix_hint="Follow RESTful naming conventions",
        confidence=0.9,
    )


def _documentation_score(operation: dict[str, Any]) -> float:
    summary = operation.get("summary")
    description = operation.get("description")
    tags = operation.get("tags")
    score = 0.0
    if isinstance(summary, str) and len(summary) > 10:
        score += 0.4
    if isinstance(description, str) and len(description) > 20:
        score += 0.4
    if isinstance(tags, list) and tags:
        score += 0.2
    return score


def _validate_documentation(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    if _documentation_score(found[1]) >= 0.6:
        return PASS
    return ValidationResult(
        passed=False,
        message="Insufficient documentation",
        fix_hint="Add summary, description, and tags",
        confidence=0.8,
    )


def _validate_semver(target: Target, doc: Any) -> ValidationResult:
    version = get_in(doc, "info", "version")
    if isinstance(version, str) and _SEMVER.match(version):
        return PASS
    return ValidationResult(
        passed=False,
        message="Invalid semantic version",
        fix_hint="Use semantic versioning (e.g., 1.0.0)",
        confidence=0.95,
    )


def _has_example(doc: Any, owner: Any) -> bool:
    media = media_type(doc, owner)
    return isinstance(media, dict) and bool(media.get("example") or media.get("examples"))


def _validate_request_example(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    body = found[1].get("requestBody")
    if body is not None and _has_example(doc, body):
        return PASS
    return ValidationResult(
        passed=False,
        message="Missing request examples",
        fix_hint="Add example or examples to request body",
        confidence=0.7,
    )


MAINT_NAMING = Rule(
    id="MAINT-001",
    category="maintainability",
    severity="minor",
    points=5,
    description="Consistent naming conventions",
    rationale="Improves API discoverability",
    detect=lambda doc: [
        Target(kind="path", location=f"$.paths['{path}']", identifier=path, path=path)
        for path, _ in iter_paths(doc)
    ],
    validate=_validate_naming,
    effort="easy",
)

MAINT_DOCUMENTATION = Rule(
    id="MAINT-002",
    category="maintainability",
    severity="minor",
    points=5,
    description="Operation documentation",
    rationale="Helps developers understand API usage",
    detect=lambda doc: _operation_targets(doc, CRUD_METHODS),
    validate=_validate_documentation,
    effort="easy",
)

MAINT_VERSIONING = Rule(
    id="MAINT-003",
    category="maintainability",
    severity="minor",
    points=3,
    description="API versioning strategy",
    rationale="Enables backward compatibility",
    detect=_document_target("$.info.version", "API Version"),
    validate=_validate_semver,
    effort="trivial",
    auto_fixable=True,
)

MAINT_EXAMPLES = Rule(
    id="MAINT-004",
    category="maintainability",
    severity="minor",
    points=2,
    description="Request/response examples",
    rationale="Helps developers understand usage",
    detect=lambda doc: _operation_targets(doc, ("post", "put"))[:5],
    validate=_validate_request_example,
    effort="easy",
)

# ---------------------------------------------------------------------------
# Excellence (10 points)
# ---------------------------------------------------------------------------


def _validate_operation_examples(target: Target, doc: Any) -> ValidationResult:
    found = _lookup(doc, target)
    if found is None:
        return _NOT_FOUND
    operation = found[1]
    body = operation.get("requestBody")
    if body is not None and get_in(media_type(doc, body), "example") is not MISSING:
        return PASS
    responses = responses_of(operation)
    for code in ("200", "201"):
        if code in responses and get_in(media_type(doc, responses[code]), "example") is not MISSING:
            return PASS
    return fail("No examples provided", "Add comprehensive examples")


def _info_description(doc: Any) -> str:
    description = get_in(doc, "info", "description")
    return description if isinstance(description, str) else ""


def _validate_performance_hints(target: Target, doc: Any) -> ValidationResult:
    description = _info_description(doc)
    if any(word in description for word in ("performance", "SLA", "response time")):
        return PASS
    return fail("No performance information provided", "Document SLAs and performance expectations")


def _validate_advanced_patterns(target: Target, doc: Any) -> ValidationResult:
    if get_in(doc, "webhooks"):
        return PASS
    for _path, _method, _item, operation in iter_operations(doc):
        if operation.get("callbacks"):
            return PASS
        if any(get_in(response, "links") for _, response in iter_responses(doc, operation)):
            return PASS
    return fail("No advanced patterns used", "Consider webhooks, callbacks, or links")


def _validate_deprecation_strategy(target: Target, doc: Any) -> ValidationResult:
    if "deprecat" in _info_description(doc):
        return PASS
    if any(op.get("deprecated") is True for _, _, _, op in iter_operations(doc)):
        return PASS
    return fail("No deprecation strategy documented", "Document deprecation and migration paths")


EXCEL_EXAMPLES = Rule(
    id="EXCEL-001",
    category="excellence",
    severity="minor",
    points=3,
    description="Comprehensive examples for all operations",
    rationale="Excellent developer experience",
    detect=lambda doc: _operation_targets(doc, CRUD_METHODS),
    validate=_validate_operation_examples,
    effort="easy",
)

EXCEL_PERFORMANCE = Rule(
    id="EXCEL-002",
    category="excellence",
    severity="minor",
    points=3,
    description="Performance hints and SLAs",
    rationale="Sets clear performance expectations",
    detect=_document_target("$.info", "API Info"),
    validate=_validate_performance_hints,
    effort="easy",
)

EXCEL_ADVANCED = Rule(
    id="EXCEL-003",
    category="excellence",
    severity="minor",
    points=2,
    description="Advanced API patterns",
    rationale="Webhooks, callbacks and links are modern API practice",
    detect=_document_target("$", "API Specification"),
    validate=_validate_advanced_patterns,
    effort="hard",
)

EXCEL_DEPRECATION = Rule(
    id="EXCEL-004",
    category="excellence",
    severity="minor",
    points=2,
    description="Backward compatibility strategy",
    rationale="Smooth version transitions",
    detect=_document_target("$.info", "API Info"),
    validate=_validate_deprecation_strategy,
    effort="medium",
)

# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

BUILTIN_RULES: tuple[Rule, ...] = (
    PREREQ_OPENAPI_VERSION,
    PREREQ_AUTH_DEFINED,
    PREREQ_TENANT_WRITE,
    FUNC_CRUD,
    FUNC_ERROR_RESPONSES,
    FUNC_RESPONSE_ENVELOPE,
    FUNC_STATUS_CODES,
    SEC_TENANT_READ,
    SEC_BRANCH_HEADERS,
    SEC_AUTHORIZATION,
    SEC_INPUT_VALIDATION,
    SCALE_PAGINATION,
    SCALE_CACHING,
    SCALE_ASYNC,
    SCALE_RATE_LIMITING,
    MAINT_NAMING,
    MAINT_DOCUMENTATION,
    MAINT_VERSIONING,
    MAINT_EXAMPLES,
    EXCEL_EXAMPLES,
    EXCEL_PERFORMANCE,
    EXCEL_ADVANCED,
    EXCEL_DEPRECATION,
)
