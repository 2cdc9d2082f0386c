"""The checkpoint catalogue: seventy weighted checks that add up to 100 points.

Each check is a plain function of the parsed document returning a
:class:`CheckResult`. Checks never mutate the document. The engine isolates
checks that raise, so the functions here do not guard against every
malformed shape.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from apigrader.checkpoints.model import Checkpoint, CheckResult
from apigrader.document.resolver import (
    deref,
    get_in,
    has_parameter,
    has_problem_json,
    has_response_header,
    iter_operations,
    iter_paths,
    iter_responses,
    iter_strings,
    json_schema,
    resolve_effective_parameters,
    responses_of,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_CRUD = ("get", "post", "put", "patch", "delete")
_ALL_METHODS = ("get", "post", "put", "patch", "delete", "options", "head")
_RATE_TRIO = ("X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset")
_ENVELOPE_REF = "#/components/schemas/ResponseEnvelope"
_JOB_STATUS_REF = "#/components/schemas/AsyncJobStatus"


def _ok(message: str | None = None) -> CheckResult:
    return CheckResult(passed=True, message=message)


def _fail(message: str) -> CheckResult:
    return CheckResult(passed=False, message=message)


def _advise(warnings: list[str], limit: int | None = None) -> CheckResult:
    """Pass, attaching any warnings as advice."""
    shown = warnings if limit is None else warnings[:limit]
    return _ok("; ".join(shown) if shown else None)


def _first(items: list[str], limit: int = 5) -> str:
    return ", ".join(items[:limit])


def _label(method: str, path: str) -> str:
    return f"{method.upper()} {path}"


def _component(doc: Any, section: str, name: str) -> Any:
    return deref(doc, get_in(doc, "components", section, name))


def _dict(node: Any) -> dict[str, Any]:
    return node if isinstance(node, dict) else {}


def _list(node: Any) -> list[Any]:
    return node if isinstance(node, list) else []


def _status(code: str) -> int | None:
    try:
        return int(code)
    except ValueError:
        return None


def _has_any_param(doc: Any, item: Any, operation: Any, *names: str) -> bool:
    return any(has_parameter(doc, item, operation, name) for name in names)


def _resolved_params(doc: Any, item: Any, operation: Any) -> list[dict[str, Any]]:
    params = (deref(doc, p) for p in resolve_effective_parameters(item, operation, doc))
    return [p for p in params if isinstance(p, dict)]


def _has_rate_trio(doc: Any, response: Any) -> bool:
    return all(has_response_header(doc, response, name) for name in _RATE_TRIO)


def _collection_gets(doc: Any) -> Iterator[tuple[str, dict[str, Any], dict[str, Any]]]:
    """GET operations on paths that do not end in a path parameter."""
    for path, _method, item, operation in iter_operations(doc, ("get",)):
        if not path.endswith("}"):
            yield path, item, operation


def _all_text(doc: Any) -> str:
    return "\n".join(iter_strings(doc)).lower()


def _scheme(doc: Any, name: str) -> Any:
    return _component(doc, "securitySchemes", name)


def _scopes(requirements: Any, scheme: str) -> list[str] | None:
    """Scopes granted by *scheme* across a security requirement list, or None if unused."""
    found: list[str] | None = None
    for requirement in _list(requirements):
        if isinstance(requirement, dict) and scheme in requirement:
            found = (found or []) + [str(s) for s in _list(requirement[scheme])]
    return found


# ---------------------------------------------------------------------------
# OpenAPI structure
# ---------------------------------------------------------------------------


def check_oas_version(doc: Any) -> CheckResult:
    version = get_in(doc, "openapi")
    if version == "3.0.3":
        return _ok()
    return _fail(f"OpenAPI version is {version or 'missing'}, must be 3.0.3")


def check_operation_ids(doc: Any) -> CheckResult:
    seen: set[str] = set()
    duplicates: list[str] = []
    for _path, _method, _item, operation in iter_operations(doc, _ALL_METHODS):
        op_id = operation.get("operationId")
        if not isinstance(op_id, str):
            continue
        if op_id in seen and op_id not in duplicates:
            duplicates.append(op_id)
        seen.add(op_id)
    if duplicates:
        return _fail(f"Duplicate operationIds found: {', '.join(duplicates)}")
    return _ok()


_PLACEHOLDER = re.compile(r"\{([A-Za-z_][\w ]*)\}")
_ALLOWED_PLACEHOLDERS = frozenset(
    {
        "domain",
        "Domain",
        "resource",
        "Resource",
        "resources",
        "Resources",
        "id",
        "job_id",
        "key",
        "organization_id",
        "branch_id",
        "product_id",
        "user_id",
        "order_id",
        "item_id",
    }
)
_TEMPLATE_MARKERS = ("API", "Name", "Function", "TODO")


def check_no_placeholders(doc: Any) -> CheckResult:
    found: list[str] = []
    for text in iter_strings(doc):
        for name in _PLACEHOLDER.findall(text):
            if name in _ALLOWED_PLACEHOLDERS:
                continue
            if any(marker in name for marker in _TEMPLATE_MARKERS) and f"{{{name}}}" not in found:
                found.append(f"{{{name}}}")
    title = get_in(doc, "info", "title")
    if isinstance(title, str):
        for name in _PLACEHOLDER.findall(title):
            if f"{{{name}}}" not in found:
                found.append(f"{{{name}}}")
    if found:
        return _fail(f"Found unresolved placeholders: {', '.join(found)}")
    return _ok()


def check_info_complete(doc: Any) -> CheckResult:
    info = get_in(doc, "info")
    if not isinstance(info, dict):
        return _fail("Missing info section")
    missing = [f for f in ("title", "version", "description", "contact", "license") if not info.get(f)]
    if missing:
        return _fail(f"Missing info fields: {', '.join(missing)}")
    contact = _dict(info["contact"])
    if not contact.get("email") or not contact.get("name"):
        return _fail("Contact must have name and email")
    return _ok()


def check_no_native_webhooks(doc: Any) -> CheckResult:
    if get_in(doc, "webhooks"):
        return _fail("Must use x-webhooks instead of webhooks for OpenAPI 3.0.3")
    return _ok()


# ---------------------------------------------------------------------------
# Servers, tags, naming
# ---------------------------------------------------------------------------


def check_servers(doc: Any) -> CheckResult:
    servers = [s for s in _list(get_in(doc, "servers")) if isinstance(s, dict)]
    if len(servers) < 3:
        return _fail("Must define 3 servers: production, staging, development")
    urls = [str(s.get("url", "")) for s in servers]
    production = any("api.smackdab.com" in u and "staging" not in u for u in urls)
    staging = any("staging" in u for u in urls)
    development = any("localhost" in u for u in urls)
    if not (production and staging and development):
        return _fail("Must include production, staging, and localhost servers")
    warnings: list[str] = []
    for i, (server, url) in enumerate(zip(servers, urls), start=1):
        if not server.get("description"):
            warnings.append(f"Server {i} missing description")
        if url.endswith("/"):
            warnings.append(f"Server {i} has trailing slash")
    return _advise(warnings)


def check_tag_groups(doc: Any) -> CheckResult:
    tags = [t for t in _list(get_in(doc, "tags")) if isinstance(t, dict)]
    if not tags:
        return _fail("Tags must be defined")
    names = [str(t.get("name", "")).lower() for t in tags]
    warnings: list[str] = []
    if not any("bulk" in n for n in names):
        warnings.append('Consider adding "Bulk Operations" tag')
    if not any("admin" in n for n in names):
        warnings.append('Consider adding "Admin" tag')
    if not any("job" in n for n in names):
        warnings.append('Consider adding "Jobs" tag for async operations')
    return _advise(warnings)


_NAMESPACED = re.compile(r"^/api/v2/[a-z][a-z0-9-]*/")


def check_namespace(doc: Any) -> CheckResult:
    bad = [path for path, _ in iter_paths(doc) if not _NAMESPACED.match(path)]
    if bad:
        return _fail(f"Paths outside /api/v2/<domain>/: {_first(bad)}")
    return _ok()


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


def check_top_level_security(doc: Any) -> CheckResult:
    security = _list(get_in(doc, "security"))
    if not security:
        return _fail("Top-level security must be defined")
    if _scopes(security, "OAuth2") is None or _scopes(security, "BearerAuth") is None:
        return _fail("Top-level security must include OAuth2: [] and BearerAuth: []")
    return _ok()


def check_oauth2_scheme(doc: Any) -> CheckResult:
    oauth = _scheme(doc, "OAuth2")
    if not isinstance(oauth, dict):
        return _fail("OAuth2 security scheme required")
    if oauth.get("type") != "oauth2" or not oauth.get("flows"):
        return _fail("OAuth2 must be type oauth2 with flows")
    return _ok()


def check_oauth2_scopes(doc: Any) -> CheckResult:
    oauth = _scheme(doc, "OAuth2")
    if not isinstance(oauth, dict):
        return _fail("OAuth2 security scheme not defined")
    scopes = get_in(oauth, "flows", "authorizationCode", "scopes")
    if not isinstance(scopes, dict):
        return _fail("OAuth2 authorization code flow with scopes not defined")
    names = [str(s) for s in scopes]
    if any("{domain}" in s or "{Domain}" in s for s in names):
        return _fail("OAuth2 scopes contain unresolved {domain} placeholders")
    if any(s.startswith("read:") for s in names) and any(s.startswith("write:") for s in names):
        return _ok()
    return _fail("OAuth2 must have concrete read: and write: scopes")


_WRITE_SCOPE_PREFIXES = ("write:", "delete:", "admin:")


def check_operation_scopes(doc: Any) -> CheckResult:
    errors: list[str] = []
    warnings: list[str] = []
    for path, method, _item, operation in iter_operations(doc, _CRUD):
        label = _label(method, path)
        security = operation.get("security")
        if security is None:
            if method == "get":
                warnings.append(f"{label} inherits top-level security (consider explicit scopes)")
            else:
                warnings.append(f"{label} should have explicit security scopes")
            continue
        scopes = _scopes(security, "OAuth2")
        if scopes is None:
            continue
        if method == "get" and not any(s.startswith("read:") for s in scopes):
            errors.append(f"{label} missing read: scope")
        elif method != "get" and not any(s.startswith(_WRITE_SCOPE_PREFIXES) for s in scopes):
            errors.append(f"{label} missing write:/delete:/admin: scope")
    if errors:
        return _fail("; ".join(errors[:5]))
    return _advise(warnings, limit=3)


def check_bearer_jwt(doc: Any) -> CheckResult:
    bearer = _scheme(doc, "BearerAuth")
    if not isinstance(bearer, dict):
        return _fail("BearerAuth security scheme not defined")
    if bearer.get("type") != "http" or bearer.get("scheme") != "bearer":
        return _fail("BearerAuth must be type:http, scheme:bearer")
    if bearer.get("bearerFormat") != "JWT":
        return _fail("BearerAuth must specify bearerFormat: JWT")
    return _ok()


def check_api_key_restricted(doc: Any) -> CheckResult:
    if not _scheme(doc, "ApiKeyAuth"):
        return _ok()
    misuse = [
        _label(method, path)
        for path, method, _item, operation in iter_operations(doc, _CRUD)
        if _scopes(operation.get("security"), "ApiKeyAuth") is not None and "webhook" not in path
    ]
    if misuse:
        return _fail(f"ApiKeyAuth should only be used for webhooks: {_first(misuse, 3)}")
    return _ok()


def check_www_authenticate(doc: Any) -> CheckResult:
    unauthorized = _component(doc, "responses", "Unauthorized")
    if not isinstance(unauthorized, dict):
        return _fail("Unauthorized response not defined in components")
    if not has_response_header(doc, unauthorized, "WWW-Authenticate"):
        return _fail("401 response missing WWW-Authenticate header")
    missing: list[str] = []
    for path, method, _item, operation in iter_operations(doc, _CRUD):
        response = responses_of(operation).get("401")
        if response is None or "$ref" in _dict(response):
            continue
        if not has_response_header(doc, response, "WWW-Authenticate"):
            missing.append(_label(method, path))
    if missing:
        return _fail(f"401 responses missing WWW-Authenticate: {_first(missing, 3)}")
    return _ok()


# ---------------------------------------------------------------------------
# Multi-tenancy and tracing
# ---------------------------------------------------------------------------


def _header_on_all_ops(doc: Any, component: str, header: str) -> CheckResult:
    if not get_in(doc, "components", "parameters", component):
        return _fail(f"{component} parameter not defined in components")
    missing = [
        _label(method, path)
        for path, method, item, operation in iter_operations(doc, _CRUD)
        if not _has_any_param(doc, item, operation, component, header)
    ]
    if missing:
        return _fail(f"Missing {header} on: {_first(missing)}")
    return _ok()


def check_org_header(doc: Any) -> CheckResult:
    return _header_on_all_ops(doc, "OrganizationHeader", "X-Organization-ID")


def check_branch_header(doc: Any) -> CheckResult:
    return _header_on_all_ops(doc, "BranchHeader", "X-Branch-ID")


def _dual_format_error(doc: Any, header: Any, name: str) -> str | None:
    variants = [deref(doc, v) for v in _list(get_in(header, "schema", "oneOf"))]
    if len(variants) < 2:
        return f"{name} must support both BIGINT and UUID with oneOf"
    has_int = any(
        get_in(v, "type") == "integer" or (get_in(v, "type") == "string" and get_in(v, "pattern"))
        for v in variants
    )
    has_uuid = any(get_in(v, "format") == "uuid" for v in variants)
    if not (has_int and has_uuid):
        return f"{name} must support both BIGINT and UUID formats"
    return None


def check_bigint_uuid(doc: Any) -> CheckResult:
    org = _component(doc, "parameters", "OrganizationHeader")
    if not isinstance(org, dict):
        return _fail("OrganizationHeader not defined")
    error = _dual_format_error(doc, org, "OrganizationHeader")
    branch = _component(doc, "parameters", "BranchHeader")
    if error is None and isinstance(branch, dict):
        error = _dual_format_error(doc, branch, "BranchHeader")
    return _fail(error) if error else _ok()


_REQUEST_ID_STATUSES = ("200", "201", "202", "204", "303")


def check_request_id(doc: Any) -> CheckResult:
    if not get_in(doc, "components", "parameters", "RequestId"):
        return _fail("RequestId parameter not defined")
    if not get_in(doc, "components", "headers", "XRequestId"):
        return _fail("XRequestId response header not defined")
    missing: list[str] = []
    for path, method, _item, operation in iter_operations(doc, _CRUD):
        responses = responses_of(operation)
        for status in _REQUEST_ID_STATUSES:
            if status in responses and not has_response_header(doc, responses[status], "X-Request-ID"):
                missing.append(f"{_label(method, path)} {status}")
    if missing:
        return _fail(f"X-Request-ID missing on responses: {'; '.join(missing[:3])}")
    return _ok()


def check_trace_headers(doc: Any) -> CheckResult:
    missing = [
        name
        for name in ("TraceParent", "TraceState", "Baggage")
        if not get_in(doc, "components", "parameters", name)
    ]
    if missing:
        return _fail(f"W3C trace parameters missing: {', '.join(missing)}")
    return _ok()


def check_consistency(doc: Any) -> CheckResult:
    consistency = _component(doc, "parameters", "Consistency")
    if not isinstance(consistency, dict):
        return _fail("Consistency parameter not defined")
    values = _list(get_in(consistency, "schema", "enum"))
    if "eventual" not in values or "strong" not in values:
        return _fail("Consistency must have enum: [best_effort, eventual, strong]")
    missing = [
        _label("get", path)
        for path, _method, item, operation in iter_operations(doc, ("get",))
        if not _has_any_param(doc, item, operation, "Consistency", "X-Consistency")
    ]
    if missing:
        return _fail(f"GET operations missing X-Consistency: {_first(missing)}")
    return _ok()


# ---------------------------------------------------------------------------
# HTTP semantics
# ---------------------------------------------------------------------------


def check_errors_problem_json(doc: Any) -> CheckResult:
    bad: list[str] = []
    for path, method, _item, operation in iter_operations(doc, _CRUD):
        for code, response in responses_of(operation).items():
            status = _status(code)
            if status is not None and 400 <= status < 600 and not has_problem_json(doc, response):
                bad.append(f"{_label(method, path)} {code}")
    if bad:
        return _fail(f"Error responses not using problem+json: {_first(bad)}")
    return _ok()


_REQUIRED_ERROR_RESPONSES = (
    "BadRequest",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "Conflict",
    "UnprocessableEntity",
    "TooManyRequests",
    "InternalServerError",
    "ServiceUnavailable",
    "PreconditionFailed",
    "PreconditionRequired",
    "UnsupportedMediaType",
)


def check_status_code_components(doc: Any) -> CheckResult:
    missing = [r for r in _REQUIRED_ERROR_RESPONSES if not get_in(doc, "components", "responses", r)]
    if missing:
        return _fail(f"Missing response definitions: {', '.join(missing)}")
    return _ok()


def check_precondition_required(doc: Any) -> CheckResult:
    errors: list[str] = []
    for path, method, item, operation in iter_operations(doc, ("patch", "delete")):
        label = _label(method, path)
        if "428" not in responses_of(operation):
            errors.append(f"{label} missing 428 response")
        if not _has_any_param(doc, item, operation, "IfMatch", "If-Match"):
            errors.append(f"{label} missing If-Match parameter")
    if errors:
        return _fail("; ".join(errors[:5]))
    return _ok()


def check_precondition_failed(doc: Any) -> CheckResult:
    failed = _component(doc, "responses", "PreconditionFailed")
    if not isinstance(failed, dict):
        return _fail("PreconditionFailed (412) response not defined in components")
    if not has_problem_json(doc, failed):
        return _fail("412 response must use application/problem+json")
    missing = [
        _label(method, path)
        for path, method, _item, operation in iter_operations(doc, ("patch", "delete"))
        if responses_of(operation) and "412" not in responses_of(operation)
    ]
    if missing:
        return _fail(f"Operations missing 412 response: {_first(missing, 3)}")
    return _ok()


def _require_status(doc: Any, methods: tuple[str, ...], status: str, what: str) -> CheckResult:
    missing = [
        _label(method, path)
        for path, method, _item, operation in iter_operations(doc, methods)
        if responses_of(operation) and status not in responses_of(operation)
    ]
    if missing:
        return _fail(f"{what} missing {status} response: {_first(missing)}")
    return _ok()


def check_unsupported_media_type(doc: Any) -> CheckResult:
    return _require_status(doc, ("post", "patch"), "415", "Operations")


def check_service_unavailable(doc: Any) -> CheckResult:
    return _require_status(doc, ("get",), "503", "GET operations")


def check_conflict_vs_unprocessable(doc: Any) -> CheckResult:
    conflict = _component(doc, "responses", "Conflict")
    unprocessable = _component(doc, "responses", "UnprocessableEntity")
    if not isinstance(conflict, dict) or not isinstance(unprocessable, dict):
        return _fail("Both 409 Conflict and 422 Unprocessable Entity must be defined")
    if conflict.get("description") == unprocessable.get("description"):
        return _fail("409 and 422 must have distinct descriptions")
    return _ok()


def check_delete_no_content(doc: Any) -> CheckResult:
    missing: list[str] = []
    for path, _method, _item, operation in iter_operations(doc, ("delete",)):
        response = responses_of(operation).get("204")
        if response is not None and not _has_rate_trio(doc, response):
            missing.append(path)
    if missing:
        return _fail(f"DELETE 204 missing rate-limit headers: {', '.join(missing)}")
    return _ok()


# ---------------------------------------------------------------------------
# Rate limiting and caching
# ---------------------------------------------------------------------------


def check_rate_limit_components(doc: Any) -> CheckResult:
    missing = [
        name
        for name in ("XRateLimitLimit", "XRateLimitRemaining", "XRateLimitReset")
        if not get_in(doc, "components", "headers", name)
    ]
    if missing:
        return _fail(f"Missing rate limit headers: {', '.join(missing)}")
    return _ok()


_RATE_LIMITED_STATUSES = ("200", "201", "202", "204", "206")


def check_rate_limit_trio(doc: Any) -> CheckResult:
    missing: list[str] = []
    for path, method, _item, operation in iter_operations(doc, _CRUD):
        responses = responses_of(operation)
        for status in _RATE_LIMITED_STATUSES:
            if status in responses and not _has_rate_trio(doc, responses[status]):
                missing.append(f"{_label(method, path)} {status}")
    if missing:
        return _fail(f"Rate limit trio missing on: {_first(missing)}")
    return _ok()


def check_etag(doc: Any) -> CheckResult:
    missing = [
        path
        for path, _method, _item, operation in iter_operations(doc, ("get",))
        if "200" in responses_of(operation)
        and not has_response_header(doc, responses_of(operation)["200"], "ETag")
    ]
    if missing:
        return _fail(f"GET endpoints missing ETag: {', '.join(missing)}")
    return _ok()


def check_etag_cacheable(doc: Any) -> CheckResult:
    warnings: list[str] = []
    for path, method, _item, operation in iter_operations(doc, ("post", "patch")):
        status = "201" if method == "post" else "200"
        response = responses_of(operation).get(status)
        if response is not None and not has_response_header(doc, response, "ETag"):
            warnings.append(f"{_label(method, path)} {status}")
    if warnings:
        return _ok(f"Consider ETag on cacheable responses: {_first(warnings, 3)}")
    return _ok()


def check_conditional_params(doc: Any) -> CheckResult:
    params = get_in(doc, "components", "parameters")
    if get_in(params, "IfMatch") and get_in(params, "IfNoneMatch"):
        return _ok()
    return _fail("IfMatch and IfNoneMatch parameters must be defined")


def check_not_modified(doc: Any) -> CheckResult:
    missing = [
        path
        for path, _method, _item, operation in iter_operations(doc, ("get",))
        if responses_of(operation) and "304" not in responses_of(operation)
    ]
    if missing:
        return _fail(f"GET endpoints missing 304 response: {', '.join(missing)}")
    return _ok()


_VARY_EXPECTED = (
    "Accept",
    "Accept-Language",
    "Accept-Encoding",
    "Authorization",
    "X-Organization-ID",
    "X-Branch-ID",
)


def check_vary_headers(doc: Any) -> CheckResult:
    vary = _component(doc, "headers", "Vary")
    if not isinstance(vary, dict):
        return _fail("Vary header not defined in components")
    if not get_in(doc, "components", "headers", "CacheControl"):
        return _fail("CacheControl header not defined in components")
    default = get_in(vary, "schema", "default") or vary.get("example") or ""
    missing_vary = [h for h in _VARY_EXPECTED if h not in str(default)]
    if missing_vary:
        return _fail(f"Vary header missing: {', '.join(missing_vary)}")
    errors: list[str] = []
    for path, _method, _item, operation in iter_operations(doc, ("get",)):
        response = responses_of(operation).get("200")
        if response is None:
            continue
        if not has_response_header(doc, response, "Vary"):
            errors.append(f"GET {path} missing Vary")
        if not has_response_header(doc, response, "Cache-Control"):
            errors.append(f"GET {path} missing Cache-Control")
    if errors:
        return _fail("; ".join(errors[:5]))
    return _ok()


# ---------------------------------------------------------------------------
# Envelope and error format
# ---------------------------------------------------------------------------


def check_envelope_schema(doc: Any) -> CheckResult:
    envelope = _component(doc, "schemas", "ResponseEnvelope")
    if not isinstance(envelope, dict):
        return _fail("ResponseEnvelope schema not defined")
    required = _list(envelope.get("required"))
    props = _dict(envelope.get("properties"))
    if all(f in required for f in ("success", "data", "_links")) and all(
        props.get(f) for f in ("success", "data", "meta", "_links")
    ):
        return _ok()
    return _fail("ResponseEnvelope must have success, data, meta, _links")


def check_meta_ref(doc: Any) -> CheckResult:
    if not get_in(doc, "components", "schemas", "ResponseMeta"):
        return _fail("ResponseMeta schema not defined")
    meta = get_in(doc, "components", "schemas", "ResponseEnvelope", "properties", "meta", "$ref")
    if meta != "#/components/schemas/ResponseMeta":
        return _fail("ResponseEnvelope.meta must use $ref to ResponseMeta")
    return _ok()


_LINK_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def check_hateoas_links(doc: Any) -> CheckResult:
    links = _component(doc, "schemas", "HATEOASLinks")
    if not isinstance(links, dict):
        return _fail("HATEOASLinks schema not defined")
    link = deref(doc, links.get("additionalProperties"))
    props = _dict(get_in(link, "properties"))
    if not props.get("href") or not props.get("method"):
        return _fail("HATEOAS links must have href and method properties")
    methods = get_in(props["method"], "enum")
    if not isinstance(methods, list) or not methods or not all(m in _LINK_METHODS for m in methods):
        return _fail("HATEOAS method must have enum: [GET, POST, PUT, PATCH, DELETE]")
    return _ok()


_PROBLEM_FIELDS = ("type", "title", "status", "detail", "instance")
_PROBLEM_RESPONSES = ("BadRequest", "Unauthorized", "Forbidden", "NotFound", "Conflict", "UnprocessableEntity")


def check_problem_detail(doc: Any) -> CheckResult:
    problem = _component(doc, "schemas", "ProblemDetail")
    if not isinstance(problem, dict):
        return _fail("ProblemDetail schema not defined")
    required = _list(problem.get("required"))
    missing = [f for f in _PROBLEM_FIELDS if f not in required]
    if missing:
        return _fail(f"ProblemDetail missing required fields: {', '.join(missing)}")
    bad = [
        name
        for name in _PROBLEM_RESPONSES
        if get_in(_component(doc, "responses", name), "content")
        and not has_problem_json(doc, _component(doc, "responses", name))
    ]
    if bad:
        return _fail(f"Error responses not using problem+json: {', '.join(bad)}")
    return _ok()


def _is_enveloped(schema: Any) -> bool:
    ref = get_in(schema, "$ref")
    if ref in (_ENVELOPE_REF, _JOB_STATUS_REF):
        return True
    return any(get_in(s, "$ref") == _ENVELOPE_REF for s in _list(get_in(schema, "allOf")))


def check_envelope_on_success(doc: Any) -> CheckResult:
    bad: list[str] = []
    for path, method, _item, operation in iter_operations(doc, ("get", "post", "patch", "put")):
        responses = responses_of(operation)
        for status in ("200", "201", "202"):
            schema = json_schema(doc, responses.get(status))
            if schema and not _is_enveloped(schema):
                bad.append(f"{_label(method, path)} {status}")
    if bad:
        return _fail(f"2xx responses not using envelope: {_first(bad)}")
    return _ok()


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

_KEYSET_FORBIDDEN = ("offset", "page", "cursor")
_OFFSET_PARAMS = frozenset({"offset", "page", "page_size", "pageNumber", "cursor", "pageToken"})


def check_keyset(doc: Any) -> CheckResult:
    forbidden: list[str] = []
    for name, param in _dict(get_in(doc, "components", "parameters")).items():
        param_name = str(get_in(deref(doc, param), "name") or name).lower()
        if any(word in param_name for word in _KEYSET_FORBIDDEN):
            forbidden.append(str(name))
    if forbidden:
        return _fail(f"Found forbidden pagination params in components: {', '.join(forbidden)}")

    op_level: list[str] = []
    for path, item, operation in _collection_gets(doc):
        for param in _resolved_params(doc, item, operation):
            name = str(param.get("name", ""))
            if any(word in name.lower() for word in _KEYSET_FORBIDDEN):
                op_level.append(f"GET {path}: {name}")
    if op_level:
        return _fail(f"Found forbidden pagination params at operation level: {_first(op_level, 3)}")

    params = get_in(doc, "components", "parameters")
    if get_in(params, "AfterKey") and get_in(params, "BeforeKey"):
        return _ok()
    return _fail("Must define AfterKey and BeforeKey parameters for key-set pagination")


def check_no_offset(doc: Any) -> CheckResult:
    found: list[str] = []
    for path, method, item, operation in iter_operations(doc, _ALL_METHODS):
        for param in _resolved_params(doc, item, operation):
            if param.get("in") == "query" and param.get("name") in _OFFSET_PARAMS:
                found.append(f"{_label(method, path)}: {param['name']}")
    if found:
        return _fail(f"Forbidden offset/page pagination parameters: {_first(found)}")
    return _ok()


_LIST_PARAMS = ("AfterKey", "BeforeKey", "Limit", "Sort", "Filters", "Fields", "Include")


def check_list_params(doc: Any) -> CheckResult:
    errors: list[str] = []
    for path, item, operation in _collection_gets(doc):
        missing = [p for p in _LIST_PARAMS if not has_parameter(doc, item, operation, p)]
        if missing:
            errors.append(f"GET {path} missing: {', '.join(missing)}")
    if errors:
        return _fail("; ".join(errors[:3]))
    return _ok()


_TIE_BREAKER_HINTS = ("tie-breaker", "tie breaker", "secondary sort", "unique_id")


def check_tie_breaker(doc: Any) -> CheckResult:
    description = get_in(_component(doc, "parameters", "AfterKey"), "description")
    if not isinstance(description, str) or not description:
        return _fail("AfterKey parameter missing description")
    if any(hint in description.lower() for hint in _TIE_BREAKER_HINTS):
        return _ok()
    return _fail("Pagination must document tie-breaker rules")


def check_filter_style(doc: Any) -> CheckResult:
    filters = _component(doc, "parameters", "Filters")
    if not isinstance(filters, dict):
        return _fail("Filters parameter not defined")
    if filters.get("style") == "deepObject" and filters.get("explode") is not False:
        return _ok()
    return _fail("Filter parameter must use deepObject style with explode:true")


def _csv_param(doc: Any, name: str) -> CheckResult:
    param = _component(doc, "parameters", name)
    if not isinstance(param, dict):
        return _fail(f"{name} parameter not defined")
    if not get_in(param, "schema", "pattern"):
        return _fail(f"{name} parameter must have regex pattern")
    if param.get("style") != "form" or param.get("explode") is not False:
        return _fail(f"{name} must use style:form, explode:false (CSV)")
    return _ok()


def check_fields_param(doc: Any) -> CheckResult:
    return _csv_param(doc, "Fields")


def check_include_param(doc: Any) -> CheckResult:
    return _csv_param(doc, "Include")


def check_limit_bounds(doc: Any) -> CheckResult:
    limit = _component(doc, "parameters", "Limit")
    if not isinstance(limit, dict):
        return _fail("Limit parameter not defined")
    schema = _dict(limit.get("schema"))
    warnings: list[str] = []
    if not schema.get("default"):
        warnings.append("Limit should have a default value")
    maximum = schema.get("maximum")
    if not isinstance(maximum, (int, float)) or not maximum or maximum > 500:
        warnings.append("Limit should have maximum <= 500")
    return _advise(warnings)


# ---------------------------------------------------------------------------
# Async operations
# ---------------------------------------------------------------------------


def check_accepted_responses(doc: Any) -> CheckResult:
    errors: list[str] = []
    accepted = 0
    for path, _method, _item, operation in iter_operations(doc, ("post",)):
        response = responses_of(operation).get("202")
        if response is None:
            continue
        accepted += 1
        if not has_response_header(doc, response, "Location"):
            errors.append(f"POST {path} 202 missing Location")
        if not has_response_header(doc, response, "Retry-After"):
            errors.append(f"POST {path} 202 missing Retry-After")
        if not _has_rate_trio(doc, response):
            errors.append(f"POST {path} 202 missing rate-limit trio")
    if not accepted:
        return _fail("No operations support 202 Accepted for async processing")
    if errors:
        return _fail("; ".join(errors[:5]))
    return _ok()


def _returns_job_status(schema: Any) -> bool:
    """AsyncJobStatus directly, or as the ``data`` of an enveloped allOf."""
    if get_in(schema, "$ref") == _JOB_STATUS_REF:
        return True
    return any(
        get_in(part, "properties", "data", "$ref") == _JOB_STATUS_REF
        for part in _list(get_in(schema, "allOf"))
    )


def check_job_endpoint(doc: Any) -> CheckResult:
    job_path = next(
        (path for path, _ in iter_paths(doc) if "/jobs/" in path and "{job_id}" in path),
        None,
    )
    if job_path is None:
        return _fail("Job status endpoint not found (/api/v2/{domain}/jobs/{job_id})")
    job_get = get_in(doc, "paths", job_path, "get")
    if not isinstance(job_get, dict):
        return _fail("Job status endpoint missing GET operation")
    responses = responses_of(job_get)
    if "200" not in responses or "303" not in responses:
        return _fail("Job status endpoint must support 200 and 303 responses")
    if not _returns_job_status(json_schema(doc, responses["200"])):
        return _fail("Job GET 200 must return AsyncJobStatus schema")
    if not has_response_header(doc, responses["303"], "Location"):
        return _fail("Job GET 303 must have Location header")
    errors = [
        f"{status} missing X-Request-ID"
        for status in ("200", "303")
        if not has_response_header(doc, responses[status], "X-Request-ID")
    ]
    if errors:
        return _fail(f"Job endpoint issues: {', '.join(errors)}")
    return _ok()


_JOB_STATES = ("queued", "running", "succeeded", "failed")
_JOB_FIELDS = ("job_id", "status", "created_at", "updated_at")


def check_job_schema(doc: Any) -> CheckResult:
    job = _component(doc, "schemas", "AsyncJobStatus")
    if not isinstance(job, dict):
        return _fail("AsyncJobStatus schema not defined")
    states = _list(get_in(job, "properties", "status", "enum"))
    if not all(s in states for s in _JOB_STATES):
        return _fail("AsyncJobStatus must have queued, running, succeeded, failed states")
    required = _list(job.get("required"))
    missing = [f for f in _JOB_FIELDS if f not in required]
    if missing:
        return _fail(f"AsyncJobStatus missing required fields: {', '.join(missing)}")
    return _ok()


def check_idempotency_key(doc: Any) -> CheckResult:
    if not get_in(doc, "components", "parameters", "IdempotencyKey"):
        return _fail("IdempotencyKey parameter not defined")
    missing = [
        _label(method, path)
        for path, method, item, operation in iter_operations(doc, ("post", "patch"))
        if not _has_any_param(doc, item, operation, "IdempotencyKey", "X-Idempotency-Key")
    ]
    if missing:
        return _fail(f"Operations missing X-Idempotency-Key: {_first(missing)}")
    return _ok()


def check_idempotency_docs(doc: Any) -> CheckResult:
    description = get_in(_component(doc, "parameters", "IdempotencyKey"), "description")
    if not isinstance(description, str) or not description:
        return _fail("IdempotencyKey missing description")
    text = description.lower()
    scope = "scope" in text or "method + path" in text
    ttl = "ttl" in text or "24 hour" in text
    replay = "replay" in text or "same key" in text
    if scope and ttl and replay:
        return _ok()
    return _fail("Idempotency description must document scope, TTL, and replay behavior")


_PATH_VERSION = re.compile(r"/v\d+/")


def check_version_negotiation(doc: Any) -> CheckResult:
    accept = _component(doc, "parameters", "AcceptVersion")
    if not isinstance(accept, dict):
        return _fail("AcceptVersion parameter not defined")
    pattern = get_in(accept, "schema", "pattern")
    if not isinstance(pattern, str) or ("v" not in pattern and "\\d" not in pattern):
        return _fail("AcceptVersion must have version pattern (e.g., v2, v2.1)")
    if all(_PATH_VERSION.search(path) for path, _ in iter_paths(doc)):
        return _ok()
    unversioned = [
        _label(method, path)
        for path, method, item, operation in iter_operations(doc, _CRUD)
        if not has_parameter(doc, item, operation, "AcceptVersion")
    ]
    if len(unversioned) > 5:
        return _fail("Operations missing Accept-Version header (no path versioning detected)")
    return _ok()


# ---------------------------------------------------------------------------
# Content negotiation and i18n
# ---------------------------------------------------------------------------


def check_patch_media_types(doc: Any) -> CheckResult:
    errors: list[str] = []
    for path, _method, _item, operation in iter_operations(doc, ("patch",)):
        content = get_in(deref(doc, operation.get("requestBody")), "content")
        if not isinstance(content, dict):
            continue
        if "application/json" not in content or "application/merge-patch+json" not in content:
            errors.append(path)
        merge_description = str(get_in(content, "application/merge-patch+json", "description") or "")
        if "rfc 7396" not in merge_description.lower() and "merge patch" not in merge_description.lower():
            errors.append(f"{path} merge-patch missing RFC 7396 description")
    if errors:
        return _fail(f"PATCH issues: {_first(errors)}")
    return _ok()


def check_accept_language(doc: Any) -> CheckResult:
    accept = _component(doc, "parameters", "AcceptLanguage")
    if not isinstance(accept, dict):
        return _fail("AcceptLanguage parameter not defined")
    if not get_in(accept, "schema", "pattern"):
        return _fail("AcceptLanguage must have RFC 5646 pattern")
    return _ok()


def _all_responses(doc: Any) -> Iterator[tuple[str, Any]]:
    for _path, _method, _item, operation in iter_operations(doc, _ALL_METHODS):
        yield from iter_responses(doc, operation)


def check_content_language(doc: Any) -> CheckResult:
    for _code, response in _all_responses(doc):
        headers = get_in(response, "headers")
        if isinstance(headers, dict) and any(str(h).lower() == "content-language" for h in headers):
            return _ok()
    return _fail("No Content-Language response headers found")


def _error_schemas(doc: Any) -> Iterable[Any]:
    for code, response in _all_responses(doc):
        status = _status(code)
        if status is None or status < 400:
            continue
        content = _dict(get_in(response, "content"))
        for mime in ("application/problem+json", "application/json"):
            yield deref(doc, get_in(content, mime, "schema"))


def check_localized_errors(doc: Any) -> CheckResult:
    for schema in _error_schemas(doc):
        props = get_in(schema, "properties")
        if isinstance(props, dict) and ("locale" in props or "language" in props):
            return _ok()
    return _fail("No localized error messages found (locale or language on error schemas)")


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


def check_webhook_hmac(doc: Any) -> CheckResult:
    if not get_in(doc, "x-webhooks"):
        return _ok()
    meta = _component(doc, "schemas", "WebhookMeta")
    if not isinstance(meta, dict):
        return _fail("WebhookMeta schema not defined for webhook security")
    if "HMAC-SHA256" in _list(get_in(meta, "properties", "algorithm", "enum")):
        return _ok()
    return _fail("Webhooks must use HMAC-SHA256 for verification")


def check_webhook_security(doc: Any) -> CheckResult:
    if not get_in(doc, "x-webhooks"):
        return _ok()
    meta = _component(doc, "schemas", "WebhookMeta")
    if not isinstance(meta, dict):
        return _fail("WebhookMeta schema required for webhook security")
    props = _dict(meta.get("properties"))
    missing = [
        f for f in ("signature_header", "timestamp_header", "replay_window_seconds") if not props.get(f)
    ]
    if missing:
        return _fail(f"WebhookMeta missing: {', '.join(missing)}")
    return _ok()


# ---------------------------------------------------------------------------
# Documentation
# ---------------------------------------------------------------------------


def _description(doc: Any) -> str:
    description = get_in(doc, "info", "description")
    return description if isinstance(description, str) else ""


_BUSINESS_RULE = re.compile(r"RULE-[A-Z]{3}-\d{3}")


def check_business_rules(doc: Any) -> CheckResult:
    if _BUSINESS_RULE.search(_description(doc)):
        return _ok()
    return _fail("API description must document business rules in RULE-XXX-001 format")


def check_performance_slas(doc: Any) -> CheckResult:
    description = _description(doc)
    documented = ("ms" in description and "p95" in description) or "performance" in description
    if documented or get_in(doc, "x-performance-slas"):
        return _ok()
    return _fail("Performance SLAs must be documented")


def check_tech_stack(doc: Any) -> CheckResult:
    text = _description(doc).lower()
    database = "citus" in text or "postgresql" in text
    cache = "dragonfly" in text or "valkey" in text
    messaging = "pulsar" in text
    if database and cache and messaging:
        return _ok()
    return _fail("Must document Smackdab tech stack: Citus, Dragonfly/Valkey, Pulsar")


def forbidden_technologies(doc: Any) -> list[str]:
    """Technologies the platform rules out, as mentioned anywhere in *doc*."""
    text = _all_text(doc)
    found: list[str] = []
    if "kafka" in text:
        found.append("Kafka")
    if "rabbitmq" in text:
        found.append("RabbitMQ")
    if "elasticsearch" in text or "elastic search" in text:
        found.append("Elasticsearch")
    if (
        "redis" in text
        and "redis-compatible" not in text
        and "dragonfly" not in text
        and "valkey" not in text
    ):
        found.append("Redis (use Dragonfly/Valkey instead)")
    if "saga pattern" in text or "saga-pattern" in text:
        found.append("Saga Pattern")
    if "materialized view" in text:
        found.append("Materialized Views")
    if "foreign key" in text and "distributed" in text:
        found.append("Foreign Keys across distributed tables")
    return found


def check_forbidden_tech(doc: Any) -> CheckResult:
    found = forbidden_technologies(doc)
    if found:
        return _fail(f"Forbidden technology detected: {', '.join(found)}")
    return _ok()


_VERSIONED_DOMAIN = re.compile(r"^/api/v\d+/[a-z]+/")


def check_path_versioning(doc: Any) -> CheckResult:
    errors: list[str] = []
    for path, _ in iter_paths(doc):
        if "webhook" in path:
            continue
        if not _VERSIONED_DOMAIN.match(path):
            errors.append(path)
        segments = path.split("/")
        resource = segments[4] if len(segments) > 4 else ""
        if resource and "{" not in resource and not path.endswith("}") and not resource.endswith("s"):
            errors.append(f"{path} (collection should be plural)")
    if errors:
        return _fail(f"Invalid path structure: {_first(errors, 3)}")
    return _ok()


# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------

_REQUIRED_EXTENSIONS = (
    "x-rate-limiting",
    "x-caching-strategy",
    "x-performance-slas",
    "x-platform-constraints",
)


def check_required_extensions(doc: Any) -> CheckResult:
    missing = [ext for ext in _REQUIRED_EXTENSIONS if not get_in(doc, ext)]
    if missing:
        return _fail(f"Missing required extensions: {', '.join(missing)}")
    return _ok()


def check_negotiation_extensions(doc: Any) -> CheckResult:
    warnings: list[str] = []
    negotiation = get_in(doc, "x-content-negotiation")
    if not negotiation:
        warnings.append("x-content-negotiation not defined")
    else:
        if not get_in(negotiation, "supported_media_types"):
            warnings.append("x-content-negotiation missing supported_media_types")
        if not get_in(negotiation, "compression"):
            warnings.append("x-content-negotiation missing compression config")
    if not get_in(doc, "x-cors-policy"):
        warnings.append("x-cors-policy not defined")
    return _advise(warnings)


def check_deprecation_headers(doc: Any) -> CheckResult:
    headers = get_in(doc, "components", "headers")
    if all(get_in(headers, name) for name in ("Deprecation", "Sunset", "Link")):
        return _ok()
    return _ok("Consider defining Deprecation, Sunset, and Link headers for API lifecycle")


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


def _cp(
    id: str,
    category: str,
    description: str,
    check: Any,
    weight: int = 1,
    auto_fail: bool = False,
) -> Checkpoint:
    return Checkpoint(
        id=id,
        category=category,
        description=description,
        weight=weight,
        auto_fail=auto_fail,
        check=check,
    )


CHECKPOINTS: tuple[Checkpoint, ...] = (
    # openapi
    _cp("OAS-VERSION", "openapi", "OpenAPI version must be 3.0.3", check_oas_version, 3, True),
    _cp("OAS-OPERATIONIDS", "openapi", "All operationIds globally unique", check_operation_ids),
    _cp("OAS-NO-PLACEHOLDERS", "openapi", "No unresolved template placeholders", check_no_placeholders),
    _cp("OAS-INFO-COMPLETE", "openapi", "Info section complete with all required fields", check_info_complete),
    _cp("OAS-X-WEBHOOKS", "openapi", "Uses x-webhooks not webhooks for 3.0.3", check_no_native_webhooks),
    # servers, tags, naming
    _cp("SERVERS-REQUIRED", "servers", "Required servers (prod, staging, dev)", check_servers, 2),
    _cp("TAGS-LOGICAL-GROUPS", "tags", "Required tag groups defined", check_tag_groups),
    _cp("NAME-NAMESPACE", "naming", "All paths start with /api/v2/<domain>", check_namespace, 3, True),
    # security
    _cp("SEC-TOP-LEVEL-DEFAULT", "security", "Top-level security with OAuth2 and Bearer defaults", check_top_level_security),
    _cp("SEC-OAUTH2", "security", "OAuth2 scheme present", check_oauth2_scheme),
    _cp("SEC-OAUTH2-SCOPES", "security", "Concrete OAuth2 scopes (no placeholders)", check_oauth2_scopes, 2),
    _cp("SEC-PER-OP-SECURITY", "security", "GET has read scope, POST/PATCH/DELETE have write scope", check_operation_scopes, 2),
    _cp("SEC-BEARER-JWT", "security", "Bearer JWT auth method supported", check_bearer_jwt, 2),
    _cp("SEC-APIKEY-RESTRICT", "security", "ApiKey used only for webhooks/service-to-service", check_api_key_restricted),
    _cp("SEC-WWW-AUTH", "security", "WWW-Authenticate on 401 responses", check_www_authenticate),
    # tenancy
    _cp("MT-ORG-HDR", "tenancy", "X-Organization-ID on all operations", check_org_header, 3, True),
    _cp("MT-BRANCH-ALL-OPS", "tenancy", "X-Branch-ID on all operations", check_branch_header, 3, True),
    _cp("MT-BIGINT-UUID", "tenancy", "BIGINT/UUID dual format support", check_bigint_uuid),
    _cp("MT-REQUEST-ID", "tenancy", "X-Request-ID in parameters and response headers", check_request_id),
    _cp("MT-W3C-TRACE", "tenancy", "W3C trace headers supported", check_trace_headers),
    _cp("MT-CONSISTENCY", "tenancy", "X-Consistency parameter defined and used on GET operations", check_consistency),
    # http
    _cp("HTTP-ERRORS-PROBLEMJSON", "http", "All 4xx/5xx responses use problem+json", check_errors_problem_json, 3, True),
    _cp("HTTP-STATUS-CODES", "http", "All required status codes present", check_status_code_components, 2),
    _cp("HTTP-428-PRECONDITION", "http", "428 on PATCH/DELETE when If-Match required", check_precondition_required),
    _cp("HTTP-412-PRECONDITION", "http", "412 Precondition Failed support", check_precondition_failed),
    _cp("HTTP-415-MEDIATYPE", "http", "415 on POST/PATCH for content-type validation", check_unsupported_media_type),
    _cp("HTTP-503-SERVICE", "http", "503 on GET for service unavailability", check_service_unavailable),
    _cp("HTTP-409-VS-422", "http", "409 vs 422 properly distinguished", check_conflict_vs_unprocessable),
    _cp("HTTP-DELETE-204", "http", "DELETE returns 204 with rate-limit headers", check_delete_no_content),
    # ratelimit
    _cp("RATE-LIMIT-HEADERS", "ratelimit", "Rate-limit header trio defined", check_rate_limit_components),
    _cp("RATE-LIMIT-TRIO-ENFORCED", "ratelimit", "Rate-limit trio on 200,201,202,204,206 responses", check_rate_limit_trio, 2),
    # caching
    _cp("CACHE-ETAG", "caching", "ETag on GET 200 responses", check_etag, 2),
    _cp("CACHE-ETAG-CACHEABLE", "caching", "ETag on cacheable responses (201, PATCH 200)", check_etag_cacheable),
    _cp("CACHE-IF-MATCH", "caching", "If-Match/If-None-Match parameters defined", check_conditional_params),
    _cp("CACHE-304", "caching", "304 Not Modified support on GET", check_not_modified),
    _cp("CACHE-VARY-HEADERS", "caching", "Vary and Cache-Control headers on GET 200", check_vary_headers),
    # envelope
    _cp("ENV-RESPONSE-WRAPPER", "envelope", "ResponseEnvelope with success, data, meta, _links", check_envelope_schema, 3, True),
    _cp("ENV-META-REF", "envelope", "ResponseMeta uses $ref not inline", check_meta_ref),
    _cp("ENV-HATEOAS", "envelope", "HATEOAS links with href and method enum", check_hateoas_links),
    _cp("ENV-RFC7807", "envelope", "RFC 7807 ProblemDetail for all errors", check_problem_detail, 3, True),
    _cp("ENV-ALL-2XX", "envelope", "Envelope on all 2xx responses with bodies", check_envelope_on_success, 2),
    # pagination
    _cp("PAG-KEYSET", "pagination", "Key-set pagination (after_key/before_key)", check_keyset, 3, True),
    _cp("PAG-NO-OFFSET", "pagination", "No offset/page/page_size/pageNumber parameters", check_no_offset, 3, True),
    _cp("PAG-OP-LEVEL-PARAMS", "pagination", "GET list operations have full pagination params", check_list_params, 2),
    _cp("PAG-TIEBREAKER", "pagination", "Tie-breaker rules documented", check_tie_breaker),
    _cp("PAG-FILTER-DEEPOBJECT", "pagination", "Filter parameter deepObject style", check_filter_style),
    _cp("PAG-FIELDS", "pagination", "Fields parameter for sparse fieldsets", check_fields_param),
    _cp("PAG-INCLUDE", "pagination", "Include/expand for related resources", check_include_param),
    _cp("PAG-LIMIT-BOUNDS", "pagination", "Limit parameter has max and default", check_limit_bounds),
    # async
    _cp("ASYNC-202-COMPLETE", "async", "202 with Location, Retry-After, and rate-limit trio", check_accepted_responses, 2),
    _cp("ASYNC-JOB-ENDPOINT", "async", "Job status endpoint /api/v2/{domain}/jobs/{job_id}", check_job_endpoint),
    _cp("ASYNC-JOB-SCHEMA", "async", "AsyncJobStatus schema with proper states", check_job_schema),
    _cp("ASYNC-IDEMPOTENCY", "async", "X-Idempotency-Key on POST/PATCH", check_idempotency_key, 2),
    _cp("ASYNC-IDEMPOTENCY-DOCS", "async", "Idempotency scope, TTL, replay documented", check_idempotency_docs),
    _cp("ASYNC-VERSION-NEGOTIATION", "async", "Accept-Version parameter defined and used", check_version_negotiation),
    # content, i18n
    _cp("CONTENT-PATCH", "content", "PATCH supports application/json and merge-patch+json", check_patch_media_types),
    _cp("CONTENT-ACCEPT-LANG", "content", "Accept-Language header support", check_accept_language),
    _cp("I18N-CONTENT-LANG", "i18n", "Content-Language on localized responses", check_content_language),
    _cp("I18N-LOCALIZED-ERRORS", "i18n", "Error payloads carry a locale", check_localized_errors),
    # webhooks
    _cp("WH-X-WEBHOOKS", "webhooks", "Uses x-webhooks not webhooks (3.0.3)", check_no_native_webhooks),
    _cp("WH-HMAC", "webhooks", "HMAC-SHA256 webhook verification", check_webhook_hmac),
    _cp("WH-SECURITY", "webhooks", "Webhook signature, timestamp and replay window", check_webhook_security),
    # docs
    _cp("DOC-BUSINESS-RULES", "docs", "Business rules in RULE-XXX-001 format", check_business_rules),
    _cp("DOC-PERF-SLA", "docs", "Performance SLAs documented", check_performance_slas),
    _cp("DOC-TECH-STACK", "docs", "Platform tech stack documented", check_tech_stack),
    _cp("DOC-FORBIDDEN-TECH", "docs", "No forbidden technology mentioned", check_forbidden_tech),
    _cp("DOC-API-VERSION", "docs", "API versioning /api/v2/{domain}/{resources}", check_path_versioning, 2),
    # extensions
    _cp("EXT-REQUIRED-PRESENT", "extensions", "Required x-extensions present", check_required_extensions),
    _cp("EXT-CONTENT-NEGOTIATION", "extensions", "Content negotiation and CORS extensions", check_negotiation_extensions),
    _cp("EXT-DEPRECATION", "extensions", "Deprecation headers and strategy", check_deprecation_headers),
)
