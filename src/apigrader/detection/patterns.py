"""Heuristic pattern families that classify a document as REST, gRPC-style or SaaS.

Each family is a weighted set of boolean detectors. A family's score is the
share of its total weight whose detectors fire, on a 0-100 scale. The output
is advisory and never feeds the grade.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from apigrader.document.resolver import (
    deref,
    get_in,
    iter_operations,
    iter_paths,
    iter_responses,
    iter_strings,
    resolve_effective_parameters,
    responses_of,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

logger = logging.getLogger(__name__)

# Families in tie-break order: the first listed wins an exact tie.
FAMILY_ORDER: tuple[str, ...] = ("saas", "grpc", "rest")

_EVIDENCE_LIMIT = 3

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pattern:
    """One weighted detector with an evidence extractor."""

    id: str
    name: str
    description: str
    weight: float
    detector: Callable[[Any], bool] = field(compare=False, repr=False)
    evidence: Callable[[Any], list[str]] = field(compare=False, repr=False)


@dataclass(frozen=True)
class PatternFamily:
    name: str
    patterns: tuple[Pattern, ...]

    def fired(self, doc: Any) -> list[str]:
        """Ids of the patterns whose detectors fire on *doc*."""
        return [p.id for p in self.patterns if _fires(p, doc)]

    def calculate_score(self, doc: Any) -> float:
        total = sum(p.weight for p in self.patterns)
        if total <= 0:
            return 0.0
        earned = sum(p.weight for p in self.patterns if _fires(p, doc))
        return earned / total * 100

    def get_evidence(self, doc: Any) -> list[str]:
        """One line per fired pattern: its name plus up to three evidence items."""
        lines: list[str] = []
        for pattern in self.patterns:
            if not _fires(pattern, doc):
                continue
            try:
                items = pattern.evidence(doc)[:_EVIDENCE_LIMIT]
            except Exception as exc:  # evidence is decoration; keep the pattern name
                logger.warning("Evidence for pattern %s raised: %s", pattern.id, exc)
                items = []
            lines.append(f"{pattern.name}: {', '.join(items)}" if items else pattern.name)
        return lines


def _fires(pattern: Pattern, doc: Any) -> bool:
    """Run one detector; a detector that raises counts as not fired."""
    try:
        return bool(pattern.detector(doc))
    except Exception as exc:  # classification is advisory and must not abort grading
        logger.warning("Pattern %s raised: %s", pattern.id, exc)
        return False


@dataclass(frozen=True)
class Classification:
    """Family scores for a document and the best-supported family."""

    scores: Mapping[str, float]
    evidence: Mapping[str, tuple[str, ...]]
    primary: str
    confidence: float  # 0.0 - 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary,
            "confidence": self.confidence,
            "scores": {name: round(score, 2) for name, score in self.scores.items()},
            "evidence": {name: list(lines) for name, lines in self.evidence.items()},
        }


# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------


def _paths(doc: Any) -> list[str]:
    return [path for path, _ in iter_paths(doc)]


def _parameters(doc: Any) -> Iterator[tuple[str, dict[str, Any], dict[str, Any]]]:
    """Yield ``(path, operation, resolved_parameter)`` for every operation."""
    for path, _method, item, operation in iter_operations(doc):
        for param in resolve_effective_parameters(item, operation, doc):
            resolved = deref(doc, param)
            if isinstance(resolved, dict) and isinstance(resolved.get("name"), str):
                yield path, operation, resolved


def _responses(doc: Any) -> Iterator[dict[str, Any]]:
    for _path, _method, _item, operation in iter_operations(doc):
        for _code, response in iter_responses(doc, operation):
            if isinstance(response, dict):
                yield response


def _schemas(doc: Any) -> dict[str, Any]:
    schemas = get_in(doc, "components", "schemas")
    return schemas if isinstance(schemas, dict) else {}


def _text(doc: Any) -> str:
    return "\n".join(iter_strings(doc))


def _matching_paths(doc: Any, pattern: str, flags: int = 0) -> list[str]:
    regex = re.compile(pattern, flags)
    return [p for p in _paths(doc) if regex.search(p)]


def _content_types(doc: Any) -> set[str]:
    types: set[str] = set()
    for _path, _method, _item, operation in iter_operations(doc):
        content = get_in(deref(doc, get_in(operation, "requestBody")), "content")
        if isinstance(content, dict):
            types.update(str(t) for t in content)
    for response in _responses(doc):
        content = response.get("content")
        if isinstance(content, dict):
            types.update(str(t) for t in content)
    return types


# ---------------------------------------------------------------------------
# REST
# ---------------------------------------------------------------------------

_HIERARCHY = r"/\w+/\{\w+\}/\w+"
_VERSIONED = r"/v\d+/"


def _collection_pairs(doc: Any) -> list[str]:
    paths = _paths(doc)
    pairs: list[str] = []
    for collection in paths:
        item = re.compile(re.escape(collection) + r"/\{[^}/]+\}$")
        pairs.extend(f"{collection} → {p}" for p in paths if item.match(p))
    return pairs


def _verb_usage(doc: Any) -> bool:
    correct = total = 0
    for _path, method, _item, operation in iter_operations(doc, ("get", "post", "put", "delete")):
        total += 1
        has_body = "requestBody" in operation
        if (method in ("post", "put")) == has_body:
            correct += 1
    return total > 0 and correct / total > 0.8


def _verbs(doc: Any) -> list[str]:
    verbs = {m.upper() for _, m, _, _ in iter_operations(doc, ("get", "post", "put", "patch", "delete"))}
    return [f"Uses verbs: {', '.join(sorted(verbs))}"]


_EXPECTED_STATUS = {"post": "201", "delete": "204", "get": "200"}


def _status_usage(doc: Any) -> bool:
    appropriate = total = 0
    for _path, method, _item, operation in iter_operations(doc, tuple(_EXPECTED_STATUS)):
        total += 1
        if _EXPECTED_STATUS[method] in responses_of(operation):
            appropriate += 1
    return total > 0 and appropriate / total > 0.6


def _status_codes(doc: Any) -> list[str]:
    codes: set[str] = set()
    for _path, _method, _item, operation in iter_operations(doc):
        codes.update(responses_of(operation))
    return [f"Status codes: {', '.join(sorted(codes))}"] if codes else []


_QUERY_HINTS = ("page", "limit", "sort", "filter", "search", "q")


def _query_params(doc: Any) -> list[str]:
    names: list[str] = []
    for _path, _op, param in _parameters(doc):
        if param.get("in") == "query" and param["name"] not in names:
            names.append(param["name"])
    return names


def _link_schemas(doc: Any) -> list[str]:
    found: list[str] = []
    for name, schema in _schemas(doc).items():
        props = get_in(schema, "properties")
        if isinstance(props, dict) and ("_links" in props or "links" in props or "href" in props):
            found.append(f"{name} has HATEOAS links")
    return found


def _negotiates(doc: Any) -> bool:
    for _path, _method, _item, operation in iter_operations(doc):
        content = get_in(deref(doc, get_in(operation, "requestBody")), "content")
        if isinstance(content, dict) and len(content) > 1:
            return True
    for response in _responses(doc):
        content = response.get("content")
        if isinstance(content, dict) and len(content) > 1:
            return True
    return False


def _version_headers(doc: Any) -> list[str]:
    return [
        param["name"]
        for _path, _op, param in _parameters(doc)
        if param.get("in") == "header" and re.search("version", param["name"], re.IGNORECASE)
    ]


def _versioning_evidence(doc: Any) -> list[str]:
    evidence: list[str] = []
    versioned = _matching_paths(doc, _VERSIONED)
    if versioned:
        evidence.append(f"Path versioning: {versioned[0]}")
    headers = _version_headers(doc)
    if headers:
        evidence.append(f"Header versioning: {headers[0]}")
    return evidence


def _idempotent_ops(doc: Any) -> list[str]:
    return [f"{m.upper()} {p}" for p, m, _, _ in iter_operations(doc, ("put", "delete"))]


def _resource_schemas(doc: Any) -> list[str]:
    return [
        name
        for name in _schemas(doc)
        if not any(word in str(name).lower() for word in ("error", "request", "response"))
    ]


REST_PATTERNS = PatternFamily(
    name="rest",
    patterns=(
        Pattern(
            id="rest.resource_hierarchy",
            name="Resource Hierarchy",
            description="Hierarchical resource paths like /users/{id}/posts",
            weight=0.9,
            detector=lambda doc: bool(_matching_paths(doc, _HIERARCHY)),
            evidence=lambda doc: _matching_paths(doc, _HIERARCHY),
        ),
        Pattern(
            id="rest.collection_item",
            name="Collection/Item Pattern",
            description="Paired paths like /users and /users/{id}",
            weight=0.95,
            detector=lambda doc: bool(_collection_pairs(doc)),
            evidence=_collection_pairs,
        ),
        Pattern(
            id="rest.http_verbs",
            name="HTTP Verb Semantics",
            description="Request bodies on POST/PUT only",
            weight=0.85,
            detector=_verb_usage,
            evidence=_verbs,
        ),
        Pattern(
            id="rest.status_codes",
            name="RESTful Status Codes",
            description="201 on create, 204 on delete, 200 on read",
            weight=0.7,
            detector=_status_usage,
            evidence=_status_codes,
        ),
        Pattern(
            id="rest.query_params",
            name="Query Parameters",
            description="Query parameters for filtering and pagination",
            weight=0.6,
            detector=lambda doc: any(
                hint in name.lower() for name in _query_params(doc) for hint in _QUERY_HINTS
            ),
            evidence=lambda doc: [f"Query params: {', '.join(_query_params(doc)[:5])}"],
        ),
        Pattern(
            id="rest.hateoas",
            name="HATEOAS Links",
            description="Hypermedia links in response schemas",
            weight=0.5,
            detector=lambda doc: bool(_link_schemas(doc)),
            evidence=_link_schemas,
        ),
        Pattern(
            id="rest.content_negotiation",
            name="Content Negotiation",
            description="More than one media type per body",
            weight=0.6,
            detector=_negotiates,
            evidence=lambda doc: [f"Content types: {', '.join(sorted(_content_types(doc)))}"],
        ),
        Pattern(
            id="rest.versioning",
            name="API Versioning",
            description="Version in path or header",
            weight=0.7,
            detector=lambda doc: bool(_versioning_evidence(doc)),
            evidence=_versioning_evidence,
        ),
        Pattern(
            id="rest.idempotency",
            name="Idempotent Operations",
            description="PUT and DELETE operations",
            weight=0.6,
            detector=lambda doc: bool(_idempotent_ops(doc)),
            evidence=_idempotent_ops,
        ),
        Pattern(
            id="rest.resource_representation",
            name="Resource Representations",
            description="Named resource schemas",
            weight=0.7,
            detector=lambda doc: bool(_resource_schemas(doc)),
            evidence=lambda doc: [f"Resources: {', '.join(_resource_schemas(doc)[:5])}"],
        ),
    ),
)

# ---------------------------------------------------------------------------
# gRPC / Google API style
# ---------------------------------------------------------------------------

_CUSTOM_METHOD = r":\w+$"
_STANDARD_METHODS = (":get", ":list", ":create", ":update", ":delete")
_RESOURCE_NAME = r"/(projects|organizations|folders|locations)/\{[^}]+\}"
_GRPC_CODES = (
    "CANCELLED",
    "UNKNOWN",
    "INVALID_ARGUMENT",
    "DEADLINE_EXCEEDED",
    "NOT_FOUND",
    "ALREADY_EXISTS",
    "PERMISSION_DENIED",
    "UNAUTHENTICATED",
    "RESOURCE_EXHAUSTED",
    "FAILED_PRECONDITION",
    "ABORTED",
    "OUT_OF_RANGE",
    "UNIMPLEMENTED",
    "INTERNAL",
    "UNAVAILABLE",
    "DATA_LOSS",
)


def _service_operation_ids(doc: Any) -> list[str]:
    ids: list[str] = []
    for _path, _method, _item, operation in iter_operations(doc):
        op_id = operation.get("operationId")
        if isinstance(op_id, str) and "." in op_id:
            ids.append(op_id)
    return ids


def _mentions(doc: Any, *needles: str) -> list[str]:
    text = _text(doc).lower()
    return [n for n in needles if n in text]


def _field_masks(doc: Any) -> list[str]:
    return [
        f"{param['name']} on {path}"
        for path, _op, param in _parameters(doc)
        if param["name"] in ("field_mask", "fieldMask")
    ]


def _operation_resources(doc: Any) -> list[str]:
    evidence = [f"Operation paths: {p}" for p in _paths(doc) if "/operations" in p][:1]
    if evidence:
        return evidence
    for _path, _method, _item, operation in iter_operations(doc):
        response = deref(doc, responses_of(operation).get("200"))
        props = get_in(deref(doc, get_in(response, "content", "application/json", "schema")), "properties")
        if isinstance(props, dict) and "name" in props and "done" in props:
            evidence.append(f"Operation resource returned by {operation.get('operationId', 'an operation')}")
            break
    return evidence


def _grpc_codes(doc: Any) -> list[str]:
    text = _text(doc)
    return [code for code in _GRPC_CODES if code in text]


def _streaming(doc: Any) -> list[str]:
    text = _text(doc).lower()
    count = text.count("stream")
    evidence = [f"{count} streaming references"] if count else []
    evidence.extend(f"{word} mentioned" for word in ("server-sent", "bidirectional") if word in text)
    return evidence


def _transcoding(doc: Any) -> list[str]:
    text = _text(doc)
    markers = {
        "google.api.http": "google.api.http annotations",
        "additional_bindings": "Additional HTTP bindings",
        "response_body": "response_body bindings",
    }
    return [label for marker, label in markers.items() if marker in text]


GRPC_PATTERNS = PatternFamily(
    name="grpc",
    patterns=(
        Pattern(
            id="grpc.custom_methods",
            name="Custom Method Patterns",
            description="Paths with a :verb suffix like /resource:action",
            weight=1.0,
            detector=lambda doc: bool(_matching_paths(doc, _CUSTOM_METHOD)),
            evidence=lambda doc: _matching_paths(doc, _CUSTOM_METHOD),
        ),
        Pattern(
            id="grpc.google_api_style",
            name="Google API Style",
            description="Standard :get/:list/:create/:update/:delete methods",
            weight=0.9,
            detector=lambda doc: any(p.endswith(_STANDARD_METHODS) for p in _paths(doc)),
            evidence=lambda doc: [p for p in _paths(doc) if p.endswith(_STANDARD_METHODS)],
        ),
        Pattern(
            id="grpc.service_naming",
            name="Service-Based Naming",
            description="Service.Method operation ids",
            weight=0.85,
            detector=lambda doc: bool(_service_operation_ids(doc)),
            evidence=_service_operation_ids,
        ),
        Pattern(
            id="grpc.protobuf_refs",
            name="Protocol Buffer References",
            description="Mentions of protobuf or gRPC",
            weight=0.9,
            detector=lambda doc: bool(_mentions(doc, "protobuf", "grpc", "proto3", ".proto")),
            evidence=lambda doc: [f"{m} references found" for m in _mentions(doc, "protobuf", "grpc", ".proto")],
        ),
        Pattern(
            id="grpc.field_mask",
            name="Field Mask Support",
            description="Field masks for partial responses",
            weight=0.7,
            detector=lambda doc: bool(_field_masks(doc)),
            evidence=_field_masks,
        ),
        Pattern(
            id="grpc.streaming",
            name="Streaming Patterns",
            description="Server or bidirectional streaming",
            weight=0.8,
            detector=lambda doc: bool(_streaming(doc)),
            evidence=_streaming,
        ),
        Pattern(
            id="grpc.resource_name",
            name="Resource Name Pattern",
            description="Full resource names like projects/*/locations/*",
            weight=0.75,
            detector=lambda doc: bool(_matching_paths(doc, _RESOURCE_NAME)),
            evidence=lambda doc: _matching_paths(doc, _RESOURCE_NAME),
        ),
        Pattern(
            id="grpc.long_running",
            name="Long-Running Operations",
            description="Operation resources with name and done fields",
            weight=0.6,
            detector=lambda doc: bool(_operation_resources(doc)),
            evidence=_operation_resources,
        ),
        Pattern(
            id="grpc.error_model",
            name="gRPC Error Model",
            description="Canonical gRPC status codes",
            weight=0.65,
            detector=lambda doc: bool(_grpc_codes(doc)),
            evidence=lambda doc: [f"gRPC status codes: {', '.join(_grpc_codes(doc)[:3])}"],
        ),
        Pattern(
            id="grpc.transcoding",
            name="HTTP Transcoding",
            description="gRPC-JSON transcoding annotations",
            weight=0.7,
            detector=lambda doc: bool(_transcoding(doc)) or 'body: "*"' in _text(doc),
            evidence=_transcoding,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Enterprise SaaS
# ---------------------------------------------------------------------------

TENANT_HEADERS: frozenset[str] = frozenset(
    {"x-organization-id", "x-tenant-id", "x-company-id", "x-account-id", "x-workspace-id", "x-team-id"}
)
_ADMIN_PATH = r"/(admin|system|management|organizations|tenants|accounts)"
_ISOLATION_EXEMPT = re.compile(r"/(admin|system|health)")
_TENANT_CONTEXT = re.compile(r"organization|tenant|company|account", re.IGNORECASE)
_RBAC_PREFIXES = ("admin:", "write:", "read:", "delete:", "manage:", "view:", "edit:", "owner:")
_BILLING_WORDS = ("billing", "subscription", "invoice", "payment", "plan", "tier", "usage", "credit", "quota")
_AUDIT_PATH = r"/(audit|logs|activity|history|events|changelog)"
_USER_WORDS = ("users", "members", "teams", "invitations", "roles", "permissions", "groups")
_KEY_PATH = r"api[_-]?keys?|tokens?|credentials"
_WEBHOOK_PATH = r"webhook|hook|callback|notification"
_RATE_HEADER = re.compile(r"rate|limit|quota|remaining", re.IGNORECASE)


def _tenant_headers(doc: Any) -> list[str]:
    found: list[str] = []
    for _path, _op, param in _parameters(doc):
        if param.get("in") == "header" and param["name"].lower() in TENANT_HEADERS:
            found.append(f"Required: {param['name']}")
    components = get_in(doc, "components", "parameters")
    if isinstance(components, dict):
        for param in components.values():
            name = get_in(param, "name")
            if get_in(param, "in") == "header" and isinstance(name, str) and name.lower() in TENANT_HEADERS:
                found.append(f"Defined: {name}")
    return list(dict.fromkeys(found))


def _rbac_scopes(doc: Any) -> list[str]:
    scopes: list[str] = []
    schemes = get_in(doc, "components", "securitySchemes")
    if not isinstance(schemes, dict):
        return scopes
    for scheme in schemes.values():
        flows = get_in(deref(doc, scheme), "flows")
        if not isinstance(flows, dict):
            continue
        for flow in flows.values():
            flow_scopes = get_in(flow, "scopes")
            if isinstance(flow_scopes, dict):
                scopes.extend(
                    s for s in flow_scopes if any(prefix in str(s) for prefix in _RBAC_PREFIXES)
                )
    return list(dict.fromkeys(scopes))


def _keyword_paths(doc: Any, words: tuple[str, ...]) -> list[str]:
    return [p for p in _paths(doc) if any(w in p.lower() for w in words)]


def _rate_headers(doc: Any) -> list[str]:
    names: list[str] = []
    for response in _responses(doc):
        headers = response.get("headers")
        if isinstance(headers, dict):
            names.extend(str(h) for h in headers if _RATE_HEADER.search(str(h)))
    return list(dict.fromkeys(names))


def _sso(doc: Any) -> list[str]:
    labels = {"saml": "SAML support", "oauth": "OAuth support", "openid": "OpenID Connect", "sso": "SSO mentioned"}
    return [labels[m] for m in _mentions(doc, *labels)]


def _isolation_counts(doc: Any) -> tuple[int, int]:
    """``(tenant_scoped, total)`` over non-admin operations that take parameters."""
    total = scoped = 0
    for path, _method, item, operation in iter_operations(doc):
        if _ISOLATION_EXEMPT.search(path):
            continue
        params = [deref(doc, p) for p in resolve_effective_parameters(item, operation, doc)]
        if not params:
            continue
        total += 1
        if any(
            isinstance(p, dict)
            and p.get("in") == "header"
            and isinstance(p.get("name"), str)
            and _TENANT_CONTEXT.search(p["name"])
            for p in params
        ):
            scoped += 1
    return scoped, total


def _isolated(doc: Any) -> bool:
    scoped, total = _isolation_counts(doc)
    return total > 0 and scoped / total > 0.7


SAAS_PATTERNS = PatternFamily(
    name="saas",
    patterns=(
        Pattern(
            id="saas.multi_tenant_headers",
            name="Multi-Tenant Headers",
            description="Organization or tenant identification headers",
            weight=1.0,
            detector=lambda doc: bool(_tenant_headers(doc)),
            evidence=_tenant_headers,
        ),
        Pattern(
            id="saas.admin_endpoints",
            name="Administrative Endpoints",
            description="Admin endpoints for tenant management",
            weight=0.85,
            detector=lambda doc: bool(_matching_paths(doc, _ADMIN_PATH, re.IGNORECASE)),
            evidence=lambda doc: _matching_paths(doc, _ADMIN_PATH, re.IGNORECASE),
        ),
        Pattern(
            id="saas.rbac_scopes",
            name="Role-Based Access Control",
            description="OAuth scopes for role-based permissions",
            weight=0.9,
            detector=lambda doc: bool(_rbac_scopes(doc)),
            evidence=lambda doc: [f"RBAC scopes: {', '.join(_rbac_scopes(doc)[:3])}"],
        ),
        Pattern(
            id="saas.subscription_billing",
            name="Subscription & Billing",
            description="Subscription and billing endpoints",
            weight=0.8,
            detector=lambda doc: bool(_keyword_paths(doc, _BILLING_WORDS)),
            evidence=lambda doc: _keyword_paths(doc, _BILLING_WORDS),
        ),
        Pattern(
            id="saas.audit_logging",
            name="Audit Logging",
            description="Audit trail and activity endpoints",
            weight=0.75,
            detector=lambda doc: bool(_matching_paths(doc, _AUDIT_PATH, re.IGNORECASE)),
            evidence=lambda doc: _matching_paths(doc, _AUDIT_PATH, re.IGNORECASE),
        ),
        Pattern(
            id="saas.user_management",
            name="User & Team Management",
            description="User invitation and team management",
            weight=0.7,
            detector=lambda doc: len(_keyword_paths(doc, _USER_WORDS)) >= 2,
            evidence=lambda doc: _keyword_paths(doc, _USER_WORDS),
        ),
        Pattern(
            id="saas.api_keys",
            name="API Key Management",
            description="API key generation and management",
            weight=0.65,
            detector=lambda doc: bool(_matching_paths(doc, _KEY_PATH, re.IGNORECASE)),
            evidence=lambda doc: _matching_paths(doc, _KEY_PATH, re.IGNORECASE),
        ),
        Pattern(
            id="saas.webhooks",
            name="Webhook Configuration",
            description="Webhook setup and management",
            weight=0.6,
            detector=lambda doc: bool(_matching_paths(doc, _WEBHOOK_PATH, re.IGNORECASE)),
            evidence=lambda doc: _matching_paths(doc, _WEBHOOK_PATH, re.IGNORECASE),
        ),
        Pattern(
            id="saas.rate_limiting",
            name="Rate Limiting Headers",
            description="Rate limit headers in responses",
            weight=0.7,
            detector=lambda doc: bool(_rate_headers(doc)),
            evidence=_rate_headers,
        ),
        Pattern(
            id="saas.sso_integration",
            name="SSO Integration",
            description="Single sign-on support",
            weight=0.65,
            detector=lambda doc: bool(_sso(doc)),
            evidence=_sso,
        ),
        Pattern(
            id="saas.data_isolation",
            name="Data Isolation Patterns",
            description="Tenant context on data endpoints",
            weight=0.8,
            detector=_isolated,
            evidence=lambda doc: [
                "{}/{} endpoints require tenant context".format(*_isolation_counts(doc))
            ],
        ),
    ),
)

FAMILIES: Mapping[str, PatternFamily] = {
    family.name: family for family in (SAAS_PATTERNS, GRPC_PATTERNS, REST_PATTERNS)
}

# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def _confidence(ranked: list[float]) -> float:
    top = ranked[0]
    gap = top - ranked[1] if len(ranked) > 1 else top
    confidence = top / 100
    if gap > 30:
        confidence = min(0.95, confidence * 1.2)
    elif gap < 10:
        confidence = max(0.5, confidence * 0.8)
    return round(confidence, 2)


def classify(doc: Any) -> Classification:
    """Score every family on *doc* and pick the strongest."""
    scores = {name: FAMILIES[name].calculate_score(doc) for name in FAMILY_ORDER}
    evidence = {name: tuple(FAMILIES[name].get_evidence(doc)) for name in FAMILY_ORDER}
    # max() keeps the first of equal scores, which is the tie-break order
    primary = max(FAMILY_ORDER, key=lambda name: scores[name])
    ranked = sorted(scores.values(), reverse=True)
    confidence = _confidence(ranked)
    logger.debug("Classified as %s (%.2f): %s", primary, confidence, scores)
    return Classification(scores=scores, evidence=evidence, primary=primary, confidence=confidence)


def unclassified() -> Classification:
    """The classification of a document nothing could be detected in."""
    return Classification(
        scores={name: 0.0 for name in FAMILY_ORDER},
        evidence={name: () for name in FAMILY_ORDER},
        primary=FAMILY_ORDER[0],
        confidence=_confidence([0.0 for _ in FAMILY_ORDER]),
    )


_VERBS_IN_PATH = re.compile(
    r"/(get|create|update|delete|fetch|list|remove|add)[A-Z_\-]?\w*(/|$)", re.IGNORECASE
)


def check_rest_best_practices(doc: Any) -> list[str]:
    """Advisory REST naming problems; an empty list means none were spotted."""
    advice: list[str] = []
    for path in _paths(doc):
        if _VERBS_IN_PATH.search(path):
            advice.append(f"{path}: avoid verbs in resource paths")
        if len(path) > 1 and path.endswith("/"):
            advice.append(f"{path}: remove the trailing slash")
        if not re.search(_VERSIONED, path + "/"):
            advice.append(f"{path}: path is not versioned")
    for path, _method, _item, _op in iter_operations(doc, ("post",)):
        segment = path.rstrip("/").rsplit("/", 1)[-1]
        if segment and not segment.startswith("{") and ":" not in segment and not segment.endswith("s"):
            advice.append(f"{path}: collection name '{segment}' should be plural")
    return advice
