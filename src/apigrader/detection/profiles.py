"""Grading profiles: which prerequisites and rules apply to an API type."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from apigrader.detection.patterns import classify

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from apigrader.detection.patterns import Classification
    from apigrader.rules.model import Rule

logger = logging.getLogger(__name__)

PROFILE_TYPES: tuple[str, ...] = ("Enterprise_SaaS", "REST", "GraphQL", "Microservice", "Custom")

# Below this family score a document gets the relaxed internal profile.
MIN_FAMILY_SCORE = 30.0


@dataclass(frozen=True)
class ProfilePrerequisites:
    requires_authentication: bool = True
    requires_multi_tenant_headers: bool = False
    requires_api_id: bool = True
    custom_prerequisites: tuple[str, ...] = ()


@dataclass(frozen=True)
class GradingProfile:
    """A named set of gate requirements and rule exclusions for one kind of API."""

    id: str
    name: str
    type: str
    description: str
    prerequisites: ProfilePrerequisites
    disabled_rules: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "prerequisites": {
                "requires_authentication": self.prerequisites.requires_authentication,
                "requires_multi_tenant_headers": self.prerequisites.requires_multi_tenant_headers,
                "requires_api_id": self.prerequisites.requires_api_id,
                "custom_prerequisites": list(self.prerequisites.custom_prerequisites),
            },
            "disabled_rules": list(self.disabled_rules),
        }


ENTERPRISE_SAAS = GradingProfile(
    id="enterprise-saas",
    name="Enterprise Multi-Tenant SaaS",
    type="Enterprise_SaaS",
    description="Multi-tenant SaaS APIs with strict tenancy and authorization requirements",
    prerequisites=ProfilePrerequisites(
        requires_authentication=True,
        requires_multi_tenant_headers=True,
        requires_api_id=True,
        custom_prerequisites=("multi-tenant-isolation", "rbac-scopes"),
    ),
)
REST_API = GradingProfile(
    id="rest",
    name="Simple REST API",
    type="REST",
    description="Standard REST APIs without multi-tenancy",
    prerequisites=ProfilePrerequisites(requires_multi_tenant_headers=False),
    disabled_rules=("SEC-002",),
)
GRAPHQL_API = GradingProfile(
    id="graphql",
    name="GraphQL API",
    type="GraphQL",
    description="Schema-first GraphQL APIs",
    prerequisites=ProfilePrerequisites(
        custom_prerequisites=("graphql-schema", "introspection-control"),
    ),
)
MICROSERVICE_API = GradingProfile(
    id="microservice",
    name="Microservice API",
    type="Microservice",
    description="Internal microservices behind a service mesh",
    prerequisites=ProfilePrerequisites(
        custom_prerequisites=("health-endpoints", "tracing-headers"),
    ),
)
INTERNAL_TOOL = GradingProfile(
    id="internal",
    name="Internal Tool API",
    type="Custom",
    description="Internal tools and utilities with relaxed requirements",
    prerequisites=ProfilePrerequisites(requires_authentication=False),
    disabled_rules=("SEC-002",),
)

PROFILES: Mapping[str, GradingProfile] = MappingProxyType(
    {
        p.id: p
        for p in (ENTERPRISE_SAAS, REST_API, GRAPHQL_API, MICROSERVICE_API, INTERNAL_TOOL)
    }
)

_FAMILY_PROFILES: Mapping[str, GradingProfile] = MappingProxyType(
    {"saas": ENTERPRISE_SAAS, "grpc": MICROSERVICE_API, "rest": REST_API}
)


def get_profile(profile_id: str) -> GradingProfile:
    """Look up a profile by id.

    Raises:
        KeyError: If no profile has that id.
    """
    try:
        return PROFILES[profile_id]
    except KeyError:
        msg = f"Unknown profile '{profile_id}'. Available: {', '.join(PROFILES)}"
        raise KeyError(msg) from None


def profile_for_classification(classification: Classification) -> GradingProfile:
    if classification.scores[classification.primary] < MIN_FAMILY_SCORE:
        return INTERNAL_TOOL
    return _FAMILY_PROFILES[classification.primary]


def excluded_rules(
    profile: GradingProfile | None,
    rules: Iterable[Rule],
    skipped_prerequisites: Iterable[str] = (),
) -> dict[str, str]:
    """Rules that do not apply under *profile*, mapped to the reason.

    A rule is excluded when the profile disables it or when it depends on a
    prerequisite the gate skipped for this profile.
    """
    disabled = set(profile.disabled_rules) if profile is not None else set()
    skipped = set(skipped_prerequisites)
    owner = f"the {profile.name} profile" if profile is not None else "the prerequisite gate"
    excluded: dict[str, str] = {}
    for rule in rules:
        if rule.id in disabled:
            excluded[rule.id] = f"Disabled by {owner}"
            continue
        waived = sorted(skipped.intersection(rule.depends_on))
        if waived:
            excluded[rule.id] = f"Not required by {owner}: {', '.join(waived)} skipped"
    return excluded


def suggest_profile(doc: Any) -> GradingProfile:
    """Pick a profile from the document's strongest pattern family."""
    classification = classify(doc)
    profile = profile_for_classification(classification)
    logger.debug(
        "Suggested profile %s (%s, confidence %.2f)",
        profile.id,
        classification.primary,
        classification.confidence,
    )
    return profile
