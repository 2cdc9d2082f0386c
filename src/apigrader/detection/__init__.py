"""API family detection and grading profiles."""

from apigrader.detection.patterns import (
    FAMILIES,
    Classification,
    Pattern,
    PatternFamily,
    check_rest_best_practices,
    classify,
)
from apigrader.detection.profiles import (
    PROFILES,
    GradingProfile,
    ProfilePrerequisites,
    get_profile,
    suggest_profile,
)

__all__ = [
    "FAMILIES",
    "PROFILES",
    "Classification",
    "GradingProfile",
    "Pattern",
    "PatternFamily",
    "ProfilePrerequisites",
    "check_rest_best_practices",
    "classify",
    "get_profile",
    "suggest_profile",
]
