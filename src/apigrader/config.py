"""Grading configuration: category weights, passing threshold, and load-time validation.

Weights are validated once, when the configuration is built. Grading calls
receive an already-valid :class:`GradingConfig` and never raise on it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SCORED_CATEGORIES: tuple[str, ...] = (
    "functionality",
    "security",
    "scalability",
    "maintainability",
    "excellence",
)
VALID_CATEGORIES: frozenset[str] = frozenset({*SCORED_CATEGORIES, "prerequisite"})

DEFAULT_CATEGORY_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "functionality": 0.30,
        "security": 0.25,
        "scalability": 0.20,
        "maintainability": 0.15,
        "excellence": 0.10,
    }
)
DEFAULT_PASSING_SCORE = 70
DEFAULT_CONFIG_NAME = "apigrader.yml"

WEIGHT_TOLERANCE = 1e-6


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigurationError(Exception):
    """Raised when weights, categories, or the rule catalogue are malformed."""


class DependencyCycleError(ConfigurationError):
    """Raised when rule dependencies form a cycle."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_weights(weights: Mapping[str, Any]) -> dict[str, float]:
    """Check a category weight mapping and return it as plain floats.

    Every scored category must be present, no unknown category may appear,
    no weight may be negative, and the weights must sum to 1.0.
    """
    unknown = sorted(set(weights) - set(SCORED_CATEGORIES))
    if unknown:
        msg = f"Unknown grading categories: {', '.join(unknown)}"
        raise ConfigurationError(msg)

    missing = [c for c in SCORED_CATEGORIES if c not in weights]
    if missing:
        msg = f"Missing weights for categories: {', '.join(missing)}"
        raise ConfigurationError(msg)

    result: dict[str, float] = {}
    for category in SCORED_CATEGORIES:
        raw = weights[category]
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            msg = f"Weight for '{category}' must be a number, got {raw!r}"
            raise ConfigurationError(msg)
        if raw < 0:
            msg = f"Weight for '{category}' must not be negative, got {raw}"
            raise ConfigurationError(msg)
        result[category] = float(raw)

    total = sum(result.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        msg = f"Category weights must sum to 1.0, got {total:.4f}"
        raise ConfigurationError(msg)
    return result


def validate_passing_score(value: Any) -> int:
    """Check the passing threshold is an integer in [0, 100]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"passing_score must be a number, got {value!r}"
        raise ConfigurationError(msg)
    if not 0 <= value <= 100:
        msg = f"passing_score must be between 0 and 100, got {value}"
        raise ConfigurationError(msg)
    return int(value)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GradingConfig:
    """Category weights and passing threshold used by the grade calculator."""

    category_weights: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_CATEGORY_WEIGHTS
    )
    passing_score: int = DEFAULT_PASSING_SCORE

    def __post_init__(self) -> None:
        checked = validate_weights(self.category_weights)
        object.__setattr__(self, "category_weights", MappingProxyType(checked))
        object.__setattr__(self, "passing_score", validate_passing_score(self.passing_score))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GradingConfig:
        """Build a config from a ``grading`` section, filling gaps with defaults.

        A partial ``weights`` mapping is rejected rather than merged, since
        merging would almost never sum to 1.0.
        """
        weights = data.get("weights", DEFAULT_CATEGORY_WEIGHTS)
        if not isinstance(weights, Mapping):
            msg = "grading.weights must be a mapping"
            raise ConfigurationError(msg)
        passing = data.get("passing_score", DEFAULT_PASSING_SCORE)
        return cls(category_weights=weights, passing_score=passing)

    def to_dict(self) -> dict[str, Any]:
        return {
            "weights": dict(self.category_weights),
            "passing_score": self.passing_score,
        }


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_grading_config(path: Path | None = None) -> GradingConfig:
    """Load grading settings from the ``grading`` section of a YAML file.

    Falls back to defaults when the file is missing, unreadable, or has no
    ``grading`` section. An invalid ``grading`` section raises
    :class:`ConfigurationError`.
    """
    config_path = path if path is not None else Path.cwd() / DEFAULT_CONFIG_NAME
    if not config_path.is_file():
        return GradingConfig()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using default grading config", config_path)
        return GradingConfig()

    if not isinstance(data, dict):
        return GradingConfig()

    section = data.get("grading")
    if section is None:
        return GradingConfig()
    if not isinstance(section, dict):
        msg = f"{config_path}: 'grading' must be a mapping"
        raise ConfigurationError(msg)

    return GradingConfig.from_mapping(section)
