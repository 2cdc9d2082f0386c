"""Read an API specification file into a plain tree for the grading core."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class LoadError(Exception):
    """Raised when a specification file cannot be read or decoded."""


def load_document(path: Path) -> dict[str, Any]:
    """Parse a YAML or JSON specification file.

    JSON is a subset of YAML, so both go through ``yaml.safe_load``. The
    root must be a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise LoadError(msg) from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Cannot parse {path}: {exc}"
        raise LoadError(msg) from exc

    if not isinstance(data, dict):
        msg = f"{path}: document root must be a mapping, got {type(data).__name__}"
        raise LoadError(msg)

    logger.debug("Loaded %s (%d top-level keys)", path, len(data))
    return data
