"""Shared test fixtures for apigrader."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture()
def best_practice_path() -> Path:
    return FIXTURES_DIR / "best_practice.yaml"


@pytest.fixture()
def best_practice_doc(best_practice_path: Path) -> dict[str, Any]:
    """A document that satisfies every rule and every checkpoint (fresh copy per test)."""
    with best_practice_path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


@pytest.fixture()
def minimal_doc() -> dict[str, Any]:
    """Structurally valid document with one tenant-scoped list endpoint and no x-api-id."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Widgets", "version": "1.0.0"},
        "components": {
            "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer"}},
            "parameters": {
                "OrganizationHeader": {
                    "name": "X-Organization-ID",
                    "in": "header",
                    "required": True,
                    "schema": {"type": "integer"},
                },
            },
        },
        "paths": {
            "/api/v2/widgets": {
                "get": {
                    "parameters": [{"$ref": "#/components/parameters/OrganizationHeader"}],
                    "responses": {"200": {"description": "ok"}},
                },
            },
        },
    }


@pytest.fixture()
def write_spec(tmp_path: Path) -> Any:
    """Dump a document to ``tmp_path`` and return the file path."""

    def _write(doc: Any, name: str = "spec.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
        return path

    return _write
