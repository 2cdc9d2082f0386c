"""apigrader: score OpenAPI documents against a configurable quality standard."""

__version__ = "0.4.0"
