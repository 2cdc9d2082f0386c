"""Document access: reference resolution, parameter inheritance, file loading."""

from apigrader.document.loader import LoadError, load_document
from apigrader.document.resolver import (
    HTTP_METHODS,
    MISSING,
    WRITE_METHODS,
    deref,
    get_in,
    has_parameter,
    has_problem_json,
    has_response_header,
    iter_operations,
    parse_pointer,
    resolve_effective_parameters,
    resolve_ref,
    resolve_response,
)

__all__ = [
    "HTTP_METHODS",
    "MISSING",
    "WRITE_METHODS",
    "LoadError",
    "deref",
    "get_in",
    "has_parameter",
    "has_problem_json",
    "has_response_header",
    "iter_operations",
    "load_document",
    "parse_pointer",
    "resolve_effective_parameters",
    "resolve_ref",
    "resolve_response",
]
