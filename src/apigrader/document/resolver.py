"""Reference resolution and the effective-parameter view over a parsed document.

The document is a plain JSON-compatible tree (dicts, lists, scalars). Nothing
here mutates it and nothing here raises on a missing key: lookups that fall
off the tree return :data:`MISSING`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

# ---------------------------------------------------------------------------
# Absent sentinel
# ---------------------------------------------------------------------------


class _Missing:
    """Falsy singleton marking an absent node (distinct from a JSON ``null``)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)
WRITE_METHODS: frozenset[str] = frozenset({"post", "put", "patch", "delete"})

_MAX_REF_HOPS = 16

# ---------------------------------------------------------------------------
# Pointer resolution
# ---------------------------------------------------------------------------


def parse_pointer(ref: str) -> list[str] | None:
    """Split a local fragment pointer (``#/a/b/c``) into decoded segments.

    Returns ``None`` for anything that is not a local pointer (remote refs,
    bare names, non-strings). ``#`` alone yields an empty list (the root).
    """
    if not isinstance(ref, str) or not ref.startswith("#"):
        return None
    body = ref[1:]
    if body == "":
        return []
    if not body.startswith("/"):
        return None
    return [seg.replace("~1", "/").replace("~0", "~") for seg in body[1:].split("/")]


def _step(node: Any, segment: str) -> Any:
    if isinstance(node, dict):
        return node.get(segment, MISSING)
    if isinstance(node, list):
        if not segment.isdigit():
            return MISSING
        index = int(segment)
        return node[index] if index < len(node) else MISSING
    return MISSING


def resolve_ref(doc: Any, ref: str) -> Any:
    """Walk *ref* through *doc*, returning :data:`MISSING` on any miss."""
    segments = parse_pointer(ref)
    if segments is None:
        return MISSING
    node = doc
    for segment in segments:
        node = _step(node, segment)
        if node is MISSING:
            return MISSING
    return node


def get_in(node: Any, *keys: str | int) -> Any:
    """Safe nested lookup: ``get_in(doc, "info", "title")``."""
    for key in keys:
        if isinstance(node, dict):
            node = node.get(key, MISSING)
        elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
            node = node[key]
        else:
            return MISSING
        if node is MISSING:
            return MISSING
    return node


def iter_strings(node: Any) -> Iterator[str]:
    """Every string key and value in the tree.

    Non-string keys (YAML turns ``2024-01-01:`` into a date) are skipped,
    their values are not.
    """
    if isinstance(node, str):
        yield node
    elif isinstance(node, dict):
        for key, value in node.items():
            if isinstance(key, str):
                yield key
            yield from iter_strings(value)
    elif isinstance(node, list):
        for value in node:
            yield from iter_strings(value)


def is_ref(node: Any) -> bool:
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


def ref_tail(ref: str) -> str:
    """Last segment of a pointer: ``#/components/parameters/Limit`` -> ``Limit``."""
    return ref.rsplit("/", 1)[-1]


def deref(doc: Any, node: Any) -> Any:
    """Follow ``$ref`` chains from *node*; returns :data:`MISSING` if one dangles.

    Chains longer than a fixed hop limit are treated as dangling, which also
    stops reference cycles.
    """
    for _ in range(_MAX_REF_HOPS):
        if not is_ref(node):
            return node
        node = resolve_ref(doc, node["$ref"])
    return MISSING if is_ref(node) else node


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def iter_paths(doc: Any) -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(path, path_item)`` for every mapping under ``paths``."""
    paths = get_in(doc, "paths")
    if not isinstance(paths, dict):
        return
    for path, item in paths.items():
        if isinstance(item, dict):
            yield str(path), item


def iter_operations(
    doc: Any,
    methods: Iterable[str] = HTTP_METHODS,
) -> Iterator[tuple[str, str, dict[str, Any], dict[str, Any]]]:
    """Yield ``(path, method, path_item, operation)`` in document order."""
    wanted = frozenset(methods)
    for path, item in iter_paths(doc):
        for method, operation in item.items():
            if method in wanted and isinstance(operation, dict):
                yield path, method, item, operation


def find_operation(doc: Any, path: str, method: str) -> tuple[dict[str, Any], dict[str, Any]] | None:
    """Return ``(path_item, operation)`` for *path* and *method*, or ``None``."""
    item = get_in(doc, "paths", path)
    if not isinstance(item, dict):
        return None
    operation = item.get(method)
    if not isinstance(operation, dict):
        return None
    return item, operation


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


def _param_keys(param: Any, doc: Any) -> set[str]:
    """Identity keys of a parameter: its ``$ref`` tail and its resolved name."""
    keys: set[str] = set()
    if is_ref(param):
        keys.add(ref_tail(param["$ref"]))
        if doc is not None:
            resolved = deref(doc, param)
            if isinstance(resolved, dict) and isinstance(resolved.get("name"), str):
                keys.add(resolved["name"])
    elif isinstance(param, dict) and isinstance(param.get("name"), str):
        keys.add(param["name"])
    return keys


def _param_list(node: Any) -> list[Any]:
    params = get_in(node, "parameters")
    if not isinstance(params, list):
        return []
    return [p for p in params if isinstance(p, dict)]


def resolve_effective_parameters(
    path_item: Any,
    operation: Any,
    doc: Any = None,
) -> list[dict[str, Any]]:
    """Return the parameters an operation actually receives.

    Path-level parameters come first, in declaration order, minus any that an
    operation-level parameter overrides by name or by reference. All
    operation-level parameters follow, in declaration order. When *doc* is
    given, referenced parameters are also compared by their resolved name.
    """
    op_params = _param_list(operation)
    overriding: set[str] = set()
    for param in op_params:
        overriding |= _param_keys(param, doc)

    inherited = [
        p for p in _param_list(path_item) if not (_param_keys(p, doc) & overriding)
    ]
    return inherited + op_params


def has_parameter(
    doc: Any,
    path_item: Any,
    operation: Any,
    name: str,
    location: str | None = None,
) -> bool:
    """Return True if the effective parameters include *name*.

    A ``$ref`` parameter matches when the pointer is *name* itself, ends with
    ``/name``, or resolves to a parameter called *name*. When *location* is
    given (``query``, ``header``...), a resolvable parameter must also
    declare that ``in`` value.
    """
    for param in resolve_effective_parameters(path_item, operation, doc):
        resolved = deref(doc, param)
        if is_ref(param):
            ref = param["$ref"]
            matched = ref == name or ref.endswith("/" + name)
            if not matched and isinstance(resolved, dict):
                matched = resolved.get("name") == name
        else:
            matched = param.get("name") == name
        if not matched:
            continue
        if location is None or not isinstance(resolved, dict):
            return True
        if resolved.get("in") == location:
            return True
    return False


def parameter_names(
    doc: Any,
    path_item: Any,
    operation: Any,
    location: str | None = None,
) -> list[str]:
    """Resolved names of the effective parameters, optionally filtered by ``in``."""
    names: list[str] = []
    for param in resolve_effective_parameters(path_item, operation, doc):
        resolved = deref(doc, param)
        if not isinstance(resolved, dict) or not isinstance(resolved.get("name"), str):
            continue
        if location is not None and resolved.get("in") != location:
            continue
        names.append(resolved["name"])
    return names


# ---------------------------------------------------------------------------
# Responses and media
# ---------------------------------------------------------------------------


def resolve_response(doc: Any, response: Any) -> Any:
    """Resolve a possibly-referenced response object."""
    return deref(doc, response)


def responses_of(operation: Any) -> dict[str, Any]:
    """An operation's responses keyed by status code string.

    YAML reads unquoted codes (``200:``) as integers; keys are normalized so
    lookups by ``"200"`` work either way.
    """
    responses = get_in(operation, "responses")
    if not isinstance(responses, dict):
        return {}
    return {str(code): response for code, response in responses.items()}


def iter_responses(doc: Any, operation: Any) -> Iterator[tuple[str, Any]]:
    """Yield ``(status_code, resolved_response)`` for an operation."""
    for code, response in responses_of(operation).items():
        yield code, resolve_response(doc, response)


def has_response_header(doc: Any, response: Any, name: str) -> bool:
    """Return True if the (resolved) response declares header *name*.

    A referenced header counts as present without following it further; an
    inline header needs a ``schema`` or a ``description``.
    """
    headers = get_in(resolve_response(doc, response), "headers")
    if not isinstance(headers, dict) or name not in headers:
        return False
    header = headers[name]
    if is_ref(header):
        return True
    return isinstance(header, dict) and ("schema" in header or "description" in header)


def has_problem_json(doc: Any, response: Any) -> bool:
    content = get_in(resolve_response(doc, response), "content")
    return isinstance(content, dict) and "application/problem+json" in content


def media_type(doc: Any, owner: Any, mime: str = "application/json") -> Any:
    """Media type object for *mime* under a (resolved) request body or response."""
    return get_in(deref(doc, owner), "content", mime)


def json_schema(doc: Any, owner: Any) -> Any:
    """The ``application/json`` schema of a request body or response, unresolved."""
    return get_in(media_type(doc, owner), "schema")
