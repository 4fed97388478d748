"""Follow ``$ref`` JSON Reference pointers in raw documents and in models.

OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. This module
works on both representations:

* :func:`resolve_refs` -- raw-dict level. Deep-copies the document and
  inlines every internal ``$ref``. Circular references are detected via a
  ``seen`` set and left unresolved at the cycle point.
* :func:`resolve_reference` -- model level. Follows one
  :class:`~oasmodel.models.Reference` (and any chain of references behind
  it) inside a parsed :class:`~oasmodel.models.OpenAPI` document and
  returns the concrete object. Cycles raise
  :class:`~oasmodel.exceptions.CyclicReferenceError` instead of recursing.
* :func:`iter_references` -- yields every Reference in a model with its
  dotted location.

Only **internal** references (those starting with ``#/``) are followed.
External file or URL references raise
:class:`~oasmodel.exceptions.UnresolvedReferenceError`.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator, Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, RootModel

from oasmodel.exceptions import (
    CyclicReferenceError,
    ShapeMismatchError,
    UnresolvedReferenceError,
)
from oasmodel.models import REF_KEY, Reference, is_reference

logger = logging.getLogger(__name__)


def _pointer_segments(ref: str) -> list[str]:
    """Split an internal ``#/a/b~1c`` reference into unescaped segments.

    Raises:
        UnresolvedReferenceError: If the reference is not internal.
    """
    if not ref.startswith("#/"):
        raise UnresolvedReferenceError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )
    # RFC 6901: '~1' is '/', '~0' is '~', in that order
    return [seg.replace("~1", "/").replace("~0", "~") for seg in ref[2:].split("/")]


# --- Raw documents ---


def resolve_pointer(root: dict[str, Any], ref: str) -> Any:
    """Resolve a single ``$ref`` string against a raw document.

    Args:
        ref: The ``$ref`` string (e.g. ``"#/components/schemas/Pet"``).
        root: The root document dictionary to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        UnresolvedReferenceError: If the reference is external or any
            segment of the pointer does not exist in the document.
    """
    current: Any = root
    for segment in _pointer_segments(ref):
        if isinstance(current, dict):
            if segment not in current:
                raise UnresolvedReferenceError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise UnresolvedReferenceError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise UnresolvedReferenceError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *spec* with every internal ``$ref`` inlined.

    Circular references are left unresolved (the ``$ref`` dict is kept
    as-is at the cycle point) to prevent infinite recursion.

    Raises:
        UnresolvedReferenceError: If a ``$ref`` points to a non-existent
            path, or an external reference is encountered.

    Example::

        raw = load_spec("petstore.yaml")
        resolved = resolve_refs(raw)
        # resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"]
        # now contains the inlined schema instead of a $ref pointer.
    """
    root = copy.deepcopy(spec)
    return _deep_resolve(root, root, seen=None)


def _deep_resolve(obj: Any, root: dict[str, Any], seen: set[str] | None = None) -> Any:
    """Recursively resolve all ``$ref`` pointers within *obj*.

    ``seen`` holds the references on the current resolution stack; a
    **copy** is made at each branch so sibling references do not interfere.
    """
    if seen is None:
        seen = set()

    if isinstance(obj, dict):
        if REF_KEY in obj and isinstance(obj[REF_KEY], str):
            ref = obj[REF_KEY]
            if ref in seen:
                return obj
            resolved = resolve_pointer(root, ref)
            return _deep_resolve(resolved, root, seen | {ref})
        return {key: _deep_resolve(value, root, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, seen) for item in obj]

    return obj


# --- Parsed models ---


def _field_by_wire_name(model: BaseModel, name: str) -> tuple[bool, Any]:
    """Look up a model attribute by its wire name (alias) or extension key."""
    for field_name, info in type(model).model_fields.items():
        if field_name == "extensions":
            continue
        if (info.alias or field_name) == name:
            return True, getattr(model, field_name)
    extra = model.model_extra or {}
    if name in extra:
        return True, extra[name]
    extensions = getattr(model, "extensions", None)
    if isinstance(extensions, Mapping) and name in extensions:
        return True, extensions[name]
    return False, None


def _step(node: Any, segment: str) -> tuple[bool, Any]:
    if isinstance(node, RootModel):
        node = node.root
    if isinstance(node, BaseModel):
        return _field_by_wire_name(node, segment)
    if isinstance(node, Mapping):
        return (segment in node), node.get(segment)
    if isinstance(node, (list, tuple)):
        try:
            return True, node[int(segment)]
        except (ValueError, IndexError):
            return False, None
    return False, None


def lookup_pointer(document: BaseModel, ref: str) -> Any:
    """Walk an internal JSON pointer through a parsed model.

    Segments match wire names (``requestBodies``, not ``request_bodies``).
    The value at the end of the pointer is returned as-is, even if it is
    itself a :class:`~oasmodel.models.Reference`.

    Raises:
        UnresolvedReferenceError: If the pointer is external or leads nowhere.
    """
    current: Any = document
    for segment in _pointer_segments(ref):
        found, current = _step(current, segment)
        if not found or current is None:
            raise UnresolvedReferenceError(
                f"Cannot resolve $ref '{ref}': '{segment}' not found"
            )
    return current


def resolve_reference(
    document: BaseModel,
    value: Any,
    expected: Optional[Union[type, tuple[type, ...]]] = None,
) -> Any:
    """Return the concrete object behind *value*.

    Non-reference values are returned unchanged. A
    :class:`~oasmodel.models.Reference` is followed through *document*;
    if the target is itself a reference, that one is followed too, while
    a visited set guards against loops.

    Args:
        document: The parsed document the reference points into.
        value: A value from a :data:`~oasmodel.models.ReferenceOr` slot.
        expected: Optional type (or tuple of types) the final target must be.

    Raises:
        UnresolvedReferenceError: The pointer is external or leads nowhere.
        CyclicReferenceError: Following the chain revisits a reference.
        ShapeMismatchError: The target is not an instance of *expected*.

    Example::

        param = resolve_reference(doc, op.parameters[0], expected=Parameter)
    """
    visited: list[str] = []
    current = value
    while isinstance(current, Reference):
        if current.ref in visited:
            chain = " -> ".join([*visited, current.ref])
            raise CyclicReferenceError(f"Circular $ref chain: {chain}", location=current.ref)
        visited.append(current.ref)
        try:
            current = lookup_pointer(document, current.ref)
        except UnresolvedReferenceError as exc:
            raise UnresolvedReferenceError(str(exc), location=visited[-1]) from exc
        if is_reference(current) and not isinstance(current, Reference):
            current = Reference.model_validate(current)

    if visited:
        logger.debug("Resolved %s", " -> ".join(visited))

    if expected is not None and not isinstance(current, expected):
        names = (
            ", ".join(t.__name__ for t in expected)
            if isinstance(expected, tuple)
            else expected.__name__
        )
        raise ShapeMismatchError(
            f"$ref '{visited[0] if visited else '<inline>'}' resolves to "
            f"{type(current).__name__}, expected {names}",
            location=visited[0] if visited else None,
        )
    return current


def iter_references(value: Any, location: str = "") -> Iterator[tuple[str, Reference]]:
    """Yield ``(location, reference)`` for every Reference inside *value*.

    Locations use wire names and the dotted format of
    :func:`~oasmodel.parser.loader.format_location`.
    """
    if isinstance(value, Reference):
        yield location, value
        return
    if isinstance(value, RootModel):
        yield from iter_references(value.root, location)
        return
    if isinstance(value, BaseModel):
        for field_name, info in type(value).model_fields.items():
            child = getattr(value, field_name)
            if child is None or field_name == "extensions":
                continue
            yield from iter_references(child, _join(location, info.alias or field_name))
        return
    if isinstance(value, Mapping):
        for key, child in value.items():
            yield from iter_references(child, _join(location, str(key)))
        return
    if isinstance(value, (list, tuple)):
        for index, child in enumerate(value):
            yield from iter_references(child, f"{location}[{index}]")


def _join(location: str, key: str) -> str:
    return f"{location}.{key}" if location else key
