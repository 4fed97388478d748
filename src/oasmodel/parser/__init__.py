"""Document parser -- load raw documents, build models, resolve ``$ref`` pointers.

Typical usage::

    from oasmodel.parser import load_spec, validate_openapi_version, parse_document

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    validate_openapi_version(raw)
    doc = parse_document(raw)

Sub-modules:

* :mod:`~oasmodel.parser.loader` -- I/O layer (URL, file, stdin), format
  detection, version validation and model construction.
* :mod:`~oasmodel.parser.resolver` -- ``$ref`` resolution for raw dicts and
  parsed models, with circular-reference detection.
"""

from oasmodel.parser.loader import (
    load_document,
    load_spec,
    parse_document,
    validate_openapi_version,
)
from oasmodel.parser.resolver import iter_references, resolve_reference, resolve_refs

__all__ = [
    "iter_references",
    "load_document",
    "load_spec",
    "parse_document",
    "resolve_reference",
    "resolve_refs",
    "validate_openapi_version",
]
