"""oasmodel -- a typed object model for OpenAPI 3.x documents.

This package describes the shape of an OpenAPI 3.x document as a graph of
frozen Pydantic models (``OpenAPI``, ``Info``, ``PathItem``, ``Operation``,
``Schema``, ...) and ships the tooling needed to use that shape: loading
JSON/YAML documents, emitting them back out, following ``$ref`` pointers,
and checking the cross-field rules the OpenAPI text states but the shapes
deliberately do not enforce.

Typical usage::

    from oasmodel import load_document, validate_document, to_yaml

    doc = load_document("petstore.yaml")
    report = validate_document(doc)
    for issue in report.issues:
        print(issue.location, issue.message)
    print(to_yaml(doc))

Modules:
    models: The OpenAPI object model (the core of the package).
    serializer: Model -> dict / JSON / YAML.
    parser: Loading raw documents, building models, resolving references.
    validation: Invariant checks producing a :class:`ValidationReport`.
    exceptions: Exception hierarchy with exit-code mapping.
    config: XDG-aware settings for the command-line tool.
    app: Typer application and CLI entry point.
"""

from oasmodel.models import (
    OpenAPI,
    Operation,
    PathItem,
    Reference,
    ReferenceOr,
    Schema,
    is_reference,
)
from oasmodel.parser import load_document, load_spec, parse_document
from oasmodel.serializer import to_dict, to_json, to_yaml
from oasmodel.validation import ValidationReport, validate_document, validate_raw

__version__ = "0.1.0"

__all__ = [
    "OpenAPI",
    "Operation",
    "PathItem",
    "Reference",
    "ReferenceOr",
    "Schema",
    "ValidationReport",
    "is_reference",
    "load_document",
    "load_spec",
    "parse_document",
    "to_dict",
    "to_json",
    "to_yaml",
    "validate_document",
    "validate_raw",
]
