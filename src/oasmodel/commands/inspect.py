"""Inspect commands -- examine a document's contents.

Provides the ``oasmodel inspect`` sub-command group with read-only
commands for viewing the contents of an OpenAPI document: operations,
component schemas, security schemes, and general API info. Every
sub-command takes the document source as its argument and presents the
data in table or structured output format.
"""

from __future__ import annotations

from typing import Any

import typer

from oasmodel.commands.common import load_source
from oasmodel.models import Reference, Schema, SecurityScheme
from oasmodel.output import format_response, get_output, info

inspect_app = typer.Typer(no_args_is_help=True)

_SOURCE_HELP = "Document URL, file path, or '-' for stdin."


@inspect_app.command("paths")
def inspect_paths(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List every operation.

    Displays a table with the HTTP method, path, operationId, summary and
    deprecation status of each operation, in document order.

    Example::

        oasmodel inspect paths petstore.yaml
    """
    document = load_source(source)

    headers = ["Method", "Path", "Operation ID", "Summary", "Deprecated"]
    rows: list[list[str]] = []
    for path, method, operation in document.operations():
        rows.append([
            method.value.upper(),
            path,
            operation.operation_id or "-",
            operation.summary or "-",
            "Yes" if operation.is_deprecated else "",
        ])

    get_output().print_table(
        headers, rows, title=f"{document.info.title} -- Paths ({len(rows)})"
    )


def _describe_schema(schema: Any) -> tuple[str, str]:
    """Return ``(type, properties)`` cells for a component schema entry."""
    if isinstance(schema, Reference):
        return f"-> {schema.ref}", ""
    assert isinstance(schema, Schema)
    if isinstance(schema.type, list):
        schema_type = "|".join(schema.type)
    elif schema.type is not None:
        schema_type = schema.type
    elif schema.all_of or schema.one_of or schema.any_of:
        schema_type = "composite"
    else:
        schema_type = "object" if schema.properties else "any"
    prop_names = list(schema.properties or {})
    props = ", ".join(prop_names[:5])
    if len(prop_names) > 5:
        props += "..."
    return schema_type, props


@inspect_app.command("schemas")
def inspect_schemas(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List the schemas under ``components.schemas``.

    Shows each schema's type and up to five property names. References
    are shown with their target.

    Example::

        oasmodel inspect schemas petstore.yaml
    """
    document = load_source(source)
    schemas = document.components.schemas if document.components else None
    if not schemas:
        info("No schemas defined in this document.")
        return

    rows: list[list[str]] = []
    for name, schema in sorted(schemas.items()):
        schema_type, props = _describe_schema(schema)
        rows.append([name, schema_type, props])

    get_output().print_table(
        ["Schema", "Type", "Properties"], rows, title=f"Schemas ({len(rows)})"
    )


@inspect_app.command("security")
def inspect_security(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """Show the security schemes under ``components.securitySchemes``.

    Example::

        oasmodel inspect security petstore.yaml
    """
    document = load_source(source)
    schemes = document.components.security_schemes if document.components else None
    if not schemes:
        info("No security schemes defined.")
        return

    headers = ["Name", "Type", "Scheme", "Location", "Description"]
    rows: list[list[str]] = []
    for name, scheme in schemes.items():
        if isinstance(scheme, SecurityScheme):
            rows.append([
                name,
                scheme.type,
                scheme.scheme or "-",
                scheme.in_ or "-",
                (scheme.description or "-")[:60],
            ])
        else:
            rows.append([name, f"-> {scheme.ref}", "-", "-", "-"])

    get_output().print_table(headers, rows, title="Security Schemes")


@inspect_app.command("info")
def inspect_info(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """Show API info (title, version, servers, counts).

    Example::

        oasmodel inspect info petstore.yaml
    """
    document = load_source(source)
    components = document.components

    data: dict[str, Any] = {
        "title": document.info.title,
        "version": document.info.version,
        "openapi_version": document.openapi,
        "description": document.info.description or "-",
        "servers": [server.url for server in document.effective_servers],
        "paths": len(document.paths),
        "operations": sum(1 for _ in document.operations()),
        "schemas": len(components.schemas or {}) if components else 0,
        "security_schemes": list((components.security_schemes or {}) if components else []),
    }
    if document.info.contact is not None and document.info.contact.email:
        data["contact"] = document.info.contact.email
    if document.info.license is not None:
        data["license"] = document.info.license.name

    format_response(data)
