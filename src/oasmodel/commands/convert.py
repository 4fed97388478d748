"""Convert command -- parse a document and emit it as YAML or JSON."""

from __future__ import annotations

from typing import Optional

import typer

from oasmodel.commands.common import exit_with, get_settings
from oasmodel.config import DOCUMENT_FORMATS
from oasmodel.exceptions import InvalidUsageError, OasModelError
from oasmodel.output import print_document
from oasmodel.parser import load_spec, parse_document, resolve_refs, validate_openapi_version
from oasmodel.serializer import to_json, to_yaml


def convert_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document URL, file path, or '-' for stdin."),
    to: Optional[str] = typer.Option(
        None, "--to", "-t", help="Target format: yaml or json."
    ),
    inline_refs: bool = typer.Option(
        False, "--inline-refs", help="Replace internal $ref pointers by their targets."
    ),
) -> None:
    """Re-emit a document through the object model.

    Fields are written with their OpenAPI names, absent fields are omitted
    and vendor extensions stay inline. Use the global ``-o`` option to
    write to a file.

    Example::

        oasmodel convert petstore.json --to yaml
        oasmodel -o petstore.json convert petstore.yaml --to json
    """
    output_settings = get_settings(ctx).output
    target = to or output_settings.document_format
    if target not in DOCUMENT_FORMATS:
        exit_with(
            InvalidUsageError(f"Unknown format '{target}'. Use one of: {', '.join(DOCUMENT_FORMATS)}")
        )

    try:
        raw = load_spec(source)
        validate_openapi_version(raw)
        if inline_refs:
            raw = resolve_refs(raw)
        document = parse_document(raw)
    except OasModelError as exc:
        exit_with(exc)

    if target == "json":
        print_document(to_json(document, indent=output_settings.json_indent or None), "json")
    else:
        print_document(to_yaml(document, indent=output_settings.yaml_indent), "yaml")
