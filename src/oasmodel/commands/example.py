"""Example command -- print a small sample document.

The sample is built from the model classes directly (not parsed from
text), so it doubles as a usage example of the object model.
"""

from __future__ import annotations

import typer

from oasmodel.models import (
    Info,
    OpenAPI,
    Operation,
    Parameter,
    PathItem,
    Server,
    ServerVariable,
)
from oasmodel.output import print_document
from oasmodel.serializer import to_json, to_yaml


def build_example_document() -> OpenAPI:
    """Return a one-path ``myapi`` document with two servers.

    ``GET /records`` is deprecated and takes a single cookie parameter
    whose ``required`` flag is left unset.
    """
    return OpenAPI(
        openapi="3.0.0",
        info=Info(title="myapi", version="1.0"),
        servers=[
            Server(url="http://testapi.example.org"),
            Server(
                url="https://api.example.org",
                description="This is the production api",
                variables={
                    "some": ServerVariable(
                        default="100",
                        description="some number",
                        enum=["100", "200"],
                    ),
                },
            ),
        ],
        paths={
            "/records": PathItem(
                description="this is the gets records",
                summary="This path does something very cool",
                get=Operation(
                    tags=["tag1"],
                    summary="this is a summary",
                    deprecated=True,
                    operation_id="someid",
                    parameters=[Parameter(name="param1", in_="cookie")],
                ),
            ),
        },
    )


def example_command(
    json_format: bool = typer.Option(False, "--as-json", help="Emit JSON instead of YAML."),
) -> None:
    """Print the sample document.

    Example::

        oasmodel example
        oasmodel example --as-json > myapi.json
    """
    document = build_example_document()
    if json_format:
        print_document(to_json(document), "json")
    else:
        print_document(to_yaml(document), "yaml")
