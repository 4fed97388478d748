"""Validate command -- check a document and report every issue.

``oasmodel validate SOURCE`` loads the document, checks its shape and the
cross-field rules of :mod:`oasmodel.validation`, and prints one table row
per issue. The exit code is 0 for a clean document (or when no issue kind
is listed in ``validation.fail_on``) and otherwise the exit code of the
first failing issue's error class.
"""

from __future__ import annotations

from typing import Optional

import typer
from pydantic import ValidationError

from oasmodel.commands.common import exit_with, get_settings
from oasmodel.config import ValidationSettings
from oasmodel.exceptions import InvalidUsageError, OasModelError
from oasmodel.output import print_table, success, warning
from oasmodel.parser import load_spec, validate_openapi_version
from oasmodel.validation import ValidationReport, validate_raw


def validate_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document URL, file path, or '-' for stdin."),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Comma-separated issue kinds that cause a non-zero exit.",
    ),
    allow_external_refs: Optional[bool] = typer.Option(
        None,
        "--allow-external-refs/--no-allow-external-refs",
        help="Skip (instead of report) references to other documents.",
    ),
) -> None:
    """Validate an OpenAPI 3.x document.

    Example::

        oasmodel validate petstore.yaml
        oasmodel validate --fail-on constraint_violation petstore.yaml
        cat petstore.json | oasmodel --json validate -
    """
    options = get_settings(ctx).validation
    overrides: dict[str, object] = {}
    if fail_on is not None:
        overrides["fail_on"] = fail_on
    if allow_external_refs is not None:
        overrides["allow_external_refs"] = allow_external_refs
    if overrides:
        try:
            options = ValidationSettings.model_validate(
                {**options.model_dump(mode="json"), **overrides}
            )
        except ValidationError as exc:
            exit_with(InvalidUsageError(f"Invalid option: {exc.errors()[0]['msg']}"))

    try:
        raw = load_spec(source)
        validate_openapi_version(raw)
    except OasModelError as exc:
        exit_with(exc)

    report = validate_raw(
        raw,
        allow_external_refs=options.allow_external_refs,
        check_security_names=options.check_security_names,
    )
    if report.ok:
        success(f"No issues found in {source}")
        return

    rows = [
        [issue.kind.value, issue.location or "<root>", issue.message]
        for issue in report.issues
    ]
    print_table(["Kind", "Location", "Message"], rows, title=f"{len(rows)} issue(s)")

    failing = ValidationReport(
        issues=[issue for issue in report.issues if issue.kind in options.fail_on]
    )
    error_class = failing.error_class()
    if error_class is None:
        warning(f"{len(rows)} issue(s) found; none of a kind listed in fail_on")
        return
    raise typer.Exit(code=error_class.exit_code)
