"""Helpers shared by the command modules."""

from __future__ import annotations

from typing import Any, NoReturn

import typer

from oasmodel.config import Settings, resolve_settings
from oasmodel.exceptions import ModelError, OasModelError
from oasmodel.models import OpenAPI
from oasmodel.output import error
from oasmodel.parser import load_document

_MAX_LISTED_ISSUES = 10


def get_settings(ctx: typer.Context) -> Settings:
    """Settings resolved by the root callback, or resolved now if absent."""
    obj: dict[str, Any] = ctx.obj or {}
    settings = obj.get("settings")
    if settings is None:
        settings = resolve_settings()
    return settings


def exit_with(exc: OasModelError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code.

    For model errors the first few issues are listed under the message.
    """
    error(str(exc))
    if isinstance(exc, ModelError):
        for issue in exc.issues[:_MAX_LISTED_ISSUES]:
            error(f"  {issue}")
        hidden = len(exc.issues) - _MAX_LISTED_ISSUES
        if hidden > 0:
            error(f"  ... and {hidden} more")
    raise typer.Exit(code=exc.exit_code)


def load_source(source: str) -> OpenAPI:
    """Load and parse *source*, exiting with the matching code on failure."""
    try:
        return load_document(source)
    except OasModelError as exc:
        exit_with(exc)
