"""Load OpenAPI documents from a URL, local file, or stdin and build models.

This module handles all I/O for fetching raw OpenAPI documents, converting
them into Python dictionaries, and validating those dictionaries into the
object model of :mod:`oasmodel.models`. It supports both JSON and YAML with
automatic format detection.

Public functions:

* :func:`load_spec` -- Load and parse a raw mapping from any supported source.
* :func:`validate_openapi_version` -- Check and return the ``openapi``
  version string, rejecting Swagger 2.x and unsupported versions.
* :func:`parse_document` -- Build an :class:`~oasmodel.models.OpenAPI`
  value from a raw mapping, reporting every shape mismatch at once.
* :func:`load_document` -- All three steps in one call.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml
from pydantic import BaseModel, ValidationError

from oasmodel.exceptions import ShapeMismatchError, SpecParseError
from oasmodel.models import UNION_TAGS, OpenAPI

logger = logging.getLogger(__name__)


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    logger.debug("Loading document from %s", source)
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin.

    Raises:
        SpecParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S). Supports JSON and YAML responses.

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file.

    ``.json``, ``.yaml`` and ``.yml`` extensions pick the parser; anything
    else falls back to content-based detection.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse text as JSON or YAML.

    Tries JSON first (unless *hint* is ``yaml``), then falls back to YAML.
    Valid JSON is also valid YAML, but the JSON parser is stricter and
    faster.

    Args:
        content: The raw string content.
        hint: Optional format hint (``json`` or ``yaml``).

    Returns:
        The parsed mapping.

    Raises:
        SpecParseError: If the content cannot be parsed as either format,
            or does not hold a mapping at the top level.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise SpecParseError(
                    f"Document must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            kind = type(result).__name__ if result is not None else "empty document"
            raise SpecParseError(f"Document must be a JSON/YAML object (got {kind})")
        return result

    msg = "Failed to parse document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.x. Raises :class:`SpecParseError` for Swagger 2.x,
    missing version fields, or other major versions.

    Returns:
        The OpenAPI version string (e.g. ``'3.0.3'``).
    """
    if "swagger" in spec:
        swagger_ver = str(spec["swagger"])
        raise SpecParseError(
            f"Swagger {swagger_ver} is not supported. "
            "Only OpenAPI 3.x documents can be loaded. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        if not version_str.startswith("3.0."):
            logger.debug("Loading OpenAPI %s with the 3.0 object model", version_str)
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
    )


def format_location(loc: tuple[Any, ...] | list[Any]) -> str:
    """Render a location tuple as a dotted path.

    ``("paths", "/records", "get", "parameters", 0, "name")`` becomes
    ``paths./records.get.parameters[0].name``. Union tags that Pydantic
    inserts for reference-or-object slots are dropped.
    """
    parts: list[str] = []
    for segment in loc:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif segment in UNION_TAGS:
            continue
        else:
            parts.append(("." if parts else "") + str(segment))
    return "".join(parts)


def parse_document(
    raw: dict[str, Any],
    extension: Optional[type[BaseModel]] = None,
) -> OpenAPI:
    """Build an :class:`~oasmodel.models.OpenAPI` value from a raw mapping.

    Args:
        raw: The document as returned by :func:`load_spec`.
        extension: Optional model describing the ``x-`` fields of path items
            and operations. When given, the result is an
            ``OpenAPI[extension]`` instance.

    Returns:
        The validated document.

    Raises:
        ShapeMismatchError: Carrying one
            :class:`~oasmodel.validation.ValidationIssue` per mismatch,
            each with its dotted location.
    """
    from oasmodel.validation import IssueKind, ValidationIssue

    model = OpenAPI if extension is None else OpenAPI[extension]  # type: ignore[index]
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        issues = [
            ValidationIssue(
                kind=IssueKind.SHAPE_MISMATCH,
                location=format_location(err["loc"]),
                message=err["msg"],
            )
            for err in exc.errors()
        ]
        logger.debug("Document failed shape validation with %d issue(s)", len(issues))
        first = issues[0]
        raise ShapeMismatchError(
            f"{len(issues)} shape mismatch(es); first at {first.location or '<root>'}: "
            f"{first.message}",
            location=first.location,
            issues=issues,
        ) from exc


def load_document(
    source: str,
    extension: Optional[type[BaseModel]] = None,
) -> OpenAPI:
    """Load, version-check and parse a document in one call.

    Example::

        doc = load_document("https://petstore3.swagger.io/api/v3/openapi.json")
        for path, method, op in doc.operations():
            print(method.value.upper(), path, op.operation_id)
    """
    raw = load_spec(source)
    validate_openapi_version(raw)
    return parse_document(raw, extension=extension)
