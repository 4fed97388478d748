"""Check the rules the OpenAPI text states but the object model does not enforce.

The models in :mod:`oasmodel.models` are deliberately permissive: a path
parameter with ``required: false`` or a schema that is both ``readOnly`` and
``writeOnly`` still constructs. This module walks a parsed document and
collects every such problem into a :class:`ValidationReport`, each tagged
with a dotted location such as ``paths./records.get.parameters[0].required``.
Problems are collected, never short-circuited, so a single pass reports
everything.

Issue kinds map one-to-one onto the exception classes of
:mod:`oasmodel.exceptions` (see :meth:`ValidationReport.raise_for_issues`):

========================  ===============================================
Kind                      Raised as
========================  ===============================================
``shape_mismatch``        :class:`~oasmodel.exceptions.ShapeMismatchError`
``constraint_violation``  :class:`~oasmodel.exceptions.ConstraintViolationError`
``unresolved_reference``  :class:`~oasmodel.exceptions.UnresolvedReferenceError`
``cyclic_reference``      :class:`~oasmodel.exceptions.CyclicReferenceError`
``ambiguous_response_key`` :class:`~oasmodel.exceptions.AmbiguousResponseKeyError`
========================  ===============================================
"""

from __future__ import annotations

import enum
import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from oasmodel.exceptions import (
    AmbiguousResponseKeyError,
    ConstraintViolationError,
    CyclicReferenceError,
    ModelError,
    ShapeMismatchError,
    UnresolvedReferenceError,
)
from oasmodel.models import (
    DEFAULT_RESPONSE_KEY,
    RESPONSE_RANGE_KEYS,
    Callback,
    Components,
    Example,
    Header,
    Link,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    OpenAPI,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    RequestBody,
    Response,
    Responses,
    Schema,
    SecurityRequirement,
    SecurityScheme,
    SecuritySchemeType,
    is_reference,
)
from oasmodel.parser.loader import parse_document
from oasmodel.parser.resolver import iter_references, resolve_reference

logger = logging.getLogger(__name__)

_TEMPLATE_VARIABLE = re.compile(r"\{([^{}]+)\}")

# URLs each OAuth flow must carry
_OAUTH_FLOW_URLS: dict[str, tuple[str, ...]] = {
    "implicit": ("authorization_url",),
    "password": ("token_url",),
    "client_credentials": ("token_url",),
    "authorization_code": ("authorization_url", "token_url"),
}


class IssueKind(str, enum.Enum):
    """Category of a :class:`ValidationIssue`."""

    SHAPE_MISMATCH = "shape_mismatch"
    CONSTRAINT_VIOLATION = "constraint_violation"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    CYCLIC_REFERENCE = "cyclic_reference"
    AMBIGUOUS_RESPONSE_KEY = "ambiguous_response_key"


_ERROR_CLASSES: dict[IssueKind, type[ModelError]] = {
    IssueKind.SHAPE_MISMATCH: ShapeMismatchError,
    IssueKind.CONSTRAINT_VIOLATION: ConstraintViolationError,
    IssueKind.UNRESOLVED_REFERENCE: UnresolvedReferenceError,
    IssueKind.CYCLIC_REFERENCE: CyclicReferenceError,
    IssueKind.AMBIGUOUS_RESPONSE_KEY: AmbiguousResponseKeyError,
}


class ValidationIssue(BaseModel):
    """One problem found in a document."""

    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    location: str = Field(description="Dotted path, e.g. paths./pets.get.responses")
    message: str

    def __str__(self) -> str:
        return f"{self.location or '<root>'}: {self.message}"


class ValidationReport(BaseModel):
    """Every issue found in one validation pass, in discovery order."""

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """``True`` when no issues were found."""
        return not self.issues

    def by_kind(self) -> dict[IssueKind, list[ValidationIssue]]:
        """Group issues by :class:`IssueKind`, omitting kinds with no issues."""
        grouped: dict[IssueKind, list[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.kind, []).append(issue)
        return grouped

    def error_class(self) -> Optional[type[ModelError]]:
        """The exception class matching the first issue, or ``None`` if clean."""
        if not self.issues:
            return None
        return _ERROR_CLASSES[self.issues[0].kind]

    def raise_for_issues(self) -> None:
        """Raise if any issue was found.

        The exception class follows the kind of the first issue; the full
        list is attached as ``exc.issues``.
        """
        error_class = self.error_class()
        if error_class is None:
            return
        first = self.issues[0]
        raise error_class(
            f"{len(self.issues)} issue(s); first at {first}",
            location=first.location,
            issues=self.issues,
        )


def validate_document(
    document: OpenAPI,
    *,
    allow_external_refs: bool = False,
    check_security_names: bool = True,
) -> ValidationReport:
    """Check *document* against the cross-field rules of OpenAPI 3.x.

    Args:
        document: A parsed document.
        allow_external_refs: When ``False`` (the default), ``$ref`` values
            pointing outside the document are reported as unresolved since
            they cannot be checked. When ``True`` they are skipped.
        check_security_names: Report security requirements that name a
            scheme missing from ``components.securitySchemes``.

    Returns:
        A :class:`ValidationReport`; ``report.ok`` is ``True`` for a clean
        document.
    """
    validator = _DocumentValidator(
        document,
        allow_external_refs=allow_external_refs,
        check_security_names=check_security_names,
    )
    issues = validator.run()
    logger.debug("Validation finished with %d issue(s)", len(issues))
    return ValidationReport(issues=issues)


def validate_raw(
    raw: dict[str, Any],
    extension: Optional[type[BaseModel]] = None,
    **options: bool,
) -> ValidationReport:
    """Validate a raw mapping: shape first, then the document rules.

    Shape mismatches are returned as ``shape_mismatch`` issues instead of
    being raised. When the shape is fine, the result is that of
    :func:`validate_document` with the same keyword *options*.
    """
    try:
        document = parse_document(raw, extension=extension)
    except ShapeMismatchError as exc:
        return ValidationReport(issues=exc.issues)
    return validate_document(document, **options)


def is_valid_response_key(key: str) -> bool:
    """``default``, a range ``1XX``..``5XX``, or a status code 100-599."""
    if key == DEFAULT_RESPONSE_KEY or key in RESPONSE_RANGE_KEYS:
        return True
    return len(key) == 3 and key.isdigit() and 100 <= int(key) <= 599


def _join(location: str, key: str) -> str:
    return f"{location}.{key}" if location else key


def _template_variables(template: str) -> set[str]:
    return set(_TEMPLATE_VARIABLE.findall(template))


class _DocumentValidator:
    """Single-use walker that accumulates issues for one document."""

    def __init__(
        self,
        document: OpenAPI,
        allow_external_refs: bool,
        check_security_names: bool,
    ) -> None:
        self.document = document
        self.allow_external_refs = allow_external_refs
        self.check_security_names = check_security_names
        self.issues: list[ValidationIssue] = []
        self._operation_ids: dict[str, str] = {}
        self._linked_operation_ids: list[tuple[str, str]] = []
        components = document.components
        self._scheme_names = set(
            (components.security_schemes or {}) if components is not None else ()
        )

    def run(self) -> list[ValidationIssue]:
        doc = self.document
        self._check_tags()
        for index, requirement in enumerate(doc.security or []):
            self._check_security_requirement(requirement, f"security[{index}]")
        self._check_path_keys()
        for path, item in doc.paths.items():
            self._check_path_item(item, _join("paths", path), template=path)
        if doc.components is not None:
            self._check_components(doc.components, "components")
        self._check_link_targets()
        self._check_references()
        return self.issues

    def _add(self, kind: IssueKind, location: str, message: str) -> None:
        self.issues.append(ValidationIssue(kind=kind, location=location, message=message))

    def _violation(self, location: str, message: str) -> None:
        self._add(IssueKind.CONSTRAINT_VIOLATION, location, message)

    def _resolved(self, value: Any) -> Any:
        """Follow *value* if it is a reference; ``None`` if it cannot be followed.

        Broken references are reported once, by :meth:`_check_references`.
        """
        try:
            return resolve_reference(self.document, value)
        except UnresolvedReferenceError:
            return None

    # --- Document level ---

    def _check_tags(self) -> None:
        seen: set[str] = set()
        for index, tag in enumerate(self.document.tags or []):
            if tag.name in seen:
                self._violation(f"tags[{index}].name", f"Duplicate tag name '{tag.name}'")
            seen.add(tag.name)

    def _check_path_keys(self) -> None:
        shapes: dict[str, str] = {}
        for path in self.document.paths:
            location = _join("paths", path)
            if not path.startswith("/"):
                self._violation(location, f"Path '{path}' must begin with '/'")
            shape = _TEMPLATE_VARIABLE.sub("{}", path)
            if shape in shapes:
                self._violation(
                    location,
                    f"Path '{path}' is identical to '{shapes[shape]}' up to template names",
                )
            else:
                shapes[shape] = path

    def _check_link_targets(self) -> None:
        for location, operation_id in self._linked_operation_ids:
            if operation_id not in self._operation_ids:
                self._add(
                    IssueKind.UNRESOLVED_REFERENCE,
                    location,
                    f"Link targets unknown operationId '{operation_id}'",
                )

    def _check_references(self) -> None:
        for location, reference in iter_references(self.document):
            if not reference.is_internal:
                if not self.allow_external_refs:
                    self._add(
                        IssueKind.UNRESOLVED_REFERENCE,
                        location,
                        f"External reference '{reference.ref}' cannot be resolved",
                    )
                continue
            try:
                resolve_reference(self.document, reference)
            except CyclicReferenceError as exc:
                self._add(IssueKind.CYCLIC_REFERENCE, location, str(exc))
            except UnresolvedReferenceError as exc:
                self._add(IssueKind.UNRESOLVED_REFERENCE, location, str(exc))

    # --- Paths and operations ---

    def _check_path_item(self, item: PathItem, location: str, template: Optional[str]) -> None:
        params_location = _join(location, "parameters")
        path_params = self._check_parameter_list(item.parameters, params_location)
        if item.ref:
            template = None
        if template is not None:
            self._check_unused_path_params(template, path_params, params_location)
        for method, operation in item.operations():
            self._check_operation(
                operation,
                _join(location, method.value),
                template=template,
                path_params=path_params,
            )

    def _check_operation(
        self,
        operation: Operation,
        location: str,
        template: Optional[str],
        path_params: list[Parameter],
    ) -> None:
        if operation.operation_id is not None:
            first = self._operation_ids.get(operation.operation_id)
            if first is not None:
                self._violation(
                    _join(location, "operationId"),
                    f"Duplicate operationId '{operation.operation_id}' (first defined at {first})",
                )
            else:
                self._operation_ids[operation.operation_id] = location

        params = self._check_parameter_list(
            operation.parameters, _join(location, "parameters")
        )
        if template is not None:
            self._check_path_template(template, path_params, params, location)

        if operation.request_body is not None and not is_reference(operation.request_body):
            self._check_request_body(operation.request_body, _join(location, "requestBody"))

        if operation.responses is None:
            self._violation(_join(location, "responses"), "Operation must declare responses")
        else:
            self._check_responses(operation.responses, _join(location, "responses"))

        for name, callback in (operation.callbacks or {}).items():
            if not is_reference(callback):
                self._check_callback(callback, _join(location, f"callbacks.{name}"))

        for index, requirement in enumerate(operation.security or []):
            self._check_security_requirement(requirement, _join(location, f"security[{index}]"))

    def _check_path_template(
        self,
        template: str,
        path_params: list[Parameter],
        params: list[Parameter],
        location: str,
    ) -> None:
        """Check one operation's parameters against its path template.

        Path-level parameters were checked for unused names once, by
        :meth:`_check_path_item`; here they only count towards covering the
        template variables.
        """
        params_location = _join(location, "parameters")
        self._check_unused_path_params(template, params, params_location)
        declared = {
            p.name
            for p in [*path_params, *params]
            if p.in_ == ParameterLocation.PATH.value
        }
        for name in sorted(_template_variables(template) - declared):
            self._violation(
                params_location,
                f"Template variable '{{{name}}}' has no matching path parameter",
            )

    def _check_unused_path_params(
        self, template: str, params: list[Parameter], location: str
    ) -> None:
        declared = {p.name for p in params if p.in_ == ParameterLocation.PATH.value}
        for name in sorted(declared - _template_variables(template)):
            self._violation(
                location,
                f"Path parameter '{name}' does not appear in template '{template}'",
            )

    def _check_callback(self, callback: Callback, location: str) -> None:
        for expression, item in callback.items():
            self._check_path_item(item, _join(location, expression), template=None)

    # --- Parameters, headers and content ---

    def _check_parameter_list(self, params: Optional[list[Any]], location: str) -> list[Parameter]:
        resolved: list[Parameter] = []
        seen: dict[tuple[str, str], int] = {}
        for index, value in enumerate(params or []):
            item_location = f"{location}[{index}]"
            param = self._resolved(value)
            if not isinstance(param, Parameter):
                continue
            if not is_reference(value):
                self._check_parameter(param, item_location)
            if param.identity in seen:
                self._violation(
                    item_location,
                    f"Duplicate parameter '{param.name}' in {param.in_} "
                    f"(also at index {seen[param.identity]})",
                )
            else:
                seen[param.identity] = index
            resolved.append(param)
        return resolved

    def _check_parameter(self, param: Parameter, location: str) -> None:
        if param.location is None:
            allowed = ", ".join(loc.value for loc in ParameterLocation)
            self._violation(
                _join(location, "in"),
                f"Unknown parameter location '{param.in_}'; expected one of {allowed}",
            )
        if param.in_ == ParameterLocation.PATH.value and param.required is not True:
            self._violation(
                _join(location, "required"),
                f"Path parameter '{param.name}' must set required: true",
            )
        self._check_header(param, location)

    def _check_header(self, header: Header, location: str) -> None:
        self._check_example_exclusivity(header, location)
        if header.schema_ is not None and header.content is not None:
            self._violation(location, "schema and content are mutually exclusive")
        if header.content is not None and len(header.content) != 1:
            self._violation(
                _join(location, "content"),
                f"content must hold exactly one media type (found {len(header.content)})",
            )
        if header.schema_ is not None:
            self._check_schema(header.schema_, _join(location, "schema"))
        self._check_examples(header.examples, _join(location, "examples"))
        for media_type, content in (header.content or {}).items():
            self._check_media_type(content, _join(location, f"content.{media_type}"))

    def _check_example_exclusivity(self, owner: Any, location: str) -> None:
        if "example" in owner.model_fields_set and owner.examples is not None:
            self._violation(location, "example and examples are mutually exclusive")

    def _check_examples(self, examples: Optional[dict[str, Any]], location: str) -> None:
        for name, example in (examples or {}).items():
            if isinstance(example, Example):
                self._check_example(example, _join(location, name))

    def _check_example(self, example: Example, location: str) -> None:
        if "value" in example.model_fields_set and example.external_value is not None:
            self._violation(location, "value and externalValue are mutually exclusive")

    def _check_media_type(self, media_type: MediaType, location: str) -> None:
        self._check_example_exclusivity(media_type, location)
        if media_type.schema_ is not None:
            self._check_schema(media_type.schema_, _join(location, "schema"))
        self._check_examples(media_type.examples, _join(location, "examples"))
        for prop, encoding in (media_type.encoding or {}).items():
            for name, header in (encoding.headers or {}).items():
                if isinstance(header, Header):
                    self._check_header(header, _join(location, f"encoding.{prop}.headers.{name}"))

    def _check_request_body(self, body: RequestBody, location: str) -> None:
        for media_type, content in (body.content or {}).items():
            self._check_media_type(content, _join(location, f"content.{media_type}"))

    def _check_schema(self, schema: Any, location: str) -> None:
        if not isinstance(schema, Schema):
            return
        if schema.read_only and schema.write_only:
            self._violation(location, "readOnly and writeOnly must not both be true")
        for sub_location, subschema in schema.subschemas():
            self._check_schema(subschema, _join(location, sub_location))

    # --- Responses ---

    def _check_responses(self, responses: Responses, location: str) -> None:
        if len(responses) == 0:
            self._violation(location, "Responses must contain at least one response code")
        folded: dict[str, str] = {}
        for key, response in responses.items():
            key_location = _join(location, key)
            if not is_valid_response_key(key):
                self._add(
                    IssueKind.AMBIGUOUS_RESPONSE_KEY,
                    key_location,
                    f"'{key}' is not a status code, a range (1XX..5XX) or 'default'",
                )
            upper = key.upper()
            if upper in folded:
                self._add(
                    IssueKind.AMBIGUOUS_RESPONSE_KEY,
                    key_location,
                    f"'{key}' collides with '{folded[upper]}'",
                )
            else:
                folded[upper] = key
            if isinstance(response, Response):
                self._check_response(response, key_location)

    def _check_response(self, response: Response, location: str) -> None:
        for name, header in (response.headers or {}).items():
            if isinstance(header, Header):
                self._check_header(header, _join(location, f"headers.{name}"))
        for media_type, content in (response.content or {}).items():
            self._check_media_type(content, _join(location, f"content.{media_type}"))
        for name, link in (response.links or {}).items():
            if isinstance(link, Link):
                self._check_link(link, _join(location, f"links.{name}"))

    def _check_link(self, link: Link, location: str) -> None:
        if link.operation_ref is not None and link.operation_id is not None:
            self._violation(location, "operationRef and operationId are mutually exclusive")
        if link.operation_id is not None:
            self._linked_operation_ids.append((_join(location, "operationId"), link.operation_id))

    # --- Security ---

    def _check_security_requirement(self, requirement: SecurityRequirement, location: str) -> None:
        if not self.check_security_names:
            return
        for name in requirement:
            if name not in self._scheme_names:
                self._add(
                    IssueKind.UNRESOLVED_REFERENCE,
                    _join(location, name),
                    f"Security requirement names undefined scheme '{name}'",
                )

    def _check_security_scheme(self, scheme: SecurityScheme, location: str) -> None:
        try:
            scheme_type = SecuritySchemeType(scheme.type)
        except ValueError:
            allowed = ", ".join(t.value for t in SecuritySchemeType)
            self._violation(
                _join(location, "type"),
                f"Unknown security scheme type '{scheme.type}'; expected one of {allowed}",
            )
            return

        if scheme_type is SecuritySchemeType.API_KEY:
            if scheme.name is None:
                self._violation(_join(location, "name"), "apiKey scheme requires name")
            if scheme.in_ not in ("query", "header", "cookie"):
                self._violation(
                    _join(location, "in"),
                    "apiKey scheme requires in: query, header or cookie",
                )
        elif scheme_type is SecuritySchemeType.HTTP:
            if scheme.scheme is None:
                self._violation(_join(location, "scheme"), "http scheme requires scheme")
        elif scheme_type is SecuritySchemeType.OAUTH2:
            if scheme.flows is None:
                self._violation(_join(location, "flows"), "oauth2 scheme requires flows")
            else:
                self._check_oauth_flows(scheme.flows, _join(location, "flows"))
        elif scheme.open_id_connect_url is None:
            self._violation(
                _join(location, "openIdConnectUrl"),
                "openIdConnect scheme requires openIdConnectUrl",
            )

    def _check_oauth_flows(self, flows: OAuthFlows, location: str) -> None:
        for flow_field, required in _OAUTH_FLOW_URLS.items():
            flow = getattr(flows, flow_field)
            if flow is None:
                continue
            flow_name = OAuthFlows.model_fields[flow_field].alias or flow_field
            for field_name in required:
                if getattr(flow, field_name) is None:
                    alias = OAuthFlow.model_fields[field_name].alias or field_name
                    self._violation(
                        _join(location, f"{flow_name}.{alias}"),
                        f"{flow_name} flow requires {alias}",
                    )

    # --- Components ---

    def _check_components(self, components: Components, location: str) -> None:
        for name, schema in (components.schemas or {}).items():
            self._check_schema(schema, _join(location, f"schemas.{name}"))
        for name, response in (components.responses or {}).items():
            if isinstance(response, Response):
                self._check_response(response, _join(location, f"responses.{name}"))
        for name, param in (components.parameters or {}).items():
            if isinstance(param, Parameter):
                self._check_parameter(param, _join(location, f"parameters.{name}"))
        self._check_examples(components.examples, _join(location, "examples"))
        for name, body in (components.request_bodies or {}).items():
            if isinstance(body, RequestBody):
                self._check_request_body(body, _join(location, f"requestBodies.{name}"))
        for name, header in (components.headers or {}).items():
            if isinstance(header, Header):
                self._check_header(header, _join(location, f"headers.{name}"))
        for name, scheme in (components.security_schemes or {}).items():
            if isinstance(scheme, SecurityScheme):
                self._check_security_scheme(scheme, _join(location, f"securitySchemes.{name}"))
        for name, link in (components.links or {}).items():
            if isinstance(link, Link):
                self._check_link(link, _join(location, f"links.{name}"))
        for name, callback in (components.callbacks or {}).items():
            if isinstance(callback, Callback):
                self._check_callback(callback, _join(location, f"callbacks.{name}"))
