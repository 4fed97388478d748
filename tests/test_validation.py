"""Tests for oasmodel.validation -- cross-field rules and issue reports."""

from __future__ import annotations

from typing import Any

import pytest

from oasmodel.exceptions import AmbiguousResponseKeyError, ConstraintViolationError
from oasmodel.models import OpenAPI
from oasmodel.parser import load_document, parse_document
from oasmodel.validation import (
    IssueKind,
    ValidationIssue,
    ValidationReport,
    is_valid_response_key,
    validate_document,
    validate_raw,
)


def _issues(raw: dict[str, Any], **options: bool) -> dict[str, IssueKind]:
    """Validate *raw* and return ``{location: kind}``."""
    report = validate_document(parse_document(raw), **options)
    return {issue.location: issue.kind for issue in report.issues}


def _ping(raw: dict[str, Any]) -> dict[str, Any]:
    return raw["paths"]["/ping"]["get"]


# ---------------------------------------------------------------------------
# Clean documents
# ---------------------------------------------------------------------------


class TestCleanDocuments:
    """Well-formed documents produce an empty report."""

    def test_petstore(self, petstore: OpenAPI) -> None:
        report = validate_document(petstore)
        assert report.ok, [str(issue) for issue in report.issues]

    def test_minimal(self, minimal_raw: dict[str, Any]) -> None:
        assert validate_raw(minimal_raw).ok

    def test_records_yaml(self, records_path) -> None:
        report = validate_document(load_document(str(records_path)))
        assert report.ok, [str(issue) for issue in report.issues]


# ---------------------------------------------------------------------------
# Parameters and path templates
# ---------------------------------------------------------------------------


class TestParameters:
    """Parameter list rules."""

    def test_path_parameter_must_be_required(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["paths"]["/pets/{petId}"]["parameters"][0]["required"] = False
        issues = _issues(petstore_raw)
        assert issues == {
            "paths./pets/{petId}.parameters[0].required": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_path_parameter_required_absent(self, petstore_raw: dict[str, Any]) -> None:
        del petstore_raw["paths"]["/pets/{petId}"]["parameters"][0]["required"]
        assert "paths./pets/{petId}.parameters[0].required" in _issues(petstore_raw)

    def test_unknown_location(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["parameters"] = [{"name": "payload", "in": "body"}]
        assert _issues(minimal_raw) == {
            "paths./ping.get.parameters[0].in": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_duplicate_name_and_location(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["parameters"] = [
            {"name": "q", "in": "query"},
            {"name": "q", "in": "header"},
            {"name": "q", "in": "query"},
        ]
        assert _issues(minimal_raw) == {
            "paths./ping.get.parameters[2]": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_duplicate_through_reference(self, petstore_raw: dict[str, Any]) -> None:
        get_pets = petstore_raw["paths"]["/pets"]["get"]
        get_pets["parameters"].append({"name": "limit", "in": "query"})
        assert "paths./pets.get.parameters[2]" in _issues(petstore_raw)

    def test_template_variable_without_parameter(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["paths"]["/items/{itemId}"] = {
            "get": {"responses": {"200": {"description": "ok"}}}
        }
        report = validate_raw(minimal_raw)
        assert len(report.issues) == 1
        issue = report.issues[0]
        assert issue.location == "paths./items/{itemId}.get.parameters"
        assert "{itemId}" in issue.message

    def test_path_parameter_not_in_template(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["parameters"] = [{"name": "id", "in": "path", "required": True}]
        report = validate_raw(minimal_raw)
        assert [issue.location for issue in report.issues] == ["paths./ping.get.parameters"]
        assert "'id' does not appear" in report.issues[0].message

    def test_operation_parameter_fills_template(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["paths"]["/items/{itemId}"] = {
            "get": {
                "parameters": [{"name": "itemId", "in": "path", "required": True}],
                "responses": {"200": {"description": "ok"}},
            }
        }
        assert validate_raw(minimal_raw).ok

    def test_unused_path_level_parameter_reported_once(
        self, minimal_raw: dict[str, Any]
    ) -> None:
        ping = minimal_raw["paths"]["/ping"]
        ping["parameters"] = [{"name": "id", "in": "path", "required": True}]
        ping["put"] = {"responses": {"200": {"description": "ok"}}}
        report = validate_raw(minimal_raw)
        assert [issue.location for issue in report.issues] == ["paths./ping.parameters"]
        assert "'id' does not appear" in report.issues[0].message

    def test_path_item_without_operations_checks_parameters(
        self, minimal_raw: dict[str, Any]
    ) -> None:
        minimal_raw["paths"]["/idle"] = {
            "parameters": [{"name": "id", "in": "path", "required": True}]
        }
        assert _issues(minimal_raw) == {
            "paths./idle.parameters": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_path_level_parameter_fills_template_for_every_operation(
        self, minimal_raw: dict[str, Any]
    ) -> None:
        minimal_raw["paths"]["/items/{itemId}"] = {
            "parameters": [{"name": "itemId", "in": "path", "required": True}],
            "get": {"responses": {"200": {"description": "ok"}}},
            "delete": {"responses": {"204": {"description": "gone"}}},
        }
        assert validate_raw(minimal_raw).ok


class TestPaths:
    """Path keys, operation ids and tags."""

    def test_path_must_start_with_slash(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["paths"]["pong"] = {"get": {"responses": {"200": {"description": "ok"}}}}
        assert _issues(minimal_raw) == {"paths.pong": IssueKind.CONSTRAINT_VIOLATION}

    def test_templates_identical_up_to_names(self, minimal_raw: dict[str, Any]) -> None:
        for name in ("a", "b"):
            minimal_raw["paths"][f"/items/{{{name}}}"] = {
                "parameters": [{"name": name, "in": "path", "required": True}],
                "get": {"responses": {"200": {"description": "ok"}}},
            }
        assert _issues(minimal_raw) == {"paths./items/{b}": IssueKind.CONSTRAINT_VIOLATION}

    def test_duplicate_operation_id(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["paths"]["/pong"] = {
            "post": {"operationId": "ping", "responses": {"200": {"description": "ok"}}}
        }
        report = validate_raw(minimal_raw)
        assert [issue.location for issue in report.issues] == ["paths./pong.post.operationId"]
        assert "paths./ping.get" in report.issues[0].message

    def test_duplicate_tag(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["tags"] = [{"name": "a"}, {"name": "b"}, {"name": "a"}]
        assert _issues(minimal_raw) == {"tags[2].name": IssueKind.CONSTRAINT_VIOLATION}

    def test_missing_responses(self, minimal_raw: dict[str, Any]) -> None:
        del _ping(minimal_raw)["responses"]
        assert _issues(minimal_raw) == {
            "paths./ping.get.responses": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_empty_responses(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["responses"] = {}
        assert _issues(minimal_raw) == {
            "paths./ping.get.responses": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_callback_operations_are_checked(self, petstore_raw: dict[str, Any]) -> None:
        callback = petstore_raw["paths"]["/pets"]["post"]["callbacks"]["onAdopted"]
        callback["{$request.body#/callbackUrl}"]["post"]["responses"] = {}
        location = (
            "paths./pets.post.callbacks.onAdopted.{$request.body#/callbackUrl}.post.responses"
        )
        assert _issues(petstore_raw) == {location: IssueKind.CONSTRAINT_VIOLATION}


# ---------------------------------------------------------------------------
# Content, headers, examples and schemas
# ---------------------------------------------------------------------------


class TestMutualExclusion:
    """Fields that must not appear together."""

    def test_media_type_example_and_examples(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["responses"]["200"]["content"] = {
            "text/plain": {"example": "pong", "examples": {"a": {"value": "pong"}}}
        }
        assert _issues(minimal_raw) == {
            "paths./ping.get.responses.200.content.text/plain": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_explicit_null_example_counts(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["responses"]["200"]["content"] = {
            "text/plain": {"example": None, "examples": {"a": {"value": "pong"}}}
        }
        assert not validate_raw(minimal_raw).ok

    def test_example_value_and_external_value(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["components"]["examples"]["Dog"]["externalValue"] = "https://x/dog.json"
        assert _issues(petstore_raw) == {
            "components.examples.Dog": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_header_schema_and_content(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["components"]["headers"]["RateLimit"]["content"] = {
            "text/plain": {"schema": {"type": "integer"}}
        }
        assert _issues(petstore_raw) == {
            "components.headers.RateLimit": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_parameter_content_needs_one_entry(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["parameters"] = [
            {
                "name": "filter",
                "in": "query",
                "content": {
                    "application/json": {"schema": {"type": "object"}},
                    "text/plain": {"schema": {"type": "string"}},
                },
            }
        ]
        assert _issues(minimal_raw) == {
            "paths./ping.get.parameters[0].content": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_read_only_and_write_only(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["components"]["schemas"]["Pet"]["properties"]["id"]["writeOnly"] = True
        assert _issues(petstore_raw) == {
            "components.schemas.Pet.properties.id": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_inline_request_body_schema(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["paths"]["/pets"]["post"]["requestBody"]["content"]["application/json"][
            "schema"
        ] = {"type": "object", "properties": {"x": {"readOnly": True, "writeOnly": True}}}
        location = "paths./pets.post.requestBody.content.application/json.schema.properties.x"
        assert _issues(petstore_raw) == {location: IssueKind.CONSTRAINT_VIOLATION}


# ---------------------------------------------------------------------------
# Response keys and links
# ---------------------------------------------------------------------------


class TestResponseKeys:
    """Keys must be status codes, ranges or default."""

    @pytest.mark.parametrize("key", ["200", "100", "599", "2XX", "5XX", "default"])
    def test_valid_keys(self, key: str) -> None:
        assert is_valid_response_key(key)

    @pytest.mark.parametrize("key", ["2xx", "6XX", "600", "99", "20", "OK", "Default", ""])
    def test_invalid_keys(self, key: str) -> None:
        assert not is_valid_response_key(key)

    def test_invalid_key_reported(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["responses"]["OK"] = {"description": "fine"}
        assert _issues(minimal_raw) == {
            "paths./ping.get.responses.OK": IssueKind.AMBIGUOUS_RESPONSE_KEY
        }

    def test_case_collision(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["responses"].update(
            {"2XX": {"description": "range"}, "2xx": {"description": "lower"}}
        )
        report = validate_raw(minimal_raw)
        assert {issue.location for issue in report.issues} == {"paths./ping.get.responses.2xx"}
        assert len(report.issues) == 2
        assert any("collides with '2XX'" in issue.message for issue in report.issues)

    def test_integer_keys_from_yaml(self, minimal_raw: dict[str, Any]) -> None:
        _ping(minimal_raw)["responses"] = {200: {"description": "ok"}, 404: {"description": "nf"}}
        assert validate_raw(minimal_raw).ok


class TestLinks:
    """Link objects."""

    def test_unknown_operation_id(self, petstore_raw: dict[str, Any]) -> None:
        link = petstore_raw["paths"]["/pets"]["post"]["responses"]["201"]["links"]["GetPetById"]
        link["operationId"] = "fetchPet"
        location = "paths./pets.post.responses.201.links.GetPetById.operationId"
        assert _issues(petstore_raw) == {location: IssueKind.UNRESOLVED_REFERENCE}

    def test_operation_ref_and_operation_id(self, petstore_raw: dict[str, Any]) -> None:
        link = petstore_raw["paths"]["/pets"]["post"]["responses"]["201"]["links"]["GetPetById"]
        link["operationRef"] = "#/paths/~1pets~1{petId}/get"
        location = "paths./pets.post.responses.201.links.GetPetById"
        assert _issues(petstore_raw) == {location: IssueKind.CONSTRAINT_VIOLATION}

    def test_link_to_callback_operation(self, petstore_raw: dict[str, Any]) -> None:
        link = petstore_raw["paths"]["/pets"]["post"]["responses"]["201"]["links"]["GetPetById"]
        link["operationId"] = "petAdoptedCallback"
        assert validate_raw(petstore_raw).ok


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


class TestSecurity:
    """Security requirements and schemes."""

    def test_undefined_scheme_name(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["security"] = [{"apiKeyAuth": []}, {"sessionCookie": []}]
        assert _issues(petstore_raw) == {
            "security[1].sessionCookie": IssueKind.UNRESOLVED_REFERENCE
        }

    def test_undefined_scheme_name_on_operation(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["paths"]["/pets/{petId}"]["delete"]["security"] = [{"adminKey": []}]
        assert _issues(petstore_raw) == {
            "paths./pets/{petId}.delete.security[0].adminKey": IssueKind.UNRESOLVED_REFERENCE
        }

    def test_name_check_can_be_disabled(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["security"] = [{"sessionCookie": []}]
        assert _issues(petstore_raw, check_security_names=False) == {}

    def test_empty_requirement_is_anonymous_access(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["security"] = [{}]
        assert validate_raw(petstore_raw).ok

    @pytest.mark.parametrize(
        ("scheme", "location"),
        [
            ({"type": "apiKey", "in": "header"}, "name"),
            ({"type": "apiKey", "name": "k", "in": "body"}, "in"),
            ({"type": "http"}, "scheme"),
            ({"type": "oauth2"}, "flows"),
            ({"type": "openIdConnect"}, "openIdConnectUrl"),
            ({"type": "mutualTLS"}, "type"),
            (
                {"type": "oauth2", "flows": {"implicit": {"scopes": {}}}},
                "flows.implicit.authorizationUrl",
            ),
            (
                {
                    "type": "oauth2",
                    "flows": {"clientCredentials": {"scopes": {}}},
                },
                "flows.clientCredentials.tokenUrl",
            ),
        ],
    )
    def test_scheme_requirements(
        self, petstore_raw: dict[str, Any], scheme: dict[str, Any], location: str
    ) -> None:
        petstore_raw["components"]["securitySchemes"]["extra"] = scheme
        assert _issues(petstore_raw) == {
            f"components.securitySchemes.extra.{location}": IssueKind.CONSTRAINT_VIOLATION
        }

    def test_authorization_code_needs_both_urls(self, petstore_raw: dict[str, Any]) -> None:
        flow = petstore_raw["components"]["securitySchemes"]["petstoreOAuth"]["flows"][
            "authorizationCode"
        ]
        del flow["authorizationUrl"]
        del flow["tokenUrl"]
        prefix = "components.securitySchemes.petstoreOAuth.flows.authorizationCode"
        assert _issues(petstore_raw) == {
            f"{prefix}.authorizationUrl": IssueKind.CONSTRAINT_VIOLATION,
            f"{prefix}.tokenUrl": IssueKind.CONSTRAINT_VIOLATION,
        }


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestReferences:
    """Every $ref must point somewhere inside the document."""

    def test_missing_target(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["paths"]["/pets"]["get"]["parameters"][0] = {
            "$ref": "#/components/parameters/Offset"
        }
        assert _issues(petstore_raw) == {
            "paths./pets.get.parameters[0]": IssueKind.UNRESOLVED_REFERENCE
        }

    def test_cycle(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["components"] = {
            "schemas": {
                "A": {"$ref": "#/components/schemas/B"},
                "B": {"$ref": "#/components/schemas/A"},
            }
        }
        assert _issues(minimal_raw) == {
            "components.schemas.A": IssueKind.CYCLIC_REFERENCE,
            "components.schemas.B": IssueKind.CYCLIC_REFERENCE,
        }

    def test_external_reported_by_default(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["components"]["schemas"]["Owner"]["properties"]["pets"]["items"] = {
            "$ref": "common.yaml#/Pet"
        }
        location = "components.schemas.Owner.properties.pets.items"
        assert _issues(petstore_raw) == {location: IssueKind.UNRESOLVED_REFERENCE}
        assert _issues(petstore_raw, allow_external_refs=True) == {}


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class TestReport:
    """ValidationReport helpers and validate_raw."""

    def test_validate_raw_reports_shape(self, minimal_raw: dict[str, Any]) -> None:
        del minimal_raw["info"]["title"]
        report = validate_raw(minimal_raw)
        assert not report.ok
        assert [(issue.kind, issue.location) for issue in report.issues] == [
            (IssueKind.SHAPE_MISMATCH, "info.title")
        ]

    def test_by_kind(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["tags"] = [{"name": "a"}, {"name": "a"}]
        _ping(minimal_raw)["responses"]["OK"] = {"description": "fine"}
        grouped = validate_raw(minimal_raw).by_kind()
        assert set(grouped) == {IssueKind.CONSTRAINT_VIOLATION, IssueKind.AMBIGUOUS_RESPONSE_KEY}
        assert grouped[IssueKind.CONSTRAINT_VIOLATION][0].location == "tags[1].name"

    def test_raise_for_issues_uses_first_kind(self) -> None:
        report = ValidationReport(
            issues=[
                ValidationIssue(
                    kind=IssueKind.AMBIGUOUS_RESPONSE_KEY, location="a", message="bad key"
                ),
                ValidationIssue(
                    kind=IssueKind.CONSTRAINT_VIOLATION, location="b", message="bad value"
                ),
            ]
        )
        assert report.error_class() is AmbiguousResponseKeyError
        with pytest.raises(AmbiguousResponseKeyError) as exc_info:
            report.raise_for_issues()
        assert exc_info.value.exit_code == 11
        assert exc_info.value.location == "a"
        assert len(exc_info.value.issues) == 2

    def test_raise_for_constraint(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["paths"]["/pets/{petId}"]["parameters"][0]["required"] = False
        with pytest.raises(ConstraintViolationError) as exc_info:
            validate_raw(petstore_raw).raise_for_issues()
        assert exc_info.value.exit_code == 9

    def test_clean_report(self) -> None:
        report = ValidationReport()
        assert report.ok
        assert report.error_class() is None
        report.raise_for_issues()

    def test_issue_str(self) -> None:
        issue = ValidationIssue(kind=IssueKind.SHAPE_MISMATCH, location="", message="boom")
        assert str(issue) == "<root>: boom"
