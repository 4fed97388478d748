"""Tests for oasmodel.models -- object shapes, references and extensions."""

from __future__ import annotations

from typing import Any, Optional

import pytest
from pydantic import BaseModel, Field, ValidationError

from oasmodel.exceptions import ShapeMismatchError
from oasmodel.models import (
    HTTPMethod,
    Info,
    MediaType,
    OpenAPI,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    Reference,
    RequestBody,
    Schema,
    SecurityRequirement,
    Server,
    ServerVariable,
    is_reference,
)
from oasmodel.parser import parse_document
from oasmodel.serializer import to_dict


class InternalExtensions(BaseModel):
    internal_id: Optional[str] = Field(default=None, alias="x-internal-id")


class RankedExtensions(BaseModel):
    rank: int = Field(alias="x-rank")


# ---------------------------------------------------------------------------
# Reference-or-object slots
# ---------------------------------------------------------------------------


class TestReferenceOrObject:
    """A mapping whose only key is $ref is a Reference; anything else is the object."""

    def test_ref_only_mapping_becomes_reference(self) -> None:
        media = MediaType.model_validate({"schema": {"$ref": "#/components/schemas/Pet"}})
        assert isinstance(media.schema_, Reference)
        assert media.schema_.ref == "#/components/schemas/Pet"

    def test_object_mapping_becomes_object(self) -> None:
        media = MediaType.model_validate({"schema": {"type": "string"}})
        assert isinstance(media.schema_, Schema)
        assert media.schema_.type == "string"

    def test_ref_with_sibling_keys_is_not_a_reference(self) -> None:
        value = {"$ref": "#/components/parameters/Limit", "name": "limit"}
        assert not is_reference(value)
        # Treated as a Parameter, which lacks "in" and does not allow "$ref".
        with pytest.raises(ValidationError):
            Operation.model_validate({"parameters": [value]})

    def test_reference_rejects_extra_keys(self) -> None:
        with pytest.raises(ValidationError):
            Reference.model_validate({"$ref": "#/a", "summary": "nope"})

    def test_reference_requires_ref(self) -> None:
        with pytest.raises(ValidationError):
            Reference.model_validate({})

    def test_is_reference_accepts_instances_and_mappings(self) -> None:
        assert is_reference(Reference(ref="#/components/schemas/Pet"))
        assert is_reference({"$ref": "#/components/schemas/Pet"})
        assert not is_reference({"type": "string"})
        assert not is_reference(Schema(type="string"))
        assert not is_reference("#/components/schemas/Pet")

    def test_component_name(self) -> None:
        assert Reference(ref="#/components/schemas/Pet").component_name == "Pet"
        assert Reference(ref="#/components/schemas/a~1b").component_name == "a/b"

    def test_external_reference(self) -> None:
        ref = Reference(ref="common.yaml#/components/schemas/Pet")
        assert not ref.is_internal
        assert ref.component_name is None

    def test_reference_serializes_with_dollar_ref(self) -> None:
        assert to_dict(Reference(ref="#/components/schemas/Pet")) == {
            "$ref": "#/components/schemas/Pet"
        }

    def test_nested_schema_references(self) -> None:
        schema = Schema.model_validate(
            {
                "type": "object",
                "properties": {
                    "owner": {"$ref": "#/components/schemas/Owner"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "allOf": [{"$ref": "#/components/schemas/Base"}],
            }
        )
        assert isinstance(schema.properties["owner"], Reference)
        assert isinstance(schema.properties["tags"], Schema)
        assert isinstance(schema.properties["tags"].items, Schema)
        assert isinstance(schema.all_of[0], Reference)


# ---------------------------------------------------------------------------
# Vendor extensions
# ---------------------------------------------------------------------------


class TestExtensions:
    """x- keys are collected into `extensions` and written back inline."""

    def test_collects_extension_keys(self) -> None:
        info = Info.model_validate(
            {"title": "t", "version": "1", "x-logo": {"url": "https://example.com/l.png"}}
        )
        assert info.extensions == {"x-logo": {"url": "https://example.com/l.png"}}

    def test_no_extensions_leaves_field_unset(self) -> None:
        info = Info.model_validate({"title": "t", "version": "1"})
        assert info.extensions is None
        assert "extensions" not in to_dict(info)

    def test_unknown_fixed_field_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Info.model_validate({"title": "t", "version": "1", "logo": "nope"})

    def test_extensions_are_written_inline(self) -> None:
        info = Info.model_validate({"title": "t", "version": "1", "x-audience": "public"})
        assert to_dict(info) == {"title": "t", "version": "1", "x-audience": "public"}

    def test_untyped_document_keeps_dicts(self, petstore: OpenAPI) -> None:
        assert petstore.paths["/pets"].get.extensions == {"x-internal-id": "PET-001"}
        assert petstore.info.extensions == {"x-audience": "public"}

    def test_typed_extensions(self, petstore_raw: dict[str, Any]) -> None:
        doc = OpenAPI[InternalExtensions].model_validate(petstore_raw)
        get_pets = doc.paths["/pets"].get
        assert isinstance(get_pets.extensions, InternalExtensions)
        assert get_pets.extensions.internal_id == "PET-001"
        assert doc.paths["/pets/{petId}"].extensions.internal_id == "PET-PATH"
        assert doc.paths["/pets"].post.extensions is None

    def test_typed_extensions_round_trip(self, petstore_raw: dict[str, Any]) -> None:
        doc = OpenAPI[InternalExtensions].model_validate(petstore_raw)
        data = to_dict(doc)
        assert data["paths"]["/pets"]["get"]["x-internal-id"] == "PET-001"
        assert data["paths"]["/pets/{petId}"]["x-internal-id"] == "PET-PATH"
        assert data == petstore_raw

    def test_typed_extension_value_is_validated(self) -> None:
        raw = {
            "openapi": "3.0.3",
            "info": {"title": "t", "version": "1"},
            "paths": {"/a": {"get": {"x-rank": "high", "responses": {}}}},
        }
        with pytest.raises(ValidationError):
            OpenAPI[RankedExtensions].model_validate(raw)

    def test_schema_keeps_unknown_keywords(self) -> None:
        schema = Schema.model_validate(
            {"type": "string", "$comment": "legacy", "x-order": 3}
        )
        assert schema.model_extra == {"$comment": "legacy"}
        assert schema.extensions == {"x-order": 3}
        assert to_dict(schema) == {"type": "string", "$comment": "legacy", "x-order": 3}

    def test_schema_keyword_named_extensions_is_kept(self) -> None:
        raw = {"type": "object", "extensions": {"a": 1}, "x-order": 2}
        schema = Schema.model_validate(raw)
        assert schema.model_extra == {"extensions": {"a": 1}}
        assert schema.extensions == {"x-order": 2}
        assert to_dict(schema) == raw

    def test_key_named_extensions_is_a_shape_mismatch(self, minimal_raw: dict[str, Any]) -> None:
        minimal_raw["info"]["extensions"] = {"foo": 1}
        with pytest.raises(ShapeMismatchError) as exc_info:
            parse_document(minimal_raw)
        assert [issue.location for issue in exc_info.value.issues] == ["info.extensions"]

    def test_key_shaped_like_the_slot_is_an_extension(self) -> None:
        raw = {"title": "t", "version": "1", "x-*": {"foo": 1}}
        info = Info.model_validate(raw)
        assert info.extensions == {"x-*": {"foo": 1}}
        assert to_dict(info) == raw

    def test_keyword_takes_extension_keys(self) -> None:
        info = Info(title="t", version="1", extensions={"x-logo": "l.png"})
        assert info.extensions == {"x-logo": "l.png"}
        assert info == Info.model_validate({"title": "t", "version": "1", "x-logo": "l.png"})
        assert to_dict(info) == {"title": "t", "version": "1", "x-logo": "l.png"}

    def test_keyword_rejects_plain_keys(self) -> None:
        with pytest.raises(ValidationError, match="must start with 'x-'"):
            Info(title="t", version="1", extensions={"logo": "l.png"})

    def test_keyword_accepts_typed_extension_model(self) -> None:
        typed = InternalExtensions.model_validate({"x-internal-id": "REC-9"})
        operation = Operation[InternalExtensions](operation_id="listRecords", extensions=typed)
        assert operation.extensions == typed
        assert to_dict(operation) == {"operationId": "listRecords", "x-internal-id": "REC-9"}


# ---------------------------------------------------------------------------
# Field names and immutability
# ---------------------------------------------------------------------------


class TestFieldNames:
    """Attributes are snake_case; wire names are accepted and emitted."""

    def test_wire_and_attribute_names_both_accepted(self) -> None:
        by_wire = Operation.model_validate({"operationId": "a"})
        by_name = Operation(operation_id="a")
        assert by_wire == by_name

    def test_keyword_fields(self) -> None:
        param = Parameter.model_validate({"name": "q", "in": "query", "schema": {"type": "string"}})
        assert param.in_ == "query"
        assert isinstance(param.schema_, Schema)
        assert to_dict(param) == {"name": "q", "in": "query", "schema": {"type": "string"}}

    def test_schema_not_keyword(self) -> None:
        schema = Schema.model_validate({"not": {"type": "null"}})
        assert isinstance(schema.not_, Schema)
        assert to_dict(schema) == {"not": {"type": "null"}}

    def test_models_are_frozen(self) -> None:
        info = Info(title="t", version="1")
        with pytest.raises(ValidationError):
            info.title = "changed"  # type: ignore[misc]

    def test_required_fields(self) -> None:
        with pytest.raises(ValidationError):
            Info.model_validate({"title": "t"})
        with pytest.raises(ValidationError):
            OpenAPI.model_validate({"openapi": "3.0.0", "info": {"title": "t", "version": "1"}})


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class TestParameter:
    """Derived parameter properties."""

    def test_path_parameter_is_always_required(self) -> None:
        param = Parameter(name="id", in_="path")
        assert param.required is None
        assert param.is_required is True

    def test_other_locations_default_to_optional(self) -> None:
        assert Parameter(name="q", in_="query").is_required is False
        assert Parameter(name="q", in_="query", required=True).is_required is True

    def test_location(self) -> None:
        assert Parameter(name="s", in_="cookie").location is ParameterLocation.COOKIE
        assert Parameter(name="s", in_="body").location is None

    def test_identity(self) -> None:
        assert Parameter(name="id", in_="header").identity == ("id", "header")

    @pytest.mark.parametrize(
        ("location", "style"),
        [("query", "form"), ("cookie", "form"), ("path", "simple"), ("header", "simple")],
    )
    def test_default_style(self, location: str, style: str) -> None:
        assert Parameter(name="p", in_=location).default_style == style

    def test_explicit_style_wins(self) -> None:
        assert Parameter(name="p", in_="query", style="pipeDelimited").default_style == "pipeDelimited"

    def test_request_body_optional_by_default(self) -> None:
        assert RequestBody().is_required is False
        assert RequestBody(required=True).is_required is True


# ---------------------------------------------------------------------------
# Paths, operations and servers
# ---------------------------------------------------------------------------


class TestPathsAndOperations:
    """Operation iteration and lookups."""

    def test_operations_follow_declaration_order(self) -> None:
        item = PathItem.model_validate(
            {
                "put": {"responses": {"200": {"description": "ok"}}},
                "get": {"responses": {"200": {"description": "ok"}}},
                "trace": {"responses": {"200": {"description": "ok"}}},
            }
        )
        assert [method for method, _ in item.operations()] == [
            HTTPMethod.GET,
            HTTPMethod.PUT,
            HTTPMethod.TRACE,
        ]

    def test_document_operations(self, petstore: OpenAPI) -> None:
        found = [(path, method.value) for path, method, _ in petstore.operations()]
        assert found == [
            ("/pets", "get"),
            ("/pets", "post"),
            ("/pets/{petId}", "get"),
            ("/pets/{petId}", "delete"),
        ]

    def test_get_operation(self, petstore: OpenAPI) -> None:
        op = petstore.get_operation("deletePet")
        assert op is not None
        assert op.is_deprecated
        assert petstore.get_operation("missing") is None

    def test_callbacks_hold_path_items(self, petstore: OpenAPI) -> None:
        callback = petstore.paths["/pets"].post.callbacks["onAdopted"]
        item = callback["{$request.body#/callbackUrl}"]
        assert isinstance(item, PathItem)
        assert item.post.operation_id == "petAdoptedCallback"

    def test_security_requirement_is_a_mapping(self, petstore: OpenAPI) -> None:
        requirement = petstore.paths["/pets"].post.security[0]
        assert isinstance(requirement, SecurityRequirement)
        assert requirement["petstoreOAuth"] == ["write:pets"]
        assert list(requirement) == ["petstoreOAuth"]

    def test_empty_security_requirement(self) -> None:
        requirement = SecurityRequirement.model_validate({})
        assert len(requirement) == 0
        assert to_dict(requirement) == {}

    def test_effective_servers_default(self, minimal_raw: dict[str, Any]) -> None:
        doc = OpenAPI.model_validate(minimal_raw)
        assert [server.url for server in doc.effective_servers] == ["/"]

    def test_effective_servers_declared(self, petstore: OpenAPI) -> None:
        assert len(petstore.effective_servers) == 2

    def test_server_expand(self) -> None:
        server = Server(
            url="https://{region}.example.com/{version}",
            variables={
                "region": ServerVariable(default="eu", enum=["eu", "us"]),
                "version": ServerVariable(default="v1"),
            },
        )
        assert server.expand() == "https://eu.example.com/v1"
        assert server.expand(region="us") == "https://us.example.com/v1"

    def test_schema_subschemas(self) -> None:
        schema = Schema.model_validate(
            {
                "properties": {"a": {"type": "string"}},
                "items": {"$ref": "#/components/schemas/Item"},
                "additionalProperties": False,
                "oneOf": [{"type": "integer"}, {"type": "number"}],
            }
        )
        locations = [location for location, _ in schema.subschemas()]
        assert locations == ["properties.a", "items", "oneOf[0]", "oneOf[1]"]
