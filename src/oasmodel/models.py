"""The OpenAPI 3.x object model as frozen Pydantic models.

This is the single source of truth for the shape of an OpenAPI document.
Every object kind named by the OpenAPI 3.x specification has one model here;
the loader, serializer, resolver and validator all read and write these
types and nothing else.

Conventions shared by every model:

* **Attribute names are snake_case; wire names are aliases.** ``operationId``
  is ``operation_id``, ``in`` is ``in_``, ``$ref`` is ``ref``, ``schema`` is
  ``schema_``. Values are accepted by alias or by attribute name.
* **Absent means absent.** Optional fields default to ``None`` and are
  omitted when serialised, whether left out or passed as ``None``. Only
  fields holding arbitrary JSON (``example``, ``default``, ``value``) write
  an explicit ``None`` as ``null``. Defaults that the OpenAPI text defines (for
  example ``Parameter.required`` defaulting to false) are exposed as
  read-only properties such as :attr:`Parameter.is_required` rather than
  materialised into the value.
* **Shapes are permissive.** Cross-field rules (path parameters must be
  required, ``readOnly``/``writeOnly`` exclusivity, unique operation ids,
  ...) are *not* enforced at construction time; see
  :mod:`oasmodel.validation`.
* **Reference-or-object slots** are typed :data:`ReferenceOr` and are
  told apart by shape: a mapping whose only key is ``$ref`` is a
  :class:`Reference`, anything else is the concrete object.
* **Vendor extensions** (keys starting with ``x-``) are lifted into the
  ``extensions`` field on the way in and written back inline on the way
  out. A key literally named ``extensions`` is an ordinary key: rejected
  on closed objects, kept as a keyword on :class:`Schema`. In Python the
  ``extensions=`` keyword takes the ``x-`` keys themselves.
  :class:`PathItem` and :class:`Operation` are generic over the
  extension shape, so callers may supply a model with ``x-`` aliases
  instead of an unconstrained dict::

      class Internal(BaseModel):
          internal_id: Optional[str] = Field(default=None, alias="x-internal-id")

      doc = OpenAPI[Internal].model_validate(raw)
      doc.paths["/records"].get.extensions.internal_id
"""

from __future__ import annotations

import enum
import functools
from collections.abc import Iterator, Mapping
from typing import Annotated, Any, Generic, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    ValidationError,
    model_serializer,
    model_validator,
)
from pydantic import Discriminator as UnionDiscriminator
from pydantic import Tag as UnionTag
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

REF_KEY = "$ref"
"""The single key of a Reference Object."""

EXTENSION_PREFIX = "x-"
"""Prefix of vendor-extension keys."""

EXTENSIONS_SLOT = "x-*"
"""Input key the collected extensions are validated under.

It carries the extension prefix, so a document key of the same name is
itself collected as an extension and can never fill the slot directly.
"""

DEFAULT_RESPONSE_KEY = "default"
"""Responses map key covering every status code not declared explicitly."""

RESPONSE_RANGE_KEYS = ("1XX", "2XX", "3XX", "4XX", "5XX")
"""The only status-code range keys a responses map may use."""

ExtensionT = TypeVar("ExtensionT")
T = TypeVar("T")


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a Path Item can define, in OpenAPI declaration order."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where a parameter can appear, per the OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class SecuritySchemeType(str, enum.Enum):
    """Values of ``SecurityScheme.type``."""

    API_KEY = "apiKey"
    HTTP = "http"
    OAUTH2 = "oauth2"
    OPEN_ID_CONNECT = "openIdConnect"


# --- Base classes ---


class OpenAPIObject(BaseModel):
    """Common configuration for every OpenAPI object except :class:`Reference`.

    Keys starting with ``x-`` are collected into :attr:`extensions` before
    field validation and inlined again by the serializer. Any other key that
    is not a declared field is rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    extensions: Optional[dict[str, Any]] = Field(default=None, alias=EXTENSIONS_SLOT)

    def __init__(self, /, **data: Any) -> None:
        # The keyword is spread back into x- keys so it meets the same
        # collection step as a parsed document.
        extensions = data.pop("extensions", None)
        if isinstance(extensions, BaseModel):
            extensions = extensions.model_dump(by_alias=True, exclude_unset=True)
        if extensions:
            misnamed = [key for key in extensions if not str(key).startswith(EXTENSION_PREFIX)]
            if misnamed:
                raise ValidationError.from_exception_data(
                    type(self).__name__,
                    [
                        {
                            "type": PydanticCustomError(
                                "extension_key",
                                "extension keys must start with 'x-'",
                            ),
                            "loc": ("extensions", key),
                            "input": extensions[key],
                        }
                        for key in misnamed
                    ],
                )
            data.update(extensions)
        super().__init__(**data)

    @model_validator(mode="before")
    @classmethod
    def _collect_extensions(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        found = {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and key.startswith(EXTENSION_PREFIX)
        }
        if not found and "extensions" not in data:
            return data
        remaining = {key: value for key, value in data.items() if key not in found}
        # Filling the slot leaves a literal "extensions" key unmatched, so it
        # is an extra: rejected on closed objects, kept on Schema.
        remaining[EXTENSIONS_SLOT] = found or None
        return remaining

    @model_serializer(mode="wrap")
    def _inline_extensions(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> dict[str, Any]:
        data = handler(self)
        extensions = data.pop(EXTENSIONS_SLOT if info.by_alias else "extensions", None)
        for key in _null_omitted_keys(type(self)):
            if key in data and data[key] is None:
                del data[key]
        if extensions:
            data.update(extensions)
        return data


@functools.lru_cache(maxsize=None)
def _null_omitted_keys(model: type[BaseModel]) -> frozenset[str]:
    """Output keys of *model* whose ``None`` means absent.

    Fields typed ``Any`` (``example``, ``default``, ``value``, ...) hold
    arbitrary JSON, where ``null`` is a real value, so they are left out.
    """
    keys: set[str] = set()
    for name, field in model.model_fields.items():
        if field.annotation is Any or name == "extensions":
            continue
        keys.add(name)
        if field.serialization_alias:
            keys.add(field.serialization_alias)
        if field.alias:
            keys.add(field.alias)
    return frozenset(keys)


class _MappingMixin:
    """Read-only mapping behaviour for the string-keyed ``RootModel`` maps.

    Classes using it must also derive from ``RootModel`` over a dict; the
    mixin itself declares no ``root`` annotation so it never overrides the
    value type.
    """

    def __getitem__(self, key: str) -> Any:
        return self.root[key]

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def get(self, key: str, default: Any = None) -> Any:
        return self.root.get(key, default)

    def keys(self):  # noqa: ANN201
        return self.root.keys()

    def values(self):  # noqa: ANN201
        return self.root.values()

    def items(self):  # noqa: ANN201
        return self.root.items()


# --- Reference Object ---


class Reference(BaseModel):
    """A Reference Object: ``{"$ref": "#/components/schemas/Pet"}``.

    Exactly one field is allowed. This is the only cross-entity pointer in
    the model; :func:`oasmodel.parser.resolver.resolve_reference` follows it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    ref: str = Field(alias=REF_KEY)

    @property
    def is_internal(self) -> bool:
        """Whether the reference points into the same document (``#/...``)."""
        return self.ref.startswith("#/")

    @property
    def component_name(self) -> Optional[str]:
        """The last pointer segment of an internal reference, e.g. ``Pet``."""
        if not self.is_internal:
            return None
        return self.ref.rsplit("/", 1)[-1].replace("~1", "/").replace("~0", "~")


def is_reference(value: Any) -> bool:
    """Return ``True`` when *value* is the Reference variant of a union slot.

    A :class:`Reference` instance, or a mapping whose one and only key is
    ``$ref``, counts as a reference. Any other shape is a concrete object.
    """
    if isinstance(value, Reference):
        return True
    return isinstance(value, Mapping) and len(value) == 1 and REF_KEY in value


def _reference_or_object(value: Any) -> str:
    return "$reference" if is_reference(value) else "$object"


ReferenceOr = Annotated[
    Union[
        Annotated[Reference, UnionTag("$reference")],
        Annotated[T, UnionTag("$object")],
    ],
    UnionDiscriminator(_reference_or_object),
]
"""``ReferenceOr[Schema]`` -- either a :class:`Reference` or a :class:`Schema`."""

UNION_TAGS = frozenset({"$reference", "$object"})
"""Tag names that Pydantic inserts into error locations for :data:`ReferenceOr`."""


# --- Metadata objects ---


class Contact(OpenAPIObject):
    """Contact information for the exposed API."""

    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class License(OpenAPIObject):
    """License information for the exposed API."""

    name: str
    url: Optional[str] = None


class Info(OpenAPIObject):
    """Metadata about the API: title, version and optional contact/license."""

    title: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact: Optional[Contact] = None
    license: Optional[License] = None
    version: str


class ExternalDocumentation(OpenAPIObject):
    """A link to external documentation."""

    description: Optional[str] = None
    url: str


class Tag(OpenAPIObject):
    """Metadata for a tag used by operations."""

    name: str
    description: Optional[str] = None
    external_docs: Optional[ExternalDocumentation] = None


class ServerVariable(OpenAPIObject):
    """One substitution slot in a server URL template."""

    enum: Optional[list[str]] = None
    default: str
    description: Optional[str] = None


class Server(OpenAPIObject):
    """A deployment target. ``{name}`` segments of ``url`` refer to ``variables``."""

    url: str
    description: Optional[str] = None
    variables: Optional[dict[str, ServerVariable]] = None

    def expand(self, **overrides: str) -> str:
        """Return :attr:`url` with every variable substituted.

        Variables take their ``default`` unless given in *overrides*.
        """
        url = self.url
        values = {name: var.default for name, var in (self.variables or {}).items()}
        values.update(overrides)
        for name, value in values.items():
            url = url.replace("{" + name + "}", value)
        return url


# --- Schema Object ---


class Discriminator(OpenAPIObject):
    """Polymorphism hint: which payload property selects the concrete schema."""

    property_name: str
    mapping: Optional[dict[str, str]] = None


class XML(OpenAPIObject):
    """XML serialisation hints for a schema property."""

    name: Optional[str] = None
    namespace: Optional[str] = None
    prefix: Optional[str] = None
    attribute: Optional[bool] = None
    wrapped: Optional[bool] = None


class Schema(OpenAPIObject):
    """A Schema Object: the JSON Schema subset used by OpenAPI 3.0, plus extensions.

    The JSON Schema keywords OpenAPI 3.0 adopts are declared as fields.
    Keywords outside that list are kept as extra fields (see
    ``model_extra``) rather than rejected, so documents written against a
    newer JSON Schema dialect still load and round-trip.
    """

    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    multiple_of: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None
    exclusive_maximum: Optional[Union[bool, int, float]] = None
    minimum: Optional[Union[int, float]] = None
    exclusive_minimum: Optional[Union[bool, int, float]] = None
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    pattern: Optional[str] = None
    max_items: Optional[int] = None
    min_items: Optional[int] = None
    unique_items: Optional[bool] = None
    max_properties: Optional[int] = None
    min_properties: Optional[int] = None
    required: Optional[list[str]] = None
    enum: Optional[list[Any]] = None

    type: Optional[Union[str, list[str]]] = None
    all_of: Optional[list[ReferenceOr[Schema]]] = None
    one_of: Optional[list[ReferenceOr[Schema]]] = None
    any_of: Optional[list[ReferenceOr[Schema]]] = None
    not_: Optional[ReferenceOr[Schema]] = Field(default=None, alias="not")
    items: Optional[ReferenceOr[Schema]] = None
    properties: Optional[dict[str, ReferenceOr[Schema]]] = None
    additional_properties: Optional[Union[bool, ReferenceOr[Schema]]] = None
    description: Optional[str] = None
    format: Optional[str] = None
    default: Any = None

    # OpenAPI additions
    nullable: Optional[bool] = None
    discriminator: Optional[Discriminator] = None
    read_only: Optional[bool] = None
    write_only: Optional[bool] = None
    xml: Optional[XML] = None
    external_docs: Optional[ExternalDocumentation] = None
    example: Any = None
    deprecated: Optional[bool] = None

    def subschemas(self) -> Iterator[tuple[str, Union[Reference, Schema]]]:
        """Yield ``(relative_location, schema)`` for every directly nested schema.

        Locations use wire names, e.g. ``properties.name``, ``allOf[1]``,
        ``items``. Boolean ``additionalProperties`` values are skipped.
        """
        for name, schema in (self.properties or {}).items():
            yield f"properties.{name}", schema
        if self.items is not None:
            yield "items", self.items
        if self.not_ is not None:
            yield "not", self.not_
        if isinstance(self.additional_properties, (Schema, Reference)):
            yield "additionalProperties", self.additional_properties
        for keyword, members in (
            ("allOf", self.all_of),
            ("oneOf", self.one_of),
            ("anyOf", self.any_of),
        ):
            for index, member in enumerate(members or []):
                yield f"{keyword}[{index}]", member


# --- Examples, media types and parameters ---


class Example(OpenAPIObject):
    """An example value, embedded (``value``) or linked (``externalValue``)."""

    summary: Optional[str] = None
    description: Optional[str] = None
    value: Any = None
    external_value: Optional[str] = None


class Encoding(OpenAPIObject):
    """Serialisation hints for one property of a multipart or form body."""

    content_type: Optional[str] = None
    headers: Optional[dict[str, ReferenceOr[Header]]] = None
    style: Optional[str] = None
    explode: Optional[bool] = None
    allow_reserved: Optional[bool] = None


class MediaType(OpenAPIObject):
    """Schema and examples for one media type (the key of a ``content`` map)."""

    schema_: Optional[ReferenceOr[Schema]] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, ReferenceOr[Example]]] = None
    encoding: Optional[dict[str, Encoding]] = None


class Header(OpenAPIObject):
    """A Header Object: the Parameter shape without ``name`` and ``in``.

    The name is the key of the enclosing ``headers`` map and the location is
    implicitly ``header``. :class:`Parameter` extends this shape.
    """

    description: Optional[str] = None
    required: Optional[bool] = None
    deprecated: Optional[bool] = None
    allow_empty_value: Optional[bool] = None
    style: Optional[str] = None
    explode: Optional[bool] = None
    allow_reserved: Optional[bool] = None
    schema_: Optional[ReferenceOr[Schema]] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, ReferenceOr[Example]]] = None
    content: Optional[dict[str, MediaType]] = None

    @property
    def is_required(self) -> bool:
        """Effective ``required`` value (absent means false)."""
        return bool(self.required)

    @property
    def is_deprecated(self) -> bool:
        return bool(self.deprecated)


class Parameter(Header):
    """A single operation parameter, identified by ``(name, in)``."""

    name: str
    in_: str = Field(alias="in")

    @property
    def location(self) -> Optional[ParameterLocation]:
        """The ``in`` value as a :class:`ParameterLocation`, or ``None`` if unknown."""
        try:
            return ParameterLocation(self.in_)
        except ValueError:
            return None

    @property
    def identity(self) -> tuple[str, str]:
        """The ``(name, in)`` pair that must be unique within a parameter list."""
        return self.name, self.in_

    @property
    def is_required(self) -> bool:
        """Effective ``required`` value.

        Path parameters are always required; elsewhere an absent
        ``required`` means false.
        """
        return self.in_ == ParameterLocation.PATH.value or bool(self.required)

    @property
    def default_style(self) -> str:
        """The serialisation style that applies when ``style`` is absent."""
        if self.style is not None:
            return self.style
        if self.in_ in (ParameterLocation.QUERY.value, ParameterLocation.COOKIE.value):
            return "form"
        return "simple"


class RequestBody(OpenAPIObject):
    """The body of a request, keyed by media type."""

    description: Optional[str] = None
    content: Optional[dict[str, MediaType]] = None
    required: Optional[bool] = None

    @property
    def is_required(self) -> bool:
        return bool(self.required)


# --- Responses ---


class Link(OpenAPIObject):
    """A design-time link from a response to another operation."""

    operation_ref: Optional[str] = None
    operation_id: Optional[str] = None
    parameters: Optional[dict[str, Any]] = None
    request_body: Any = None
    description: Optional[str] = None
    server: Optional[Server] = None


class Response(OpenAPIObject):
    """One possible response of an operation. ``description`` is required."""

    description: str
    headers: Optional[dict[str, ReferenceOr[Header]]] = None
    content: Optional[dict[str, MediaType]] = None
    links: Optional[dict[str, ReferenceOr[Link]]] = None


class Responses(_MappingMixin, RootModel[dict[str, ReferenceOr[Response]]]):
    """Status-code-keyed response catalogue of an operation.

    Keys are explicit codes (``"200"``), ranges (``"1XX"`` .. ``"5XX"``) or
    ``"default"``. Keys are always strings; integer keys produced by YAML
    loaders (``200:``) are converted on the way in.
    """

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _stringify_keys(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {str(key): value for key, value in data.items()}
        return data

    @property
    def default(self) -> Optional[Union[Reference, Response]]:
        return self.root.get(DEFAULT_RESPONSE_KEY)

    def resolve(self, status: Union[int, str]) -> Optional[Union[Reference, Response]]:
        """Return the entry that applies to *status*.

        An explicit code wins over its range (``"200"`` over ``"2XX"``),
        a range wins over ``default``. Returns ``None`` when nothing applies.
        """
        code = str(status).strip()
        if code in self.root:
            return self.root[code]
        if len(code) == 3 and code.isdigit():
            range_key = f"{code[0]}XX"
            if range_key in self.root:
                return self.root[range_key]
        return self.root.get(DEFAULT_RESPONSE_KEY)


# --- Security ---


class OAuthFlow(OpenAPIObject):
    """Configuration of one OAuth2 flow.

    Which URLs are required depends on the flow (``implicit`` needs
    ``authorizationUrl``, ``password`` and ``clientCredentials`` need
    ``tokenUrl``, ``authorizationCode`` needs both); the shape accepts any
    combination and :mod:`oasmodel.validation` checks it.
    """

    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    refresh_url: Optional[str] = None
    scopes: dict[str, str]


class OAuthFlows(OpenAPIObject):
    """The OAuth2 flows a security scheme supports."""

    implicit: Optional[OAuthFlow] = None
    password: Optional[OAuthFlow] = None
    client_credentials: Optional[OAuthFlow] = None
    authorization_code: Optional[OAuthFlow] = None


class SecurityScheme(OpenAPIObject):
    """An authentication mechanism usable by operations.

    Only the fields relevant to :attr:`type` are expected to be set:
    ``name``/``in`` for ``apiKey``, ``scheme``/``bearerFormat`` for ``http``,
    ``flows`` for ``oauth2`` and ``openIdConnectUrl`` for ``openIdConnect``.
    """

    type: str
    description: Optional[str] = None
    name: Optional[str] = None
    in_: Optional[str] = Field(default=None, alias="in")
    scheme: Optional[str] = None
    bearer_format: Optional[str] = None
    flows: Optional[OAuthFlows] = None
    open_id_connect_url: Optional[str] = None


class SecurityRequirement(_MappingMixin, RootModel[dict[str, list[str]]]):
    """Scheme name -> required scopes. ``{}`` makes security optional."""

    model_config = ConfigDict(frozen=True)


# --- Operations and paths ---


class Callback(_MappingMixin, RootModel):
    """Runtime-expression -> Path Item map of out-of-band requests."""

    model_config = ConfigDict(frozen=True)

    root: dict[str, PathItem]


class Operation(OpenAPIObject, Generic[ExtensionT]):
    """One HTTP method on one path.

    ``extensions`` holds the ``x-`` keys of the operation, validated into
    ``ExtensionT`` when the model is parameterised.
    """

    extensions: Optional[ExtensionT] = Field(default=None, alias=EXTENSIONS_SLOT)

    tags: Optional[list[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocumentation] = None
    operation_id: Optional[str] = None
    parameters: Optional[list[ReferenceOr[Parameter]]] = None
    request_body: Optional[ReferenceOr[RequestBody]] = None
    responses: Optional[Responses] = None
    callbacks: Optional[dict[str, ReferenceOr[Callback]]] = None
    deprecated: Optional[bool] = None
    security: Optional[list[SecurityRequirement]] = None
    servers: Optional[list[Server]] = None

    @property
    def is_deprecated(self) -> bool:
        return bool(self.deprecated)


class PathItem(OpenAPIObject, Generic[ExtensionT]):
    """The operations available on one path template.

    ``$ref`` may point at an external definition of the same path item.
    """

    extensions: Optional[ExtensionT] = Field(default=None, alias=EXTENSIONS_SLOT)

    ref: Optional[str] = Field(default=None, alias=REF_KEY)
    summary: Optional[str] = None
    description: Optional[str] = None
    get: Optional[Operation[ExtensionT]] = None
    put: Optional[Operation[ExtensionT]] = None
    post: Optional[Operation[ExtensionT]] = None
    delete: Optional[Operation[ExtensionT]] = None
    options: Optional[Operation[ExtensionT]] = None
    head: Optional[Operation[ExtensionT]] = None
    patch: Optional[Operation[ExtensionT]] = None
    trace: Optional[Operation[ExtensionT]] = None
    servers: Optional[list[Server]] = None
    parameters: Optional[list[ReferenceOr[Parameter]]] = None

    def operations(self) -> Iterator[tuple[HTTPMethod, Operation[ExtensionT]]]:
        """Yield ``(method, operation)`` for every defined method, in declaration order."""
        for method in HTTPMethod:
            operation = getattr(self, method.value)
            if operation is not None:
                yield method, operation


Paths = dict[str, PathItem]
"""Path template -> :class:`PathItem`. Keys begin with ``/``."""


# --- Components and root ---


class Components(OpenAPIObject):
    """Named, reusable objects referenced from elsewhere via ``#/components/...``."""

    schemas: Optional[dict[str, ReferenceOr[Schema]]] = None
    responses: Optional[dict[str, ReferenceOr[Response]]] = None
    parameters: Optional[dict[str, ReferenceOr[Parameter]]] = None
    examples: Optional[dict[str, ReferenceOr[Example]]] = None
    request_bodies: Optional[dict[str, ReferenceOr[RequestBody]]] = None
    headers: Optional[dict[str, ReferenceOr[Header]]] = None
    security_schemes: Optional[dict[str, ReferenceOr[SecurityScheme]]] = None
    links: Optional[dict[str, ReferenceOr[Link]]] = None
    callbacks: Optional[dict[str, ReferenceOr[Callback]]] = None


class OpenAPI(OpenAPIObject, Generic[ExtensionT]):
    """The root of an OpenAPI 3.x document.

    Parameterise with an extension model (``OpenAPI[MyExt]``) to have the
    ``x-`` keys of every path item and operation validated into ``MyExt``.
    The root object's own extensions stay an unconstrained dict.
    """

    openapi: str
    info: Info
    servers: Optional[list[Server]] = None
    paths: dict[str, PathItem[ExtensionT]]
    components: Optional[Components] = None
    security: Optional[list[SecurityRequirement]] = None
    tags: Optional[list[Tag]] = None
    external_docs: Optional[ExternalDocumentation] = None

    @property
    def effective_servers(self) -> list[Server]:
        """:attr:`servers`, or a single ``/`` server when none are declared."""
        return list(self.servers) if self.servers else [Server(url="/")]

    def operations(self) -> Iterator[tuple[str, HTTPMethod, Operation[ExtensionT]]]:
        """Yield ``(path, method, operation)`` for every operation under :attr:`paths`."""
        for path, item in self.paths.items():
            for method, operation in item.operations():
                yield path, method, operation

    def get_operation(self, operation_id: str) -> Optional[Operation[ExtensionT]]:
        """Return the operation whose ``operationId`` equals *operation_id*."""
        for _, _, operation in self.operations():
            if operation.operation_id == operation_id:
                return operation
        return None


for _model in (
    Schema,
    Encoding,
    MediaType,
    Header,
    Parameter,
    Response,
    Responses,
    Callback,
    Operation,
    PathItem,
    Components,
    OpenAPI,
):
    _model.model_rebuild()
del _model
