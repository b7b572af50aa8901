"""Data models for persisted and live API specifications.

Both sides of a sync pass are loaded into these models. They follow the
OpenAPI document shape so a persisted specification round-trips through
YAML without losing keys the engine does not understand.
"""

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

REF_PREFIX = "#/components/schemas/"
NEUTRAL_TAG = "none"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def attr(self) -> str:
        return self.value.lower()


class DiffStatus(str, Enum):
    """Structural drift of one operation between live and persisted."""

    NONE = "none"
    REQUEST = "request"
    RESPONSE = "response"
    BOTH = "both"
    ENDPOINT = "endpoint"  # absorbing, cleared only by a reviewer


class ProgressStatus(str, Enum):
    NONE = "none"
    MOCK = "mock"
    COMPLETED = "completed"


def ref_name(ref: str | None) -> str | None:
    """Return the schema name a `$ref` points at.

    Accepts both `#/components/schemas/Order` and a bare `Order`.
    """
    if not ref:
        return None
    if ref.startswith(REF_PREFIX):
        return ref[len(REF_PREFIX):]
    return ref.rsplit("/", 1)[-1]


class _SpecModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Schema(_SpecModel):
    """A reference, primitive, object or array schema."""

    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = None
    format: str | None = None
    description: str | None = None
    properties: dict[str, "Schema"] | None = None
    required: list[str] | None = None
    additional_properties: "bool | Schema | None" = Field(default=None, alias="additionalProperties")
    items: "Schema | None" = None

    @property
    def is_ref(self) -> bool:
        return bool(self.ref)

    @property
    def ref_name(self) -> str | None:
        return ref_name(self.ref)


class MediaType(_SpecModel):
    schema_: Schema | None = Field(default=None, alias="schema")


class Parameter(_SpecModel):
    name: str
    location: str = Field(alias="in")  # path / query / header / cookie
    required: bool | None = None
    description: str | None = None
    schema_: Schema | None = Field(default=None, alias="schema")


class RequestBody(_SpecModel):
    required: bool | None = None
    description: str | None = None
    content: dict[str, MediaType] | None = None


class Response(_SpecModel):
    description: str | None = None
    content: dict[str, MediaType] | None = None  # "*/*" matches any type


class Operation(_SpecModel):
    """One HTTP method on a path, plus the sync metadata kept alongside it."""

    summary: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(default=None, alias="requestBody")
    responses: dict[str, Response] | None = None

    diff: DiffStatus = Field(default=DiffStatus.NONE, alias="x-sync-diff")
    progress: ProgressStatus = Field(default=ProgressStatus.NONE, alias="x-sync-progress")
    tag: str = Field(default=NEUTRAL_TAG, alias="x-sync-tag")
    identifier: str | None = Field(default=None, alias="x-sync-id")
    mock: bool | None = Field(default=None, alias="x-sync-mock")
    verify_responses: bool | None = Field(default=None, alias="x-sync-verify-responses")
    req_log: str | None = Field(default=None, alias="x-sync-req-log")
    res_log: str | None = Field(default=None, alias="x-sync-res-log")

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_str(cls, value: Any) -> Any:
        # YAML loads `200:` as an int key
        if isinstance(value, dict):
            return {str(code): resp for code, resp in value.items()}
        return value

    @field_validator("diff", "progress", mode="before")
    @classmethod
    def _lowercase_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value


class PathItem(_SpecModel):
    get: Operation | None = None
    post: Operation | None = None
    put: Operation | None = None
    patch: Operation | None = None
    delete: Operation | None = None

    def operation(self, method: HttpMethod) -> Operation | None:
        return getattr(self, method.attr)

    def set_operation(self, method: HttpMethod, operation: Operation | None) -> None:
        setattr(self, method.attr, operation)

    def operations(self) -> Iterator[tuple[HttpMethod, Operation]]:
        for method in HttpMethod:
            op = self.operation(method)
            if op is not None:
                yield method, op

    def is_empty(self) -> bool:
        return all(self.operation(method) is None for method in HttpMethod)


class Info(_SpecModel):
    title: str = "API Documentation"
    version: str = "1.0.0"


class Components(_SpecModel):
    schemas: dict[str, Schema] | None = None
    security_schemes: dict[str, Any] | None = Field(default=None, alias="securitySchemes")


class ApiSpecification(_SpecModel):
    openapi: str = "3.1.0"
    info: Info | None = None
    paths: dict[str, PathItem] | None = None
    components: Components | None = None

    def schema_registry(self) -> dict[str, Schema]:
        """Named schemas, or an empty mapping when the registry is missing."""
        if self.components is None or self.components.schemas is None:
            return {}
        return self.components.schemas

    def iter_operations(self) -> Iterator[tuple[str, HttpMethod, Operation]]:
        for path, item in (self.paths or {}).items():
            if item is None:
                continue
            for method, op in item.operations():
                yield path, method, op
