from api_spec_sync.model.base import (
    ApiSpecification,
    DiffStatus,
    HttpMethod,
    Operation,
    Parameter,
    PathItem,
    ProgressStatus,
    Schema,
    ref_name,
)


class TestSchema:
    def test_ref_alias(self):
        s = Schema.model_validate({"$ref": "#/components/schemas/Order"})
        assert s.is_ref is True
        assert s.ref_name == "Order"

    def test_bare_ref_name(self):
        assert ref_name("Order") == "Order"
        assert ref_name("#/definitions/Order") == "Order"
        assert ref_name(None) is None

    def test_nested_object(self):
        s = Schema.model_validate({
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "integer", "format": "int64"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
            "additionalProperties": False,
        })
        assert s.properties["id"].format == "int64"
        assert s.properties["tags"].items.type == "string"
        assert s.additional_properties is False

    def test_additional_properties_schema(self):
        s = Schema.model_validate({"type": "object", "additionalProperties": {"type": "string"}})
        assert isinstance(s.additional_properties, Schema)
        assert s.additional_properties.type == "string"

    def test_unknown_keys_preserved(self):
        s = Schema.model_validate({"type": "string", "example": "abc"})
        assert s.model_dump(by_alias=True, exclude_none=True)["example"] == "abc"


class TestParameter:
    def test_in_alias(self):
        p = Parameter.model_validate({"name": "id", "in": "path", "schema": {"type": "integer"}})
        assert p.location == "path"
        assert p.schema_.type == "integer"


class TestOperation:
    def test_defaults(self):
        op = Operation()
        assert op.diff == DiffStatus.NONE
        assert op.progress == ProgressStatus.NONE
        assert op.tag == "none"
        assert op.identifier is None

    def test_sync_extensions(self):
        op = Operation.model_validate({
            "x-sync-diff": "endpoint",
            "x-sync-progress": "MOCK",
            "x-sync-tag": "stub",
            "x-sync-id": "abc",
            "x-sync-mock": True,
            "x-sync-verify-responses": True,
        })
        assert op.diff == DiffStatus.ENDPOINT
        assert op.progress == ProgressStatus.MOCK
        assert op.tag == "stub"
        assert op.identifier == "abc"
        assert op.mock is True
        assert op.verify_responses is True

    def test_integer_status_codes(self):
        op = Operation.model_validate({"responses": {200: {"description": "OK"}}})
        assert list(op.responses) == ["200"]

    def test_dump_uses_aliases(self):
        op = Operation.model_validate({"requestBody": {"content": {}}, "x-sync-tag": "stub"})
        data = op.model_dump(by_alias=True, exclude_none=True, mode="json")
        assert "requestBody" in data
        assert data["x-sync-tag"] == "stub"
        assert data["x-sync-diff"] == "none"


class TestPathItem:
    def test_operation_access(self):
        item = PathItem.model_validate({"get": {"summary": "a"}, "delete": {"summary": "b"}})
        assert item.operation(HttpMethod.GET).summary == "a"
        assert item.operation(HttpMethod.POST) is None
        assert [m for m, _ in item.operations()] == [HttpMethod.GET, HttpMethod.DELETE]

    def test_set_and_empty(self):
        item = PathItem()
        assert item.is_empty()
        item.set_operation(HttpMethod.PUT, Operation())
        assert not item.is_empty()


class TestApiSpecification:
    def test_missing_registry(self):
        spec = ApiSpecification()
        assert spec.schema_registry() == {}
        assert list(spec.iter_operations()) == []

    def test_iter_operations(self):
        spec = ApiSpecification.model_validate({
            "paths": {"/a": {"get": {}, "post": {}}, "/b": {"patch": {}}},
        })
        assert [(p, m) for p, m, _ in spec.iter_operations()] == [
            ("/a", HttpMethod.GET),
            ("/a", HttpMethod.POST),
            ("/b", HttpMethod.PATCH),
        ]
