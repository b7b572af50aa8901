from api_spec_sync.engine.schema_match import match_schemas, schemas_equal
from api_spec_sync.model.base import Schema


def _schemas(data: dict) -> dict[str, Schema]:
    return {name: Schema.model_validate(s) for name, s in data.items()}


ORDER = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "integer", "format": "int64"},
        "lines": {"type": "array", "items": {"$ref": "#/components/schemas/OrderLine"}},
    },
}


class TestMatchSchemas:
    def test_identical_registries(self):
        registry = _schemas({"Order": ORDER, "OrderLine": {"type": "object", "properties": {"sku": {"type": "string"}}}})
        assert match_schemas(registry, dict(registry)) == {"Order": True, "OrderLine": True}

    def test_required_set_differs(self):
        live = _schemas({"Order": {**ORDER, "required": ["id", "total"]}})
        persisted = _schemas({"Order": ORDER})
        assert match_schemas(live, persisted) == {"Order": False}

    def test_required_order_ignored(self):
        live = _schemas({"Order": {**ORDER, "required": ["b", "a"]}})
        persisted = _schemas({"Order": {**ORDER, "required": ["a", "b"]}})
        assert match_schemas(live, persisted)["Order"] is True

    def test_live_only_and_persisted_only_names(self):
        live = _schemas({"New": {"type": "string"}, "Shared": {"type": "string"}})
        persisted = _schemas({"Old": {"type": "string"}, "Shared": {"type": "string"}})
        assert match_schemas(live, persisted) == {"New": False, "Shared": True, "Old": False}

    def test_missing_registries(self):
        assert match_schemas(None, None) == {}
        assert match_schemas(_schemas({"A": {"type": "string"}}), None) == {"A": False}
        assert match_schemas(None, _schemas({"A": {"type": "string"}})) == {"A": False}

    def test_self_reference_terminates(self):
        node = {"type": "object", "properties": {"next": {"$ref": "#/components/schemas/Node"}}}
        assert match_schemas(_schemas({"Node": node}), _schemas({"Node": node})) == {"Node": True}

    def test_mutual_reference_cycle_terminates(self):
        registry = {
            "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
            "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
        }
        changed = {**registry, "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}, "x": {"type": "string"}}}}
        result = match_schemas(_schemas(changed), _schemas(registry))
        # A only points at B by name; B's change is reported on B alone
        assert result == {"A": True, "B": False}

    def test_iteration_order_does_not_matter(self):
        live = {"A": {"type": "string"}, "B": {"type": "integer"}}
        persisted = {"B": {"type": "integer"}, "A": {"type": "number"}}
        forward = match_schemas(_schemas(live), _schemas(persisted))
        backward = match_schemas(
            _schemas(dict(reversed(list(live.items())))),
            _schemas(dict(reversed(list(persisted.items())))),
        )
        assert forward == backward == {"A": False, "B": True}


class TestSchemasEqual:
    def test_format_matters(self):
        assert not schemas_equal(
            Schema.model_validate({"type": "string", "format": "date-time"}),
            Schema.model_validate({"type": "string"}),
        )

    def test_ref_names_compared_not_resolved(self):
        a = Schema.model_validate({"$ref": "#/components/schemas/X"})
        b = Schema.model_validate({"$ref": "X"})
        assert schemas_equal(a, b)
        assert not schemas_equal(a, Schema.model_validate({"$ref": "#/components/schemas/Y"}))

    def test_ref_versus_inline(self):
        assert not schemas_equal(
            Schema.model_validate({"$ref": "#/components/schemas/X"}),
            Schema.model_validate({"type": "object"}),
        )

    def test_property_sets(self):
        a = Schema.model_validate({"type": "object", "properties": {"a": {"type": "string"}}})
        b = Schema.model_validate({"type": "object", "properties": {"b": {"type": "string"}}})
        assert not schemas_equal(a, b)

    def test_nested_property_type(self):
        a = Schema.model_validate({"type": "object", "properties": {"a": {"type": "array", "items": {"type": "string"}}}})
        b = Schema.model_validate({"type": "object", "properties": {"a": {"type": "array", "items": {"type": "integer"}}}})
        assert not schemas_equal(a, b)

    def test_additional_properties(self):
        base = {"type": "object"}
        assert not schemas_equal(
            Schema.model_validate({**base, "additionalProperties": True}),
            Schema.model_validate({**base, "additionalProperties": False}),
        )
        assert schemas_equal(
            Schema.model_validate({**base, "additionalProperties": {"type": "string"}}),
            Schema.model_validate({**base, "additionalProperties": {"type": "string"}}),
        )
        assert not schemas_equal(
            Schema.model_validate({**base, "additionalProperties": {"type": "string"}}),
            Schema.model_validate({**base, "additionalProperties": True}),
        )

    def test_none_operands(self):
        assert schemas_equal(None, None)
        assert not schemas_equal(Schema(type="string"), None)
