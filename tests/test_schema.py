"""Tests for input schema -> parameter metadata conversion."""

import pytest

from toolbridge.errors import SchemaConversionError
from toolbridge.tools.schema import (
    ParameterMetadata,
    SemanticType,
    _schema_type_to_semantic,
    parameters_to_schema,
    schema_to_parameters,
)


class TestTypeMapping:
    """Tests for JSON Schema type -> SemanticType."""

    @pytest.mark.parametrize("schema_type,expected", [
        ("string", SemanticType.STRING),
        ("integer", SemanticType.INTEGER),
        ("number", SemanticType.NUMBER),
        ("boolean", SemanticType.BOOLEAN),
        ("array", SemanticType.STRING_LIST),
        ("object", SemanticType.MAPPING),
    ])
    def test_fixed_table(self, schema_type, expected):
        assert _schema_type_to_semantic(schema_type) is expected

    def test_unknown_type_degrades_to_any(self):
        assert _schema_type_to_semantic("date-time") is SemanticType.ANY

    def test_missing_type_is_any(self):
        assert _schema_type_to_semantic(None) is SemanticType.ANY

    def test_nullable_union(self):
        assert _schema_type_to_semantic(["integer", "null"]) is SemanticType.INTEGER

    def test_ambiguous_union_is_any(self):
        assert _schema_type_to_semantic(["integer", "string"]) is SemanticType.ANY


class TestSchemaToParameters:
    """Tests for schema_to_parameters()."""

    def test_required_and_optional(self):
        params = schema_to_parameters("t", {
            "type": "object",
            "properties": {
                "a": {"type": "integer", "description": "first"},
                "b": {"type": "string"},
            },
            "required": ["a"],
        })
        a, b = params
        assert a == ParameterMetadata("a", "first", SemanticType.INTEGER, required=True, nullable=False)
        assert b.required is False
        assert b.semantic_type is SemanticType.STRING
        assert b.description == ""

    def test_preserves_property_order(self):
        params = schema_to_parameters("t", {
            "properties": {"z": {"type": "string"}, "a": {"type": "string"}, "m": {"type": "string"}},
        })
        assert [p.name for p in params] == ["z", "a", "m"]

    def test_optional_value_types_are_nullable(self):
        params = schema_to_parameters("t", {
            "properties": {
                "count": {"type": "integer"},
                "ratio": {"type": "number"},
                "flag": {"type": "boolean"},
                "name": {"type": "string"},
                "tags": {"type": "array"},
            },
            "required": [],
        })
        nullable = {p.name: p.nullable for p in params}
        assert nullable == {
            "count": True, "ratio": True, "flag": True, "name": False, "tags": False,
        }

    def test_required_value_type_not_nullable(self):
        (param,) = schema_to_parameters("t", {
            "properties": {"count": {"type": "integer"}},
            "required": ["count"],
        })
        assert param.nullable is False

    def test_required_reflects_membership_exactly(self):
        params = schema_to_parameters("t", {
            "properties": {"a": {}, "b": {}, "c": {}},
            "required": ["b", "not_a_property"],
        })
        assert [p.required for p in params] == [False, True, False]
        assert all(p.semantic_type is SemanticType.ANY for p in params)

    def test_no_properties_is_absent(self):
        assert schema_to_parameters("t", {"type": "object"}) is None

    def test_no_schema_is_absent(self):
        assert schema_to_parameters("t", None) is None

    def test_empty_properties_is_empty(self):
        assert schema_to_parameters("t", {"properties": {}}) == ()

    def test_schema_not_an_object(self):
        with pytest.raises(SchemaConversionError, match="not an object"):
            schema_to_parameters("t", ["nope"])

    def test_properties_not_an_object(self):
        with pytest.raises(SchemaConversionError) as exc_info:
            schema_to_parameters("broken", {"properties": ["a", "b"]})
        assert exc_info.value.tool_name == "broken"

    def test_property_not_an_object(self):
        with pytest.raises(SchemaConversionError, match="'a'"):
            schema_to_parameters("t", {"properties": {"a": "string"}})

    def test_required_not_an_array(self):
        with pytest.raises(SchemaConversionError, match="required"):
            schema_to_parameters("t", {"properties": {"a": {}}, "required": "a"})


class TestParametersToSchema:
    """Tests for rebuilding JSON Schema from metadata."""

    def test_rebuild(self):
        params = (
            ParameterMetadata("q", "query text", SemanticType.STRING, required=True),
            ParameterMetadata("tags", "", SemanticType.STRING_LIST, required=False),
            ParameterMetadata("extra", "", SemanticType.ANY, required=False),
        )
        schema = parameters_to_schema(params)
        assert schema["type"] == "object"
        assert schema["properties"]["q"] == {"type": "string", "description": "query text"}
        assert schema["properties"]["tags"] == {"type": "array", "items": {"type": "string"}}
        assert schema["properties"]["extra"] == {}
        assert schema["required"] == ["q"]

    def test_no_parameters(self):
        assert parameters_to_schema(None) == {"type": "object", "properties": {}}
