from mcp_agent_lib.agent_core import SchemaValidator


def test_empty_schema_becomes_empty_object() -> None:
    assert SchemaValidator.normalize_input_schema({}) == {"type": "object", "properties": {}}
    assert SchemaValidator.normalize_input_schema(None) == {"type": "object", "properties": {}}


def test_refs_are_inlined_and_metadata_removed() -> None:
    schema = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "SearchArgs",
        "type": "object",
        "properties": {"filter": {"$ref": "#/$defs/Filter"}},
        "$defs": {"Filter": {"title": "Filter", "type": "object", "properties": {"tag": {"type": "string"}}}},
    }

    normalized = SchemaValidator.normalize_input_schema(schema, "notion__search")

    assert normalized == {
        "type": "object",
        "properties": {"filter": {"type": "object", "properties": {"tag": {"type": "string"}}}},
    }


def test_optional_fields_are_simplified() -> None:
    schema = {
        "type": "object",
        "properties": {
            "limit": {"anyOf": [{"type": "integer"}, {"type": "null"}], "description": "Max results"},
        },
    }

    normalized = SchemaValidator.normalize_input_schema(schema)

    assert normalized["properties"]["limit"] == {"type": "integer", "description": "Max results"}


def test_missing_object_type_is_forced() -> None:
    normalized = SchemaValidator.normalize_input_schema({"properties": {"q": {"type": "string"}}})

    assert normalized["type"] == "object"
    assert normalized["properties"] == {"q": {"type": "string"}}


def test_recursive_schema_keeps_refs() -> None:
    schema = {
        "$defs": {"Node": {"type": "object", "properties": {"child": {"$ref": "#/$defs/Node"}}}},
        "type": "object",
        "properties": {"root": {"$ref": "#/$defs/Node"}},
    }

    assert SchemaValidator.has_recursive_refs(schema)
    normalized = SchemaValidator.normalize_input_schema(schema, "tree")

    assert normalized["properties"]["root"] == {"$ref": "#/$defs/Node"}
    assert "$defs" not in normalized


def test_non_recursive_schema_is_detected() -> None:
    schema = {"type": "object", "properties": {"a": {"type": "object", "properties": {"b": {"type": "integer"}}}}}
    assert not SchemaValidator.has_recursive_refs(schema)


def test_argument_named_like_a_metadata_key_is_kept() -> None:
    schema = {
        "title": "CreatePage",
        "type": "object",
        "properties": {"title": {"type": "string", "title": "Title"}, "parent": {"type": "string"}},
        "required": ["title"],
    }

    normalized = SchemaValidator.normalize_input_schema(schema)

    assert normalized == {
        "type": "object",
        "properties": {"title": {"type": "string"}, "parent": {"type": "string"}},
        "required": ["title"],
    }


def test_nullable_union_with_several_branches_is_kept() -> None:
    union = {"anyOf": [{"type": "integer"}, {"type": "string"}, {"type": "null"}]}
    schema = {"type": "object", "properties": {"value": union}}

    assert SchemaValidator.normalize_input_schema(schema)["properties"]["value"] == union
