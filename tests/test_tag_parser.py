import pytest

from annodoc.errors import MalformedTagError
from annodoc.parser.tags import (
    cast_example,
    parse_parameter_tag,
    parse_property_block,
    parse_response_tag,
    parse_return_tag,
    split_parameter_tag,
)


class TestSplitParameterTag:
    def test_name_and_type_only(self):
        assert split_parameter_tag("bodyParam", "age int") == ("age", "int", False, "")

    def test_trailing_bare_required(self):
        assert split_parameter_tag("bodyParam", "age int required") == ("age", "int", True, "")

    def test_required_with_description(self):
        assert split_parameter_tag("bodyParam", "age int required The age") == ("age", "int", True, "The age")

    def test_description_without_marker(self):
        assert split_parameter_tag("bodyParam", "age int The user age") == ("age", "int", False, "The user age")

    def test_marker_is_case_sensitive(self):
        assert split_parameter_tag("bodyParam", "age int Required field") == ("age", "int", False, "Required field")

    def test_single_token_rejected(self):
        with pytest.raises(MalformedTagError) as exc:
            split_parameter_tag("bodyParam", "lonely")
        assert exc.value.tag == "bodyParam"
        assert "bodyParam" in str(exc.value)

    def test_empty_text_rejected(self):
        with pytest.raises(MalformedTagError):
            split_parameter_tag("queryParam", "   ")


class TestParseParameterTag:
    def test_full_tag_with_example(self):
        parsed = parse_parameter_tag("bodyParam", "name string required The user's full name Example: Jane Doe")
        assert parsed.name == "name"
        assert parsed.type == "string"
        assert parsed.required is True
        assert parsed.description == "The user's full name"
        assert parsed.example == "Jane Doe"

    def test_two_tokens_normalizes_type(self):
        parsed = parse_parameter_tag("queryParam", "count int")
        assert parsed.type == "integer"
        assert parsed.required is False
        assert parsed.description == ""
        assert parsed.example is None
        assert parsed.properties is None

    def test_boolean_false_example(self):
        parsed = parse_parameter_tag("bodyParam", "admin bool Is admin Example: false")
        assert parsed.example is False
        assert parsed.description == "Is admin"

    def test_integer_example_is_cast(self):
        parsed = parse_parameter_tag("queryParam", "page int Page number Example: 3")
        assert parsed.example == 3
        assert isinstance(parsed.example, int)

    def test_example_without_description(self):
        parsed = parse_parameter_tag("bodyParam", "price double Example: 9.5")
        assert parsed.type == "float"
        assert parsed.example == 9.5
        assert parsed.description == ""

    def test_invalid_integer_example_rejected(self):
        with pytest.raises(MalformedTagError):
            parse_parameter_tag("bodyParam", "page int Example: abc")

    def test_object_example_on_next_line_kept_raw(self):
        parsed = parse_parameter_tag("bodyParam", 'meta object Extra data\nExample: {"a": 1}')
        assert parsed.example == '{"a": 1}'
        assert parsed.description == "Extra data"

    def test_object_example_on_same_line_not_extracted(self):
        parsed = parse_parameter_tag("bodyParam", "meta object Extra Example: {}")
        assert parsed.example is None
        assert parsed.description == "Extra Example: {}"

    def test_array_example(self):
        parsed = parse_parameter_tag("bodyParam", "ids array Identifiers\nExample: [1, 2]")
        assert parsed.example == "[1, 2]"
        assert parsed.description == "Identifiers"

    def test_properties_block(self):
        text = (
            "address object Postal address\n"
            "properties:\n"
            "  street string required Street name\n"
            "  zip: {type: int, example: 12345}"
        )
        parsed = parse_parameter_tag("bodyParam", text)
        assert parsed.description == "Postal address"
        assert parsed.properties == {
            "street": {"type": "string", "description": "Street name", "required": True},
            "zip": {"type": "integer", "example": 12345},
        }

    def test_properties_header_in_prose(self):
        parsed = parse_parameter_tag("bodyParam", "note string Lists these properties:\n- color\n- size")
        assert parsed.properties is None
        assert parsed.description == "Lists these properties:\n- color\n- size"

    def test_reference_properties(self):
        parsed = parse_parameter_tag("bodyParam", "owner ref\nproperties:\n  $ref: '#/components/schemas/User'")
        assert parsed.type == "schema"
        assert parsed.properties == {"$ref": "#/components/schemas/User"}
        assert parsed.description == ""


class TestCastExample:
    def test_false_under_boolean(self):
        assert cast_example("bodyParam", "false", "boolean") is False

    def test_truthy_boolean(self):
        assert cast_example("bodyParam", "true", "boolean") is True
        assert cast_example("bodyParam", "yes", "boolean") is True

    def test_numbers(self):
        assert cast_example("bodyParam", "42", "integer") == 42
        assert cast_example("bodyParam", "1.5", "number") == 1.5

    def test_structured_types_pass_through(self):
        assert cast_example("bodyParam", '{"a": 1}', "json") == '{"a": 1}'
        assert cast_example("bodyParam", "[1]", "array") == "[1]"

    def test_unknown_type_kept_as_text(self):
        assert cast_example("bodyParam", "2024-01-01", "date") == "2024-01-01"


class TestParsePropertyBlock:
    def test_nested_items(self):
        block = "tags:\n  items:\n    properties:\n      label string"
        assert parse_property_block("response", block) == {
            "tags": {"items": {"properties": {"label": {"type": "string", "description": ""}}}}
        }

    def test_invalid_yaml_rejected(self):
        with pytest.raises(MalformedTagError):
            parse_property_block("response", "a: [unclosed")

    def test_non_mapping_rejected(self):
        with pytest.raises(MalformedTagError):
            parse_property_block("response", "justtext")

    def test_type_must_be_a_name(self):
        with pytest.raises(MalformedTagError):
            parse_property_block("response", "age: {type: 5}")

    def test_empty_block(self):
        assert parse_property_block("response", "") == {}


class TestParseResponseTag:
    def test_status_and_json_example(self):
        response = parse_response_tag("response", '200 {"id": 1}')
        assert response.status == 200
        assert response.example == {"id": 1}
        assert response.description == "success"
        assert response.content is None

    def test_status_defaults_to_200(self):
        response = parse_response_tag("response", "User list")
        assert response.status == 200
        assert response.description == "User list"

    def test_properties_after_json_example(self):
        response = parse_response_tag("response", '200 {"id":1} properties:\n  id integer')
        assert response.example == {"id": 1}
        assert response.content == {"id": {"type": "integer", "description": ""}}

    def test_content_lines_without_header(self):
        response = parse_response_tag("response", "201 Created\nid integer\nname string")
        assert response.status == 201
        assert response.description == "Created"
        assert set(response.content) == {"id", "name"}

    def test_multiline_json_example(self):
        response = parse_response_tag("response", '200 {\n  "id": 1\n}\nproperties:\n  id integer')
        assert response.example == {"id": 1}
        assert response.content == {"id": {"type": "integer", "description": ""}}

    def test_invalid_json_rejected(self):
        with pytest.raises(MalformedTagError):
            parse_response_tag("response", '200 {"id": }')

    def test_no_content(self):
        response = parse_response_tag("response", "204")
        assert response.status == 204
        assert response.content is None

    def test_bulleted_prose_is_not_a_key_map(self):
        response = parse_response_tag("response", "200 Returns these properties:\n- id\n- name")
        assert response.content is None
        assert response.description == "Returns these properties:\n- id\n- name"


class TestParseReturnTag:
    def test_generic_array(self):
        response = parse_return_tag("return", "array<User>")
        assert response.status == 200
        assert response.description == "Array of Users"
        assert response.schema_ref == {"type": "array", "items": {"$ref": "#/components/schemas/User"}}

    def test_bracket_suffix(self):
        response = parse_return_tag("return", "User[] the users")
        assert response.schema_ref["type"] == "array"

    def test_namespaced_collection(self):
        response = parse_return_tag("return", "Collection<App\\Models\\Order>")
        assert response.schema_ref["items"] == {"$ref": "#/components/schemas/Order"}

    def test_python_list(self):
        response = parse_return_tag("return", "list[Pet]")
        assert response.schema_ref["items"] == {"$ref": "#/components/schemas/Pet"}

    def test_single_reference(self):
        response = parse_return_tag("return", "\\App\\Models\\User")
        assert response.description == "User"
        assert response.schema_ref == {"$ref": "#/components/schemas/User"}

    def test_unrecognised_type_rejected(self):
        with pytest.raises(MalformedTagError):
            parse_return_tag("return", "<>")
        with pytest.raises(MalformedTagError):
            parse_return_tag("return", "")
