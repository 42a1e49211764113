"""Tests for query parameter serialization (OpenAPI 3 style/explode, Swagger 2 collectionFormat)."""

import pytest

from oas_request.errors import MissingRequiredValue
from oas_request.example import MappingExample
from oas_request.query_serializer import (
    build_query_string,
    serialize_query_param,
    serialize_swagger2_param,
    stringify,
)


def _array_param(style=None, explode=None, name="tags"):
    param = {"name": name, "in": "query", "schema": {"type": "array"}}
    if style is not None:
        param["style"] = style
    if explode is not None:
        param["explode"] = explode
    return param


def _object_param(style=None, explode=None, name="filter"):
    param = {"name": name, "in": "query", "schema": {"type": "object"}}
    if style is not None:
        param["style"] = style
    if explode is not None:
        param["explode"] = explode
    return param


class TestArrays:
    def test_form_not_exploded(self):
        """Test form arrays without explode are comma-joined."""
        assert serialize_query_param(_array_param("form", False), ["a", "b"]) == "tags=a,b"

    def test_form_exploded(self):
        """Test exploded form arrays repeat the name."""
        assert serialize_query_param(_array_param("form", True), ["a", "b"]) == "tags=a&tags=b"

    def test_defaults_are_form_exploded(self):
        """Test style and explode default to exploded form."""
        assert serialize_query_param(_array_param(), ["a", "b"]) == "tags=a&tags=b"

    def test_pipe_delimited(self):
        """Test pipeDelimited arrays join with a pipe."""
        assert serialize_query_param(_array_param("pipeDelimited", False), ["a", "b"]) == "tags=a|b"

    def test_space_delimited(self):
        """Test spaceDelimited arrays join with an encoded space."""
        param = _array_param("spaceDelimited", False)
        assert serialize_query_param(param, ["a", "b"]) == "tags=a%20b"

    def test_exploded_ignores_delimiter_style(self):
        """Test exploded delimited arrays repeat the name."""
        param = _array_param("pipeDelimited", True)
        assert serialize_query_param(param, ["a", "b"]) == "tags=a&tags=b"

    def test_values_escaped(self):
        """Test array values are escaped."""
        param = _array_param("form", False)
        assert serialize_query_param(param, ["a b", "c&d"]) == "tags=a+b,c%26d"

    def test_nested_lists_flattened(self):
        """Test nested lists are flattened."""
        param = _array_param("form", False)
        assert serialize_query_param(param, [1, [2, 3]]) == "tags=1,2,3"

    def test_scalar_value_treated_as_single_element(self):
        """Test a scalar for an array parameter is one element."""
        assert serialize_query_param(_array_param("form", False), "a") == "tags=a"


class TestObjects:
    def test_deep_object(self):
        """Test deepObject uses bracketed keys."""
        value = {"color": "red", "size": "L"}
        result = serialize_query_param(_object_param("deepObject"), value)
        assert result == "filter[color]=red&filter[size]=L"

    def test_deep_object_nested(self):
        """Test nested deepObject values add bracket levels."""
        value = {"owner": {"name": "ann"}, "ids": [1, 2]}
        result = serialize_query_param(_object_param("deepObject"), value)
        assert result == "filter[owner][name]=ann&filter[ids][]=1&filter[ids][]=2"

    def test_form_exploded_uses_object_keys(self):
        """Test exploded form objects use their keys as names."""
        value = {"color": "red", "size": "L"}
        assert serialize_query_param(_object_param("form", True), value) == "color=red&size=L"

    def test_form_not_exploded_interleaves(self):
        """Test non-exploded form objects interleave keys and values."""
        value = {"color": "red", "size": "L"}
        assert serialize_query_param(_object_param("form", False), value) == "filter=color,red,size,L"

    def test_unsupported_object_style_is_empty(self):
        """Test a style undefined for objects gives an empty fragment."""
        assert serialize_query_param(_object_param("pipeDelimited", False), {"a": 1}) == ""


class TestScalars:
    def test_scalar(self):
        """Test a scalar renders as name=value."""
        param = {"name": "q", "in": "query", "schema": {"type": "string"}}
        assert serialize_query_param(param, "hello world") == "q=hello+world"

    def test_boolean_lowercase(self):
        """Test booleans render lowercase."""
        param = {"name": "flag", "in": "query", "schema": {"type": "boolean"}}
        assert serialize_query_param(param, True) == "flag=true"

    def test_name_escaped(self):
        """Test parameter names are escaped."""
        param = {"name": "a b", "in": "query", "schema": {"type": "string"}}
        assert serialize_query_param(param, "x") == "a+b=x"

    def test_no_schema_is_empty(self):
        """Test a parameter without a schema gives an empty fragment."""
        assert serialize_query_param({"name": "q", "in": "query"}, "x") == ""


class TestStringify:
    @pytest.mark.parametrize(
        "value, expected",
        [(None, ""), (False, "false"), (42, "42"), ("x", "x")],
    )
    def test_stringify(self, value, expected):
        """Test value rendering."""
        assert stringify(value) == expected


class TestSwagger2CollectionFormat:
    @pytest.mark.parametrize(
        "collection_format, expected",
        [
            (None, "ids=1,2"),
            ("csv", "ids=1,2"),
            ("ssv", "ids=1%202"),
            ("tsv", "ids=1%092"),
            ("pipes", "ids=1|2"),
            ("multi", "ids=1&ids=2"),
        ],
    )
    def test_array_formats(self, collection_format, expected):
        """Test each collectionFormat."""
        param = {"name": "ids", "in": "query", "type": "array"}
        if collection_format is not None:
            param["collectionFormat"] = collection_format
        assert serialize_swagger2_param(param, [1, 2]) == expected

    def test_scalar(self):
        """Test a Swagger 2 scalar renders as name=value."""
        param = {"name": "q", "in": "query", "type": "string"}
        assert serialize_swagger2_param(param, "a b") == "q=a+b"


class TestBuildQueryString:
    def test_fragments_joined_in_order(self):
        """Test fragments are joined with ? then &."""
        params = [
            {"name": "b", "in": "query", "schema": {"type": "string"}},
            {"name": "id", "in": "path", "schema": {"type": "string"}},
            {"name": "a", "in": "query", "schema": {"type": "string"}},
        ]
        example = MappingExample(a="1", b="2", id="3")
        assert build_query_string(params, example) == "?b=2&a=1"

    def test_schema_less_parameter_skipped(self):
        """Test empty fragments are skipped."""
        params = [
            {"name": "skip", "in": "query"},
            {"name": "a", "in": "query", "schema": {"type": "string"}},
        ]
        example = MappingExample(skip="x", a="1")
        assert build_query_string(params, example) == "?a=1"

    def test_no_query_parameters(self):
        """Test no query parameters gives an empty string."""
        assert build_query_string([], MappingExample()) == ""

    def test_missing_value_raises(self):
        """Test a missing query value raises MissingRequiredValue."""
        params = [{"name": "a", "in": "query", "required": True, "schema": {"type": "string"}}]
        with pytest.raises(MissingRequiredValue) as exc_info:
            build_query_string(params, MappingExample())
        assert exc_info.value.name == "a"
        assert exc_info.value.location == "query"

    def test_custom_serializer(self):
        """Test a custom serializer is used for each parameter."""
        params = [{"name": "ids", "in": "query", "type": "array", "collectionFormat": "multi"}]
        example = MappingExample(ids=[1, 2])
        assert build_query_string(params, example, serialize_swagger2_param) == "?ids=1&ids=2"
