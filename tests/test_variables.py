"""Unit tests for building mutation variables from form values."""

import pytest
from graphql import parse

from gqlform.variables import build_variables, coerce_scalar, identity_variable


UPDATE_USER = parse("""
    mutation ($id: ID!, $age: Int, $tags: [String!]) {
        updateUser(id: $id, age: $age, tags: $tags) { id }
    }
""")


class TestBuildVariables:
    """Test variable building over declared variables."""

    def test_only_declared_variables_are_produced(self):
        doc = parse("mutation ($id: ID!) { deleteUser(id: $id) }")
        variables = build_variables(doc, {"id": "42", "name": "A"}, identity_variable)
        assert variables == {"id": "42"}

    def test_unset_values_are_passed_as_none(self):
        variables = build_variables(UPDATE_USER, {"id": "1"})
        assert variables == {"id": "1", "age": None, "tags": None}

    def test_transform_receives_value_type_and_name(self):
        calls = []

        def transform(value, type_name, name):
            calls.append((value, type_name, name))
            return value

        build_variables(UPDATE_USER, {"id": "1", "age": "3", "tags": ["a"]}, transform)
        assert calls == [("1", "ID", "id"), ("3", "Int", "age"), (["a"], "String", "tags")]

    def test_transform_result_is_used(self):
        variables = build_variables(UPDATE_USER, {"id": "1"}, lambda value, type_name, name: type_name)
        assert variables == {"id": "ID", "age": "Int", "tags": "String"}

    def test_transform_errors_propagate(self):
        def transform(value, type_name, name):
            raise ValueError(name)

        with pytest.raises(ValueError):
            build_variables(UPDATE_USER, {"id": "1"}, transform)

    def test_mutation_without_variables(self):
        assert build_variables(parse("mutation { ping }"), {"a": 1}) == {}

    def test_none_raw_values(self):
        assert build_variables(UPDATE_USER, None) == {"id": None, "age": None, "tags": None}


class TestCoerceScalar:
    """Test scalar coercion of form input strings."""

    def test_int(self):
        assert coerce_scalar("42", "Int", "age") == 42

    def test_float(self):
        assert coerce_scalar("1.5", "Float", "ratio") == 1.5

    @pytest.mark.parametrize("raw,expected", [("true", True), ("On", True), ("0", False), ("no", False)])
    def test_boolean(self, raw, expected):
        assert coerce_scalar(raw, "Boolean", "active") is expected

    def test_invalid_boolean_raises(self):
        with pytest.raises(ValueError):
            coerce_scalar("maybe", "Boolean", "active")

    def test_invalid_int_raises(self):
        with pytest.raises(ValueError):
            coerce_scalar("abc", "Int", "age")

    def test_datetime(self):
        assert coerce_scalar("2024-05-01T10:00:00Z", "DateTime", "at") == "2024-05-01T10:00:00+00:00"

    def test_date(self):
        assert coerce_scalar("2024-05-01T10:00:00", "Date", "on") == "2024-05-01"

    def test_empty_string_becomes_none(self):
        assert coerce_scalar("", "Int", "age") is None

    def test_empty_string_kept_for_string_types(self):
        assert coerce_scalar("", "String", "name") == ""
        assert coerce_scalar("", "ID", "id") == ""

    def test_non_strings_pass_through(self):
        assert coerce_scalar(7, "Int", "age") == 7
        assert coerce_scalar(None, "Int", "age") is None

    def test_unknown_types_pass_through(self):
        assert coerce_scalar("x", "UserInput", "input") == "x"
