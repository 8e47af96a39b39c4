"""Mapping of form values to mutation input variables.

Only variables declared on the mutation are produced; every other form field
is left out. Each value goes through a transform that receives the declared
type name, so callers can coerce form input (usually strings) into what the
schema expects.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from dateutil import parser as date_parser
from graphql.language.ast import DocumentNode

from gqlform.documents import (
    operation_definition,
    variable_definitions,
    variable_name,
    variable_type,
)

VariableTransform = Callable[[Any, Optional[str], str], Any]
"""Signature of a variable transform: (value, type_name, name) -> value."""

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def identity_variable(value: Any, type_name: Optional[str], name: str) -> Any:
    return value


def build_variables(
    mutation: DocumentNode,
    raw_values: Mapping[str, Any],
    transform: VariableTransform = identity_variable,
) -> Dict[str, Any]:
    """Build mutation variables from raw form values.

    Args:
        mutation: Parsed mutation document
        raw_values: Form values keyed by variable name
        transform: Called as ``transform(value, type_name, name)`` for every
            declared variable; unset values are passed as None

    Returns:
        Dict with one entry per declared variable, in declaration order

    Examples:
        >>> from graphql import parse
        >>> doc = parse("mutation ($id: ID!) { deleteUser(id: $id) }")
        >>> build_variables(doc, {"id": "42", "name": "A"})
        {'id': '42'}
    """
    raw_values = raw_values or {}
    variables: Dict[str, Any] = {}
    for definition in variable_definitions(operation_definition(mutation)):
        name = variable_name(definition)
        variables[name] = transform(raw_values.get(name), variable_type(definition), name)
    return variables


def coerce_scalar(value: Any, type_name: Optional[str], name: str) -> Any:
    """Coerce a form input value to the variable's built-in scalar type.

    Strings are converted for Int, Float, Boolean, DateTime and Date. Empty
    strings become None. Values of other types, and variables of other types,
    pass through unchanged.

    Raises:
        ValueError: If a string cannot be converted to the declared type

    Examples:
        >>> coerce_scalar("42", "Int", "age")
        42
        >>> coerce_scalar("off", "Boolean", "active")
        False
        >>> coerce_scalar("2024-05-01T10:00:00Z", "DateTime", "at")
        '2024-05-01T10:00:00+00:00'
    """
    if not isinstance(value, str):
        return value
    if value == "" and type_name not in ("String", "ID"):
        return None
    if type_name == "Int":
        return int(value)
    if type_name == "Float":
        return float(value)
    if type_name == "Boolean":
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Variable '{name}' expects Boolean, got {value!r}")
    if type_name == "DateTime":
        return date_parser.isoparse(value).isoformat()
    if type_name == "Date":
        return date_parser.isoparse(value).date().isoformat()
    return value


__all__ = [
    "VariableTransform",
    "identity_variable",
    "build_variables",
    "coerce_scalar",
]
