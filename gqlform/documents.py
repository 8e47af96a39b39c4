"""Introspection helpers over parsed GraphQL documents.

These are pure functions over graphql-core's typed syntax tree. They find the
operation of a document, its first top-level field (the selection key under
which the payload is nested) and its variable definitions with their
innermost named types.

Usage:
    >>> from graphql import parse
    >>> doc = parse("query ($id: ID!) { user: getUser(id: $id) { name } }")
    >>> selection_key(doc)
    'user'
    >>> [variable_type(v) for v in variable_definitions(operation_definition(doc))]
    ['ID']
"""

import logging
from typing import List, Optional, Union

from graphql import GraphQLSyntaxError, parse
from graphql.language.ast import (
    DocumentNode,
    FieldNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    OperationDefinitionNode,
    TypeNode,
    VariableDefinitionNode,
)

from gqlform.errors import StructureError

logger = logging.getLogger(__name__)


def ensure_document(source: Union[str, DocumentNode]) -> DocumentNode:
    """Return a parsed document, parsing GraphQL source text if needed.

    Raises:
        StructureError: If the source is not valid GraphQL
    """
    if isinstance(source, DocumentNode):
        return source
    if not isinstance(source, str):
        raise StructureError(f"Expected GraphQL source or DocumentNode, got {type(source).__name__}")
    try:
        return parse(source)
    except GraphQLSyntaxError as e:
        raise StructureError(f"Invalid GraphQL document: {e.message}") from e


def operation_definition(document: Optional[DocumentNode]) -> Optional[OperationDefinitionNode]:
    """Return the first operation definition of the document, or None."""
    if document is None:
        return None
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            return definition
    return None


def field_selection(definition: Optional[OperationDefinitionNode]) -> Optional[FieldNode]:
    """Return the first field of the operation's top-level selection set, or None."""
    if definition is None or definition.selection_set is None:
        return None
    for selection in definition.selection_set.selections:
        if isinstance(selection, FieldNode):
            return selection
    return None


def selection_key(document: DocumentNode) -> str:
    """Return the response key of the document's top-level field.

    The alias wins over the field name, since the response is keyed by alias.

    Raises:
        StructureError: If the document has no operation or no field selection
    """
    field = field_selection(operation_definition(document))
    if field is None:
        raise StructureError("Unable to determine form data from query structure")
    key = field.alias.value if field.alias else field.name.value
    if not key:
        raise StructureError("Unable to determine form data from query structure")
    return key


def selection_field_name(document: DocumentNode) -> str:
    """Return the schema field name of the document's top-level field.

    Unlike selection_key, aliases are ignored.

    Raises:
        StructureError: If the document has no operation or no field selection
    """
    field = field_selection(operation_definition(document))
    if field is None:
        raise StructureError("Unable to determine mutation field from document structure")
    return field.name.value


def variable_definitions(definition: Optional[OperationDefinitionNode]) -> List[VariableDefinitionNode]:
    """Return the operation's variable definitions in declaration order."""
    if definition is None:
        return []
    return [
        node for node in (definition.variable_definitions or ())
        if isinstance(node, VariableDefinitionNode)
    ]


def variable_name(node: VariableDefinitionNode) -> str:
    return node.variable.name.value


def variable_type(node: Union[VariableDefinitionNode, TypeNode, None]) -> Optional[str]:
    """Return the innermost named type of a variable definition or type node.

    List and non-null wrappers are unwrapped, so ``[ID!]!`` gives ``ID``.

    Examples:
        >>> from graphql import parse
        >>> op = operation_definition(parse("mutation ($ids: [ID!]!) { delete(ids: $ids) }"))
        >>> variable_type(variable_definitions(op)[0])
        'ID'
    """
    if node is None:
        return None
    if isinstance(node, NamedTypeNode):
        return node.name.value
    if isinstance(node, (VariableDefinitionNode, ListTypeNode, NonNullTypeNode)):
        return variable_type(node.type)
    raise StructureError(f"Unexpected type node: {type(node).__name__}")


__all__ = [
    "ensure_document",
    "operation_definition",
    "field_selection",
    "selection_key",
    "selection_field_name",
    "variable_definitions",
    "variable_name",
    "variable_type",
]
