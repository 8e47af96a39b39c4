"""gqlform: GraphQL-bound form runtime.

gqlform binds a form's lifecycle to a GraphQL API:
- Initial form data loaded from a query, keyed by the query's selection key
- Field edits merged and validated against declarative JSON Schema rules
- Named actions submitting mutations whose variables and cache-update targets
  are derived from the mutation documents themselves
- Success, error and action hooks around every submission
- Per-action progress and error state, with change events for re-rendering

Basic usage:
    >>> from gqlform import FormRuntime
    >>> runtime = FormRuntime.create(
    ...     client,
    ...     data={"name": ""},
    ...     rules={"name": {"type": "string", "minLength": 1}},
    ...     mutation="mutation ($name: String!) { createUser(name: $name) { id } }",
    ... )  # doctest: +SKIP
    >>> await runtime.update_form_data({"name": "Alice"})  # doctest: +SKIP
    >>> await runtime.on_submit()  # doctest: +SKIP
    <ActionState.SUCCEEDED: 'succeeded'>
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from gqlform.client import GraphQLClient, QueryResult
from gqlform.config import FormConfig, resolve_config
from gqlform.errors import (
    ConfigurationError,
    GqlFormError,
    HookConfigurationError,
    IgnorableValidationError,
    MutationError,
    QueryError,
    StructureError,
    ValidationError,
    ValidationMessage,
)
from gqlform.provider import FormProvider
from gqlform.runtime import FormRuntime, FormState
from gqlform.server_errors import create_validator_error_handler
from gqlform.types import ActionState, EventType, FetchPolicy, HookEvent, SubmitEvent
from gqlform.variables import coerce_scalar

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "ActionState",
    "ConfigurationError",
    "EventType",
    "FetchPolicy",
    "FormConfig",
    "FormProvider",
    "FormRuntime",
    "FormState",
    "GqlFormError",
    "GraphQLClient",
    "HookConfigurationError",
    "HookEvent",
    "IgnorableValidationError",
    "MutationError",
    "QueryError",
    "QueryResult",
    "StructureError",
    "SubmitEvent",
    "ValidationError",
    "ValidationMessage",
    "coerce_scalar",
    "create_validator_error_handler",
    "resolve_config",
]
