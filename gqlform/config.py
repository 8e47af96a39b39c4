"""Form options and their layered resolution.

Options come from up to three layers, applied in this order, each overriding
the previous one key by key:

1. defaults (the FormConfig field defaults)
2. provider-level options shared by many forms (gqlform.provider)
3. call-site options for one form

Handlers (``onSubmit``, ``on_save_error``, ...) may be given as keyword
options or in a ``handlers`` mapping; handler maps from different layers are
merged per handler name.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Mapping, Optional

from gqlform.errors import ConfigurationError
from gqlform.hooks import Handler, is_handler_name
from gqlform.types import FetchPolicy
from gqlform.variables import VariableTransform, identity_variable


def identity_form_data(data: Dict[str, Any], query: Any, key: str) -> Dict[str, Any]:
    return data


@dataclass(frozen=True)
class FormConfig:
    """Resolved options of one form.

    Attributes:
        data: Initial form data
        rules: Validation rules, JSON Schema fragments keyed by field name
        query: Query document (or source text) loading the initial form data
        query_variables: Variables for the query
        fetch_policy: Fetch policy passed to the client with the query
        mutation: Single mutation, registered under ``submit_action``
        mutation_variables: Variables producer for the single mutation
        mutations: Named mutations, one action each
        mutations_variables: Variables producers by action name (mapping or function)
        mutations_options: Extra executor options by action name (mapping or function)
        submit_action: Name of the action run by ``on_submit``
        to_form_data: ``(data, query, key) -> data`` applied to query results
        to_mutation_variable: ``(value, type_name, name) -> value`` applied per variable
        cache_updates: Cache-update targets by mutation field name (mapping or function)
        handlers: Lifecycle handlers by conventional name
    """
    data: Dict[str, Any] = field(default_factory=dict)
    rules: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    query: Any = None
    query_variables: Optional[Dict[str, Any]] = None
    fetch_policy: str = FetchPolicy.NETWORK_ONLY.value
    mutation: Any = None
    mutation_variables: Optional[Callable[[Dict[str, Any]], Any]] = None
    mutations: Dict[str, Any] = field(default_factory=dict)
    mutations_variables: Any = field(default_factory=dict)
    mutations_options: Any = field(default_factory=dict)
    submit_action: str = "submit"
    to_form_data: Callable[[Dict[str, Any], Any, str], Dict[str, Any]] = identity_form_data
    to_mutation_variable: VariableTransform = identity_variable
    cache_updates: Any = field(default_factory=dict)
    handlers: Dict[str, Handler] = field(default_factory=dict)


OPTION_NAMES = frozenset(f.name for f in fields(FormConfig))


def _split_layer(layer: Mapping[str, Any]) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    handlers: Dict[str, Handler] = dict(layer.get("handlers") or {})
    for key, value in layer.items():
        if key == "handlers":
            continue
        if key in OPTION_NAMES:
            options[key] = value
        elif is_handler_name(key):
            handlers[key] = value
        else:
            raise ConfigurationError(f"Unknown form option '{key}'")
    options["handlers"] = handlers
    return options


def resolve_config(*layers: Optional[Mapping[str, Any]]) -> FormConfig:
    """Resolve option layers, lowest precedence first, into a FormConfig.

    Examples:
        >>> config = resolve_config({"submit_action": "save"}, {"data": {"a": 1}})
        >>> (config.submit_action, config.data)
        ('save', {'a': 1})

    Raises:
        ConfigurationError: If a layer contains an unknown option
    """
    resolved: Dict[str, Any] = {}
    handlers: Dict[str, Handler] = {}
    for layer in layers:
        if not layer:
            continue
        options = _split_layer(layer)
        handlers.update(options.pop("handlers"))
        resolved.update(options)
    resolved["handlers"] = handlers
    if resolved.get("fetch_policy") is not None:
        try:
            resolved["fetch_policy"] = FetchPolicy(resolved["fetch_policy"]).value
        except ValueError as e:
            raise ConfigurationError(f"Unknown fetch policy {resolved['fetch_policy']!r}") from e
    return FormConfig(**resolved)


__all__ = [
    "FormConfig",
    "OPTION_NAMES",
    "identity_form_data",
    "resolve_config",
]
