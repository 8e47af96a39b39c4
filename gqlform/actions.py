"""Registry of submit-capable actions.

An action binds a name to a mutation document, the function producing its raw
variables, extra execution options and the cache-update target for the
mutation. A form is configured either with a single ``mutation`` (registered
under the submit action name) or with named ``mutations``.

Building a registry closes over the producer and option functions current at
build time, so ActionRegistry caches the last build and only rebuilds when one
of its source objects is replaced by another object. Equal but distinct
objects trigger a rebuild; the same object mutated in place does not.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from graphql.language.ast import DocumentNode

from gqlform.documents import ensure_document, selection_field_name

logger = logging.getLogger(__name__)

VariablesProducer = Callable[[Dict[str, Any]], Any]
"""Maps form data to raw variable values; may return an awaitable."""


def lookup(source: Any, name: str) -> Any:
    """Look up ``name`` in a mapping, or call ``source(name)`` if it is a function."""
    if source is None:
        return None
    if callable(source) and not isinstance(source, Mapping):
        return source(name)
    return source.get(name)


def pass_form_data(form_data: Dict[str, Any]) -> Dict[str, Any]:
    return form_data


@dataclass(frozen=True)
class Action:
    """A named mutation the form can submit.

    Attributes:
        name: Action name (e.g. "submit", "delete")
        mutation: Parsed mutation document
        variables_producer: Maps form data to raw variable values
        options: Extra keyword options passed to the mutation executor
        cache_update: Cache-update target for the mutation, if any
    """
    name: str
    mutation: DocumentNode
    variables_producer: VariablesProducer = pass_form_data
    options: Dict[str, Any] = field(default_factory=dict)
    cache_update: Any = None


def build_actions(
    mutation: Any = None,
    mutation_variables: Optional[VariablesProducer] = None,
    mutations: Optional[Mapping[str, Any]] = None,
    mutations_variables: Any = None,
    mutations_options: Any = None,
    cache_updates: Any = None,
    submit_action: str = "submit",
) -> Dict[str, Action]:
    """Build the action mapping from form options.

    A single ``mutation`` takes precedence: it is registered under
    ``submit_action`` and ``mutations`` is ignored.

    Raises:
        StructureError: If a mutation document has no top-level field
    """
    if mutation is not None:
        sources = {submit_action: mutation}
        producers: Any = {submit_action: mutation_variables}
    else:
        sources = dict(mutations or {})
        producers = mutations_variables

    actions: Dict[str, Action] = {}
    for name, source in sources.items():
        document = ensure_document(source)
        producer = lookup(producers, name) or pass_form_data
        options = lookup(mutations_options, name) or {}
        actions[name] = Action(
            name=name,
            mutation=document,
            variables_producer=producer,
            options=dict(options),
            cache_update=lookup(cache_updates, selection_field_name(document)),
        )
    return actions


class ActionRegistry:
    """Caches the action mapping for one form.

    Examples:
        >>> registry = ActionRegistry()
        >>> mutations = {"save": "mutation { save }"}
        >>> first = registry.get(mutations=mutations)
        >>> registry.get(mutations=mutations) is first
        True
        >>> registry.get(mutations=dict(mutations)) is first
        False
    """

    _SOURCE_KEYS = (
        "mutation",
        "mutation_variables",
        "mutations",
        "mutations_variables",
        "mutations_options",
        "cache_updates",
        "submit_action",
    )

    def __init__(self):
        self._key: Optional[Tuple[Any, ...]] = None
        self._actions: Dict[str, Action] = {}

    def get(self, **sources: Any) -> Dict[str, Action]:
        """Return the action mapping for ``sources``, rebuilding it if needed.

        Args:
            **sources: Any of mutation, mutation_variables, mutations,
                mutations_variables, mutations_options, cache_updates and
                submit_action
        """
        unknown = set(sources) - set(self._SOURCE_KEYS)
        if unknown:
            raise TypeError(f"Unknown action sources: {', '.join(sorted(unknown))}")
        key = tuple(sources.get(name) for name in self._SOURCE_KEYS)
        if self._key is not None and self._same_sources(key):
            return self._actions

        self._actions = build_actions(**sources)
        self._key = key
        logger.debug("Rebuilt action registry: %s", ", ".join(self._actions) or "(empty)")
        return self._actions

    def invalidate(self) -> None:
        """Drop the cached mapping so the next get() rebuilds it."""
        self._key = None
        self._actions = {}

    def _same_sources(self, key: Tuple[Any, ...]) -> bool:
        return all(a is b for a, b in zip(self._key, key))


__all__ = [
    "Action",
    "ActionRegistry",
    "VariablesProducer",
    "build_actions",
    "lookup",
    "pass_form_data",
]
