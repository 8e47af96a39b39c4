"""Provider-level form options shared by many forms.

A FormProvider holds options (and usually a client) common to a group of
forms, e.g. ``to_mutation_variable=coerce_scalar`` or an ``onSubmitError``
handler for the whole application. Forms created through it resolve options
as defaults, then provider layers (outermost first), then call-site options.

Usage:
    >>> provider = FormProvider(client, to_mutation_variable=coerce_scalar)  # doctest: +SKIP
    >>> admin = provider.scope(cache_updates=admin_updates)  # doctest: +SKIP
    >>> form = admin.create_form(mutation=UPDATE_USER)  # doctest: +SKIP
"""

from typing import Any, Dict, List, Optional

from gqlform.client import GraphQLClient
from gqlform.config import FormConfig, resolve_config
from gqlform.events import EventEmitter
from gqlform.runtime import FormRuntime


class FormProvider:
    """Ambient options and client for the forms created through it."""

    def __init__(self, client: Optional[GraphQLClient] = None, **options: Any):
        """Initialize the provider.

        Raises:
            ConfigurationError: If an option is unknown
        """
        self.client = client
        self._layers: List[Dict[str, Any]] = [options]
        resolve_config(*self._layers)

    def scope(self, client: Optional[GraphQLClient] = None, **options: Any) -> "FormProvider":
        """Return a nested provider whose options override this one's."""
        child = FormProvider(client or self.client)
        child._layers = self._layers + [options]
        resolve_config(*child._layers)
        return child

    def resolve(self, **options: Any) -> FormConfig:
        return resolve_config(*self._layers, options)

    def create_form(
        self,
        client: Optional[GraphQLClient] = None,
        events: Optional[EventEmitter] = None,
        **options: Any,
    ) -> FormRuntime:
        """Create a FormRuntime with provider options applied under ``options``.

        Raises:
            ValueError: If neither the provider nor the call site supplies a client
        """
        client = client or self.client
        if client is None:
            raise ValueError("A GraphQL client is required to create a form")
        return FormRuntime(client, self.resolve(**options), events=events)


__all__ = [
    "FormProvider",
]
