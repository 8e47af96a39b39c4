"""FormRuntime orchestrator for gqlform.

The runtime owns a form's state: form data, validation messages, per-action
progress flags, per-action mutation errors and the state of the initial data
query. It coordinates the action registry, the validator, the hook dispatcher
and the external GraphQL client.

State is held in an immutable FormState snapshot that is replaced on every
change, and each change emits a FormEvent so a rendering layer can re-read it.

Usage:
    >>> runtime = FormRuntime.create(
    ...     client,
    ...     query="query ($id: ID!) { getUser(id: $id) { id name } }",
    ...     query_variables={"id": "42"},
    ...     mutation="mutation ($id: ID!, $name: String) { updateUser(id: $id, name: $name) { id } }",
    ...     onSubmitSuccess=lambda event, response, form: response,
    ... )  # doctest: +SKIP
    >>> await runtime.load()  # doctest: +SKIP
    >>> runtime.update_form_data({"name": "Bob"})  # doctest: +SKIP
    >>> await runtime.on_submit()  # doctest: +SKIP
"""

import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple

from graphql.language.ast import DocumentNode

from gqlform.actions import Action, ActionRegistry
from gqlform.client import GraphQLClient, MutationExecutor, QueryResult
from gqlform.config import FormConfig, resolve_config
from gqlform.documents import ensure_document, selection_key
from gqlform.errors import IgnorableValidationError, MutationError, QueryError, ValidationMessage
from gqlform.events import EventEmitter, EventListener, FormEvent
from gqlform.hooks import HookDispatcher
from gqlform.state_machine import ActionStateMachine
from gqlform.types import ActionState, EventType, HookEvent
from gqlform.validation import ExtraResults, Validator
from gqlform.variables import build_variables

logger = logging.getLogger(__name__)


async def _resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


def _response_errors(response: Any) -> Any:
    if isinstance(response, Mapping):
        return response.get("errors")
    return getattr(response, "errors", None)


@dataclass(frozen=True)
class FormState:
    """Snapshot of a form's state.

    Attributes:
        form_data: Current field values
        progress: Action name -> True while an execution is in flight
        mutation_errors: Action name -> last reported error
        query_data: Last data returned by the form query
        query_loading: Whether the form query is loading
        query_error: Error of the last query resolution, if any
    """
    form_data: Dict[str, Any] = field(default_factory=dict)
    progress: Dict[str, bool] = field(default_factory=dict)
    mutation_errors: Dict[str, Any] = field(default_factory=dict)
    query_data: Optional[Dict[str, Any]] = None
    query_loading: bool = False
    query_error: Optional[QueryError] = None


class FormRuntime:
    """Form state machine bound to a GraphQL client.

    Attributes:
        client: The external GraphQL client
        config: Resolved form options
        validator: Validator built from ``config.rules``
        hooks: Lifecycle hooks parsed from ``config.handlers``
        events: Emitter receiving every state change event
        query: Parsed query document, or None if the form has no query
    """

    def __init__(
        self,
        client: GraphQLClient,
        config: Optional[FormConfig] = None,
        events: Optional[EventEmitter] = None,
    ):
        """Initialize the runtime.

        Raises:
            StructureError: If the query or a mutation document is malformed
            HookConfigurationError: If a handler is misnamed or not callable
        """
        self.client = client
        self.events = events or EventEmitter()
        self._registry = ActionRegistry()
        self._executors: Dict[str, Tuple[DocumentNode, MutationExecutor]] = {}
        self.config = config if config is not None else FormConfig()
        self.validator = Validator(self.config.rules)
        self._apply_config(self.config)
        self._state = FormState(form_data=dict(self.config.data), query_loading=self.query is not None)

    @classmethod
    def create(cls, client: GraphQLClient, **options: Any) -> "FormRuntime":
        """Create a runtime from keyword options (see FormConfig)."""
        return cls(client, resolve_config(options))

    def reconfigure(self, **options: Any) -> None:
        """Override options of the running form.

        Options not given keep their current objects, so the action registry
        is only rebuilt when a mutation-related option is replaced.
        """
        current = {f.name: getattr(self.config, f.name) for f in fields(FormConfig)}
        config = resolve_config(current, options)
        if config.rules is not self.config.rules:
            self.validator = Validator(config.rules)
        self._apply_config(config)
        self.config = config

    def _apply_config(self, config: FormConfig) -> None:
        self.hooks = HookDispatcher.from_handlers(config.handlers)
        self.query = ensure_document(config.query) if config.query is not None else None
        self._query_key = selection_key(self.query) if self.query is not None else None
        actions = self._registered_actions(config)
        self._executors = {
            name: cached for name, cached in self._executors.items()
            if name in actions and cached[0] is actions[name].mutation
        }

    # Exposed state

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def form_data(self) -> Dict[str, Any]:
        return self._state.form_data

    @property
    def messages(self) -> Dict[str, ValidationMessage]:
        return dict(self.validator.messages)

    @property
    def progress(self) -> Dict[str, bool]:
        return self._state.progress

    @property
    def mutation_errors(self) -> Dict[str, Any]:
        return self._state.mutation_errors

    @property
    def query_data(self) -> Optional[Dict[str, Any]]:
        return self._state.query_data

    @property
    def query_loading(self) -> bool:
        return self._state.query_loading

    @property
    def query_error(self) -> Optional[QueryError]:
        return self._state.query_error

    @property
    def actions(self) -> Dict[str, Callable[..., Awaitable[Any]]]:
        """Async callables ``(event=None)``, one per registered action."""
        return {name: functools.partial(self.submit, name) for name in self._registered_actions(self.config)}

    def subscribe(self, listener: EventListener) -> None:
        """Call ``listener`` for every event emitted by this runtime."""
        self.events.on_any(listener)

    # Form data and validation

    def set_form_data(self, data: Dict[str, Any]) -> None:
        """Replace the form data."""
        self._replace(form_data=dict(data))
        self._emit(EventType.FORM_UPDATED, payload={"fields": list(data), "replaced": True})

    def update_form_data(self, change: Mapping[str, Any]) -> Awaitable[Optional[Dict[str, ValidationMessage]]]:
        """Merge ``change`` into the form data and validate the changed fields.

        The merge happens immediately. Validation of the changed fields only
        is returned as an awaitable resolving to all current messages, or to
        None when no rule applies to the changed fields. Inside a running event
        loop it is already scheduled as a task, so callers may drop it; called
        outside a loop, the returned coroutine must be awaited.
        """
        change = dict(change)
        self._replace(form_data={**self._state.form_data, **change})
        self._emit(EventType.FORM_UPDATED, payload={"fields": list(change), "replaced": False})
        validation = self._validate_change(change)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return validation
        return asyncio.ensure_future(validation)

    async def validate(
        self,
        data: Optional[Mapping[str, Any]] = None,
        extra: Optional[ExtraResults] = None,
    ) -> Dict[str, ValidationMessage]:
        """Validate ``data`` (the whole form by default).

        Raises:
            IgnorableValidationError: If no rule applies to the given fields
        """
        messages = await self.validator.validate(self._state.form_data if data is None else data, extra)
        self._emit(EventType.VALIDATION_COMPLETED, payload={"fields": sorted(messages)})
        return messages

    async def _validate_change(self, change: Dict[str, Any]) -> Optional[Dict[str, ValidationMessage]]:
        try:
            return await self.validate(change)
        except IgnorableValidationError:
            return None

    # Mutation errors

    def set_mutation_errors(self, errors: Dict[str, Any]) -> None:
        self._replace(mutation_errors=dict(errors))
        self._emit(EventType.MUTATION_ERRORS_CHANGED, payload={"actions": sorted(errors)})

    # Submission

    async def on_submit(self, event: Any = None) -> Any:
        """Submit the configured submit action."""
        return await self.submit(self.config.submit_action, event)

    async def submit(self, action_name: str, event: Any = None) -> Any:
        """Run an action.

        All mutation errors are cleared first, including those of other
        actions. If ``action_name`` has no mutation, its plain action hook is
        invoked instead and its result returned.

        Returns:
            ActionState.SUCCEEDED or ActionState.FAILED for registered
            actions, otherwise the action hook's result
        """
        if event is not None:
            event.prevent_default()
        self.set_mutation_errors({})

        action = self._registered_actions(self.config).get(action_name)
        if action is None:
            logger.debug("No mutation for action '%s', invoking its hook", action_name)
            return await _resolve(self.hooks.trigger(action_name, HookEvent.ACTION, (event, None, self)))
        return await self._execute(action, event)

    async def _execute(self, action: Action, event: Any) -> ActionState:
        machine = ActionStateMachine(action=action.name, emitter=self.events)
        machine.transition_to(ActionState.SUBMITTING)
        self._set_progress(action.name, True)

        try:
            await self._run(action, event)
        except Exception as error:
            await self._report_error(action.name, event, error)
            outcome = ActionState.FAILED
        else:
            outcome = ActionState.SUCCEEDED

        machine.transition_to(outcome)
        self._set_progress(action.name, False)
        machine.transition_to(ActionState.IDLE)
        return outcome

    async def _run(self, action: Action, event: Any) -> None:
        raw_values = await _resolve(action.variables_producer(self._state.form_data))
        variables = build_variables(action.mutation, raw_values, self.config.to_mutation_variable)
        execute = self._executor(action)
        response = await execute(variables=variables, update=action.cache_update, **action.options)

        errors = _response_errors(response)
        if errors:
            raise MutationError(action.name, errors)

        result = await _resolve(
            self.hooks.trigger(action.name, HookEvent.SUCCESS, (event, response, self), default=response)
        )
        if result is not None:
            await _resolve(self.hooks.trigger(action.name, HookEvent.ACTION, (event, result, self)))

    async def _report_error(self, name: str, event: Any, error: Exception) -> None:
        try:
            reported = await _resolve(self.hooks.trigger(name, HookEvent.ERROR, (event, error, self), default=error))
        except Exception as hook_error:
            logger.exception("Error hook of action '%s' failed", name)
            reported = hook_error
        if reported:
            logger.error("Action '%s' failed: %s", name, reported)
            self.set_mutation_errors({**self._state.mutation_errors, name: reported})

    def _executor(self, action: Action) -> MutationExecutor:
        cached = self._executors.get(action.name)
        if cached is not None and cached[0] is action.mutation:
            return cached[1]
        execute = self.client.mutation(action.mutation)
        self._executors[action.name] = (action.mutation, execute)
        return execute

    def _registered_actions(self, config: FormConfig) -> Dict[str, Action]:
        return self._registry.get(
            mutation=config.mutation,
            mutation_variables=config.mutation_variables,
            mutations=config.mutations,
            mutations_variables=config.mutations_variables,
            mutations_options=config.mutations_options,
            cache_updates=config.cache_updates,
            submit_action=config.submit_action,
        )

    # Query

    async def load(self) -> Optional[QueryResult]:
        """Run the form query, if any, and apply its result.

        Client failures are captured in ``query_error`` and never raised.
        """
        if self.query is None:
            return None

        self._replace(query_loading=True, query_error=None)
        self._emit(EventType.QUERY_LOADING)
        try:
            result = await self.client.query(
                self.query,
                variables=self.config.query_variables,
                fetch_policy=self.config.fetch_policy,
                skip=False,
            )
        except Exception as e:
            logger.warning("Form query failed: %s", e)
            self._replace(query_loading=False, query_error=QueryError(e))
            self._emit(EventType.QUERY_FAILED, payload={"error": str(e)})
            return None

        self.receive_query_result(result)
        return result

    def receive_query_result(self, result: QueryResult) -> None:
        """Apply one resolution of the form query.

        Validation messages are always reset. The form data is replaced by
        the payload under the query's selection key, passed through
        ``to_form_data``; it is left untouched if the key is absent.
        """
        if self.query is None:
            return

        error = result.error
        if error is not None and not isinstance(error, QueryError):
            error = QueryError(error)
        self._replace(query_data=result.data, query_loading=result.loading, query_error=error)

        self.validator.reset()
        self._emit(EventType.VALIDATION_RESET)

        if error is not None:
            self._emit(EventType.QUERY_FAILED, payload={"error": str(error)})
        if not result.data or self._query_key not in result.data:
            return

        transformed = self.config.to_form_data(result.data, self.query, self._query_key)
        self._replace(form_data=dict(transformed[self._query_key] or {}))
        self._emit(EventType.QUERY_LOADED, payload={"key": self._query_key})

    # Internals

    def _replace(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)

    def _set_progress(self, name: str, flag: bool) -> None:
        self._replace(progress={**self._state.progress, name: flag})

    def _emit(self, type: EventType, action: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        self.events.emit(FormEvent.create(type, action=action, payload=payload))


__all__ = [
    "FormRuntime",
    "FormState",
]
