"""Lifecycle hook registration and dispatch.

Hooks are keyed by ``(action_name, HookEvent)``. Conventional handler names
such as ``onSaveSuccess`` or ``on_save_error`` are parsed once, when the form
is configured, so misnamed or non-callable handlers fail early instead of
being silently skipped at submit time.

Usage:
    >>> hooks = HookDispatcher.from_handlers({"onSaveSuccess": lambda e, r, f: r})
    >>> hooks.has("save", HookEvent.SUCCESS)
    True
    >>> hooks.trigger("save", HookEvent.ERROR, ("event", "boom", None), default="fallback")
    'fallback'
"""

import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from gqlform.errors import HookConfigurationError
from gqlform.types import HookEvent

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]

_CAMEL_NAME = re.compile(r"^on([A-Z][A-Za-z0-9_]*)$")
_SNAKE_NAME = re.compile(r"^on_([a-z0-9_]+)$")
_SNAKE_SUFFIXES = {
    "_success": HookEvent.SUCCESS,
    "_error": HookEvent.ERROR,
}


def _hook_key(action: str) -> str:
    """Action names match hooks regardless of the case of their first letter."""
    return action[:1].lower() + action[1:]


def is_handler_name(name: str) -> bool:
    return bool(_CAMEL_NAME.match(name) or _SNAKE_NAME.match(name))


def parse_handler_name(name: str) -> Tuple[str, HookEvent]:
    """Split a conventional handler name into action name and hook event.

    Examples:
        >>> parse_handler_name("onSubmit")
        ('submit', <HookEvent.ACTION: ''>)
        >>> parse_handler_name("onDeleteUserError")
        ('deleteUser', <HookEvent.ERROR: 'Error'>)
        >>> parse_handler_name("on_delete_user_success")
        ('delete_user', <HookEvent.SUCCESS: 'Success'>)

    Raises:
        HookConfigurationError: If the name does not follow either convention
    """
    match = _CAMEL_NAME.match(name)
    if match:
        rest = match.group(1)
        event = HookEvent.ACTION
        for candidate in (HookEvent.SUCCESS, HookEvent.ERROR):
            if rest.endswith(candidate.value) and len(rest) > len(candidate.value):
                rest = rest[: -len(candidate.value)]
                event = candidate
                break
        return rest[0].lower() + rest[1:], event

    match = _SNAKE_NAME.match(name)
    if match:
        rest = match.group(1)
        for suffix, event in _SNAKE_SUFFIXES.items():
            if rest.endswith(suffix) and len(rest) > len(suffix):
                return rest[: -len(suffix)], event
        return rest, HookEvent.ACTION

    raise HookConfigurationError(
        f"Invalid handler name '{name}': expected onAction[Success|Error] "
        f"or on_action[_success|_error]"
    )


class HookDispatcher:
    """Explicit map from (action, hook event) to handler."""

    def __init__(self):
        self._handlers: Dict[Tuple[str, HookEvent], Handler] = {}

    @classmethod
    def from_handlers(cls, handlers: Optional[Mapping[str, Handler]]) -> "HookDispatcher":
        """Build a dispatcher from conventionally named handlers.

        Raises:
            HookConfigurationError: If a name is malformed or a handler is not callable
        """
        dispatcher = cls()
        for name, handler in (handlers or {}).items():
            action, event = parse_handler_name(name)
            dispatcher.register(action, event, handler)
        return dispatcher

    def register(self, action: str, event: HookEvent, handler: Handler) -> None:
        if not callable(handler):
            raise HookConfigurationError(
                f"Handler for '{action}' ({event.name.lower()}) must be callable, "
                f"got {type(handler).__name__}"
            )
        self._handlers[(_hook_key(action), event)] = handler

    def has(self, action: str, event: HookEvent) -> bool:
        return (_hook_key(action), event) in self._handlers

    def handlers_for(self, action: str) -> Dict[HookEvent, Handler]:
        return {event: handler for (name, event), handler in self._handlers.items() if name == _hook_key(action)}

    def trigger(
        self,
        action: str,
        event: HookEvent,
        args: Sequence[Any],
        default: Any = None,
    ) -> Any:
        """Invoke the handler registered for ``(action, event)``.

        Returns:
            The handler's return value (possibly an awaitable), or ``default``
            when no handler is registered
        """
        handler = self._handlers.get((_hook_key(action), event))
        if handler is None:
            return default
        logger.debug("Triggering %s hook for action '%s'", event.name.lower(), action)
        return handler(*args)

    def __len__(self) -> int:
        return len(self._handlers)


__all__ = [
    "Handler",
    "HookDispatcher",
    "is_handler_name",
    "parse_handler_name",
]
