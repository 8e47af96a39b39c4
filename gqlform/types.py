"""Core type definitions for gqlform.

This module defines the small value types shared across the package:
- ActionState: Lifecycle states of a single action execution
- HookEvent: Lifecycle points at which caller hooks are invoked
- EventType: Change events emitted to the rendering layer
- MessageCode: Validation failure codes for individual fields
- FetchPolicy: Query fetch strategies understood by GraphQL clients
- SubmitEvent: The event object that triggers a submission
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ActionState(str, Enum):
    """Lifecycle states of one action execution.

    Every execution starts IDLE, moves to SUBMITTING, resolves to SUCCEEDED or
    FAILED and returns to IDLE (see gqlform.state_machine).
    """
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class HookEvent(str, Enum):
    """Hook points for an action.

    The value is the suffix used by the conventional handler names, so
    ``onSave`` is ACTION, ``onSaveSuccess`` is SUCCESS and ``onSaveError``
    is ERROR.
    """
    ACTION = ""
    SUCCESS = "Success"
    ERROR = "Error"


class EventType(str, Enum):
    """Change events emitted by a FormRuntime."""
    FORM_UPDATED = "form.updated"
    VALIDATION_COMPLETED = "validation.completed"
    VALIDATION_RESET = "validation.reset"
    ACTION_SUBMITTING = "action.submitting"
    ACTION_SUCCEEDED = "action.succeeded"
    ACTION_FAILED = "action.failed"
    ACTION_IDLE = "action.idle"
    QUERY_LOADING = "query.loading"
    QUERY_LOADED = "query.loaded"
    QUERY_FAILED = "query.failed"
    MUTATION_ERRORS_CHANGED = "mutation_errors.changed"


class MessageCode(str, Enum):
    """Validation failure codes for individual fields."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_FORMAT = "invalid_format"
    INVALID_VALUE = "invalid_value"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    SERVER = "server"
    CUSTOM = "custom"


class FetchPolicy(str, Enum):
    """Query fetch policies, named as GraphQL clients commonly name them."""
    CACHE_FIRST = "cache-first"
    CACHE_AND_NETWORK = "cache-and-network"
    NETWORK_ONLY = "network-only"
    CACHE_ONLY = "cache-only"
    NO_CACHE = "no-cache"


@dataclass
class SubmitEvent:
    """Event that triggered a submission.

    The runtime calls ``prevent_default()`` on every submission. Any object
    with a ``prevent_default`` method can be passed in its place.

    Examples:
        >>> event = SubmitEvent(source="save-button")
        >>> event.prevent_default()
        >>> event.default_prevented
        True
    """
    source: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


__all__ = [
    "ActionState",
    "HookEvent",
    "EventType",
    "MessageCode",
    "FetchPolicy",
    "SubmitEvent",
]
