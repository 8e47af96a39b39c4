"""Lifecycle state machine for one action execution.

Each time an action is submitted the runtime creates a fresh
ActionStateMachine, which walks Idle -> Submitting -> (Succeeded | Failed)
-> Idle and emits a FormEvent on every transition. Separate executions of the
same action never share a machine, so re-submitting an action that is still
in flight is allowed; callers that need at most one execution in flight must
disable the submitting control while ``progress[name]`` is True.

Usage:
    >>> from gqlform.state_machine import ActionStateMachine
    >>> sm = ActionStateMachine(action="save")
    >>> sm.transition_to(ActionState.SUBMITTING)
    >>> sm.state
    <ActionState.SUBMITTING: 'submitting'>
    >>> len(sm.get_events())
    1
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from gqlform.errors import GqlFormError
from gqlform.events import EventEmitter, FormEvent
from gqlform.types import ActionState, EventType

logger = logging.getLogger(__name__)


class InvalidStateTransitionError(GqlFormError):
    """Raised when attempting an invalid state transition.

    Attributes:
        current_state: The current state before the attempted transition
        target_state: The target state that was attempted
    """

    def __init__(self, current_state: ActionState, target_state: ActionState, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


STATE_TO_EVENT_TYPE: Dict[ActionState, EventType] = {
    ActionState.IDLE: EventType.ACTION_IDLE,
    ActionState.SUBMITTING: EventType.ACTION_SUBMITTING,
    ActionState.SUCCEEDED: EventType.ACTION_SUCCEEDED,
    ActionState.FAILED: EventType.ACTION_FAILED,
}


VALID_TRANSITIONS: Dict[ActionState, Set[ActionState]] = {
    ActionState.IDLE: {ActionState.SUBMITTING},
    ActionState.SUBMITTING: {ActionState.SUCCEEDED, ActionState.FAILED},
    ActionState.SUCCEEDED: {ActionState.IDLE},
    ActionState.FAILED: {ActionState.IDLE},
}


@dataclass
class ActionStateMachine:
    """State machine for a single execution of an action.

    Attributes:
        action: Name of the action being executed
        state: Current lifecycle state
        emitter: Optional emitter that also receives every transition event

    Examples:
        >>> sm = ActionStateMachine(action="submit")
        >>> sm.can_transition_to(ActionState.SUCCEEDED)
        False
        >>> sm.transition_to(ActionState.SUBMITTING)
        >>> sm.can_transition_to(ActionState.SUCCEEDED)
        True
    """

    action: str
    state: ActionState = ActionState.IDLE
    emitter: Optional[EventEmitter] = field(default=None, repr=False)
    _events: List[FormEvent] = field(default_factory=list, init=False, repr=False)

    def can_transition_to(self, target_state: ActionState) -> bool:
        return target_state in VALID_TRANSITIONS.get(self.state, set())

    def transition_to(self, target_state: ActionState, payload: Optional[Dict[str, Any]] = None) -> None:
        """Transition to a new state and emit a transition event.

        Args:
            target_state: The state to transition to
            payload: Optional extra data merged into the event payload

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(target_state):
            raise InvalidStateTransitionError(
                current_state=self.state,
                target_state=target_state,
                message=(
                    f"Invalid state transition for action '{self.action}': cannot transition "
                    f"from '{self.state.value}' to '{target_state.value}'. Valid transitions "
                    f"from '{self.state.value}' are: "
                    f"{', '.join(sorted(s.value for s in VALID_TRANSITIONS[self.state]))}"
                ),
            )

        old_state = self.state
        self.state = target_state
        logger.debug("Action '%s': %s -> %s", self.action, old_state.value, target_state.value)

        event = FormEvent.create(
            STATE_TO_EVENT_TYPE[target_state],
            action=self.action,
            payload={"from_state": old_state.value, "to_state": target_state.value, **(payload or {})},
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)

    def get_events(self) -> List[FormEvent]:
        """Return the transition events of this execution, oldest first."""
        return list(self._events)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a dictionary.

        Examples:
            >>> ActionStateMachine(action="save", state=ActionState.FAILED).to_dict()
            {'action': 'save', 'state': 'failed'}
        """
        return {"action": self.action, "state": self.state.value}


__all__ = [
    "ActionStateMachine",
    "InvalidStateTransitionError",
    "VALID_TRANSITIONS",
]
