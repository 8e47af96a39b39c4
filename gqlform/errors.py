"""Error types and validation message records for gqlform.

Structural problems with GraphQL documents and configuration mistakes are
programmer errors: they are raised at setup time and never caught internally.
Runtime data errors (validation, mutation, query) are captured into form state
and never propagate past the runtime.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from gqlform.types import MessageCode


class GqlFormError(Exception):
    """Base class for all gqlform errors."""


class StructureError(GqlFormError):
    """Raised when a GraphQL document lacks the structure the form needs.

    Examples are a document without an operation definition, or an operation
    without a top-level field selection.
    """


class ConfigurationError(GqlFormError):
    """Raised when form options cannot be resolved."""


class HookConfigurationError(ConfigurationError):
    """Raised when a lifecycle hook is misnamed or not callable."""


class ValidationError(GqlFormError):
    """Base class for validation collaborator failures."""


class IgnorableValidationError(ValidationError):
    """Raised when none of the validated fields has a rule.

    The runtime swallows this error; it never becomes a form message.
    """

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"No validation rules apply to fields: {', '.join(self.fields) or '(none)'}")


class MutationError(GqlFormError):
    """Failure of an action's mutation.

    Client errors that are already exceptions are passed to hooks unchanged.
    MutationError wraps error payloads that are not exceptions.

    Attributes:
        action: Name of the action that failed
        payload: The raw error payload
    """

    def __init__(self, action: str, payload: Any):
        self.action = action
        self.payload = payload
        super().__init__(f"Action '{action}' failed: {payload!r}")


class QueryError(GqlFormError):
    """Failure of the form's initial data query.

    Attributes:
        cause: The underlying client error
    """

    def __init__(self, cause: Any):
        self.cause = cause
        super().__init__(f"Form query failed: {cause}")


@dataclass(frozen=True)
class ValidationMessage:
    """Per-field validation failure detail.

    Attributes:
        field: Form field name the message belongs to
        code: Specific validation failure code
        message: Human-readable description
        rule: Name of the rule that produced the message
        expected: Optional - what was expected
        received: Optional - what was actually received
        payload: Optional - extra data supplied by the rule (e.g. server details)

    Examples:
        >>> msg = ValidationMessage(
        ...     field="email",
        ...     code=MessageCode.INVALID_FORMAT,
        ...     message="Invalid email format",
        ... )
        >>> msg.to_dict()["code"]
        'invalid_format'
    """
    field: str
    code: MessageCode
    message: str
    rule: Optional[str] = None
    expected: Optional[Any] = None
    received: Optional[Any] = None
    payload: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "field": self.field,
            "code": self.code.value if isinstance(self.code, MessageCode) else self.code,
            "message": self.message,
        }
        if self.rule is not None:
            result["rule"] = self.rule
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationMessage":
        """Create ValidationMessage from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = MessageCode(code)
        return cls(
            field=data["field"],
            code=code,
            message=data["message"],
            rule=data.get("rule"),
            expected=data.get("expected"),
            received=data.get("received"),
            payload=data.get("payload"),
        )


__all__ = [
    "GqlFormError",
    "StructureError",
    "ConfigurationError",
    "HookConfigurationError",
    "ValidationError",
    "IgnorableValidationError",
    "MutationError",
    "QueryError",
    "ValidationMessage",
]
