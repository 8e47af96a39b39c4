"""Declarative field validation for gqlform.

Rules are JSON Schema (Draft 7) fragments keyed by form field name. A
Validator checks only the fields it is given, which lets the runtime validate
each change as it is merged, and keeps the current message per field.

Usage:
    >>> validator = Validator({"age": {"type": "integer", "minimum": 18}})
    >>> import asyncio
    >>> messages = asyncio.run(validator.validate({"age": 12}))
    >>> messages["age"].code
    <MessageCode.INVALID_VALUE: 'invalid_value'>
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import jsonschema
from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from gqlform.errors import IgnorableValidationError, ValidationMessage
from gqlform.types import MessageCode

logger = logging.getLogger(__name__)

ExtraResults = Sequence[Tuple[str, Iterable[Mapping[str, Any]]]]
"""(rule name, results) pairs reported by a source other than the rule set."""


class Validator:
    """Per-field JSON Schema validator with message state.

    Attributes:
        rules: Mapping of field name to JSON Schema fragment
        messages: Current validation messages keyed by field name
    """

    def __init__(self, rules: Optional[Mapping[str, Dict[str, Any]]] = None) -> None:
        """Initialize the validator with a rule set.

        Raises:
            jsonschema.SchemaError: If any rule is not a valid schema
        """
        self.rules: Dict[str, Dict[str, Any]] = dict(rules or {})
        self._validators: Dict[str, Draft7Validator] = {}
        for name, rule in self.rules.items():
            Draft7Validator.check_schema(rule)
            self._validators[name] = Draft7Validator(rule)
        self.messages: Dict[str, ValidationMessage] = {}

    async def validate(
        self,
        data: Mapping[str, Any],
        extra: Optional[ExtraResults] = None,
    ) -> Dict[str, ValidationMessage]:
        """Validate the given fields and update the stored messages.

        Fields without a rule are skipped. For each validated field the stored
        message is replaced by its first failure, or removed if it passes.

        Args:
            data: Field values to validate
            extra: Results reported elsewhere (e.g. by the server), as
                ``(rule, results)`` pairs; each result is a mapping with
                ``field``, ``type``, and optional ``message`` and ``payload``

        Returns:
            A copy of all current messages

        Raises:
            IgnorableValidationError: If no rule or extra result applies
        """
        checked = [name for name in data if name in self._validators]
        reported = self._extra_messages(extra or ())
        if not checked and not reported:
            raise IgnorableValidationError(data.keys())

        messages = dict(self.messages)
        for name in checked:
            message = self._check_field(name, data[name])
            if message is None:
                messages.pop(name, None)
            else:
                messages[name] = message
        messages.update(reported)

        self.messages = messages
        logger.debug("Validated %s: %d message(s)", ", ".join(checked) or "(extra)", len(messages))
        return dict(messages)

    def reset(self) -> None:
        """Clear all messages."""
        self.messages = {}

    def is_valid(self) -> bool:
        return not self.messages

    def _check_field(self, name: str, value: Any) -> Optional[ValidationMessage]:
        error = best_match(self._validators[name].iter_errors(value))
        if error is None:
            return None
        return self._translate_error(name, error)

    def _extra_messages(self, extra: ExtraResults) -> Dict[str, ValidationMessage]:
        messages: Dict[str, ValidationMessage] = {}
        for rule, results in extra:
            for result in results:
                name = result.get("field") or result.get("path")
                if not name:
                    continue
                messages[name] = ValidationMessage(
                    field=name,
                    code=MessageCode.SERVER,
                    message=result.get("message") or f"Field '{name}' was rejected by the server",
                    rule=rule,
                    expected=result.get("type"),
                    payload=result.get("payload"),
                )
        return messages

    def _translate_error(self, name: str, error: jsonschema.ValidationError) -> ValidationMessage:
        """Translate a jsonschema ValidationError into a ValidationMessage.

        Error mapping:
            - 'required' property errors -> REQUIRED
            - 'type' errors -> INVALID_TYPE
            - 'format' and 'pattern' errors -> INVALID_FORMAT
            - 'enum', 'const' and numeric bound errors -> INVALID_VALUE
            - 'minLength' errors -> TOO_SHORT
            - 'maxLength' errors -> TOO_LONG
            - anything else -> CUSTOM
        """
        path = ".".join([name] + [str(p) for p in error.path])

        if error.validator == "required":
            missing = error.message.split("'")[1] if "'" in error.message else "field"
            full_path = f"{path}.{missing}"
            return ValidationMessage(
                field=name,
                code=MessageCode.REQUIRED,
                message=f"Field '{full_path}' is required but was not provided",
                rule=name,
                expected="required field",
            )

        if error.validator == "type":
            received_type = type(error.instance).__name__
            return ValidationMessage(
                field=name,
                code=MessageCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {error.validator_value}, got {received_type}",
                rule=name,
                expected=error.validator_value,
                received=received_type,
            )

        if error.validator == "format":
            return ValidationMessage(
                field=name,
                code=MessageCode.INVALID_FORMAT,
                message=f"Field '{path}' has invalid format. Expected format: {error.validator_value}",
                rule=name,
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator == "pattern":
            return ValidationMessage(
                field=name,
                code=MessageCode.INVALID_FORMAT,
                message=f"Field '{path}' does not match required pattern: {error.validator_value}",
                rule=name,
                expected=f"pattern: {error.validator_value}",
                received=error.instance,
            )

        if error.validator in ("enum", "const"):
            return ValidationMessage(
                field=name,
                code=MessageCode.INVALID_VALUE,
                message=f"Field '{path}' has invalid value. Must be one of: {error.validator_value}",
                rule=name,
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator in ("minLength", "maxLength"):
            actual_length = len(error.instance) if error.instance else 0
            too_short = error.validator == "minLength"
            bound = "Minimum" if too_short else "Maximum"
            return ValidationMessage(
                field=name,
                code=MessageCode.TOO_SHORT if too_short else MessageCode.TOO_LONG,
                message=(
                    f"Field '{path}' is too {'short' if too_short else 'long'}. "
                    f"{bound} length: {error.validator_value}, got: {actual_length}"
                ),
                rule=name,
                expected=f"{bound.lower()} {error.validator_value} characters",
                received=f"{actual_length} characters",
            )

        if error.validator in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"):
            return ValidationMessage(
                field=name,
                code=MessageCode.INVALID_VALUE,
                message=f"Field '{path}' violates {error.validator} constraint: {error.validator_value}",
                rule=name,
                expected=f"{error.validator}: {error.validator_value}",
                received=error.instance,
            )

        return ValidationMessage(
            field=name,
            code=MessageCode.CUSTOM,
            message=f"Field '{path}' validation failed: {error.message}",
            rule=name,
            expected=error.validator_value,
            received=error.instance,
        )


__all__ = [
    "Validator",
    "ExtraResults",
]
