"""Conversion of server-side input validation errors into form messages.

Servers may reject a mutation with GraphQL errors whose
``extensions.code`` is ``BAD_USER_INPUT`` and whose
``extensions.exception.validator`` lists per-field results. The error hook
built here feeds those results to the form's validator, so they show up as
ordinary validation messages.

Usage:
    >>> runtime = FormRuntime.create(
    ...     client,
    ...     mutation=CREATE_USER,
    ...     onSubmitError=create_validator_error_handler("server"),
    ... )  # doctest: +SKIP
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from gqlform.errors import IgnorableValidationError

logger = logging.getLogger(__name__)

BAD_USER_INPUT = "BAD_USER_INPUT"

PayloadSource = Union[Mapping[str, Any], Callable[[Dict[str, Any]], Any], None]


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def graphql_errors(error: Any) -> Optional[List[Any]]:
    """Return the GraphQL errors carried by a mutation error, if any.

    MutationError payloads, client exceptions exposing ``graphql_errors`` or
    ``errors``, and plain lists of errors are recognized.
    """
    if isinstance(error, list):
        return error
    for name in ("graphql_errors", "errors", "payload"):
        value = getattr(error, name, None)
        if isinstance(value, list):
            return value
    return None


def validator_results(errors: List[Any]) -> List[Dict[str, Any]]:
    """Collect the validator results of all BAD_USER_INPUT errors."""
    results: List[Dict[str, Any]] = []
    for err in errors:
        extensions = _get(err, "extensions") or {}
        if extensions.get("code") != BAD_USER_INPUT:
            continue
        exception = extensions.get("exception") or {}
        results.extend(dict(result) for result in (exception.get("validator") or []))
    return results


def create_validator_error_handler(
    rule: str,
    payload: PayloadSource = None,
    on_validate: Optional[Callable[[Any, Dict[str, Any], Any], Any]] = None,
) -> Callable[[Any, Any, Any], Awaitable[Any]]:
    """Build an error hook that turns server input errors into messages.

    Args:
        rule: Rule name recorded on the resulting messages
        payload: Replacement payloads, by result type (mapping) or computed
            from each result (function); falsy replacements keep the original
        on_validate: Called as ``on_validate(event, messages, error)``; its
            return value becomes the hook's result (None by default, so the
            error is not recorded as a mutation error)

    Returns:
        Async hook ``(event, error, form) -> Any``; it returns the original
        error when the error carries no server validation results or the
        results are malformed
    """

    def with_payload(result: Dict[str, Any]) -> Dict[str, Any]:
        if payload is None:
            return result
        if callable(payload):
            replacement = payload(result)
        else:
            replacement = payload.get(result.get("type"))
        return {**result, "payload": replacement or result.get("payload")}

    async def handle(event: Any, error: Any, form: Any) -> Any:
        errors = graphql_errors(error)
        if not errors:
            return error
        try:
            results = [with_payload(result) for result in validator_results(errors)]
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug("Ignoring malformed server validation payload: %s", e)
            return error
        if not results:
            return error
        try:
            messages = await form.validate(form.form_data, [(rule, results)])
        except IgnorableValidationError:
            return None
        logger.debug("Server rejected %d field(s) under rule '%s'", len(results), rule)
        if on_validate is None:
            return None
        result = on_validate(event, messages, error)
        if inspect.isawaitable(result):
            result = await result
        return result

    return handle


__all__ = [
    "BAD_USER_INPUT",
    "create_validator_error_handler",
    "graphql_errors",
    "validator_results",
]
