"""Unit tests for the field validator.

Tests cover:
- Per-field validation of only the given fields
- Message codes translated from JSON Schema failures
- Message state updates, clearing and reset
- Ignorable errors when no rule applies
- Extra (server-reported) results
"""

import jsonschema
import pytest

from gqlform.errors import IgnorableValidationError, ValidationMessage
from gqlform.types import MessageCode
from gqlform.validation import Validator


RULES = {
    "name": {"type": "string", "minLength": 2, "maxLength": 10},
    "age": {"type": "integer", "minimum": 18},
    "email": {"type": "string", "pattern": "^[^@]+@[^@]+$"},
    "role": {"enum": ["admin", "user"]},
    "address": {"type": "object", "required": ["city"]},
}


@pytest.mark.asyncio
class TestValidateFields:
    """Test validating individual fields."""

    async def test_valid_field_has_no_message(self):
        validator = Validator(RULES)
        messages = await validator.validate({"name": "Alice"})
        assert messages == {}
        assert validator.is_valid()

    async def test_only_given_fields_are_validated(self):
        validator = Validator(RULES)
        messages = await validator.validate({"age": 30})
        assert "name" not in messages

    async def test_type_mismatch(self):
        messages = await Validator(RULES).validate({"age": "thirty"})
        assert messages["age"].code == MessageCode.INVALID_TYPE
        assert messages["age"].received == "str"

    async def test_minimum(self):
        messages = await Validator(RULES).validate({"age": 12})
        assert messages["age"].code == MessageCode.INVALID_VALUE
        assert messages["age"].received == 12

    async def test_too_short_and_too_long(self):
        validator = Validator(RULES)
        assert (await validator.validate({"name": "A"}))["name"].code == MessageCode.TOO_SHORT
        assert (await validator.validate({"name": "A" * 11}))["name"].code == MessageCode.TOO_LONG

    async def test_pattern(self):
        messages = await Validator(RULES).validate({"email": "nope"})
        assert messages["email"].code == MessageCode.INVALID_FORMAT

    async def test_enum(self):
        messages = await Validator(RULES).validate({"role": "root"})
        assert messages["role"].code == MessageCode.INVALID_VALUE
        assert messages["role"].expected == ["admin", "user"]

    async def test_nested_required(self):
        messages = await Validator(RULES).validate({"address": {}})
        assert messages["address"].code == MessageCode.REQUIRED
        assert "address.city" in messages["address"].message

    async def test_message_records_rule_and_field(self):
        messages = await Validator(RULES).validate({"age": 1})
        assert messages["age"].field == "age"
        assert messages["age"].rule == "age"


@pytest.mark.asyncio
class TestMessageState:
    """Test how messages accumulate and clear."""

    async def test_messages_accumulate_across_calls(self):
        validator = Validator(RULES)
        await validator.validate({"age": 1})
        messages = await validator.validate({"name": "A"})
        assert set(messages) == {"age", "name"}

    async def test_fixed_field_clears_its_message(self):
        validator = Validator(RULES)
        await validator.validate({"age": 1, "name": "A"})
        messages = await validator.validate({"age": 40})
        assert set(messages) == {"name"}

    async def test_reset_clears_all_messages(self):
        validator = Validator(RULES)
        await validator.validate({"age": 1})
        validator.reset()
        assert validator.messages == {}

    async def test_returned_messages_are_a_copy(self):
        validator = Validator(RULES)
        messages = await validator.validate({"age": 1})
        messages.clear()
        assert "age" in validator.messages


@pytest.mark.asyncio
class TestIgnorable:
    """Test validation of fields without rules."""

    async def test_no_rule_raises_ignorable(self):
        with pytest.raises(IgnorableValidationError) as exc_info:
            await Validator(RULES).validate({"nickname": "x"})
        assert exc_info.value.fields == ["nickname"]

    async def test_empty_rules_raise_ignorable(self):
        with pytest.raises(IgnorableValidationError):
            await Validator().validate({"name": "x"})

    async def test_mixed_fields_validate_ruled_ones(self):
        messages = await Validator(RULES).validate({"nickname": "x", "age": 1})
        assert set(messages) == {"age"}


@pytest.mark.asyncio
class TestExtraResults:
    """Test results reported outside the rule set."""

    async def test_extra_results_become_server_messages(self):
        validator = Validator()
        messages = await validator.validate({}, [("server", [
            {"field": "email", "type": "unique", "message": "Email already taken", "payload": {"n": 1}},
        ])])
        assert messages["email"] == ValidationMessage(
            field="email",
            code=MessageCode.SERVER,
            message="Email already taken",
            rule="server",
            expected="unique",
            payload={"n": 1},
        )

    async def test_results_without_field_are_skipped(self):
        with pytest.raises(IgnorableValidationError):
            await Validator().validate({}, [("server", [{"type": "unique"}])])

    async def test_default_message(self):
        messages = await Validator().validate({}, [("server", [{"path": "name", "type": "taken"}])])
        assert messages["name"].message == "Field 'name' was rejected by the server"


class TestRuleSchemas:
    """Test rule set checking at construction."""

    def test_invalid_rule_schema_raises(self):
        with pytest.raises(jsonschema.SchemaError):
            Validator({"age": {"type": "no-such-type"}})


class TestValidationMessageSerialization:
    """Test ValidationMessage to_dict/from_dict."""

    def test_round_trip(self):
        message = ValidationMessage(
            field="age", code=MessageCode.INVALID_VALUE, message="too young", rule="age", received=3
        )
        data = message.to_dict()
        assert data == {"field": "age", "code": "invalid_value", "message": "too young", "rule": "age", "received": 3}
        assert ValidationMessage.from_dict(data) == message
