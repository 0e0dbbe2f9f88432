"""Unit tests for record validation rules."""

from types import SimpleNamespace

import pytest

from vault.domain.exceptions import RecordValidationError
from vault.domain.validation import validate_record


def test_valid_mapping_passes():
    assert validate_record({"name": "token", "value": "abc"}) is None


def test_valid_object_passes():
    assert validate_record(SimpleNamespace(name=" token ", value="abc")) is None


@pytest.mark.parametrize(
    "candidate, field",
    [
        ({"value": "x"}, "name"),
        ({"name": "", "value": "x"}, "name"),
        ({"name": "   ", "value": "x"}, "name"),
        ({"name": 42, "value": "x"}, "name"),
        ({"name": "x"}, "value"),
        ({"name": "x", "value": ""}, "value"),
        ({"name": "x", "value": "\t\n"}, "value"),
        ({"name": "x", "value": ["x"]}, "value"),
    ],
)
def test_invalid_field_is_reported(candidate, field):
    with pytest.raises(RecordValidationError) as exc_info:
        validate_record(candidate)
    assert exc_info.value.field == field


def test_name_is_checked_before_value():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_record({"name": "", "value": ""})
    assert exc_info.value.field == "name"


def test_error_carries_operation_in_message():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_record({"name": "ok", "value": None}, operation="update")
    error = exc_info.value
    assert error.operation == "update"
    assert "update" in str(error)
    assert "value" in str(error)
