"""Record validation rules: pure checks applied before data enters storage."""

from collections.abc import Mapping
from typing import Any

from vault.domain.exceptions import RecordValidationError

_REQUIRED_FIELDS = ("name", "value")


def _read_field(candidate: Any, field: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(field)
    return getattr(candidate, field, None)


def validate_record(candidate: Any, operation: str = "add") -> None:
    """Check that ``candidate`` carries a non-blank string ``name`` and ``value``.

    ``candidate`` may be a mapping or any object exposing the two fields as
    attributes. Raises ``RecordValidationError`` naming the first offending
    field; returns ``None`` otherwise.
    """
    for field in _REQUIRED_FIELDS:
        raw = _read_field(candidate, field)
        if raw is None:
            raise RecordValidationError(field, "is required", operation)
        if not isinstance(raw, str):
            raise RecordValidationError(
                field, f"must be a string, got {type(raw).__name__}", operation
            )
        if not raw.strip():
            raise RecordValidationError(field, "must be a non-empty string", operation)
