"""Pydantic DTOs (Data Transfer Objects) for the record feature."""

from datetime import date, datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Serializes with camelCase keys (``createdAt``) and accepts either form."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class RecordCreate(BaseModel):
    """Schema for creating a record.

    Field rules are enforced by the record store so API and menu callers
    get identical validation errors.
    """

    name: str = Field(..., examples=["api-token"])
    value: str = Field(..., examples=["s3cr3t"])


class RecordUpdate(BaseModel):
    """Schema for replacing a record's name and value."""

    name: str
    value: str


class RecordResponse(_CamelModel):
    """Schema returned to the client."""

    id: str
    name: str
    value: str
    created_at: datetime
    updated_at: datetime


class StatisticsResponse(_CamelModel):
    total_records: int
    longest_name: str | None = None
    longest_name_length: int = 0
    average_name_length: float | None = None
    earliest_record: date | None = None
    latest_record: date | None = None
    last_modified: datetime | None = None
    unique_names: int = 0
    message: str | None = None


class ExportResponse(_CamelModel):
    records: list[RecordResponse]
    formatted_text: str


class BackupSnapshot(_CamelModel):
    """Contents of one backup artifact written after a change event."""

    timestamp: datetime
    action: str
    records: list[RecordResponse]
    total_records: int
