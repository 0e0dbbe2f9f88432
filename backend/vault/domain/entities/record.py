"""Domain entities: the vault record and the value objects derived from it."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


@dataclass
class Record:
    """A named text value with backend-assigned identity and timestamps.

    ``id`` and ``created_at`` never change after creation; ``updated_at``
    is refreshed on every successful update.
    """

    id: str
    name: str
    value: str
    created_at: datetime
    updated_at: datetime


class RecordEvent(str, Enum):
    """Change events published after a successful mutation."""

    ADDED = "recordAdded"
    UPDATED = "recordUpdated"
    DELETED = "recordDeleted"

    @property
    def action(self) -> str:
        """Action name recorded in backup snapshots."""
        return _EVENT_ACTIONS[self]


_EVENT_ACTIONS = {
    RecordEvent.ADDED: "add_record",
    RecordEvent.UPDATED: "update_record",
    RecordEvent.DELETED: "delete_record",
}


class SortField(str, Enum):
    """Record attributes the store can sort by."""

    NAME = "name"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def attribute(self) -> str:
        return {
            SortField.NAME: "name",
            SortField.CREATED_AT: "created_at",
            SortField.UPDATED_AT: "updated_at",
        }[self]


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class VaultStatistics:
    """Summary of the live record set.

    An empty (or unreachable) vault yields ``total_records == 0`` with an
    explanatory ``message`` and every other field left unset.
    """

    total_records: int
    longest_name: str | None = None
    longest_name_length: int = 0
    average_name_length: float | None = None
    earliest_record: date | None = None
    latest_record: date | None = None
    last_modified: datetime | None = None
    unique_names: int = 0
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.total_records == 0


@dataclass
class ExportSnapshot:
    """The live record set together with its fixed-format text rendering."""

    records: list[Record] = field(default_factory=list)
    formatted_text: str = ""
