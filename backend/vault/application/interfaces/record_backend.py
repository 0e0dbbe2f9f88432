"""Abstract persistence port for record documents."""

from abc import ABC, abstractmethod
from typing import Any

RecordDocument = dict[str, Any]


class RecordBackend(ABC):
    """Port for durable document storage: implemented in the infrastructure layer.

    Documents are plain dicts carrying at least ``name``, ``value``,
    ``created_at`` and ``updated_at``; documents returned by the backend also
    carry the backend-assigned ``id``. Every failure must be raised as
    ``BackendError``.
    """

    @abstractmethod
    async def insert(self, document: RecordDocument) -> str:
        """Persist a new document and return its generated identifier."""
        ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> RecordDocument | None:
        """Return the document with the given id, or None if absent."""
        ...

    @abstractmethod
    async def find_all(self, *, keyword: str | None = None) -> list[RecordDocument]:
        """Return every document, optionally only those whose name or value
        contains ``keyword`` (case-insensitive, literal)."""
        ...

    @abstractmethod
    async def update_by_id(
        self, record_id: str, patch: RecordDocument
    ) -> RecordDocument | None:
        """Apply ``patch`` and return the updated document, or None if absent."""
        ...

    @abstractmethod
    async def delete_by_id(self, record_id: str) -> RecordDocument | None:
        """Remove the document and return it, or None if absent."""
        ...

    @abstractmethod
    async def distinct_values(self, field: str) -> set[Any]:
        """Return the set of distinct values stored under ``field``."""
        ...
