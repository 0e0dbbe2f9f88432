"""Shared fakes and fixtures for the vault test suite."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from vault.application.interfaces import RecordBackend, RecordDocument
from vault.application.services import RecordEventBus, RecordStore
from vault.domain.exceptions import BackendError


class FakeRecordBackend(RecordBackend):
    """In-memory fake backend for unit testing.

    Enumerates documents in insertion order. Operations listed in
    ``failing`` raise ``BackendError``. A non-zero ``delay`` makes every
    call yield to the event loop before touching the data.
    """

    def __init__(self):
        self._documents: dict[str, RecordDocument] = {}
        self._next_id = 1
        self.failing: set[str] = set()
        self.calls: list[str] = []
        self.delay = 0.0

    async def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.failing:
            raise BackendError(operation, "backend unavailable")

    def raw(self, record_id: str) -> RecordDocument:
        return self._documents[record_id]

    def put_raw(self, document: RecordDocument) -> None:
        """Store a document as-is, bypassing the record store."""
        self._documents[document["id"]] = document

    async def insert(self, document: RecordDocument) -> str:
        await self._check("insert")
        record_id = f"rec-{self._next_id}"
        self._next_id += 1
        self._documents[record_id] = {**document, "id": record_id}
        return record_id

    async def find_by_id(self, record_id: str) -> RecordDocument | None:
        await self._check("find_by_id")
        document = self._documents.get(record_id)
        return dict(document) if document else None

    async def find_all(self, *, keyword: str | None = None) -> list[RecordDocument]:
        await self._check("find_all")
        documents = [dict(d) for d in self._documents.values()]
        if keyword:
            needle = keyword.lower()
            documents = [
                d
                for d in documents
                if needle in str(d.get("name", "")).lower()
                or needle in str(d.get("value", "")).lower()
            ]
        return documents

    async def update_by_id(
        self, record_id: str, patch: RecordDocument
    ) -> RecordDocument | None:
        await self._check("update_by_id")
        document = self._documents.get(record_id)
        if document is None:
            return None
        document.update(patch)
        return dict(document)

    async def delete_by_id(self, record_id: str) -> RecordDocument | None:
        await self._check("delete_by_id")
        return self._documents.pop(record_id, None)

    async def distinct_values(self, field: str) -> set[Any]:
        await self._check("distinct_values")
        return {d.get(field) for d in self._documents.values()}


class ManualClock:
    """Deterministic clock; advances only when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def backend() -> FakeRecordBackend:
    return FakeRecordBackend()


@pytest.fixture
def event_bus() -> RecordEventBus:
    return RecordEventBus()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(backend: FakeRecordBackend, event_bus: RecordEventBus, clock: ManualClock) -> RecordStore:
    return RecordStore(backend, event_bus, clock=clock)
