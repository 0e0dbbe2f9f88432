"""Record store: the vault's use cases over the persistence backend.

The store is the only component that translates between backend documents
and ``Record`` entities. Every successful mutation is announced on the
event bus before the mutating call returns.

Read paths (list, search, sort, statistics, export) degrade to empty
results when the backend fails, so "no records" and "backend unreachable"
look the same to callers. Pass ``strict_reads=True`` to have those paths
raise ``BackendError`` instead.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from vault.application.interfaces import RecordBackend, RecordDocument
from vault.application.services.event_bus import RecordEventBus
from vault.domain.entities import (
    ExportSnapshot,
    Record,
    RecordEvent,
    SortField,
    SortOrder,
    VaultStatistics,
)
from vault.domain.exceptions import BackendError, RecordValidationError
from vault.domain.validation import validate_record

logger = logging.getLogger(__name__)

NO_RECORDS_MESSAGE = "No records to analyze"
STATISTICS_ERROR_MESSAGE = "Error retrieving statistics"
EXPORT_SEPARATOR = "-" * 40


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_timestamp(raw: Any, fallback: datetime) -> datetime:
    """Turn a stored timestamp (datetime or ISO string) into an aware UTC datetime."""
    if isinstance(raw, str):
        try:
            raw = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return fallback
    if not isinstance(raw, datetime):
        return fallback
    if raw.tzinfo is None:
        return raw.replace(tzinfo=timezone.utc)
    return raw.astimezone(timezone.utc)


class RecordStore:
    """Orchestrates record persistence, querying and change notification."""

    def __init__(
        self,
        backend: RecordBackend,
        event_bus: RecordEventBus,
        *,
        clock: Callable[[], datetime] = utc_now,
        strict_reads: bool = False,
    ):
        self._backend = backend
        self._events = event_bus
        self._clock = clock
        self._strict_reads = strict_reads
        self._id_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    # ── Normalization ───────────────────────────────────────────────

    def _to_record(self, document: RecordDocument) -> Record:
        """Map a backend document → Record, filling any missing fields."""
        now = self._clock()
        record_id = document.get("id")
        return Record(
            id=str(record_id) if record_id is not None else "unknown",
            name=document.get("name") or "",
            value=document.get("value") or "",
            created_at=_coerce_timestamp(document.get("created_at"), now),
            updated_at=_coerce_timestamp(document.get("updated_at"), now),
        )

    def _degrade(self, operation: str, exc: BackendError, strict: bool = False) -> None:
        if strict or self._strict_reads:
            raise exc
        logger.error("Error during %s, returning empty result: %s", operation, exc)

    @asynccontextmanager
    async def _locked(self, record_id: str) -> AsyncIterator[None]:
        """Serialize mutations of one id; the lock is dropped once nobody holds or awaits it."""
        lock = self._id_locks.get(record_id)
        if lock is None:
            lock = self._id_locks[record_id] = asyncio.Lock()
        self._lock_users[record_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[record_id] -= 1
            if not self._lock_users[record_id]:
                del self._lock_users[record_id]
                del self._id_locks[record_id]

    # ── Mutations ───────────────────────────────────────────────────

    async def add(self, name: Any, value: Any) -> Record:
        """Validate, persist and announce a new record."""
        validate_record({"name": name, "value": value}, operation="add")
        timestamp = self._clock()
        document: RecordDocument = {
            "name": name.strip(),
            "value": value.strip(),
            "created_at": timestamp,
            "updated_at": timestamp,
        }
        try:
            record_id = await self._backend.insert(document)
        except BackendError:
            logger.exception("Error adding record")
            raise

        record = Record(id=str(record_id), **document)
        logger.info("Added record %s", record.id)
        await self._events.publish(RecordEvent.ADDED, record)
        return record

    async def update(self, record_id: str, name: Any, value: Any) -> Record | None:
        """Replace name and value of an existing record.

        Returns None without side effects when ``record_id`` does not exist.
        """
        async with self._locked(record_id):
            existing = await self._backend.find_by_id(record_id)
            if existing is None:
                logger.info("Update skipped, record %s not found", record_id)
                return None

            validate_record({"name": name, "value": value}, operation="update")
            current = self._to_record(existing)
            patch: RecordDocument = {
                "name": name.strip(),
                "value": value.strip(),
                "updated_at": max(self._clock(), current.created_at),
            }
            updated = await self._backend.update_by_id(record_id, patch)
            if updated is None:
                # Removed between lookup and update
                return None

            record = self._to_record(updated)
            # created_at is owned by the store, never by the patch result
            record.created_at = current.created_at
            logger.info("Updated record %s", record.id)
            await self._events.publish(RecordEvent.UPDATED, record)
            return record

    async def delete(self, record_id: str) -> Record | None:
        """Remove a record, returning its pre-deletion snapshot (or None)."""
        async with self._locked(record_id):
            existing = await self._backend.find_by_id(record_id)
            if existing is None:
                logger.info("Delete skipped, record %s not found", record_id)
                return None

            snapshot = self._to_record(existing)
            await self._backend.delete_by_id(record_id)
            logger.info("Deleted record %s", snapshot.id)
            await self._events.publish(RecordEvent.DELETED, snapshot)
            return snapshot

    # ── Queries ─────────────────────────────────────────────────────

    async def get(self, record_id: str) -> Record | None:
        try:
            document = await self._backend.find_by_id(record_id)
        except BackendError as exc:
            self._degrade("get", exc)
            return None
        return self._to_record(document) if document is not None else None

    async def list_records(self, *, strict: bool = False) -> list[Record]:
        """Return every live record in backend enumeration order.

        With ``strict=True`` a backend failure raises instead of yielding ``[]``.
        """
        try:
            documents = await self._backend.find_all()
        except BackendError as exc:
            self._degrade("list", exc, strict)
            return []
        logger.debug("Fetched %d records", len(documents))
        return [self._to_record(doc) for doc in documents]

    async def search(self, keyword: Any) -> list[Record]:
        """Case-insensitive substring match against name or value.

        An empty, blank or non-string keyword matches nothing.
        """
        if not isinstance(keyword, str) or not keyword.strip():
            return []
        try:
            documents = await self._backend.find_all(keyword=keyword.strip())
        except BackendError as exc:
            self._degrade("search", exc)
            return []
        return [self._to_record(doc) for doc in documents]

    async def sort(
        self,
        field: SortField | str,
        order: SortOrder | str = SortOrder.ASC,
    ) -> list[Record]:
        """Return all records ordered by ``field``.

        Ties keep backend enumeration order when ascending; descending is
        the exact reverse of the ascending sequence.
        """
        try:
            sort_field = SortField(field)
        except ValueError:
            allowed = ", ".join(f.value for f in SortField)
            raise RecordValidationError(
                "field", f"must be one of {allowed}, got {field!r}", "sort"
            ) from None
        try:
            sort_order = SortOrder(order)
        except ValueError:
            raise RecordValidationError(
                "order", f"must be 'asc' or 'desc', got {order!r}", "sort"
            ) from None

        records = await self.list_records()
        ordered = sorted(records, key=lambda r: getattr(r, sort_field.attribute))
        if sort_order is SortOrder.DESC:
            ordered.reverse()
        return ordered

    async def statistics(self) -> VaultStatistics:
        """Summarize the live record set."""
        try:
            documents = await self._backend.find_all()
            records = [self._to_record(doc) for doc in documents]
            if not records:
                return VaultStatistics(total_records=0, message=NO_RECORDS_MESSAGE)
            unique_names = await self._backend.distinct_values("name")
        except BackendError as exc:
            self._degrade("statistics", exc)
            return VaultStatistics(total_records=0, message=STATISTICS_ERROR_MESSAGE)

        longest = records[0]
        for record in records[1:]:
            if len(record.name) > len(longest.name):
                longest = record

        created = [r.created_at for r in records]
        return VaultStatistics(
            total_records=len(records),
            longest_name=longest.name,
            longest_name_length=len(longest.name),
            average_name_length=round(
                sum(len(r.name) for r in records) / len(records), 2
            ),
            earliest_record=min(created).date(),
            latest_record=max(created).date(),
            last_modified=max(r.updated_at for r in records),
            unique_names=len(unique_names),
        )

    async def export_snapshot(self) -> ExportSnapshot:
        """Return the live set alongside its fixed-format text rendering."""
        records = await self.list_records()
        return ExportSnapshot(records=records, formatted_text=format_records(records))


def format_records(records: list[Record]) -> str:
    """Render one text block per record, numbered from 1."""
    blocks = []
    for index, record in enumerate(records, start=1):
        blocks.append(
            f"Record #{index}\n"
            f"  ID: {record.id}\n"
            f"  Name: {record.name}\n"
            f"  Value: {record.value}\n"
            f"  Created: {record.created_at.isoformat()}\n"
            f"  Last Updated: {record.updated_at.isoformat()}\n"
            f"{EXPORT_SEPARATOR}\n"
        )
    return "".join(blocks)
