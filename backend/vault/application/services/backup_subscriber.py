"""Backup subscriber: snapshots the vault to disk after every change event."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from vault.application.services.event_bus import RecordEventBus
from vault.application.services.record_store import RecordStore
from vault.domain.entities import Record, RecordEvent

logger = logging.getLogger(__name__)


class BackupWriter(Protocol):
    def write_backup(self, action: str, records: list[Record]) -> Path: ...


class BackupSubscriber:
    """Listens on the event bus and writes a full snapshot per change.

    The event handler only schedules an asyncio task, so a slow or failing
    snapshot never delays or fails the mutation that triggered it. Snapshots
    are written one at a time, in event order.

    Usage:
        backups = BackupSubscriber(store, storage)
        backups.attach(event_bus)
        ...
        await backups.close()
    """

    def __init__(self, store: RecordStore, writer: BackupWriter):
        self._store = store
        self._writer = writer
        self._tasks: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._unsubscribe: Callable[[], None] | None = None
        self.written: list[Path] = []

    def attach(self, event_bus: RecordEventBus) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = event_bus.subscribe_all(self.on_event)

    def on_event(self, event: RecordEvent, record: Record) -> None:
        """Event bus handler: schedules the snapshot and returns immediately."""
        task = asyncio.get_running_loop().create_task(self._snapshot(event.action))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _snapshot(self, action: str) -> None:
        async with self._write_lock:
            try:
                records = await self._store.list_records(strict=True)
                path = await asyncio.to_thread(self._writer.write_backup, action, records)
                self.written.append(path)
            except Exception as exc:
                logger.warning("Could not create backup for %s: %s", action, exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every scheduled snapshot has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop listening and flush outstanding snapshots."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.drain()
