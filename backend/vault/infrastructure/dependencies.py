"""Composition root: wires infrastructure to the application layer.

``open_vault`` owns the database connection for its whole scope and
releases it (after flushing pending backups) on exit, including on
cancellation. The FastAPI dependencies read the container the API lifespan
stores on ``app.state``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import Request

from vault.application.services import (
    BackupSubscriber,
    RecordEventBus,
    RecordStore,
    get_event_bus,
)
from vault.config import Settings, get_settings
from vault.infrastructure.database import Database
from vault.infrastructure.database.repositories import SQLAlchemyRecordBackend
from vault.infrastructure.storage.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)


@dataclass
class VaultContainer:
    """Everything a running vault process needs, built once at startup."""

    settings: Settings
    database: Database
    event_bus: RecordEventBus
    store: RecordStore
    storage: SnapshotStorage
    backups: BackupSubscriber | None = None


@asynccontextmanager
async def open_vault(
    settings: Settings | None = None,
    *,
    event_bus: RecordEventBus | None = None,
) -> AsyncIterator[VaultContainer]:
    """Open the database, build the store and attach the backup subscriber."""
    settings = settings or get_settings()
    event_bus = event_bus or get_event_bus()

    database = Database(settings.database_url, echo=settings.database_echo)
    await database.open()
    try:
        backend = SQLAlchemyRecordBackend(
            database, timeout=settings.backend_timeout_seconds
        )
        store = RecordStore(backend, event_bus, strict_reads=settings.strict_reads)
        storage = SnapshotStorage(settings.backup_dir, settings.export_file)

        backups = None
        if settings.backup_enabled:
            backups = BackupSubscriber(store, storage)
            backups.attach(event_bus)
        else:
            logger.info("Automatic backups are disabled")

        container = VaultContainer(
            settings=settings,
            database=database,
            event_bus=event_bus,
            store=store,
            storage=storage,
            backups=backups,
        )
        try:
            yield container
        finally:
            if backups is not None:
                await backups.close()
    finally:
        await database.close()


def _container(request: Request) -> VaultContainer:
    return request.app.state.vault


def get_record_store(request: Request) -> RecordStore:
    """Provides the process-wide RecordStore."""
    return _container(request).store


def get_snapshot_storage(request: Request) -> SnapshotStorage:
    """Provides the snapshot storage used for exports."""
    return _container(request).storage
