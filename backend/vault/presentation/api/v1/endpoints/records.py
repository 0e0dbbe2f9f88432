"""Record CRUD, query and export endpoints."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vault.application.schemas import (
    ExportResponse,
    RecordCreate,
    RecordResponse,
    RecordUpdate,
    StatisticsResponse,
)
from vault.application.services import RecordStore
from vault.domain.entities import SortField, SortOrder
from vault.domain.exceptions import EntityNotFoundError
from vault.infrastructure.dependencies import get_record_store, get_snapshot_storage
from vault.infrastructure.storage.snapshot_storage import SnapshotStorage

router = APIRouter(prefix="/records", tags=["Records"])


def _not_found(record_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=str(EntityNotFoundError("Record", record_id)),
    )


@router.get("", response_model=list[RecordResponse])
async def list_records(
    store: RecordStore = Depends(get_record_store),
) -> list[RecordResponse]:
    """Retrieve every record in storage order."""
    records = await store.list_records()
    return [RecordResponse.model_validate(r) for r in records]


@router.get("/search", response_model=list[RecordResponse])
async def search_records(
    q: str = Query("", description="Case-insensitive keyword matched against name and value"),
    store: RecordStore = Depends(get_record_store),
) -> list[RecordResponse]:
    records = await store.search(q)
    return [RecordResponse.model_validate(r) for r in records]


@router.get("/sorted", response_model=list[RecordResponse])
async def sort_records(
    field: SortField = Query(SortField.NAME),
    order: SortOrder = Query(SortOrder.ASC),
    store: RecordStore = Depends(get_record_store),
) -> list[RecordResponse]:
    records = await store.sort(field, order)
    return [RecordResponse.model_validate(r) for r in records]


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    store: RecordStore = Depends(get_record_store),
) -> StatisticsResponse:
    stats = await store.statistics()
    return StatisticsResponse.model_validate(stats)


@router.post("/export", response_model=ExportResponse)
async def export_records(
    store: RecordStore = Depends(get_record_store),
    storage: SnapshotStorage = Depends(get_snapshot_storage),
) -> ExportResponse:
    """Write the export file and return the exported snapshot."""
    snapshot = await store.export_snapshot()
    await asyncio.to_thread(storage.write_export, snapshot)
    return ExportResponse(
        records=[RecordResponse.model_validate(r) for r in snapshot.records],
        formatted_text=snapshot.formatted_text,
    )


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: str,
    store: RecordStore = Depends(get_record_store),
) -> RecordResponse:
    """Retrieve a single record by ID."""
    record = await store.get(record_id)
    if record is None:
        raise _not_found(record_id)
    return RecordResponse.model_validate(record)


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    data: RecordCreate,
    store: RecordStore = Depends(get_record_store),
) -> RecordResponse:
    """Create a new record."""
    record = await store.add(data.name, data.value)
    return RecordResponse.model_validate(record)


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: str,
    data: RecordUpdate,
    store: RecordStore = Depends(get_record_store),
) -> RecordResponse:
    """Replace the name and value of an existing record."""
    record = await store.update(record_id, data.name, data.value)
    if record is None:
        raise _not_found(record_id)
    return RecordResponse.model_validate(record)


@router.delete("/{record_id}", response_model=RecordResponse)
async def delete_record(
    record_id: str,
    store: RecordStore = Depends(get_record_store),
) -> RecordResponse:
    """Delete a record and return its last state."""
    record = await store.delete(record_id)
    if record is None:
        raise _not_found(record_id)
    return RecordResponse.model_validate(record)
