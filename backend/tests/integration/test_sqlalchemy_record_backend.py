"""Integration tests for the SQLAlchemy record backend on a SQLite file."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import Text

from vault.application.services import RecordEventBus, RecordStore
from vault.domain.exceptions import BackendError
from vault.infrastructure.database import Database, RecordModel
from vault.infrastructure.database.repositories import SQLAlchemyRecordBackend

T0 = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def _doc(name: str, value: str, offset: int = 0) -> dict:
    moment = T0 + timedelta(seconds=offset)
    return {"name": name, "value": value, "created_at": moment, "updated_at": moment}


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'nested' / 'vault.db'}")
    await db.open()
    try:
        yield db
    finally:
        await db.close()


@pytest.fixture
def sql_backend(database: Database) -> SQLAlchemyRecordBackend:
    return SQLAlchemyRecordBackend(database, timeout=5.0)


@pytest.mark.asyncio
async def test_insert_and_find(sql_backend: SQLAlchemyRecordBackend):
    record_id = await sql_backend.insert(_doc("alpha", "1"))

    document = await sql_backend.find_by_id(record_id)

    assert document is not None
    assert document["id"] == record_id
    assert document["name"] == "alpha"
    assert document["created_at"].replace(tzinfo=timezone.utc) == T0
    assert await sql_backend.find_by_id("missing") is None


@pytest.mark.asyncio
async def test_ids_are_unique(sql_backend: SQLAlchemyRecordBackend):
    ids = {await sql_backend.insert(_doc("same", "v")) for _ in range(5)}
    assert len(ids) == 5


@pytest.mark.asyncio
async def test_find_all_enumerates_in_creation_order(sql_backend: SQLAlchemyRecordBackend):
    await sql_backend.insert(_doc("second", "v", offset=10))
    await sql_backend.insert(_doc("first", "v", offset=0))
    await sql_backend.insert(_doc("third", "v", offset=20))

    names = [d["name"] for d in await sql_backend.find_all()]

    assert names == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_keyword_is_case_insensitive_and_literal(sql_backend: SQLAlchemyRecordBackend):
    await sql_backend.insert(_doc("Discount", "100%", offset=0))
    await sql_backend.insert(_doc("plain", "1000", offset=1))
    await sql_backend.insert(_doc("snake_case", "v", offset=2))
    await sql_backend.insert(_doc("snakeXcase", "v", offset=3))

    assert [d["name"] for d in await sql_backend.find_all(keyword="DISCOUNT")] == ["Discount"]
    assert [d["name"] for d in await sql_backend.find_all(keyword="0%")] == ["Discount"]
    assert [d["name"] for d in await sql_backend.find_all(keyword="e_c")] == ["snake_case"]
    assert len(await sql_backend.find_all(keyword="100")) == 2


@pytest.mark.asyncio
async def test_update_by_id_patches_only_known_fields(sql_backend: SQLAlchemyRecordBackend):
    record_id = await sql_backend.insert(_doc("alpha", "1"))
    later = T0 + timedelta(hours=1)

    updated = await sql_backend.update_by_id(
        record_id, {"name": "beta", "value": "2", "updated_at": later, "id": "hijack"}
    )

    assert updated is not None
    assert updated["id"] == record_id
    assert updated["name"] == "beta"
    assert updated["created_at"].replace(tzinfo=timezone.utc) == T0
    assert updated["updated_at"].replace(tzinfo=timezone.utc) == later
    assert await sql_backend.update_by_id("missing", {"name": "x"}) is None


@pytest.mark.asyncio
async def test_delete_by_id_returns_removed_document(sql_backend: SQLAlchemyRecordBackend):
    record_id = await sql_backend.insert(_doc("alpha", "1"))

    removed = await sql_backend.delete_by_id(record_id)

    assert removed is not None and removed["name"] == "alpha"
    assert await sql_backend.find_by_id(record_id) is None
    assert await sql_backend.delete_by_id(record_id) is None


@pytest.mark.asyncio
async def test_distinct_values(sql_backend: SQLAlchemyRecordBackend):
    for offset, name in enumerate(["a", "b", "a"]):
        await sql_backend.insert(_doc(name, "v", offset=offset))

    assert await sql_backend.distinct_values("name") == {"a", "b"}
    assert await sql_backend.distinct_values("value") == {"v"}

    with pytest.raises(BackendError):
        await sql_backend.distinct_values("created_at")


@pytest.mark.asyncio
async def test_closed_database_raises_backend_error(database: Database):
    sql_backend = SQLAlchemyRecordBackend(database)
    await database.close()

    with pytest.raises(BackendError) as exc_info:
        await sql_backend.find_all()

    assert exc_info.value.operation == "find_all"
    assert not database.is_open


@pytest.mark.asyncio
async def test_data_survives_reopen(tmp_path):
    url = f"sqlite:///{tmp_path / 'vault.db'}"
    async with Database(url) as db:
        record_id = await SQLAlchemyRecordBackend(db).insert(_doc("kept", "v"))

    async with Database(url) as db:
        document = await SQLAlchemyRecordBackend(db).find_by_id(record_id)

    assert document is not None and document["name"] == "kept"


@pytest.mark.asyncio
async def test_store_over_sql_backend(sql_backend: SQLAlchemyRecordBackend):
    store = RecordStore(sql_backend, RecordEventBus())

    first = await store.add("  zeta ", "last")
    second = await store.add("alpha", "first")
    updated = await store.update(first.id, "omega", "changed")

    assert updated is not None
    assert updated.created_at == first.created_at
    assert updated.updated_at >= updated.created_at
    assert [r.name for r in await store.sort("name")] == ["alpha", "omega"]
    assert [r.id for r in await store.search("CHANGED")] == [first.id]

    stats = await store.statistics()
    assert stats.total_records == 2
    assert stats.unique_names == 2

    deleted = await store.delete(second.id)
    assert deleted is not None and deleted.name == "alpha"
    assert [r.id for r in await store.list_records()] == [first.id]


@pytest.mark.asyncio
async def test_slow_call_times_out_as_backend_error(database: Database):
    sql_backend = SQLAlchemyRecordBackend(database, timeout=0.01)

    async def _stall(session):
        await asyncio.sleep(1)

    with pytest.raises(BackendError) as exc_info:
        await sql_backend._run("find_all", _stall)

    assert exc_info.value.operation == "find_all"
    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_long_names_are_stored_unbounded(sql_backend: SQLAlchemyRecordBackend):
    long_name = "n" * 1000

    record_id = await sql_backend.insert(_doc(long_name, "v"))

    assert isinstance(RecordModel.__table__.c.name.type, Text)
    assert (await sql_backend.find_by_id(record_id))["name"] == long_name
