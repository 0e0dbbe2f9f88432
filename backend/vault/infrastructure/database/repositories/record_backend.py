"""Concrete record backend implemented with SQLAlchemy async sessions."""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vault.application.interfaces import RecordBackend, RecordDocument
from vault.domain.exceptions import BackendError
from vault.infrastructure.database.models import RecordModel
from vault.infrastructure.database.session import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PATCHABLE_FIELDS = ("name", "value", "updated_at")
_DISTINCT_FIELDS = {
    "id": RecordModel.id,
    "name": RecordModel.name,
    "value": RecordModel.value,
}


class SQLAlchemyRecordBackend(RecordBackend):
    """Implements the RecordBackend port on top of a ``Database`` handle.

    Every call runs in its own session and transaction, bounded by
    ``timeout`` seconds. SQLAlchemy errors and timeouts are raised as
    ``BackendError``.
    """

    def __init__(self, database: Database, *, timeout: float = 5.0):
        self._db = database
        self._timeout = timeout

    @staticmethod
    def _to_document(model: RecordModel) -> RecordDocument:
        """Map ORM model → backend document."""
        return {
            "id": model.id,
            "name": model.name,
            "value": model.value,
            "created_at": model.created_at,
            "updated_at": model.updated_at,
        }

    async def _run(
        self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        async def _in_session() -> T:
            async with self._db.session() as session:
                try:
                    result = await work(session)
                    await session.commit()
                    return result
                except Exception:
                    await session.rollback()
                    raise

        try:
            return await asyncio.wait_for(_in_session(), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise BackendError(operation, f"timed out after {self._timeout}s") from None
        except SQLAlchemyError as exc:
            raise BackendError(operation, str(exc)) from exc
        except RuntimeError as exc:
            # Database handle not open
            raise BackendError(operation, str(exc)) from exc

    async def insert(self, document: RecordDocument) -> str:
        record_id = str(uuid.uuid4())

        async def _work(session: AsyncSession) -> str:
            session.add(
                RecordModel(
                    id=record_id,
                    name=document["name"],
                    value=document["value"],
                    created_at=document["created_at"],
                    updated_at=document["updated_at"],
                )
            )
            await session.flush()
            return record_id

        return await self._run("insert", _work)

    async def find_by_id(self, record_id: str) -> RecordDocument | None:
        async def _work(session: AsyncSession) -> RecordDocument | None:
            model = await session.get(RecordModel, record_id)
            return self._to_document(model) if model else None

        return await self._run("find_by_id", _work)

    async def find_all(self, *, keyword: str | None = None) -> list[RecordDocument]:
        stmt = select(RecordModel)
        if keyword:
            stmt = stmt.where(
                or_(
                    RecordModel.name.icontains(keyword, autoescape=True),
                    RecordModel.value.icontains(keyword, autoescape=True),
                )
            )
        stmt = stmt.order_by(RecordModel.created_at, RecordModel.id)

        async def _work(session: AsyncSession) -> list[RecordDocument]:
            result = await session.execute(stmt)
            return [self._to_document(row) for row in result.scalars().all()]

        return await self._run("find_all", _work)

    async def update_by_id(
        self, record_id: str, patch: RecordDocument
    ) -> RecordDocument | None:
        async def _work(session: AsyncSession) -> RecordDocument | None:
            model = await session.get(RecordModel, record_id)
            if model is None:
                return None
            for key in _PATCHABLE_FIELDS:
                if key in patch:
                    setattr(model, key, patch[key])
            await session.flush()
            return self._to_document(model)

        return await self._run("update_by_id", _work)

    async def delete_by_id(self, record_id: str) -> RecordDocument | None:
        async def _work(session: AsyncSession) -> RecordDocument | None:
            model = await session.get(RecordModel, record_id)
            if model is None:
                return None
            document = self._to_document(model)
            await session.execute(delete(RecordModel).where(RecordModel.id == record_id))
            return document

        return await self._run("delete_by_id", _work)

    async def distinct_values(self, field: str) -> set[Any]:
        column = _DISTINCT_FIELDS.get(field)
        if column is None:
            raise BackendError("distinct_values", f"unsupported field '{field}'")

        async def _work(session: AsyncSession) -> set[Any]:
            result = await session.execute(select(column).distinct())
            return set(result.scalars().all())

        return await self._run("distinct_values", _work)
