"""SQLAlchemy engine and session lifecycle."""

import logging
from pathlib import Path

from sqlalchemy import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vault.infrastructure.database.base import Base

logger = logging.getLogger(__name__)


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database:
        return
    if parsed.database == ":memory:" or parsed.database.startswith("file:"):
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


class Database:
    """Explicit handle on the database connection.

    Nothing connects until ``open()``; ``close()`` disposes the engine and
    is safe to call more than once. Also usable as an async context manager:

        async with Database(settings.database_url) as db:
            backend = SQLAlchemyRecordBackend(db)
    """

    def __init__(self, url: str, *, echo: bool = False):
        self._url = _get_async_url(url)
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        """Create the engine, ensure the schema exists and prepare sessions."""
        if self._engine is not None:
            return
        _ensure_sqlite_directory(self._url)
        engine = create_async_engine(self._url, echo=self._echo, future=True)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception:
            await engine.dispose()
            raise
        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database connection opened (%s)", engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    def session(self) -> AsyncSession:
        """Return a new session; the database must be open."""
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    async def __aenter__(self) -> "Database":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
