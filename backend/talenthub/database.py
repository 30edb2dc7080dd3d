import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from talenthub.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the async engine (and its bounded connection pool) for the process.

    Built once at startup, handed to request handlers through ``get_db`` and
    disposed at shutdown.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = make_url(url)
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False
        )
        if self.url.get_backend_name() == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        url = settings.sqlalchemy_url
        engine_kwargs = {"pool_pre_ping": True}
        if not url.startswith("sqlite"):
            # Requests beyond pool_size wait for a free connection instead of opening more
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=0,
                pool_timeout=settings.db_pool_timeout,
            )
        return cls(url, **engine_kwargs)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def connect(self) -> None:
        """Make sure the store is reachable and the schema exists.

        Raises whatever the driver raises; callers treat that as fatal.
        """
        if self.url.get_backend_name() == "mysql":
            await self._create_database_if_missing()

        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connected: %s", self.url.render_as_string(hide_password=True))

        await self.create_tables()

    async def create_tables(self) -> None:
        # Models must be imported so their tables are registered on Base.metadata
        from talenthub import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

    async def _create_database_if_missing(self) -> None:
        server_engine = create_async_engine(self.url.set(database=None))
        try:
            quoted = server_engine.dialect.identifier_preparer.quote(self.url.database)
            async with server_engine.begin() as conn:
                await conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted}"))
        finally:
            await server_engine.dispose()

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a session bound to the application's database for one request."""
    async with request.app.state.database.session() as session:
        yield session
