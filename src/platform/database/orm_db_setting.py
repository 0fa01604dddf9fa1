"""
SQLAlchemy async engine and session management with Read-Write Separation

- Write operations: always use the primary database
- Read operations: use the read replica if configured, otherwise fall back to primary
- Within a Unit of Work every statement uses the write session
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Manages SQLAlchemy async engines with event loop awareness.

    Engines are rebuilt whenever the running loop changes to prevent
    "Task got Future attached to a different loop" errors.
    """

    def __init__(self) -> None:
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._write_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._read_session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running (alembic, scripts)
            if read_only:
                if self._read_engine is None:
                    self._read_engine = self._create_engine(read_only=True)
                return self._read_engine
            if self._write_engine is None:
                self._write_engine = self._create_engine(read_only=False)
            return self._write_engine

        if self._loop is not current_loop:
            if self._write_engine is not None or self._read_engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, disposing old engines...')
                self._write_session_maker = None
                self._read_session_maker = None

            Logger.base.info(f'🔗 [DB] Creating engines for event loop {id(current_loop)}')
            self._write_engine = self._create_engine(read_only=False)
            self._read_engine = self._create_engine(read_only=True)
            self._loop = current_loop

        engine = self._read_engine if read_only else self._write_engine
        assert engine is not None
        return engine

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)

        if read_only:
            if self._read_session_maker is None:
                self._read_session_maker = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
            return self._read_session_maker

        if self._write_session_maker is None:
            self._write_session_maker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._write_session_maker

    async def dispose(self) -> None:
        for engine in (self._write_engine, self._read_engine):
            if engine is not None:
                await engine.dispose()
        self._write_engine = None
        self._read_engine = None
        self._write_session_maker = None
        self._read_session_maker = None
        self._loop = None

    @staticmethod
    def _create_engine(*, read_only: bool) -> AsyncEngine:
        return create_async_engine(
            settings.DATABASE_READ_URL_ASYNC if read_only else settings.DATABASE_URL_ASYNC,
            echo=False,
            pool_size=settings.DB_POOL_SIZE_READ if read_only else settings.DB_POOL_SIZE_WRITE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


# Global engine manager
_engine_manager = AsyncEngineManager()


def get_engine(*, read_only: bool = False) -> AsyncEngine:
    """Get event-loop-aware engine (read_only: use replica if available)"""
    return _engine_manager.get_engine(read_only=read_only)


def get_session_maker(*, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
    """Get event-loop-aware session maker (read_only: use replica if available)"""
    return _engine_manager.get_session_maker(read_only=read_only)


async def dispose_engines() -> None:
    await _engine_manager.dispose()


class Base(DeclarativeBase):
    pass


async def create_db_and_tables() -> None:
    """Create database tables if they don't exist (alembic is the source of truth in prod)"""
    # Register every mapped table on Base.metadata
    import src.service.shared_kernel.driven_adapter.model  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)


class Database:
    """
    Session provider for dependency injection.

    Delegates to AsyncEngineManager for event-loop-aware engines and
    read-write separation.
    """

    def __init__(self, *, read_only: bool = False) -> None:
        self._read_only = read_only

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session_maker = get_session_maker(read_only=self._read_only)
        async with session_maker() as session:
            yield session
