"""
Async SQLAlchemy engine and session management
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all tables"""


class Database:
    """
    Owns the async engine and session factory for one database URL
    """

    def __init__(self, url: str, echo: bool = False):
        """
        Args:
            url: SQLAlchemy async URL, e.g. postgresql+asyncpg://... or sqlite+aiosqlite:///...
            echo: Log emitted SQL
        """
        self.url = url
        self.logger = structlog.get_logger("database")
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine,
            expire_on_commit=False
        )

    async def create_all(self) -> None:
        """Create missing tables"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.logger.info("Database tables ensured", dialect=self.engine.dialect.name)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session that rolls back on error"""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> dict:
        """Run a trivial query"""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "healthy", "dialect": self.engine.dialect.name}

    async def dispose(self) -> None:
        await self.engine.dispose()
