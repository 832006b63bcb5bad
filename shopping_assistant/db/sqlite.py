"""
Async SQLite storage for the assistant.

Holds the `guidelines` and `conversations` tables; an in-memory URL keeps
one shared connection so every session sees the same data.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shopping_assistant.config import settings
from shopping_assistant.db.models import Base


class Database:
    """Async engine and sessions for the guideline and conversation stores."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.db_url
        self._engine = None
        self._session_factory = None

    @property
    def is_memory(self) -> bool:
        return self.url.startswith("sqlite") and ":memory:" in self.url

    async def init(self) -> None:
        """Initialize database engine and create tables."""
        engine_options = {"echo": settings.debug}

        if self.is_memory:
            # One shared connection, otherwise every session sees an empty database
            engine_options["poolclass"] = StaticPool
            engine_options["connect_args"] = {"check_same_thread": False}
        elif self.url.startswith("sqlite"):
            # sqlite+aiosqlite:///C:/path/to/db.db or sqlite+aiosqlite:///path/to/db.db
            path_part = self.url.split("///", 1)[-1]
            Path(path_part).parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(self.url, **engine_options)

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        # Create all tables
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session; commits on success, rolls back on error."""
        if not self._session_factory:
            await self.init()

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Global database instance
db = Database()
