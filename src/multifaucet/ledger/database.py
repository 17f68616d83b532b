"""Engine and session lifecycle for the withdrawal mirror.

One ``LedgerDatabase`` is built per application from its settings and owns
the async engine; ``WithdrawalStore`` borrows committing sessions from it.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from multifaucet.config import Settings
from multifaucet.ledger.models import Base

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite:///"
AIOSQLITE_PREFIX = "sqlite+aiosqlite:///"


def normalize_database_url(url: str) -> str:
    """Use the async sqlite driver for plain sqlite URLs."""
    if url.startswith(SQLITE_PREFIX):
        return AIOSQLITE_PREFIX + url[len(SQLITE_PREFIX):]
    return url


def sqlite_file(url: str) -> Optional[Path]:
    """Database file of a file-backed sqlite URL, None otherwise."""
    if not url.startswith(AIOSQLITE_PREFIX):
        return None
    path = url[len(AIOSQLITE_PREFIX):]
    if not path or ":memory:" in path:
        return None
    return Path(path)


class LedgerDatabase:
    """Async engine plus session factory for one database URL."""

    def __init__(self, url: str, echo: bool = False):
        self.url = normalize_database_url(url)
        self.engine = create_async_engine(self.url, echo=echo)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LedgerDatabase":
        return cls(settings.database_url, echo=settings.debug and not settings.is_production)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create the withdrawal table, and the sqlite directory if needed."""
        path = sqlite_file(self.url)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Ledger tables ready at %s", self.engine.url.render_as_string())

    async def dispose(self) -> None:
        await self.engine.dispose()
