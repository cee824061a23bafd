"""Session dependency and transaction helper."""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from oomf.infra.db import base


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""
    async with base.get_sessionmaker()() as session:
        yield session


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back on any error.

    Repositories only flush, so everything done inside the block lands or
    vanishes together.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
