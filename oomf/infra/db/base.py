"""Declarative base and the lazily built async engine."""
import os
import ssl
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def asyncpg_url_and_connect_args(url: str) -> tuple[str, dict]:
    """Rewrite a hosted-Postgres URL for asyncpg.

    ``postgres://`` and ``postgresql://`` become ``postgresql+asyncpg://``.
    asyncpg rejects ``sslmode``, so ``sslmode=require`` is removed from the
    query and turned into an ``ssl`` connect arg; certificates are only
    verified when DATABASE_SSL_VERIFY=true.
    """
    u = (url or "").strip()
    if u.startswith("postgres://"):
        u = "postgresql://" + u[len("postgres://"):]
    if u.startswith("postgresql://"):
        u = u.replace("postgresql://", "postgresql+asyncpg://", 1)

    parsed = urlparse(u)
    qs = parse_qs(parsed.query, keep_blank_values=True)
    sslmode = qs.pop("sslmode", None)
    u = urlunparse(parsed._replace(query=urlencode(qs, doseq=True)))
    if sslmode != ["require"]:
        return u, {}
    if os.environ.get("DATABASE_SSL_VERIFY", "false").strip().lower() in ("true", "1"):
        return u, {"ssl": True}
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return u, {"ssl": ctx}


_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker] = None


def get_engine() -> AsyncEngine:
    """Engine for settings.database_url, created on first use."""
    global _engine
    if _engine is None:
        from oomf.settings import settings

        url, connect_args = asyncpg_url_and_connect_args(settings.database_url)
        _engine = create_async_engine(
            url,
            connect_args=connect_args,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            pool_pre_ping=True,
        )
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _sessionmaker


async def dispose_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


# Models are imported in oomf/infra/db/models/__init__.py, which main.py and
# alembic/env.py import; importing them here would be circular.
