"""Tests for database URL handling."""
import ssl

from oomf.infra.db.base import asyncpg_url_and_connect_args


def test_plain_postgres_url_gets_asyncpg_driver():
    url, args = asyncpg_url_and_connect_args("postgres://u:p@db:5432/oomf")
    assert url == "postgresql+asyncpg://u:p@db:5432/oomf"
    assert args == {}


def test_already_async_url_is_untouched():
    url, args = asyncpg_url_and_connect_args("postgresql+asyncpg://u:p@db/oomf")
    assert url == "postgresql+asyncpg://u:p@db/oomf"
    assert args == {}


def test_sslmode_require_becomes_connect_arg(monkeypatch):
    monkeypatch.delenv("DATABASE_SSL_VERIFY", raising=False)
    url, args = asyncpg_url_and_connect_args("postgresql://u:p@db/oomf?sslmode=require&application_name=oomf")
    assert url == "postgresql+asyncpg://u:p@db/oomf?application_name=oomf"
    assert isinstance(args["ssl"], ssl.SSLContext)
    assert args["ssl"].verify_mode == ssl.CERT_NONE


def test_ssl_verify_env(monkeypatch):
    monkeypatch.setenv("DATABASE_SSL_VERIFY", "true")
    _, args = asyncpg_url_and_connect_args("postgresql://u:p@db/oomf?sslmode=require")
    assert args == {"ssl": True}
