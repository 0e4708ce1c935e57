"""Tests for settings and the engine factory."""
from pathlib import Path

import pytest

from authstore.config import Settings
from authstore.models import create_engine_from_settings
from authstore.store import AuthStore
from tests.conftest import make_identity


def test_postgres_url_gets_async_driver():
    settings = Settings(database_url="postgresql://user:pw@db.example:5432/sqrl")
    assert settings.database_url == "postgresql+asyncpg://user:pw@db.example:5432/sqrl"


def test_async_url_left_alone():
    url = "sqlite+aiosqlite:///./local.db"
    assert Settings(database_url=url).database_url == url


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AUTHSTORE_DATABASE_URL", "postgresql://env-host/sqrl")
    monkeypatch.setenv("AUTHSTORE_DEBUG", "true")

    settings = Settings()

    assert settings.database_url == "postgresql+asyncpg://env-host/sqrl"
    assert settings.debug is True


@pytest.mark.asyncio
async def test_engine_from_settings(tmp_path: Path):
    settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'settings.db'}")
    engine = create_engine_from_settings(settings)
    try:
        assert engine.sync_engine.hide_parameters

        store = AuthStore(engine)
        await store.ensure_schema()
        identity = make_identity()
        await store.save(identity)
        assert await store.find(identity.primary_id) == identity
    finally:
        await engine.dispose()
