"""Pytest fixtures and helpers for identity store tests.

Each test gets its own SQLite database file (via aiosqlite) so tests never
share state. Identity keys are derived from freshly generated Ed25519 keys,
matching what a SQRL client sends: the base64url encoding of a 32-byte public
key, without padding (43 characters).

Security tests follow the baseline pattern: every negative case is paired
with a positive baseline case in the same parametrized test, so a broken setup
cannot make a security check pass by accident.
"""
import base64
import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from nacl.signing import SigningKey
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from authstore.identity import Identity
from authstore.store import AuthStore


def generate_primary_id() -> str:
    """Return a new 43-character base64url identity key."""
    verify_key = SigningKey.generate().verify_key
    return base64.urlsafe_b64encode(bytes(verify_key)).rstrip(b"=").decode("ascii")


def generate_public_key() -> str:
    """Return a new base64url public key for unlock/verify fields."""
    return generate_primary_id()


def make_identity(primary_id: str | None = None, **overrides: object) -> Identity:
    """
    Build an Identity with fresh keys.

    Args:
        primary_id: Identity key; generated if omitted
        overrides: Any other Identity field

    Returns:
        A new Identity
    """
    fields: dict[str, object] = {
        "primary_id": primary_id or generate_primary_id(),
        "unlock_key": generate_public_key(),
        "verify_key": generate_public_key(),
    }
    fields.update(overrides)
    return Identity(**fields)  # type: ignore[arg-type]


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a test engine backed by a per-test SQLite file.

    TEST_DATABASE_URL overrides the database, e.g. to run against PostgreSQL.
    """
    url = os.getenv(
        "TEST_DATABASE_URL",
        f"sqlite+aiosqlite:///{tmp_path / 'authstore.db'}"
    )
    test_engine = create_async_engine(url, echo=False, hide_parameters=True)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def bare_store(engine: AsyncEngine) -> AuthStore:
    """A store whose schema has not been created yet."""
    return AuthStore(engine)


@pytest_asyncio.fixture(scope="function")
async def store(bare_store: AuthStore) -> AuthStore:
    """A store with its schema in place."""
    await bare_store.ensure_schema()
    return bare_store


async def seed_identity(store: AuthStore, identity: Identity) -> Identity:
    """Save an identity and return it, for use as test setup."""
    await store.save(identity)
    return identity
