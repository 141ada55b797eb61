import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from vault_import.config.settings import Settings
from vault_import.database.connection import close_pool, get_connection, init_pool
from vault_import.database.repositories.credentials_repository import CredentialsRepository

_SCHEMA = Path(__file__).resolve().parents[2] / "vault_import" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "vault_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        CredentialsRepository().ping()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a scratch database"
        )
    with get_connection() as conn:
        conn.execute(_SCHEMA.read_text(encoding="utf-8"))
        conn.commit()
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def owner_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh owner whose rows are removed after the test."""
    owner = f"test-{uuid.uuid4()}"
    yield owner
    with get_connection() as conn:
        conn.execute("DELETE FROM credentials WHERE owner_id = %s", (owner,))
        conn.commit()
