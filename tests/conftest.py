"""Shared fixtures: isolated databases, app configs and API clients."""

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from docmanager import AppConfig, configure_fastapi_app
from docmanager.queries import Database

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs512-signing-0123456789ab"  # noqa: S105


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "docmanager-test.db")


@pytest.fixture
def config(db_path: str) -> AppConfig:
    return AppConfig(
        environment="test",
        db_path=db_path,
        logging_level="WARNING",
        secret_key=TEST_SECRET,
        algorithm="HS512",
    )


@pytest.fixture
def client(config: AppConfig) -> Iterator[TestClient]:
    app = configure_fastapi_app(config)
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def database(db_path: str) -> AsyncIterator[Database]:
    database = await Database.connect(db_path)
    await database.initialize_tables()
    yield database
    await database.close()
