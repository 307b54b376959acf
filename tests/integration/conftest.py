from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest

from maids import Maids
from maids.config import AppIdsConfig
from maids.store.postgres import PostgresStore


def pytest_collection_modifyitems(items: list, config) -> None:  # noqa: ANN001
    """Auto-mark every test in the integration directory."""
    marker = pytest.mark.integration
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(marker)


class Settings:
    def __init__(self) -> None:
        self.host = os.getenv("POSTGRES_HOST", "localhost")
        self.port = int(os.getenv("POSTGRES_PORT", "5432"))
        self.database = os.getenv("POSTGRES_DB", "maids_test")
        self.user = os.getenv("POSTGRES_USER", "postgres")
        self.password = os.getenv("POSTGRES_PASSWORD", "postgres")


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings()


@pytest.fixture()
async def store(settings: Settings) -> AsyncGenerator[PostgresStore]:
    """Create a PostgresStore with a clean slate for each test."""
    pg_store = PostgresStore.from_params(
        host=settings.host,
        port=settings.port,
        database=settings.database,
        user=settings.user,
        password=settings.password,
        connect_attempts=2,
    )
    await pg_store.init()
    await pg_store.reset()

    yield pg_store

    await pg_store.reset()
    await pg_store.close()


@pytest.fixture()
def pg_maids(store: PostgresStore) -> Maids:
    return Maids(store=store, config=AppIdsConfig(concurrency=4))
