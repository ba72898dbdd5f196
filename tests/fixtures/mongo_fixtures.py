"""MongoDB/Beanie fixtures for testing."""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorClient

from app.schemas.init import DOCUMENT_MODELS, init_beanie_odm


@pytest.fixture(scope="session")
def mongo_url() -> str | None:
    """
    MongoDB URL for testing.

    When MONGO_URL_STREAMFLOW_PRIMARY is set in the process environment the
    tests run against that server; otherwise an in-memory mongomock database
    is used.
    """
    return os.environ.get("MONGO_URL_STREAMFLOW_PRIMARY") or None


@pytest.fixture(scope="session")
def test_db_name() -> str:
    """Get test database name."""
    return "beanie_test_db"


@pytest_asyncio.fixture(scope="function")
async def mongo_client(mongo_url: str | None) -> AsyncGenerator[Any]:
    """Create MongoDB client for testing (function-scoped to avoid event loop issues)."""
    if mongo_url:
        client: Any = AsyncIOMotorClient(mongo_url)
        yield client
        client.close()
    else:
        yield AsyncMongoMockClient()


@pytest_asyncio.fixture(scope="function")
async def beanie_db(mongo_client: Any, test_db_name: str) -> AsyncGenerator[Any]:
    """
    Initialize Beanie with the test database.

    Use the clear_collections fixture to clean data between tests.
    """
    db = mongo_client[test_db_name]
    await init_beanie_odm(db)
    yield db


@pytest_asyncio.fixture(autouse=False)
async def clear_collections(beanie_db: Any) -> None:
    """
    Clear all collections before each test.

    Usage:
        @pytest.mark.usefixtures("clear_collections")
        class TestSomething:
            ...
    """
    for model in DOCUMENT_MODELS:
        await model.get_motor_collection().delete_many({})
