"""
TravelMemory Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_collection:   AsyncMock standing in for the `trips` AsyncCollection
    ├── mock_mongo_client: MagicMock standing in for AsyncMongoClient
    ├── connector:         Real MongoConnector built on mock_mongo_client
    ├── test_app:          create_app() wired to `connector`
    ├── test_client:       HTTPX AsyncClient for API endpoint testing
    └── sample_trip_payload / sample_trip_document: camelCase trip data

No test needs a running MongoDB.
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# Keep the suite independent of the developer's shell and .env
os.environ.pop("PORT", None)
os.environ["MONGO_URI"] = "mongodb://db.test:27017/travel_memory_test"
os.environ["LOG_LEVEL"] = "WARNING"

from travel_memory.config import Settings  # noqa: E402
from travel_memory.database import MongoConnector  # noqa: E402
from travel_memory.main import create_app  # noqa: E402

TEST_MONGO_URI = "mongodb://db.test:27017/travel_memory_test"


@pytest.fixture
def mock_collection():
    """
    Provides a mock of pymongo's AsyncCollection.

    find() is synchronous in pymongo's async API (it returns a cursor), so it
    is a MagicMock; everything awaited is an AsyncMock.

    Usage:
        mock_collection.find_one.return_value = {"_id": ObjectId(), ...}
        mock_collection.find.return_value.sort.return_value.to_list.return_value = [...]
    """
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock()

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value.sort.return_value = cursor
    return collection


@pytest.fixture
def mock_mongo_client(mock_collection):
    """AsyncMongoClient double whose default database hands out mock_collection."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    client.close = AsyncMock()
    client.get_default_database.return_value.__getitem__.return_value = mock_collection
    return client


@pytest.fixture
def connector(mock_mongo_client):
    """A real MongoConnector whose driver client is mock_mongo_client."""
    with patch("travel_memory.database.AsyncMongoClient", return_value=mock_mongo_client):
        return MongoConnector(TEST_MONGO_URI)


@pytest.fixture
def settings():
    return Settings(_env_file=None, mongo_uri=TEST_MONGO_URI, log_level="WARNING")


@pytest.fixture
def test_app(settings, connector):
    return create_app(settings, connector=connector)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan, so the connector stays in its
    initial `connecting` state unless a test changes it.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_trip_payload():
    """Body accepted by POST /trip."""
    return {
        "tripName": "Monsoon in Kerala",
        "startDateOfJourney": "2024-07-01",
        "endDateOfJourney": "2024-07-09",
        "nameOfHotels": "Backwater Retreat, Hill View Inn",
        "placesVisited": "Alleppey, Munnar, Kochi",
        "totalCost": 42000,
        "tripType": "leisure",
        "experience": "Houseboats, tea gardens and a lot of rain.",
        "image": "https://images.example.com/kerala.jpg",
        "shortDescription": "A week of backwaters and hills",
        "featured": True,
    }


@pytest.fixture
def sample_trip_document(sample_trip_payload):
    """The same trip as MongoDB returns it."""
    return {"_id": ObjectId(), **sample_trip_payload}
