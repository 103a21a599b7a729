import uuid

import fakeredis
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from redis.exceptions import ResponseError

from hive_api.config.settings import Settings
from hive_api.main import create_app
from hive_api.services.ingestion_service import IngestionService
from hive_api.services.query_service import QueryService
from hive_api.storage.reading_store import ReadingStore


@pytest.fixture
def settings():
    return Settings(_env_file=None, mqtt_url=None)


@pytest.fixture
def client(settings):
    """HTTP client over an app backed by a fresh in-memory Redis."""
    redis_client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())
    app = create_app(settings, redis_client=redis_client)
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())
    yield client
    await client.aclose()


@pytest.fixture
def store(redis_client):
    return ReadingStore(redis_client)


@pytest.fixture
def ingestion_service(store):
    return IngestionService(store)


@pytest.fixture
def query_service(store):
    return QueryService(store)


@pytest.fixture
def unique_id():
    return uuid.uuid4().hex[:8]


class ReadOnlyRedis:
    """Redis replica that rejects every command."""

    async def hget(self, *args, **kwargs):
        raise ResponseError("READONLY You can't write against a read only replica.")

    async def zrevrangebylex(self, *args, **kwargs):
        raise ResponseError("READONLY You can't write against a read only replica.")


@pytest.fixture
def read_only_store():
    return ReadingStore(ReadOnlyRedis())
