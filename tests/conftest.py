from unittest.mock import AsyncMock, Mock

import pytest
from faker import Faker
from redis.asyncio import Redis

from bearer_client import (
    AuthEventBus,
    HttpClient,
    MemoryTokenStore,
    TokenPair,
    create_http_client,
)
from bearer_client.core.config import Settings, TokenStoreBackend
from tests.utils import API_BASE_URL, FakeApi


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def faker_instance() -> Faker:
    """Create a Faker instance for test data generation."""
    return Faker()


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at the fake API, independent of the environment."""
    return Settings(
        api_base_url=API_BASE_URL,
        request_timeout=5.0,
        refresh_timeout=5.0,
        refreshable_error_codes="",
        token_store_backend=TokenStoreBackend.MEMORY,
    )


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi(access_token="T1", next_token="T2")


@pytest.fixture
def token_store() -> MemoryTokenStore:
    """Store holding the token the fake API currently accepts."""
    return MemoryTokenStore(TokenPair(access_token="T1", refresh_token=None))


@pytest.fixture
def event_bus() -> AuthEventBus:
    bus = AuthEventBus()
    yield bus
    bus.clear()


@pytest.fixture
def recorded_events(event_bus: AuthEventBus) -> list:
    """Every event emitted during the test, in order."""
    events: list = []
    unsubscribe = event_bus.subscribe(events.append)
    yield events
    unsubscribe()


@pytest.fixture
def http_client(
    test_settings: Settings,
    fake_api: FakeApi,
    token_store: MemoryTokenStore,
    event_bus: AuthEventBus,
) -> HttpClient:
    """Fully wired client talking to the fake API."""
    return create_http_client(
        test_settings,
        token_store=token_store,
        event_bus=event_bus,
        client=fake_api.client(),
        refresh_client=fake_api.client(),
    )


@pytest.fixture
def mock_redis_client() -> AsyncMock:
    """Create a mock Redis client."""
    mock_redis = AsyncMock(spec=Redis)
    mock_redis.ping = AsyncMock(return_value=True)
    mock_redis.mget = AsyncMock(return_value=[None, None])
    mock_redis.delete = AsyncMock(return_value=2)
    mock_redis.aclose = AsyncMock()

    # Setup pipeline mock
    mock_pipeline = AsyncMock()
    mock_pipeline.set = Mock(return_value=mock_pipeline)
    mock_pipeline.delete = Mock(return_value=mock_pipeline)
    mock_pipeline.execute = AsyncMock(return_value=[True, True])
    mock_pipeline.__aenter__ = AsyncMock(return_value=mock_pipeline)
    mock_pipeline.__aexit__ = AsyncMock(return_value=False)
    mock_redis.pipeline = Mock(return_value=mock_pipeline)

    return mock_redis
