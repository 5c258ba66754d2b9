import pytest

from bearer_client import (
    MemoryTokenStore,
    NullTokenStore,
    RedisTokenStore,
    TokenPair,
    create_token_store,
)
from bearer_client.core.config import Settings, TokenStoreBackend


class TestMemoryTokenStore:
    """Test MemoryTokenStore class."""

    @pytest.mark.anyio
    async def test_empty_by_default(self):
        """Test a new store reports no session."""
        assert await MemoryTokenStore().get() is None

    @pytest.mark.anyio
    async def test_set_replaces_pair(self):
        """Test set replaces the whole pair."""
        store = MemoryTokenStore(TokenPair(access_token="T1", refresh_token="R1"))

        await store.set(TokenPair(access_token="T2"))

        pair = await store.get()
        assert pair.access_token == "T2"
        assert pair.refresh_token is None

    @pytest.mark.anyio
    async def test_clear(self):
        """Test clear removes the session and is idempotent."""
        store = MemoryTokenStore(TokenPair(access_token="T1"))

        await store.clear()
        await store.clear()

        assert await store.get() is None


class TestNullTokenStore:
    """Test NullTokenStore class."""

    @pytest.mark.anyio
    async def test_writes_are_dropped(self):
        """Test the store never reports a session."""
        store = NullTokenStore()

        await store.set(TokenPair(access_token="T1"))

        assert await store.get() is None
        await store.clear()


class TestTokenPair:
    """Test TokenPair schema."""

    def test_is_immutable(self):
        """Test a pair cannot be patched in place."""
        pair = TokenPair(access_token="T1")

        with pytest.raises(Exception):
            pair.access_token = "T2"

    def test_repr_masks_tokens(self):
        """Test tokens never show up in repr."""
        pair = TokenPair(access_token="secret-access", refresh_token="secret-refresh")

        assert "secret" not in repr(pair)


class TestCreateTokenStore:
    """Test create_token_store factory."""

    @pytest.mark.parametrize(
        ("backend", "expected"),
        [
            (TokenStoreBackend.MEMORY, MemoryTokenStore),
            (TokenStoreBackend.NONE, NullTokenStore),
            (TokenStoreBackend.REDIS, RedisTokenStore),
        ],
    )
    def test_backend_selection(self, test_settings: Settings, backend, expected):
        """Test the configured backend decides the store type."""
        config = test_settings.model_copy(update={"token_store_backend": backend})

        assert isinstance(create_token_store(config), expected)

    def test_redis_store_uses_configured_namespace(self, test_settings: Settings):
        """Test the Redis keys carry the configured namespace."""
        config = test_settings.model_copy(
            update={"token_store_backend": TokenStoreBackend.REDIS, "token_store_namespace": "app"}
        )

        store = create_token_store(config)

        assert store.access_key == "app:access_token"
        assert store.refresh_key == "app:refresh_token"
