from bearer_client.core.config import Settings, TokenStoreBackend, settings as default_settings

from .base import TokenStore
from .memory import MemoryTokenStore, NullTokenStore
from .redis import RedisTokenStore, get_redis_pool


def create_token_store(config: Settings | None = None) -> TokenStore:
    """
    Build the token store selected by ``token_store_backend``.
    The choice is made once here, never re-checked at call sites.
    """
    config = config or default_settings

    if config.token_store_backend == TokenStoreBackend.REDIS:
        return RedisTokenStore(namespace=config.token_store_namespace)

    if config.token_store_backend == TokenStoreBackend.NONE:
        return NullTokenStore()

    return MemoryTokenStore()


__all__ = [
    "TokenStore",
    "MemoryTokenStore",
    "NullTokenStore",
    "RedisTokenStore",
    "create_token_store",
    "get_redis_pool",
]
