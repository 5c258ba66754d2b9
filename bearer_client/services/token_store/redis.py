from loguru import logger
from redis.asyncio import ConnectionPool, Redis

from bearer_client.core.config import settings
from bearer_client.core.constants import TokenStoreKey
from bearer_client.schemas import TokenPair
from bearer_client.services.token_store.base import TokenStore

# Global shared Redis connection pool
_redis_pool: ConnectionPool | None = None


def get_redis_pool() -> ConnectionPool:
    """
    Get or create the shared Redis connection pool.

    Returns:
        ConnectionPool: Shared Redis connection pool instance
    """
    global _redis_pool

    if _redis_pool is None:
        _redis_pool = ConnectionPool.from_url(
            settings.redis_url.human_repr(),
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.redis_max_pool_connections,
            retry_on_timeout=True,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            socket_timeout=settings.redis_socket_timeout,
        )
        logger.info(
            f"Redis connection pool created with max_connections={settings.redis_max_pool_connections}"
        )
    return _redis_pool


class RedisTokenStore(TokenStore):
    """
    Token pair persisted in Redis under two fixed keys.

    An absent or empty access-token key means "no session". Redis errors are
    logged and degrade to "no session" on read and to a dropped write.
    """

    def __init__(self, redis_client: Redis | None = None, namespace: str | None = None):
        namespace = namespace or settings.token_store_namespace
        self.access_key = TokenStoreKey.build(namespace, TokenStoreKey.ACCESS_TOKEN)
        self.refresh_key = TokenStoreKey.build(namespace, TokenStoreKey.REFRESH_TOKEN)
        self._redis_client = redis_client

    @property
    def redis_client(self) -> Redis:
        """
        Get the Redis client, created lazily on the shared pool.
        """
        if self._redis_client is None:
            self._redis_client = Redis(connection_pool=get_redis_pool())
            logger.debug(f"Redis client initialized for {self.__class__.__name__} using shared pool")

        return self._redis_client

    async def get(self) -> TokenPair | None:
        try:
            access_token, refresh_token = await self.redis_client.mget(
                self.access_key, self.refresh_key
            )
        except Exception as e:
            logger.error(f"Token store read failed: {e}")
            return None

        if not access_token:
            return None

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def set(self, pair: TokenPair) -> None:
        try:
            async with self.redis_client.pipeline(transaction=True) as pipe:
                pipe.set(self.access_key, pair.access_token)
                if pair.refresh_token is None:
                    pipe.delete(self.refresh_key)
                else:
                    pipe.set(self.refresh_key, pair.refresh_token)
                await pipe.execute()
        except Exception as e:
            logger.error(f"Token store write failed: {e}")

    async def clear(self) -> None:
        try:
            await self.redis_client.delete(self.access_key, self.refresh_key)
        except Exception as e:
            logger.error(f"Token store clear failed: {e}")

    async def health_check(self) -> bool:
        """
        Check Redis connection health by pinging the server.

        Returns:
            bool: True if Redis is healthy and responsive, False otherwise
        """
        try:
            await self.redis_client.ping()
            return True
        except Exception as e:
            logger.error(f"Redis health check failed for {self.__class__.__name__}: {e}")
            return False

    async def close(self):
        """Close Redis connection gracefully"""
        if self._redis_client is not None:
            try:
                await self._redis_client.aclose()
                logger.info(f"Redis connection closed for {self.__class__.__name__}")
            except Exception as e:
                logger.error(f"Error closing Redis connection for {self.__class__.__name__}: {e}")
