from loguru import logger

from bearer_client.schemas import TokenPair
from bearer_client.services.token_store.base import TokenStore


class MemoryTokenStore(TokenStore):
    """Token pair held in process memory, lost on exit."""

    def __init__(self, pair: TokenPair | None = None):
        self._pair = pair

    async def get(self) -> TokenPair | None:
        return self._pair

    async def set(self, pair: TokenPair) -> None:
        self._pair = pair
        logger.debug("Token pair stored in memory")

    async def clear(self) -> None:
        self._pair = None
        logger.debug("Token pair cleared from memory")


class NullTokenStore(TokenStore):
    """
    Store for contexts without any storage medium.
    Reads always report "no session"; writes are dropped.
    """

    async def get(self) -> TokenPair | None:
        return None

    async def set(self, pair: TokenPair) -> None:
        return None

    async def clear(self) -> None:
        return None
