from abc import ABC, abstractmethod

from bearer_client.schemas import TokenPair


class TokenStore(ABC):
    """
    Persistence boundary for the current token pair.

    Implementations never raise on storage trouble: a store that cannot be
    read behaves as "no session", a store that cannot be written drops the
    write. Token contents are opaque and never validated here.
    """

    @abstractmethod
    async def get(self) -> TokenPair | None:
        """
        Current token pair, or None when there is no session.
        """

    @abstractmethod
    async def set(self, pair: TokenPair) -> None:
        """
        Replace the stored pair wholesale.
        """

    @abstractmethod
    async def clear(self) -> None:
        """
        Remove the stored pair.
        """
