import httpx
from loguru import logger
from pydantic import ValidationError

from bearer_client.core.config import Settings, settings as default_settings
from bearer_client.core.constants import (
    AUTHORIZATION_HEADER,
    BEARER_PREFIX,
    DEFAULT_HEADERS,
    AuthEndpoint,
)
from bearer_client.core.exceptions.base import ApiError
from bearer_client.core.exceptions.transport import (
    RefreshFailure,
    error_from_response,
    error_from_transport,
)
from bearer_client.core.logger import mask_token
from bearer_client.core.types import TokenPayloadDict
from bearer_client.schemas import RefreshResponse, TokenPair, UserInfo


class RefreshTransport:
    """
    Plain call path to the refresh endpoint.

    Owns its own ``httpx.AsyncClient`` with its own timeout and holds no
    reference to the authenticating transport or the refresh coordinator,
    so a rejected refresh is an ordinary error and can never start another
    refresh.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, config: Settings | None = None):
        config = config or default_settings
        self.client = client or httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.refresh_timeout,
            headers=DEFAULT_HEADERS,
        )
        self.last_user: UserInfo | None = None

    async def refresh(self, current_access_token: str) -> TokenPair:
        """
        Exchange the current (possibly expired) access token for a new pair.

        Performs exactly one ``POST /auth/refresh`` with no body.

        Args:
            current_access_token: Presented as the bearer credential.

        Returns:
            TokenPair: The new pair. Its refresh token is None, rotation is not supported.

        Raises:
            RefreshFailure: On a transport error, a timeout, any non-2xx status
                or a malformed body.
        """
        logger.info(f"Refreshing access token {mask_token(current_access_token)}")

        try:
            response = await self.client.post(
                AuthEndpoint.REFRESH,
                headers={AUTHORIZATION_HEADER: f"{BEARER_PREFIX}{current_access_token}"},
            )
        except httpx.TransportError as err:
            cause = error_from_transport(err)
            logger.error(f"Token refresh failed, no response: {cause.message}")
            raise RefreshFailure(cause)

        if not response.is_success:
            cause = error_from_response(response)
            logger.error(f"Token refresh rejected with status {response.status_code}")
            raise RefreshFailure(cause)

        try:
            payload: TokenPayloadDict = response.json()["data"]
            data = RefreshResponse.model_validate(payload)
        except (ValueError, KeyError, TypeError, ValidationError) as err:
            logger.error("Token refresh returned a malformed body")
            logger.debug(str(err))
            raise RefreshFailure(
                ApiError(response.status_code, "Malformed refresh response", exception=err)
            )

        self.last_user = data.user
        logger.info(f"Access token refreshed to {mask_token(data.access_token)}")
        return data.to_token_pair()

    async def aclose(self) -> None:
        await self.client.aclose()
