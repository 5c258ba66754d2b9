import httpx
from loguru import logger
from pydantic import ValidationError

from bearer_client.core.constants import (
    AUTHORIZATION_HEADER,
    BEARER_PREFIX,
    AuthEndpoint,
    AuthErrorCode,
)
from bearer_client.core.exceptions.base import ApiError
from bearer_client.core.exceptions.transport import error_from_response, error_from_transport
from bearer_client.core.logger import mask_token
from bearer_client.core.types import LoginPayloadDict
from bearer_client.http_client import HttpClient
from bearer_client.schemas import LoginEvent, LoginResponse, LogoutEvent, UserInfo


class AuthService:
    """
    Session operations: login, logout and current user.

    Login and logout go through the plain (refresh-free) HTTP client: a 401 on
    login means bad credentials, never an expired token. Current user lookups
    go through the HttpClient and recover from expiry like any business call.

    Raises ApiError subclasses; the store and event bus are updated only on
    the outcomes described per method.
    """

    def __init__(self, http_client: HttpClient):
        self.http_client = http_client
        self.token_store = http_client.token_store
        self.event_bus = http_client.event_bus
        self.plain_client: httpx.AsyncClient = http_client.refresh_transport.client

    async def login(self, username: str, password: str) -> LoginResponse:
        """
        Authenticate with credentials, store the new pair and emit ``Login``.

        Args:
            username: User's username.
            password: User's password (plaintext).

        Returns:
            LoginResponse: Tokens and user identity.

        Raises:
            AuthenticationFailure: The credentials were rejected.
            ApiError: Any other non-2xx response or a malformed body.
            NetworkError: No response was received.
        """
        try:
            response = await self.plain_client.post(
                AuthEndpoint.LOGIN, json={"username": username, "password": password}
            )
        except httpx.TransportError as err:
            raise error_from_transport(err)

        if not response.is_success:
            error = error_from_response(response)
            if error.error_code == AuthErrorCode.INVALID_CREDENTIALS:
                logger.warning(f"Login rejected for {username}: invalid credentials")
            else:
                logger.warning(f"Login rejected for {username} with status {response.status_code}")
            raise error

        try:
            payload: LoginPayloadDict = response.json()["data"]
            login = LoginResponse.model_validate(payload)
        except (ValueError, KeyError, TypeError, ValidationError) as err:
            logger.error("Login returned a malformed body")
            raise ApiError(response.status_code, "Malformed login response", exception=err)

        await self.token_store.set(login.to_token_pair())
        self.event_bus.emit(LoginEvent(user=login.user, access_token=login.access_token))
        logger.info(f"Logged in as {login.user.username}")
        return login

    async def logout(self) -> None:
        """
        End the session.

        Tells the server to invalidate the current token (best effort: failures
        are logged, not raised), then always clears the store and emits
        ``Logout``. A refresh in flight is not cancelled.
        """
        pair = await self.token_store.get()

        if pair is not None:
            try:
                response = await self.plain_client.post(
                    AuthEndpoint.LOGOUT,
                    headers={AUTHORIZATION_HEADER: f"{BEARER_PREFIX}{pair.access_token}"},
                )
                if not response.is_success:
                    logger.warning(f"Server logout answered {response.status_code}")
            except httpx.TransportError as err:
                logger.warning(f"Server logout failed for {mask_token(pair.access_token)}: {err}")

        await self.token_store.clear()
        self.event_bus.emit(LogoutEvent())
        logger.info("Logged out")

    async def get_current_user(self) -> UserInfo:
        """
        Identity behind the current access token.
        """
        data = await self.http_client.get(AuthEndpoint.ME)
        return UserInfo.model_validate(data)
