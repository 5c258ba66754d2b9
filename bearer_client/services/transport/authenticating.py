import asyncio

import httpx
from loguru import logger

from bearer_client.core.config import Settings, settings as default_settings
from bearer_client.core.constants import AUTHORIZATION_HEADER, BEARER_PREFIX, DEFAULT_HEADERS
from bearer_client.core.exceptions.transport import (
    AuthenticationFailure,
    RetryExhausted,
    error_from_response,
    error_from_transport,
)
from bearer_client.core.logger import new_request_id, request_id_var
from bearer_client.schemas import RequestDescriptor
from bearer_client.services.coordinator import RefreshCoordinator
from bearer_client.services.token_store import TokenStore


class AuthenticatingTransport:
    """
    Sends every business call with the current bearer token.

    A 401 is handed to the RefreshCoordinator once per call; a call that is
    rejected again after its replay fails with RetryExhausted. Every other
    response is returned unchanged, transport errors surface as NetworkError.
    """

    def __init__(
        self,
        token_store: TokenStore,
        coordinator: RefreshCoordinator,
        client: httpx.AsyncClient | None = None,
        config: Settings | None = None,
    ):
        self.config = config or default_settings
        self.token_store = token_store
        self.coordinator = coordinator
        self.client = client or httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=self.config.request_timeout,
            headers=DEFAULT_HEADERS,
        )

    async def send(self, request: RequestDescriptor) -> httpx.Response:
        """
        Send a call, recovering once from an expired token.

        Args:
            request: The call to send. Marked as retried when handed to the coordinator.

        Returns:
            httpx.Response: The first non-401 response, whatever its status.

        Raises:
            NetworkError: No response was received (RequestTimeout on timeout).
            AuthenticationFailure: 401 with an error code that does not call for a refresh.
            RetryExhausted: 401 again after a refresh and one replay.
            RefreshFailure: The refresh this call waited on failed.
        """
        if request.request_id is None:
            request.request_id = new_request_id()

        token = request_id_var.set(request.request_id)
        try:
            return await self._send(request)
        finally:
            request_id_var.reset(token)

    async def _send(self, request: RequestDescriptor) -> httpx.Response:
        timeout = request.timeout if request.timeout is not None else self.config.request_timeout
        started_at = asyncio.get_running_loop().time()

        response = await self._send_once(request, timeout)
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return response

        failure = error_from_response(response)

        if not self._should_refresh(failure):
            logger.info(
                f"{request.method} {request.url} rejected with {failure.error_code}, not refreshing"
            )
            raise failure

        if request.retried:
            logger.warning(f"{request.method} {request.url} rejected again after token refresh")
            raise RetryExhausted(failure)

        request.retried = True
        return await self.coordinator.submit(
            request, self.replay, failure, deadline=started_at + timeout
        )

    async def replay(self, request: RequestDescriptor) -> httpx.Response:
        """
        Re-send a call queued behind a refresh, with the token current at send time.
        """
        logger.debug(f"Replaying {request.method} {request.url}")
        return await self.send(request)

    async def _send_once(self, request: RequestDescriptor, timeout: float) -> httpx.Response:
        pair = await self.token_store.get()

        if pair is not None:
            request = request.with_headers(
                **{AUTHORIZATION_HEADER: f"{BEARER_PREFIX}{pair.access_token}"}
            )

        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params,
                json=request.json,
                content=request.content,
                timeout=timeout,
            )
        except httpx.TransportError as err:
            error = error_from_transport(err)
            logger.error(f"{request.method} {request.url} failed: {error.message}")
            raise error

        logger.debug(f"{request.method} {request.url} -> {response.status_code}")
        return response

    def _should_refresh(self, failure: AuthenticationFailure) -> bool:
        codes = self.config.refreshable_error_codes_set
        # A 401 without an errorCode always refreshes
        if not codes or failure.error_code is None:
            return True

        return failure.error_code in codes

    async def aclose(self) -> None:
        await self.client.aclose()
