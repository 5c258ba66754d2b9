from typing import Any

import httpx
from loguru import logger

from bearer_client.core.exceptions.base import ApiError
from bearer_client.core.exceptions.transport import error_from_response, parse_json_body
from bearer_client.core.types import QueryParams, RequestHeaders
from bearer_client.schemas import ApiResponse, RequestDescriptor
from bearer_client.services.coordinator import RefreshCoordinator
from bearer_client.services.event_bus import AuthEventBus
from bearer_client.services.token_store import TokenStore
from bearer_client.services.transport import AuthenticatingTransport, RefreshTransport


class HttpClient:
    """
    Entry point for business calls.

    Every call goes through the AuthenticatingTransport; callers never see
    token refreshes. Successful bodies use the ``{success, data, message}``
    envelope, which ``request`` unwraps. Non-2xx responses raise ApiError.

    Usage:
        ```python
        async with create_http_client() as client:
            users = await client.get("/users", params={"page": 0})
        ```
    """

    def __init__(
        self,
        transport: AuthenticatingTransport,
        refresh_transport: RefreshTransport,
        token_store: TokenStore,
        event_bus: AuthEventBus,
    ):
        self.transport = transport
        self.refresh_transport = refresh_transport
        self.token_store = token_store
        self.event_bus = event_bus

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self.transport.coordinator

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: QueryParams | None = None,
        json: Any = None,
        content: bytes | str | None = None,
        headers: RequestHeaders | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        Send a call and return the raw response once it is successful.

        Raises:
            ApiError: Non-2xx response other than an authentication failure.
            NetworkError: No response was received.
            RefreshFailure | RetryExhausted | AuthenticationFailure: See AuthenticatingTransport.
        """
        request = RequestDescriptor(
            method=method.upper(),
            url=url,
            headers=dict(headers or {}),
            params=params,
            json=json,
            content=content,
            timeout=timeout,
        )
        response = await self.transport.send(request)

        if not response.is_success:
            error = error_from_response(response)
            logger.warning(f"{request.method} {url} failed with {response.status_code}: {error.message}")
            raise error

        return response

    async def request(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Send a call and return the ``data`` of its envelope.
        """
        envelope = await self.request_with_meta(method, url, **kwargs)
        return envelope.data

    async def request_with_meta(self, method: str, url: str, **kwargs: Any) -> ApiResponse[Any]:
        """
        Send a call and return the whole envelope, message and metadata included.
        """
        response = await self.send(method, url, **kwargs)

        body = parse_json_body(response)
        if body is None:
            raise ApiError(response.status_code, "Response is not an API envelope", details=response.text)

        return ApiResponse[Any].model_validate(body)

    async def request_raw(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Send a call and return its body without envelope unwrapping.
        JSON bodies are decoded; anything else (PDF, images) is returned as bytes.
        """
        response = await self.send(method, url, **kwargs)

        if "json" in response.headers.get("content-type", ""):
            return response.json()

        return response.content

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", url, json=json, **kwargs)

    async def put(self, url: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", url, json=json, **kwargs)

    async def patch(self, url: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        """Close both HTTP connection pools."""
        await self.transport.aclose()
        await self.refresh_transport.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
