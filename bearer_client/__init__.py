import httpx

from bearer_client.core.config import Settings, settings
from bearer_client.core.exceptions.base import ApiError, CustomException
from bearer_client.core.exceptions.transport import (
    AuthenticationFailure,
    NetworkError,
    RefreshFailure,
    RequestTimeout,
    RetryExhausted,
)
from bearer_client.http_client import HttpClient
from bearer_client.schemas import (
    AuthEvent,
    AuthEventType,
    LoginEvent,
    LogoutEvent,
    RefreshedEvent,
    TokenPair,
    UnauthorizedEvent,
    UserInfo,
)
from bearer_client.services.auth_service import AuthService
from bearer_client.services.coordinator import RefreshCoordinator, RefreshState
from bearer_client.services.event_bus import AuthEventBus
from bearer_client.services.token_store import (
    MemoryTokenStore,
    NullTokenStore,
    RedisTokenStore,
    TokenStore,
    create_token_store,
)
from bearer_client.services.transport import AuthenticatingTransport, RefreshTransport


def create_http_client(
    config: Settings | None = None,
    *,
    token_store: TokenStore | None = None,
    event_bus: AuthEventBus | None = None,
    client: httpx.AsyncClient | None = None,
    refresh_client: httpx.AsyncClient | None = None,
) -> HttpClient:
    """
    Wire the token store, event bus, transports and coordinator together.

    Args:
        config: Settings to use, the module-level settings by default.
        token_store: Overrides the store selected by ``token_store_backend``.
        event_bus: Shared bus, a new one by default.
        client: httpx client for business calls.
        refresh_client: httpx client for the refresh (and login/logout) calls.
            Must not be the same instance as ``client``.

    Returns:
        HttpClient: Ready to use, close it with ``aclose()`` or ``async with``.
    """
    config = config or settings
    token_store = token_store or create_token_store(config)
    event_bus = event_bus or AuthEventBus()

    refresh_transport = RefreshTransport(refresh_client, config)
    coordinator = RefreshCoordinator(refresh_transport, token_store, event_bus)
    transport = AuthenticatingTransport(token_store, coordinator, client, config)

    return HttpClient(transport, refresh_transport, token_store, event_bus)


__all__ = [
    "ApiError",
    "AuthEvent",
    "AuthEventBus",
    "AuthEventType",
    "AuthService",
    "AuthenticatingTransport",
    "AuthenticationFailure",
    "CustomException",
    "HttpClient",
    "LoginEvent",
    "LogoutEvent",
    "MemoryTokenStore",
    "NetworkError",
    "NullTokenStore",
    "RedisTokenStore",
    "RefreshCoordinator",
    "RefreshFailure",
    "RefreshState",
    "RefreshTransport",
    "RefreshedEvent",
    "RequestTimeout",
    "RetryExhausted",
    "Settings",
    "TokenPair",
    "TokenStore",
    "UnauthorizedEvent",
    "UserInfo",
    "create_http_client",
    "create_token_store",
]
