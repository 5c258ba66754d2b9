class AuthEndpoint:
    """
    Paths of the authentication endpoints, relative to the API base URL.

    Example:
        ```python
        from bearer_client.core.constants import AuthEndpoint

        await refresh_client.post(AuthEndpoint.REFRESH)
        ```
    """

    # POST - authenticate with username and password
    LOGIN = "/auth/login"

    # POST - invalidate the current access token
    LOGOUT = "/auth/logout"

    # GET - identity behind the current access token
    ME = "/auth/me"

    # POST - exchange the current access token for a new one
    REFRESH = "/auth/refresh"


class TokenStoreKey:
    """
    Key names of the persisted token pair.

    Keys are namespaced per client: ``{namespace}:{key}``.
    """

    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"

    @classmethod
    def build(cls, namespace: str, key: str) -> str:
        return f"{namespace}:{key}"


class AuthErrorCode:
    """Error codes the server attaches to 401 responses."""

    INVALID_CREDENTIALS = "AUTH_001"
    INVALID_TOKEN = "AUTH_002"
    TOKEN_EXPIRED = "AUTH_003"


BEARER_PREFIX = "Bearer "
AUTHORIZATION_HEADER = "Authorization"
DEFAULT_HEADERS = {"Content-Type": "application/json"}
