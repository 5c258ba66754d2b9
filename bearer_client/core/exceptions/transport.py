from typing import Any

import httpx

from bearer_client.core.exceptions.base import ApiError
from bearer_client.core.types import ErrorBodyDict


class NetworkError(ApiError):
    """
    Transport-level failure, no response was received
    """

    def __init__(self, message: str = "Network error", exception: Exception | None = None):
        super().__init__(0, message, details=str(exception) if exception else None, exception=exception)


class RequestTimeout(NetworkError):
    """
    The call did not complete within its own timeout
    """

    def __init__(self, message: str = "Request timed out", exception: Exception | None = None):
        super().__init__(message, exception)


class AuthenticationFailure(ApiError):
    """
    The server answered but rejected the presented credential
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str | None = None,
        details: Any = None,
        exception: Exception | None = None,
    ):
        super().__init__(401, message, error_code, details, exception)


class RefreshFailure(ApiError):
    """
    The refresh call failed, whatever the cause.
    The normalized cause is kept on ``cause``.
    """

    def __init__(self, cause: ApiError, message: str = "Token refresh failed"):
        super().__init__(cause.status, message, cause.error_code, cause.details, cause)
        self.cause = cause


class RetryExhausted(ApiError):
    """
    A call failed authentication again after one refresh-and-retry cycle
    """

    def __init__(self, cause: ApiError, message: str = "Authentication failed after token refresh"):
        super().__init__(cause.status, message, cause.error_code, cause.details, cause)
        self.cause = cause


def parse_json_body(response: httpx.Response) -> ErrorBodyDict | dict[str, Any] | None:
    """
    Decode the JSON object body of a response, if it has one.

    Returns:
        dict | None: The decoded body, or None for empty or non-JSON bodies.
    """
    try:
        body = response.json()
    except ValueError:
        return None

    return body if isinstance(body, dict) else None


def error_from_response(response: httpx.Response) -> ApiError:
    """
    Normalize an error response into an ApiError.

    The message and error code come from the ``{message, errorCode}`` body
    when the server sent one.
    """
    body = parse_json_body(response)
    message = (body or {}).get("message") or response.reason_phrase or "Request failed"
    error_code = (body or {}).get("errorCode")
    details = body if body is not None else response.text

    if response.status_code == httpx.codes.UNAUTHORIZED:
        return AuthenticationFailure(message, error_code, details)

    return ApiError(response.status_code, message, error_code, details)


def error_from_transport(err: httpx.TransportError) -> NetworkError:
    """
    Normalize an httpx transport exception into a NetworkError.
    """
    if isinstance(err, httpx.TimeoutException):
        return RequestTimeout(exception=err)

    return NetworkError(str(err) or err.__class__.__name__, err)
