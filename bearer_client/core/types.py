from typing import Any, Callable, NotRequired, TypedDict


class UserInfoDict(TypedDict, total=False):
    """User identity as sent by the server."""

    id: int
    username: str
    email: str
    fullName: str
    roles: list[str]


class TokenPayloadDict(TypedDict):
    """``data`` of a successful refresh response."""

    accessToken: str
    refreshToken: str | None
    user: NotRequired[UserInfoDict]


class LoginPayloadDict(TypedDict):
    """``data`` of a successful login response."""

    accessToken: str
    refreshToken: NotRequired[str | None]
    tokenType: NotRequired[str]
    expiresIn: NotRequired[int]
    user: UserInfoDict


class ErrorBodyDict(TypedDict, total=False):
    """Body of an error response."""

    success: bool
    message: str
    errorCode: str
    timestamp: str


RequestHeaders = dict[str, str]
QueryParams = dict[str, Any]
Unsubscribe = Callable[[], None]
