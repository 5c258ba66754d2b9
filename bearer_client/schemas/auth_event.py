from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import ConfigDict, Field

from bearer_client.schemas.base import BaseSchema
from bearer_client.schemas.user import UserInfo


class AuthEventType(StrEnum):
    LOGIN = "login"
    LOGOUT = "logout"
    REFRESHED = "refreshed"
    UNAUTHORIZED = "unauthorized"


class _BaseAuthEvent(BaseSchema):
    model_config = ConfigDict(frozen=True, extra="forbid")


class LoginEvent(_BaseAuthEvent):
    """A user logged in and a token pair was stored"""

    type: Literal[AuthEventType.LOGIN] = AuthEventType.LOGIN
    user: UserInfo
    access_token: str


class LogoutEvent(_BaseAuthEvent):
    """The session was ended on request"""

    type: Literal[AuthEventType.LOGOUT] = AuthEventType.LOGOUT


class RefreshedEvent(_BaseAuthEvent):
    """The access token was replaced after a refresh"""

    type: Literal[AuthEventType.REFRESHED] = AuthEventType.REFRESHED
    access_token: str


class UnauthorizedEvent(_BaseAuthEvent):
    """The session ended because the token could not be refreshed"""

    type: Literal[AuthEventType.UNAUTHORIZED] = AuthEventType.UNAUTHORIZED


AuthEvent = Annotated[
    Union[LoginEvent, LogoutEvent, RefreshedEvent, UnauthorizedEvent],
    Field(discriminator="type"),
]
