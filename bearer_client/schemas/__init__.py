from .base import BaseSchema, WireSchema
from .user import UserInfo
from .token import TokenPair, RefreshResponse, LoginResponse
from .envelope import ApiResponse
from .request import RequestDescriptor
from .auth_event import (
    AuthEvent,
    AuthEventType,
    LoginEvent,
    LogoutEvent,
    RefreshedEvent,
    UnauthorizedEvent,
)

__all__ = [
    "BaseSchema",
    "WireSchema",
    "UserInfo",
    "TokenPair",
    "RefreshResponse",
    "LoginResponse",
    "ApiResponse",
    "RequestDescriptor",
    "AuthEvent",
    "AuthEventType",
    "LoginEvent",
    "LogoutEvent",
    "RefreshedEvent",
    "UnauthorizedEvent",
]
