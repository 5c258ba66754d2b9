from pydantic import ConfigDict

from bearer_client.schemas.base import BaseSchema, WireSchema
from bearer_client.schemas.user import UserInfo


class TokenPair(BaseSchema):
    """
    Current credential pair. Immutable: replaced wholesale, never patched.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    access_token: str
    refresh_token: str | None = None

    def __repr__(self):
        # Keep tokens out of tracebacks and logs
        return "TokenPair(access_token=***, refresh_token=%s)" % (
            "***" if self.refresh_token else None
        )


class RefreshResponse(WireSchema):
    """``data`` of a successful ``POST /auth/refresh``"""

    access_token: str
    refresh_token: str | None = None
    user: UserInfo | None = None

    def to_token_pair(self) -> TokenPair:
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)


class LoginResponse(WireSchema):
    """``data`` of a successful ``POST /auth/login``"""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None
    user: UserInfo

    def to_token_pair(self) -> TokenPair:
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)
