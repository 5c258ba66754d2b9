from pydantic import Field

from bearer_client.schemas.base import WireSchema


class UserInfo(WireSchema):
    """Identity of the authenticated user"""

    id: int | str | None = None
    username: str
    email: str | None = None
    full_name: str | None = None
    roles: list[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        return role in self.roles
