from typing import Any, Generic, TypeVar

from bearer_client.schemas.base import WireSchema

T = TypeVar("T")


class ApiResponse(WireSchema, Generic[T]):
    """Envelope the server wraps around every payload"""

    success: bool = True
    data: T | None = None
    message: str | None = None
    error_code: str | None = None
    timestamp: Any = None
