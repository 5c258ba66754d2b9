from dataclasses import dataclass, field, replace
from typing import Any

from bearer_client.core.types import QueryParams, RequestHeaders


@dataclass
class RequestDescriptor:
    """
    Everything needed to send a call, and to re-send it verbatim after a token refresh.

    ``retried`` is set once the call has been handed to the refresh coordinator;
    a second authentication failure on a retried call is final.
    """

    method: str
    url: str
    headers: RequestHeaders = field(default_factory=dict)
    params: QueryParams | None = None
    json: Any = None
    content: bytes | str | None = None
    timeout: float | None = None
    retried: bool = False
    request_id: str | None = None

    def with_headers(self, **headers: str) -> "RequestDescriptor":
        """
        Return a copy with extra headers, leaving this descriptor untouched.
        """
        return replace(self, headers={**self.headers, **headers})
