import asyncio
from typing import Any, Callable

import httpx
from faker import Faker

from bearer_client.core.constants import AuthEndpoint, AuthErrorCode

API_BASE_URL = "http://api.test"


def envelope(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Wrap a payload the way the server does."""
    return {"success": True, "data": data, "message": message}


def error_body(message: str, error_code: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if error_code is not None:
        body["errorCode"] = error_code
    return body


def generate_user(faker: Faker | None = None) -> dict[str, Any]:
    """
    Generate a random user payload as the server sends it
    Returns:
        dict: camelCase user identity
    """
    faker = faker or Faker()
    return {
        "id": faker.random_int(min=1, max=10_000),
        "username": faker.user_name(),
        "email": faker.safe_email(),
        "fullName": faker.name(),
        "roles": ["ROLE_ADMIN"],
    }


class FakeApi:
    """
    In-process stand-in for the remote API, served through ``httpx.MockTransport``.

    Business routes answer 401 unless the bearer token is in ``valid_tokens``.
    ``/auth/refresh`` swaps the valid token for ``next_token``, or fails with
    ``refresh_status``. Set ``refresh_gate`` to hold refreshes until released.
    """

    def __init__(self, access_token: str = "T1", next_token: str = "T2"):
        self.valid_tokens = {access_token}
        self.next_token = next_token
        self.user = generate_user()
        self.payloads: dict[str, Any] = {}
        self.statuses: dict[str, int] = {}

        self.refresh_status = 200
        self.refresh_error_code: str | None = None
        self.refresh_gate: asyncio.Event | None = None
        self.refresh_error: Exception | None = None
        self.unauthorized_code: str | None = AuthErrorCode.TOKEN_EXPIRED
        self.always_reject = False
        self.login_status = 200
        self.login_body: dict[str, Any] | None = None

        self.calls: list[tuple[str, str, str | None]] = []
        self.refresh_calls: list[str | None] = []
        self.on_call: Callable[[httpx.Request], None] | None = None

    @property
    def business_calls(self) -> list[tuple[str, str, str | None]]:
        return [call for call in self.calls if not call[1].startswith("/auth/")]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=API_BASE_URL, transport=self.transport())

    async def handler(self, request: httpx.Request) -> httpx.Response:
        authorization = request.headers.get("Authorization")
        path = request.url.path
        self.calls.append((request.method, path, authorization))
        if self.on_call is not None:
            self.on_call(request)

        if path == AuthEndpoint.REFRESH:
            return await self._refresh(authorization)

        if path == AuthEndpoint.LOGIN:
            return self._login()

        if path == AuthEndpoint.LOGOUT:
            return httpx.Response(200, json=envelope(message="Logged out successfully"))

        if self.always_reject or authorization not in {f"Bearer {t}" for t in self.valid_tokens}:
            return httpx.Response(
                401, json=error_body("Token expired", self.unauthorized_code)
            )

        if path == AuthEndpoint.ME:
            return httpx.Response(200, json=envelope(self.user))

        status = self.statuses.get(path, 200)
        if status >= 400:
            return httpx.Response(status, json=error_body("Request failed", "SERVER_001"))

        return httpx.Response(status, json=envelope(self.payloads.get(path, {"path": path})))

    async def _refresh(self, authorization: str | None) -> httpx.Response:
        self.refresh_calls.append(authorization)

        if self.refresh_gate is not None:
            await self.refresh_gate.wait()

        if self.refresh_error is not None:
            raise self.refresh_error

        if self.refresh_status != 200:
            return httpx.Response(
                self.refresh_status, json=error_body("Refresh failed", self.refresh_error_code)
            )

        self.valid_tokens = {self.next_token}
        return httpx.Response(
            200,
            json=envelope(
                {"accessToken": self.next_token, "refreshToken": None, "user": self.user}
            ),
        )

    def _login(self) -> httpx.Response:
        if self.login_body is not None:
            return httpx.Response(self.login_status, json=self.login_body)

        if self.login_status != 200:
            return httpx.Response(
                self.login_status,
                json=error_body("Invalid credentials", AuthErrorCode.INVALID_CREDENTIALS),
            )

        token = "LOGIN-TOKEN"
        self.valid_tokens = {token}
        return httpx.Response(
            200,
            json=envelope(
                {
                    "accessToken": token,
                    "tokenType": "Bearer",
                    "expiresIn": 3600,
                    "user": self.user,
                }
            ),
        )


async def wait_until(predicate: Callable[[], bool], attempts: int = 1000) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)

    raise AssertionError("condition not reached")
