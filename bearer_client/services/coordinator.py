import asyncio
from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Awaitable, Callable

import httpx
from loguru import logger

from bearer_client.core.exceptions.base import ApiError
from bearer_client.core.exceptions.transport import (
    AuthenticationFailure,
    RefreshFailure,
    RequestTimeout,
)
from bearer_client.schemas import RefreshedEvent, RequestDescriptor, UnauthorizedEvent
from bearer_client.services.event_bus import AuthEventBus
from bearer_client.services.token_store import TokenStore

if TYPE_CHECKING:
    from bearer_client.services.transport.refresh import RefreshTransport

Replay = Callable[[RequestDescriptor], Awaitable[httpx.Response]]


class RefreshState(StrEnum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class PendingCall:
    """
    A caller suspended until the current refresh episode is resolved.
    ``future`` is settled exactly once.
    """

    request: RequestDescriptor
    future: asyncio.Future
    replay: Replay
    deadline: float | None = None

    def expired(self, now: float) -> bool:
        return self.deadline is not None and now >= self.deadline


class RefreshCoordinator:
    """
    Collapses concurrent authentication failures into a single token refresh.

    State machine over ``{IDLE, REFRESHING}`` plus a FIFO queue of suspended
    calls:

    - IDLE + failure: queue the call, start the refresh task -> REFRESHING
    - REFRESHING + failure: queue the call, no new refresh
    - refresh succeeds: store the pair, emit ``Refreshed``, replay the queue
      in order, each caller gets its replay's outcome -> IDLE
    - refresh fails: clear the store, emit ``Unauthorized``, reject the whole
      queue with the same ``RefreshFailure`` -> IDLE

    All state changes run on the event loop thread with no ``await`` between
    reading and writing ``{state, queue}``, so "is a refresh in flight" and
    "enqueue or start" form one atomic step. The refresh call itself is never
    retried.
    """

    def __init__(
        self,
        refresh_transport: "RefreshTransport",
        token_store: TokenStore,
        event_bus: AuthEventBus,
    ):
        self.refresh_transport = refresh_transport
        self.token_store = token_store
        self.event_bus = event_bus

        self._state = RefreshState.IDLE
        self._queue: deque[PendingCall] = deque()
        self._refresh_task: asyncio.Task | None = None
        self._replay_tasks: set[asyncio.Task] = set()
        self._refresh_count = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def refresh_count(self) -> int:
        """Number of refresh episodes started since creation."""
        return self._refresh_count

    async def submit(
        self,
        request: RequestDescriptor,
        replay: Replay,
        failure: AuthenticationFailure,
        deadline: float | None = None,
    ) -> httpx.Response:
        """
        Suspend a call that failed authentication until a refresh resolves it.

        Args:
            request: The failed call, already marked as retried.
            replay: Re-sends the call with the then-current token.
            failure: The authentication failure that brought the call here.
            deadline: Event loop time after which the call must not be replayed.

        Returns:
            httpx.Response: The response of the replayed call.

        Raises:
            RefreshFailure: The refresh failed; every queued call gets this same error.
            RequestTimeout: The call's own deadline passed while it was queued.
            RetryExhausted: The replayed call failed authentication again.
        """
        loop = asyncio.get_running_loop()
        call = PendingCall(request, loop.create_future(), replay, deadline)

        # Atomic section: no await until the future
        self._queue.append(call)
        if self._state == RefreshState.IDLE:
            self._state = RefreshState.REFRESHING
            self._refresh_count += 1
            self._refresh_task = asyncio.create_task(self._run_refresh(failure))
            logger.info(f"Token refresh started by {request.method} {request.url}")
        else:
            logger.debug(
                f"{request.method} {request.url} queued behind refresh "
                f"({len(self._queue)} pending)"
            )

        return await call.future

    async def _run_refresh(self, failure: AuthenticationFailure) -> None:
        # Every path out of this block settles the queue and returns to IDLE
        try:
            pair = await self.token_store.get()

            if pair is None:
                logger.warning("Authentication failed with no stored token, ending session")
                await self._fail(failure)
                return

            new_pair = await self.refresh_transport.refresh(pair.access_token)
            await self.token_store.set(new_pair)
        except RefreshFailure as err:
            logger.error(f"Token refresh failed with status {err.status}, ending session")
            await self._fail(err)
            return
        except Exception as err:
            logger.exception("Token refresh aborted by an unexpected error, ending session")
            await self._fail(RefreshFailure(ApiError(0, str(err), exception=err)))
            return

        self.event_bus.emit(RefreshedEvent(access_token=new_pair.access_token))

        calls = self._drain()
        logger.info(f"Token refreshed, replaying {len(calls)} call(s)")

        now = asyncio.get_running_loop().time()
        for call in calls:
            if call.expired(now):
                logger.warning(f"{call.request.method} {call.request.url} timed out while queued")
                self._reject(call, RequestTimeout("Request timed out waiting for token refresh"))
                continue
            self._start_replay(call)

    async def _fail(self, error: ApiError) -> None:
        """
        End the session and reject every queued call with ``error``. Never raises.
        """
        try:
            await self.token_store.clear()
        except Exception:
            logger.exception("Token store clear failed while ending session")

        self.event_bus.emit(UnauthorizedEvent())

        for call in self._drain():
            self._reject(call, error)

    def _drain(self) -> list[PendingCall]:
        calls = list(self._queue)
        self._queue.clear()
        self._state = RefreshState.IDLE
        self._refresh_task = None
        return calls

    def _start_replay(self, call: PendingCall) -> None:
        if call.future.done():
            # Caller went away (cancelled) while queued
            return

        task = asyncio.create_task(self._replay(call))
        self._replay_tasks.add(task)
        task.add_done_callback(self._replay_tasks.discard)

    async def _replay(self, call: PendingCall) -> None:
        try:
            response = await call.replay(call.request)
        except asyncio.CancelledError:
            call.future.cancel()
            raise
        except Exception as err:
            self._reject(call, err)
        else:
            if not call.future.done():
                call.future.set_result(response)

    @staticmethod
    def _reject(call: PendingCall, error: BaseException) -> None:
        if not call.future.done():
            call.future.set_exception(error)

    async def join(self) -> None:
        """
        Wait until the current refresh episode and all of its replays are finished.
        """
        while True:
            pending = [
                task
                for task in (self._refresh_task, *self._replay_tasks)
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
