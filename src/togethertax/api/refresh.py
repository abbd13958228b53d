# Refresh Coordinator — single-flight access-token refresh with queued waiters.
# Created: 2026-10-19

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

logger = logging.getLogger(__name__)

RefreshFetcher = Callable[[], Awaitable[str | None]]


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class SessionExpiredError(Exception):
    """The refresh credential was rejected; the session cannot be recovered.

    ``initiator`` is True only for the caller that ran the failed refresh,
    so session teardown happens once.
    """

    def __init__(self, initiator: bool = False):
        super().__init__("Access token refresh failed")
        self.initiator = initiator


class RefreshAbortedError(Exception):
    """The in-flight refresh was cancelled before it produced an outcome.

    The stored session is left untouched.
    """

    def __init__(self) -> None:
        super().__init__("Access token refresh was aborted")


class RefreshCoordinator:
    """Owns the refresh state and the queue of callers waiting on it.

    At most one refresh runs at a time. Callers arriving while a refresh is in
    flight get a pending future, resolved in FIFO order with the new token or
    with :class:`SessionExpiredError` when the refresh fails, or with
    :class:`RefreshAbortedError` when the refreshing caller is cancelled.

    All methods must be called from the same event loop.
    """

    def __init__(self) -> None:
        self._state = RefreshState.IDLE
        self._waiters: list[asyncio.Future[str]] = []

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._state is RefreshState.REFRESHING

    @property
    def pending(self) -> int:
        """Number of callers waiting on the in-flight refresh."""
        return len(self._waiters)

    async def acquire(self, fetch: RefreshFetcher) -> str:
        """Return a fresh access token, running *fetch* only if no refresh is in flight.

        Raises:
            SessionExpiredError: the refresh failed (or was already failing).
            RefreshAbortedError: the refresh this caller waited on was cancelled.
        """
        if self.is_refreshing:
            return await self._wait()

        self._state = RefreshState.REFRESHING
        try:
            token = await fetch()
        except Exception as e:
            logger.warning("Token refresh raised: %s", e)
            self._fail()
            raise SessionExpiredError(initiator=True) from e
        except BaseException:
            self._fail(RefreshAbortedError)
            raise

        if not token:
            self._fail()
            raise SessionExpiredError(initiator=True)

        self._complete(token)
        return token

    async def _wait(self) -> str:
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        logger.debug("Queued behind in-flight token refresh (%d waiting)", len(self._waiters))
        return await future

    def _drain(self) -> list[asyncio.Future[str]]:
        self._state = RefreshState.IDLE
        waiters, self._waiters = self._waiters, []
        return waiters

    def _complete(self, token: str) -> None:
        waiters = self._drain()
        for future in waiters:
            if not future.done():
                future.set_result(token)
        logger.info("Access token refreshed; resumed %d waiting request(s)", len(waiters))

    def _fail(self, error: Callable[[], Exception] = SessionExpiredError) -> None:
        waiters = self._drain()
        for future in waiters:
            if not future.done():
                future.set_exception(error())
        if waiters:
            logger.info("Token refresh failed; released %d waiting request(s)", len(waiters))
