"""Predicate-driven polling used by every synchronous operation.

A wait repeatedly fetches a fresh snapshot, hands it to a ``done``
predicate and sleeps ``delay`` seconds between attempts until the
predicate holds, the deadline passes or the caller cancels.

Example:
    await poll_until(
        lambda: client.servers.get(server_id),
        lambda server: server.power,
        timeout=60,
        delay=1,
        description=f"server {server_id} to power on",
    )
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from infra_client.errors import (
    NotFoundError,
    OperationCancelledError,
    PollTimeoutError,
    is_transient,
    never,
)
from infra_client.models import RESOURCE_ACTIVE_STATUS

T = TypeVar("T")

Fetch = Callable[[], Awaitable[T]]
Predicate = Callable[[T], bool]
RetryPredicate = Callable[[Exception], bool]


class PollClock:
    """Deadline and sleep schedule of a single wait"""

    def __init__(
        self,
        timeout: float,
        delay: float,
        cancel: Optional[asyncio.Event] = None,
        description: str = "resource",
    ):
        self.timeout = timeout
        self.delay = delay
        self.cancel = cancel
        self.description = description
        self.started = self._now()

    @staticmethod
    def _now() -> float:
        return asyncio.get_event_loop().time()

    @property
    def elapsed(self) -> float:
        return self._now() - self.started

    @property
    def remaining(self) -> float:
        return max(0.0, self.timeout - self.elapsed)

    def check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise OperationCancelledError(self.description)

    async def _sleep(self, seconds: float) -> None:
        if self.cancel is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(self.cancel.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise OperationCancelledError(self.description)

    async def run(self, fetch: Fetch):
        """Await one fetch, bounded by the remaining budget and the cancel event"""
        task = asyncio.ensure_future(fetch())
        waiters = {task}
        if self.cancel is not None:
            waiters.add(asyncio.ensure_future(self.cancel.wait()))
        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self.remaining, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()
        if task in done:
            return task.result()
        self.check_cancelled()
        raise PollTimeoutError(self.description, self.timeout)

    async def tick(self) -> None:
        """Sleep until the next attempt, raising once the deadline is used up"""
        self.check_cancelled()
        remaining = self.remaining
        if remaining <= 0:
            raise PollTimeoutError(self.description, self.timeout)
        if self.delay >= remaining:
            # no room for another attempt
            await self._sleep(remaining)
            raise PollTimeoutError(self.description, self.timeout)
        await self._sleep(self.delay)


async def poll_until(
    fetch: Fetch,
    done: Predicate,
    *,
    timeout: float,
    delay: float,
    retry_on: RetryPredicate = is_transient,
    cancel: Optional[asyncio.Event] = None,
    description: str = "resource",
):
    """Poll ``fetch`` until ``done`` returns True for the fetched value.

    Errors raised by ``fetch`` are retried on the next tick when ``retry_on``
    accepts them and raised otherwise. ``done`` may raise to abort the wait.
A fetch still in flight when the deadline passes or ``cancel`` is set
is abandoned.

    Returns:
        The snapshot that satisfied the predicate.

    Raises:
        PollTimeoutError: The deadline passed first.
        OperationCancelledError: ``cancel`` was set.
    """
    clock = PollClock(timeout, delay, cancel, description)
    attempt = 0

    while True:
        clock.check_cancelled()
        attempt += 1
        try:
            snapshot = await clock.run(fetch)
        except Exception as e:
            if not retry_on(e):
                raise
            logger.warning(
                f"Attempt {attempt} polling {description} failed with "
                f"{type(e).__name__}: {e}. Retrying"
            )
        else:
            if done(snapshot):
                logger.debug(
                    f"{description} reached after {attempt} attempt(s) "
                    f"in {clock.elapsed:.2f}s"
                )
                return snapshot
            logger.debug(f"Still waiting for {description} (attempt {attempt})")

        await clock.tick()


def absent_on_404(fetch: Fetch) -> Fetch:
    """Wrap ``fetch`` so that a 404 yields None instead of raising"""

    async def fetch_or_none():
        try:
            return await fetch()
        except NotFoundError:
            return None

    return fetch_or_none


async def wait_for_active(
    fetch: Fetch,
    *,
    timeout: float,
    delay: float,
    cancel: Optional[asyncio.Event] = None,
    description: str = "resource",
):
    return await poll_until(
        fetch,
        lambda snapshot: snapshot.status == RESOURCE_ACTIVE_STATUS,
        timeout=timeout,
        delay=delay,
        cancel=cancel,
        description=f"{description} to become {RESOURCE_ACTIVE_STATUS}",
    )


async def wait_for_deleted(
    fetch: Fetch,
    *,
    timeout: float,
    delay: float,
    cancel: Optional[asyncio.Event] = None,
    description: str = "resource",
) -> None:
    # Only a 404 ends the wait, every other error is final.
    await poll_until(
        absent_on_404(fetch),
        lambda snapshot: snapshot is None,
        timeout=timeout,
        delay=delay,
        retry_on=never,
        cancel=cancel,
        description=f"{description} to be deleted",
    )


async def wait_for_exists(
    fetch: Fetch,
    *,
    timeout: float,
    delay: float,
    cancel: Optional[asyncio.Event] = None,
    description: str = "resource",
):
    return await poll_until(
        absent_on_404(fetch),
        lambda snapshot: snapshot is not None,
        timeout=timeout,
        delay=delay,
        cancel=cancel,
        description=f"{description} to exist",
    )
