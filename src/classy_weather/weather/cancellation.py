"""Cooperative cancellation for request chains."""

import asyncio
import inspect
import logging
from typing import Awaitable, TypeVar

from classy_weather.weather.errors import RequestCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """Signal shared by every request of one chain.

    Cancelling the token aborts requests that are still in flight. A response
    that already arrived may still be returned, so callers must not rely on
    the token alone to discard stale results.
    """

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        Args:
            awaitable: Request coroutine or future

        Returns:
            Result of the awaitable

        Raises:
            RequestCancelled: If the token was cancelled before completion
        """
        if self.cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelled()

        request = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {request, waiter},
                return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            waiter.cancel()

        if request in done:
            return request.result()

        logger.debug("Aborting in-flight request")
        request.cancel()
        raise RequestCancelled()
