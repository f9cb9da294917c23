"""Cooperative cancellation shared by every request a crawl issues."""
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from link_scribe.errors import CrawlCancelled

log = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """A cancel signal passed by reference into every request-issuing call.

    Loop boundaries poll it with :meth:`raise_if_cancelled`; in-flight requests are
    wrapped in :meth:`guard`, which aborts the request as soon as the token fires.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: Optional[str] = None) -> None:
        if self._event.is_set():
            return
        self.reason = reason or "Operation cancelled"
        log.debug("cancel requested: %s", self.reason)
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CrawlCancelled(self.reason)

    async def guard(self, aw: Awaitable[T]) -> T:
        """Await ``aw`` unless the token fires first, in which case ``aw`` is cancelled."""
        if self._event.is_set():
            if asyncio.iscoroutine(aw):
                aw.close()
            raise CrawlCancelled(self.reason)
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            await asyncio.gather(task, waiter, return_exceptions=True)
            raise
        if task.done():
            waiter.cancel()
            await asyncio.gather(waiter, return_exceptions=True)
            return task.result()
        task.cancel()
        # Let the aborted request unwind (closing its connection) before reporting.
        await asyncio.gather(task, return_exceptions=True)
        raise CrawlCancelled(self.reason)


async def guarded(aw: Awaitable[T], token: Optional[CancelToken]) -> T:
    if token is None:
        return await aw
    return await token.guard(aw)
