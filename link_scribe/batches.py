"""Bounded-concurrency link checking: fixed-size windows, one window in flight at a time."""
import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Sequence

from link_scribe import config
from link_scribe.cancel import CancelToken
from link_scribe.models import BatchProgress, LinkCheckResult

log = logging.getLogger(__name__)

CheckFn = Callable[[str], Awaitable[LinkCheckResult]]
ProgressFn = Callable[[BatchProgress], None]


async def iter_batches(
    urls: Sequence[str],
    check: CheckFn,
    batch_size: int = config.BATCH_SIZE,
    token: Optional[CancelToken] = None,
    page: Optional[str] = None,
) -> AsyncIterator[BatchProgress]:
    """Yield one :class:`BatchProgress` per window, results in input order.

    Window N+1 is not started before every check of window N has settled.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    total = len(urls)
    for start in range(0, total, batch_size):
        if token is not None:
            token.raise_if_cancelled()
        window = urls[start:start + batch_size]
        results = await asyncio.gather(*(check(url) for url in window), return_exceptions=True)
        for outcome in results:
            # CrawlCancelled from any member aborts the window as a whole.
            if isinstance(outcome, BaseException):
                raise outcome
        completed = start + len(window)
        log.debug("batch %d-%d/%d done%s", start + 1, completed, total, f" on {page}" if page else "")
        yield BatchProgress(page=page, results=tuple(results), completed=completed, total=total)


async def run_batches(
    urls: Sequence[str],
    check: CheckFn,
    batch_size: int = config.BATCH_SIZE,
    token: Optional[CancelToken] = None,
    on_progress: Optional[ProgressFn] = None,
    page: Optional[str] = None,
) -> List[LinkCheckResult]:
    results: List[LinkCheckResult] = []
    async for progress in iter_batches(urls, check, batch_size, token, page):
        results.extend(progress.results)
        if on_progress is not None:
            on_progress(progress)
    return results
