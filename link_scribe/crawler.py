"""Breadth-first link checking over one page or a whole site.

A crawl is a FIFO worklist of :class:`PageQueueEntry` plus a visited set, both local to
one invocation. Pages are processed strictly one after another; the only concurrency is
inside a page's batch windows. Progress is an async stream of events
(:meth:`SiteCrawler.events`); :meth:`SiteCrawler.run` and :func:`check_links` adapt it to
callbacks plus a final aggregated list.
"""
import logging
from collections import deque
from typing import AsyncIterator, Callable, Deque, List, Optional, Sequence, Set, Union

import aiohttp

from link_scribe import config
from link_scribe.batches import iter_batches
from link_scribe.cancel import CancelToken
from link_scribe.errors import AllTransportsFailed, CrawlCancelled
from link_scribe.extractor import extract_links, unique_links
from link_scribe.models import BatchProgress, LinkCheckResult, PageChecked, PageFailed, PageQueueEntry
from link_scribe.transport import Transport, build_session, default_transports, fetch_page, first_success
from link_scribe.urls import has_excluded_extension, host_of, validate_start_url
from link_scribe.verifier import LinkVerifier

log = logging.getLogger(__name__)

CrawlEvent = Union[BatchProgress, PageChecked, PageFailed]


def crawlable_children(results: Sequence[LinkCheckResult], start_host: Optional[str]) -> List[str]:
    """Working links on the start host that look like HTML pages."""
    children = []
    for result in results:
        if not result.is_working:
            continue
        if host_of(result.url) != start_host:
            continue
        if has_excluded_extension(result.url):
            continue
        children.append(result.url)
    return children


class SiteCrawler:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        transports: Optional[Sequence[Transport]] = None,
        batch_size: int = config.BATCH_SIZE,
        request_timeout: float = config.REQUEST_TIMEOUT,
        page_timeout: float = config.PAGE_TIMEOUT,
        link_limit: int = config.SINGLE_PAGE_LINK_LIMIT,
    ):
        self.session = session
        self.transports = list(transports) if transports is not None else default_transports()
        self.batch_size = batch_size
        self.page_timeout = page_timeout
        self.link_limit = link_limit
        self.verifier = LinkVerifier(session, timeout=request_timeout)

    async def events(
        self,
        start_url: str,
        recursive: bool = False,
        max_depth: int = config.DEFAULT_MAX_DEPTH,
        token: Optional[CancelToken] = None,
    ) -> AsyncIterator[CrawlEvent]:
        start_url = validate_start_url(start_url)
        start_host = host_of(start_url)

        queue: Deque[PageQueueEntry] = deque([PageQueueEntry(start_url, 0)])
        visited: Set[str] = set()
        pages_checked = 0

        while queue:
            if token is not None:
                token.raise_if_cancelled()
            entry = queue.popleft()
            if entry.url in visited:
                log.debug("[SKIP] Already processed: %s", entry.url)
                continue
            visited.add(entry.url)
            log.info("Crawling: %s (Depth: %d)", entry.url, entry.depth)

            async def _fetch(transport):
                return await fetch_page(self.session, entry.url, transport, self.page_timeout, token)

            try:
                transport, html = await first_success(self.transports, _fetch, token)
            except AllTransportsFailed as e:
                log.warning("[PAGE ERROR] Could not fetch %s: %s", entry.url, e)
                yield PageFailed(
                    url=entry.url,
                    depth=entry.depth,
                    error=str(e),
                    attempts=tuple(name for name, _ in e.failures),
                )
                continue

            links = unique_links(extract_links(html, entry.url))
            if not recursive and len(links) > self.link_limit:
                log.info("Checking first %d of %d links on %s", self.link_limit, len(links), entry.url)
                links = links[:self.link_limit]

            async def _check(link, page=entry.url if recursive else None, via=transport):
                return await self.verifier.verify(link, via, source_page=page, token=token)

            page_results: List[LinkCheckResult] = []
            async for progress in iter_batches(links, _check, self.batch_size, token, page=entry.url):
                page_results.extend(progress.results)
                yield progress

            pages_checked += 1
            yield PageChecked(url=entry.url, depth=entry.depth, count=pages_checked, links_found=len(links))

            if recursive and entry.depth < max_depth and not (token is not None and token.cancelled):
                queued = 0
                for child in crawlable_children(page_results, start_host):
                    if child in visited:
                        continue
                    queue.append(PageQueueEntry(child, entry.depth + 1))
                    queued += 1
                if queued:
                    log.debug("[QUEUEING INTERNAL] %d pages at depth %d from %s", queued, entry.depth + 1, entry.url)

    async def run(
        self,
        start_url: str,
        recursive: bool = False,
        max_depth: int = config.DEFAULT_MAX_DEPTH,
        on_progress: Optional[Callable[[BatchProgress], None]] = None,
        on_page_checked: Optional[Callable[[int], None]] = None,
        on_page_failed: Optional[Callable[[PageFailed], None]] = None,
        token: Optional[CancelToken] = None,
    ) -> List[LinkCheckResult]:
        """Consume :meth:`events` and return every result.

        On cancellation the raised :class:`CrawlCancelled` carries the results committed so far.
        """
        results: List[LinkCheckResult] = []
        try:
            async for event in self.events(start_url, recursive, max_depth, token):
                if isinstance(event, BatchProgress):
                    results.extend(event.results)
                    if on_progress is not None:
                        on_progress(event)
                elif isinstance(event, PageChecked):
                    if on_page_checked is not None:
                        on_page_checked(event.count)
                elif isinstance(event, PageFailed):
                    if on_page_failed is not None:
                        on_page_failed(event)
        except CrawlCancelled as e:
            e.results = list(results)
            log.info("[CANCELLED] crawl of %s after %d results", start_url, len(results))
            raise
        return results


async def check_links(
    url: str,
    recursive: bool = False,
    max_depth: int = config.DEFAULT_MAX_DEPTH,
    on_progress: Optional[Callable[[BatchProgress], None]] = None,
    on_page_checked: Optional[Callable[[int], None]] = None,
    on_page_failed: Optional[Callable[[PageFailed], None]] = None,
    cancel_token: Optional[CancelToken] = None,
    *,
    session: Optional[aiohttp.ClientSession] = None,
    transports: Optional[Sequence[Transport]] = None,
) -> List[LinkCheckResult]:
    """Check the links of ``url`` (and, if ``recursive``, of its site up to ``max_depth``)."""
    validate_start_url(url)
    own_session = session is None
    if own_session:
        session = build_session()
    try:
        crawler = SiteCrawler(session, transports)
        return await crawler.run(
            url, recursive, max_depth,
            on_progress=on_progress,
            on_page_checked=on_page_checked,
            on_page_failed=on_page_failed,
            token=cancel_token,
        )
    finally:
        if own_session:
            await session.close()
