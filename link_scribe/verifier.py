import asyncio
import logging
from typing import Optional

import aiohttp

from link_scribe import config
from link_scribe.cancel import CancelToken, guarded
from link_scribe.models import LinkCheckResult
from link_scribe.transport import Transport
from link_scribe.urls import add_cache_buster

log = logging.getLogger(__name__)


class LinkVerifier:
    """Checks one link: HEAD first, GET if HEAD could not complete.

    Only cancellation escapes :meth:`verify`; every other failure is returned as a
    non-working :class:`LinkCheckResult`.
    """

    def __init__(self, session: aiohttp.ClientSession, timeout: float = config.REQUEST_TIMEOUT, cache_bust: bool = True):
        self.session = session
        self.timeout = timeout
        self.cache_bust = cache_bust

    async def _attempt(self, method: str, request_url: str):
        async with self.session.request(
            method,
            request_url,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            allow_redirects=True,
        ) as resp:
            return resp.status, resp.reason

    async def verify(
        self,
        url: str,
        transport: Transport,
        source_page: Optional[str] = None,
        token: Optional[CancelToken] = None,
    ) -> LinkCheckResult:
        target = add_cache_buster(url) if self.cache_bust else url
        request_url = transport.wrap(target)

        failure = None
        for method in ("HEAD", "GET"):
            if token is not None:
                token.raise_if_cancelled()
            try:
                status, reason = await guarded(self._attempt(method, request_url), token)
            except asyncio.TimeoutError:
                log.debug("[TIMEOUT] %s %s", method, url)
                failure = "Request timeout"
            except (aiohttp.ClientError, OSError, ValueError) as e:
                log.debug("[CONNECTION ERR] %s %s: %s - %s", method, url, type(e).__name__, e)
                failure = str(e) or "Connection failed"
            else:
                is_working = 200 <= status < 300
                return LinkCheckResult(
                    url=url,
                    is_working=is_working,
                    status_code=status,
                    error=None if is_working else f"{status} {reason or ''}".strip(),
                    source_page=source_page,
                )
        return LinkCheckResult(url=url, is_working=False, error=failure, source_page=source_page)
