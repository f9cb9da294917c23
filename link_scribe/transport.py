"""Outbound request routing.

Every fetch goes through a :class:`Transport`, which turns a target URL into the URL
actually requested. In the browser-facing deployment that is one of several public
CORS proxies, tried in order until one works (:func:`first_success`); the winner is then
reused for all link checks of that page.
"""
import asyncio
import logging
import random
import ssl
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar
from urllib.parse import quote

import aiohttp

from link_scribe import config
from link_scribe.cancel import CancelToken, guarded
from link_scribe.errors import AllTransportsFailed, TransportFailure

log = logging.getLogger(__name__)

C = TypeVar("C")
T = TypeVar("T")


class Transport:
    name = "transport"

    def wrap(self, target: str) -> str:
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class DirectTransport(Transport):
    name = "direct"

    def wrap(self, target: str) -> str:
        return target


class ProxyTransport(Transport):
    """``prefix`` + percent-encoded target, e.g. ``https://api.allorigins.win/raw?url=``."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        self.name = prefix

    def wrap(self, target: str) -> str:
        return self.prefix + quote(target, safe="")


def default_transports(prefixes: Optional[Sequence[str]] = None) -> List[Transport]:
    if prefixes is None:
        prefixes = config.DEFAULT_PROXY_PREFIXES
    return [ProxyTransport(p) for p in prefixes]


async def first_success(
    candidates: Sequence[C],
    attempt: Callable[[C], Awaitable[T]],
    token: Optional[CancelToken] = None,
) -> Tuple[C, T]:
    """Run ``attempt`` for each candidate in order and keep the first that doesn't fail.

    Only :class:`TransportFailure` moves on to the next candidate; cancellation and
    anything unexpected propagate.
    """
    failures = []
    for candidate in candidates:
        if token is not None:
            token.raise_if_cancelled()
        try:
            return candidate, await attempt(candidate)
        except TransportFailure as e:
            name = getattr(candidate, "name", None) or str(candidate)
            log.debug("transport %s failed: %s", name, e)
            failures.append((name, e))
    raise AllTransportsFailed(failures)


async def fetch_page(
    session: aiohttp.ClientSession,
    url: str,
    transport: Transport,
    timeout: float = config.PAGE_TIMEOUT,
    token: Optional[CancelToken] = None,
) -> str:
    """GET ``url`` through ``transport`` and return its body.

    Raises :class:`TransportFailure` on a non-2xx status or any transport error.
    """
    async def _get():
        async with session.get(
            transport.wrap(url),
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=True,
        ) as resp:
            if not 200 <= resp.status < 300:
                raise TransportFailure(f"{resp.status} {resp.reason or ''}".strip(), status=resp.status)
            return await resp.text(errors="replace")

    try:
        return await guarded(_get(), token)
    except asyncio.TimeoutError as e:
        raise TransportFailure("Request timeout") from e
    except aiohttp.ClientError as e:
        raise TransportFailure(str(e) or type(e).__name__) from e


def get_realistic_headers(user_agent: Optional[str] = None) -> dict:
    """Common browser headers. Host and Connection are left to aiohttp."""
    return {
        "User-Agent": user_agent or random.choice(config.USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
        "Upgrade-Insecure-Requests": "1",
    }


def build_ssl_context() -> ssl.SSLContext:
    ssl_context = ssl.create_default_context()
    # Broader cipher support avoids spurious ClientOSError on older servers.
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    ssl_context.set_ciphers('DEFAULT@SECLEVEL=1')
    return ssl_context


def build_session(user_agent: Optional[str] = None, limit: int = config.TCP_CONNECTIONS_LIMIT) -> aiohttp.ClientSession:
    """Must be called from a running event loop; the caller owns (and closes) the session."""
    conn = aiohttp.TCPConnector(
        limit_per_host=config.LIMIT_PER_HOST,
        limit=limit,
        keepalive_timeout=config.CONNECTION_KEEPALIVE,
        ssl=build_ssl_context(),
    )
    return aiohttp.ClientSession(connector=conn, headers=get_realistic_headers(user_agent=user_agent))
