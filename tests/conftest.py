"""Shared fixtures.

``fake_web`` is a local aiohttp server acting as a CORS proxy in front of an imaginary
internet: ``/raw?url=<encoded target>`` answers with whatever page was registered for the
target. ``/down?url=...`` is a proxy that always fails with 502.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import aiohttp
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from link_scribe.config import CACHE_BUST_PARAM
from link_scribe.transport import ProxyTransport


def strip_cache_buster(url: str) -> str:
    parsed = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != CACHE_BUST_PARAM]
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, urlencode(query), parsed.fragment))


def html_page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">{h}</a>\n' for h in hrefs)
    return f"<html><head><title>t</title></head><body>{anchors}</body></html>"


@dataclass
class FakePage:
    status: int = 200
    body: str = ""
    delay: float = 0.0
    head_delay: Optional[float] = None
    redirect_to: Optional[str] = None
    fail_get: bool = False


class FakeWeb:
    def __init__(self):
        self.pages: Dict[str, FakePage] = {}
        self.requests: List[Tuple[str, str, str]] = []  # (route, method, target)
        self.raw_queries: List[str] = []
        self.server: Optional[TestServer] = None

    def add(self, url: str, *hrefs: str, **kwargs) -> FakePage:
        if hrefs and "body" not in kwargs:
            kwargs["body"] = html_page(*hrefs)
        page = FakePage(**kwargs)
        self.pages[url] = page
        return page

    def prefix(self, route: str = "/raw") -> str:
        return f"{self.server.make_url(route)}?url="

    def proxy(self, route: str = "/raw") -> ProxyTransport:
        return ProxyTransport(self.prefix(route))

    def targets(self, route: str = "/raw", method: Optional[str] = None) -> List[str]:
        return [t for r, m, t in self.requests if r == route and (method is None or m == method)]

    async def _raw(self, request: web.Request) -> web.StreamResponse:
        self.raw_queries.append(request.query_string)
        target = strip_cache_buster(request.query.get("url", ""))
        self.requests.append(("/raw", request.method, target))
        page = self.pages.get(target)
        if page is None:
            return web.Response(status=404, text="not registered")
        delay = page.head_delay if request.method == "HEAD" and page.head_delay is not None else page.delay
        if delay:
            await asyncio.sleep(delay)
        if page.redirect_to:
            raise web.HTTPFound(self.prefix() + page.redirect_to)
        if page.fail_get and request.method == "GET":
            return web.Response(status=500)
        return web.Response(status=page.status, text=page.body, content_type="text/html")

    async def _down(self, request: web.Request) -> web.Response:
        self.requests.append(("/down", request.method, request.query.get("url", "")))
        return web.Response(status=502)

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/raw", self._raw)
        app.router.add_route("*", "/down", self._down)
        return app


@pytest_asyncio.fixture
async def fake_web():
    fake = FakeWeb()
    server = TestServer(fake.make_app())
    await server.start_server()
    fake.server = server
    try:
        yield fake
    finally:
        await server.close()


@pytest_asyncio.fixture
async def session():
    async with aiohttp.ClientSession() as s:
        yield s
