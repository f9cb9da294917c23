"""HTTP endpoint wrapping the non-recursive checker.

``GET /api/check-links?url=<encoded>`` answers ``{"results": [...]}``. The server has no
cross-origin restriction, so targets are fetched directly and links are checked without
cache busting, five at a time, capped at 25 per page.
"""
import logging

import aiohttp
from aiohttp import web

from link_scribe import config
from link_scribe.batches import run_batches
from link_scribe.errors import InvalidUrlError, TransportFailure
from link_scribe.extractor import extract_links, unique_links
from link_scribe.transport import DirectTransport, build_session, fetch_page
from link_scribe.urls import validate_start_url
from link_scribe.verifier import LinkVerifier

log = logging.getLogger(__name__)

SESSION_KEY = web.AppKey("session", aiohttp.ClientSession)
SETTINGS_KEY = web.AppKey("settings", dict)


async def check_links_handler(request: web.Request) -> web.Response:
    url = request.query.get("url")
    if not url:
        return web.json_response({"error": "URL parameter is required"}, status=400)

    settings = request.app[SETTINGS_KEY]
    session = request.app[SESSION_KEY]
    transport = DirectTransport()
    try:
        validate_start_url(url)
        try:
            html = await fetch_page(session, url, transport, timeout=settings["timeout"])
        except TransportFailure as e:
            return web.json_response({"error": f"Failed to fetch the URL: {e}"}, status=400)

        links = unique_links(extract_links(html, url))[:settings["link_limit"]]
        verifier = LinkVerifier(session, timeout=settings["timeout"], cache_bust=False)

        async def _check(link):
            return await verifier.verify(link, transport)

        results = await run_batches(links, _check, batch_size=settings["batch_size"])
        return web.json_response({"results": [r.to_dict() for r in results]})
    except InvalidUrlError as e:
        return web.json_response({"error": str(e)}, status=400)
    except Exception as e:
        log.exception("Error checking links for %s", url)
        return web.json_response({"error": f"Failed to check links: {e}"}, status=500)


async def _open_session(app: web.Application):
    app[SESSION_KEY] = build_session(user_agent=config.SERVER_USER_AGENT)
    yield
    await app[SESSION_KEY].close()


def create_app(
    link_limit: int = config.SINGLE_PAGE_LINK_LIMIT,
    batch_size: int = config.SERVER_BATCH_SIZE,
    timeout: float = config.SERVER_TIMEOUT,
) -> web.Application:
    app = web.Application()
    app[SETTINGS_KEY] = {"link_limit": link_limit, "batch_size": batch_size, "timeout": timeout}
    app.cleanup_ctx.append(_open_session)
    app.router.add_get("/api/check-links", check_links_handler)
    return app


def run_server(host: str = config.DEFAULT_HOST, port: int = config.DEFAULT_PORT) -> None:
    log.info("Serving /api/check-links on http://%s:%d", host, port)
    web.run_app(create_app(), host=host, port=port, print=None)
