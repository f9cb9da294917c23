import json
import logging
from typing import List, Optional

import aiohttp

from link_scribe.errors import ApiError, ProtocolError
from link_scribe.models import LinkCheckResult

log = logging.getLogger(__name__)


async def fetch_remote_results(
    api_base: str,
    url: str,
    session: Optional[aiohttp.ClientSession] = None,
    timeout: float = 60,
) -> List[LinkCheckResult]:
    """Ask a running server to check ``url``.

    A non-2xx answer raises :class:`ApiError`; a body that is not JSON with a ``results``
    list raises :class:`ProtocolError`. Neither is retried.
    """
    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()
    try:
        async with session.get(
            f"{api_base.rstrip('/')}/api/check-links",
            params={"url": url},
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            if not 200 <= resp.status < 300:
                raise ApiError(f"Error: {resp.status}", status=resp.status)
            # Read as text first: a misrouted request may come back as an HTML page.
            text = await resp.text()
    finally:
        if own_session:
            await session.close()

    try:
        data = json.loads(text)
    except ValueError as e:
        log.error("Invalid JSON response, received: %s...", text[:200])
        raise ProtocolError("Invalid JSON response") from e
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise ProtocolError("Response has no results array")
    try:
        return [LinkCheckResult.from_dict(item) for item in data["results"]]
    except (KeyError, TypeError) as e:
        raise ProtocolError(f"Malformed result entry: {e}") from e
