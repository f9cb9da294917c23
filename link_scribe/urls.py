import re
import time
from typing import Optional
from urllib.parse import urlparse, urlunparse

from link_scribe.config import CACHE_BUST_PARAM, EXCLUDED_EXTENSIONS
from link_scribe.errors import InvalidUrlError

_HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def ensure_scheme(url_str: str, default_scheme="https://") -> str:
    """Prefix schemeless input such as ``example.com/page`` with ``https://``."""
    url_str = url_str.strip()
    if url_str and not _HTTP_SCHEME_RE.match(url_str):
        url_str_no_proto_relative = url_str.lstrip('/')
        return f"{default_scheme.rstrip(':/')}://{url_str_no_proto_relative}"
    return url_str


def validate_start_url(url: str) -> str:
    if not url or not url.strip():
        raise InvalidUrlError(url, "empty")
    url = url.strip()
    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e
    if parsed.scheme.lower() not in ("http", "https"):
        raise InvalidUrlError(url, "scheme must be http or https")
    if not parsed.hostname:
        raise InvalidUrlError(url, "missing host")
    return url


_DEFAULT_PORTS = {"http": 80, "https": 443}


def host_of(url: str) -> Optional[str]:
    """Lowercased hostname, with ``:port`` only when it differs from the scheme's default.

    Credentials are ignored, so ``user@site.test`` and ``site.test:443`` (over https)
    both map to ``site.test``.
    """
    try:
        parsed = urlparse(url)
        hostname, port = parsed.hostname, parsed.port
    except ValueError:
        return None
    if not hostname:
        return None
    if port is None or port == _DEFAULT_PORTS.get(parsed.scheme.lower()):
        return hostname
    return f"{hostname}:{port}"


def has_excluded_extension(url: str) -> bool:
    path_lower = (urlparse(url).path or "").lower()
    return any(path_lower.endswith(ext) for ext in EXCLUDED_EXTENSIONS)


def add_cache_buster(url: str, now_ms: Optional[int] = None) -> str:
    """Append ``_lsc=<epoch ms>`` to the query; the fragment is dropped since it never reaches the server."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    parsed = urlparse(url)
    query = f"{parsed.query}&" if parsed.query else ""
    query += f"{CACHE_BUST_PARAM}={now_ms}"
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, query, ""))
