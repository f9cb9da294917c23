"""Hyperlink extraction from raw HTML (no JavaScript rendering)."""
import html as html_lib
import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, SoupStrainer
from bs4.builder import ParserRejectedMarkup

log = logging.getLogger(__name__)

LINK_STRAINER = SoupStrainer("a", href=True)

# Textual fallback: href attribute of an <a> tag, double-, single- or un-quoted.
# The attribute must follow whitespace so data-href and similar never match.
_A_HREF_RE = re.compile(
    r"""<a\b[^>]*?\shref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
    re.IGNORECASE | re.DOTALL,
)
# Markup that never yields live anchors: comments and raw-text script/style bodies.
_INERT_RE = re.compile(
    r"<!--.*?(?:-->|\Z)|<(script|style)\b[^>]*>.*?(?:</\1\s*>|\Z)",
    re.IGNORECASE | re.DOTALL,
)


def _hrefs_structural(html: str) -> List[str]:
    soup = BeautifulSoup(html, "html.parser", parse_only=LINK_STRAINER)
    return [a.get("href") or "" for a in soup.find_all("a", href=True)]


def _hrefs_textual(html: str) -> List[str]:
    live = _INERT_RE.sub(" ", html)
    return [html_lib.unescape(next(g for g in m.groups() if g is not None)) for m in _A_HREF_RE.finditer(live)]


def resolve_href(href: str, base_url: str) -> Optional[str]:
    """Absolute URL for ``href``, or None for empty, fragment-only, javascript: or malformed targets."""
    href = (href or "").strip()
    if not href or href.startswith("#") or href.lower().startswith("javascript:"):
        return None
    try:
        return urljoin(base_url, href)
    except ValueError as e:
        log.debug("Dropping malformed href %r on %s: %s", href, base_url, e)
        return None


def extract_links(html: str, base_url: str, *, structural: bool = True) -> List[str]:
    """Absolute link targets in document order, duplicates included."""
    hrefs = None
    if structural:
        try:
            hrefs = _hrefs_structural(html)
        except ParserRejectedMarkup as e:
            log.debug("HTML parser rejected markup of %s (%s), falling back to pattern matching", base_url, e)
    if hrefs is None:
        hrefs = _hrefs_textual(html)

    links = []
    for href in hrefs:
        resolved = resolve_href(href, base_url)
        if resolved:
            links.append(resolved)
    return links


def unique_links(links: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(links))
