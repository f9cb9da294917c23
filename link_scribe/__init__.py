"""
Broken link checker: verifies every link on a page, or breadth-first across a site up to
a depth limit, routing requests through fallback CORS proxies.
"""
from link_scribe.cancel import CancelToken
from link_scribe.crawler import SiteCrawler, check_links
from link_scribe.errors import CrawlCancelled, InvalidUrlError, LinkScribeError
from link_scribe.models import BatchProgress, LinkCheckResult, PageChecked, PageFailed

__version__ = "1.0.0"
__all__ = [
    "check_links", "SiteCrawler", "CancelToken",
    "LinkCheckResult", "BatchProgress", "PageChecked", "PageFailed",
    "LinkScribeError", "CrawlCancelled", "InvalidUrlError",
]
