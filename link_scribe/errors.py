"""Exception hierarchy.

Link- and page-level failures never surface here as exceptions to the caller of a
crawl: broken links become ``LinkCheckResult`` records and unreachable pages become
``PageFailed`` events. What does reach the caller is cancellation, malformed input,
and failures of the remote API.
"""
from typing import List, Optional, Sequence, Tuple


class LinkScribeError(Exception):
    pass


class CrawlCancelled(LinkScribeError):
    """The shared cancel token fired.

    ``results`` holds whatever had been committed before the cancellation was observed;
    it is filled in by the top-level crawl call.
    """

    def __init__(self, reason: Optional[str] = None, results: Optional[list] = None):
        self.reason = reason or "Operation cancelled"
        self.results = list(results or [])
        super().__init__(self.reason)


class InvalidUrlError(LinkScribeError, ValueError):
    def __init__(self, url: str, detail: str = "not a valid http(s) URL"):
        self.url = url
        super().__init__(f"Invalid URL {url!r}: {detail}")


class TransportFailure(LinkScribeError):
    """A single fetch attempt through one transport did not produce a usable page."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class AllTransportsFailed(TransportFailure):
    def __init__(self, failures: Sequence[Tuple[str, TransportFailure]]):
        self.failures: List[Tuple[str, TransportFailure]] = list(failures)
        if self.failures:
            detail = "; ".join(f"{name}: {exc}" for name, exc in self.failures)
        else:
            detail = "no transports configured"
        super().__init__(f"All transports failed ({detail})")


class ApiError(LinkScribeError):
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class ProtocolError(ApiError):
    """The API answered, but not with a JSON body holding a ``results`` array."""
