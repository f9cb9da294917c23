from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

StatusCode = Union[int, str]


@dataclass(frozen=True)
class LinkCheckResult:
    """Outcome of verifying one link.

    ``error`` is set exactly when ``is_working`` is false. ``status_code`` is missing when
    the request never produced an HTTP response (timeout, DNS, refused connection).
    """
    url: str
    is_working: bool
    status_code: Optional[StatusCode] = None
    error: Optional[str] = None
    source_page: Optional[str] = None

    def to_dict(self) -> dict:
        """Wire shape used by the HTTP API: camelCase keys, absent fields omitted."""
        data = {"url": self.url, "isWorking": self.is_working}
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        if self.error is not None:
            data["error"] = self.error
        if self.source_page is not None:
            data["sourcePage"] = self.source_page
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LinkCheckResult":
        return cls(
            url=str(data["url"]),
            is_working=bool(data["isWorking"]),
            status_code=data.get("statusCode"),
            error=data.get("error"),
            source_page=data.get("sourcePage"),
        )


@dataclass(frozen=True)
class PageQueueEntry:
    url: str
    depth: int


# --- Crawl progress events ---

@dataclass(frozen=True)
class BatchProgress:
    """One finished batch window of link checks on ``page``."""
    page: Optional[str]
    results: Tuple[LinkCheckResult, ...]
    completed: int
    total: int

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return round(self.completed * 100.0 / self.total, 1)


@dataclass(frozen=True)
class PageChecked:
    url: str
    depth: int
    count: int  # pages checked so far in this crawl, this one included
    links_found: int = 0


@dataclass(frozen=True)
class PageFailed:
    url: str
    depth: int
    error: str
    attempts: Tuple[str, ...] = field(default_factory=tuple)
