"""Terminal presentation: live crawl status, results table, summary banner."""
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import psutil
from rich.table import Table
from rich.text import Text

from link_scribe.models import BatchProgress, LinkCheckResult, PageChecked, PageFailed


def format_elapsed_time(seconds: float) -> str:
    if seconds < 0: seconds = 0
    h = int(seconds // 3600); m = int((seconds % 3600) // 60); s = int(seconds % 60)
    return f"{h:02d}:{m:02d}:{s:02d}" if h > 0 else f"{m:02d}:{s:02d}"


@dataclass
class CrawlStatus:
    """Running totals fed from the crawl event stream."""
    start_url: str
    started_at: float = field(default_factory=time.time)
    phase: str = "Initializing..."
    pages_checked: int = 0
    pages_failed: List[PageFailed] = field(default_factory=list)
    results: List[LinkCheckResult] = field(default_factory=list)
    current_page: Optional[str] = None
    page_percent: float = 0.0

    @property
    def broken(self) -> int:
        return sum(1 for r in self.results if not r.is_working)

    def apply(self, event) -> None:
        if isinstance(event, BatchProgress):
            self.results.extend(event.results)
            self.current_page = event.page
            self.page_percent = event.percent
        elif isinstance(event, PageChecked):
            self.pages_checked = event.count
            self.current_page = event.url
            self.page_percent = 100.0
        elif isinstance(event, PageFailed):
            self.pages_failed.append(event)


def progress_table(status: CrawlStatus) -> Table:
    table = Table(title=f"Link Check Status - {status.phase}")
    table.add_column("Statistic", style="cyan", no_wrap=True); table.add_column("Value", style="magenta", justify="right")
    table.add_row("Start URL", status.start_url)
    table.add_row("Elapsed", format_elapsed_time(time.time() - status.started_at), style="yellow")
    table.add_row("--------------------", "----------")
    table.add_row("Pages Checked", str(status.pages_checked))
    failed = len(status.pages_failed)
    table.add_row("Pages Failed", Text(str(failed), style="bold red" if failed else "green"))
    table.add_row("Links Checked", str(len(status.results)))
    table.add_row("Broken Links", Text(str(status.broken), style="bold red" if status.broken else "green"))
    table.add_row("Current Page", status.current_page or "-")
    table.add_row("Page Progress", f"{status.page_percent:.0f}%")
    try:
        table.add_row("CPU Usage", f"{psutil.cpu_percent(interval=None):.1f}%")
        table.add_row("Memory Usage", f"{psutil.virtual_memory().percent:.1f}%")
    except psutil.Error:
        table.add_row("CPU/Memory", "Error fetching")
    return table


def sort_results(results: Sequence[LinkCheckResult]) -> List[LinkCheckResult]:
    """Broken links first; stable otherwise."""
    return sorted(results, key=lambda r: r.is_working)


def results_table(results: Sequence[LinkCheckResult], show_source: Optional[bool] = None) -> Table:
    if show_source is None:
        show_source = any(r.source_page for r in results)
    table = Table(title="Results")
    table.add_column("Link URL", overflow="fold")
    table.add_column("Status", no_wrap=True)
    table.add_column("Details")
    if show_source:
        table.add_column("Found On", overflow="fold")
    for r in sort_results(results):
        if r.is_working:
            status = Text("OK", style="green")
            details = Text(str(r.status_code or ""), style="dim")
        else:
            status = Text("Broken", style="bold red")
            details = Text(f"{r.status_code or ''} {r.error or 'Connection failed'}".strip(), style="red")
        row = [r.url, status, details]
        if show_source:
            row.append(r.source_page or "")
        table.add_row(*row)
    return table


def status_banner(results: Sequence[LinkCheckResult]) -> Text:
    if not results:
        return Text("No links found. We didn't find any links on the page. Check the URL and try again.", style="blue")
    broken = sum(1 for r in results if not r.is_working)
    total = len(results)
    if broken == 0:
        return Text(f"All clear! All {total} links on this page are working properly.", style="bold green")
    plural = "s" if broken > 1 else ""
    return Text(f"Found {broken} broken link{plural}. {broken} out of {total} links on this page need attention.", style="bold yellow")
