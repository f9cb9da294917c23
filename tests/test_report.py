from link_scribe.models import BatchProgress, LinkCheckResult, PageChecked, PageFailed
from link_scribe.report import (
    CrawlStatus,
    format_elapsed_time,
    progress_table,
    results_table,
    sort_results,
    status_banner,
)

OK = LinkCheckResult("https://site.test/a", True, 200)
BROKEN = LinkCheckResult("https://site.test/b", False, 404, "404 Not Found")


def test_status_banner_variants():
    assert status_banner([]).plain.startswith("No links found")
    assert status_banner([OK, OK]).plain == "All clear! All 2 links on this page are working properly."
    assert status_banner([OK, BROKEN]).plain == "Found 1 broken link. 1 out of 2 links on this page need attention."
    assert status_banner([BROKEN, BROKEN, OK]).plain.startswith("Found 2 broken links.")


def test_broken_links_sorted_first():
    assert sort_results([OK, BROKEN, OK]) == [BROKEN, OK, OK]


def test_results_table_shows_source_column_only_when_known():
    assert len(results_table([OK, BROKEN]).columns) == 3
    sourced = LinkCheckResult("https://site.test/c", True, 200, source_page="https://site.test/")
    table = results_table([sourced, OK])
    assert len(table.columns) == 4
    assert table.row_count == 2


def test_format_elapsed_time():
    assert format_elapsed_time(-3) == "00:00"
    assert format_elapsed_time(75) == "01:15"
    assert format_elapsed_time(3725) == "01:02:05"


def test_crawl_status_tracks_events():
    status = CrawlStatus(start_url="https://site.test/")
    status.apply(BatchProgress("https://site.test/", (OK, BROKEN), 2, 4))
    assert status.page_percent == 50.0
    status.apply(PageChecked("https://site.test/", 0, 1, 4))
    status.apply(PageFailed("https://site.test/x", 1, "All transports failed"))
    assert status.pages_checked == 1
    assert status.broken == 1
    assert len(status.pages_failed) == 1
    assert progress_table(status).row_count > 5
