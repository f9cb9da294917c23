"""Command-line interface: ``link-scribe check|serve|remote``."""
import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from rich.console import Console
from rich.live import Live

from link_scribe import config
from link_scribe.cancel import CancelToken
from link_scribe.client import fetch_remote_results
from link_scribe.crawler import SiteCrawler
from link_scribe.errors import ApiError, CrawlCancelled, InvalidUrlError
from link_scribe.export import write_csv
from link_scribe.log import configure_logging, console, monitor_resources
from link_scribe.models import LinkCheckResult
from link_scribe.report import CrawlStatus, progress_table, results_table, status_banner
from link_scribe.server import run_server
from link_scribe.transport import DirectTransport, build_session, default_transports
from link_scribe.urls import ensure_scheme, validate_start_url

EXIT_OK = 0
EXIT_BROKEN = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130

out = Console()


def _export(results: List[LinkCheckResult], csv_arg: Optional[str]) -> None:
    if csv_arg is None:
        return
    if not results:
        console.print("No links checked, CSV not written.", style="yellow"); return
    path = write_csv(results, csv_arg or None)
    console.print(f"CSV export: [blue]{path}[/blue]")


async def run_check(args) -> int:
    url = validate_start_url(ensure_scheme(args.url))
    transports = [DirectTransport()] if args.direct else default_transports(args.proxy)
    token = CancelToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel, "Interrupted by user")
        sigint_installed = True
    except (NotImplementedError, RuntimeError):
        sigint_installed = False  # Windows: Ctrl+C falls back to KeyboardInterrupt

    status = CrawlStatus(start_url=url, phase="Site Crawl" if args.recursive else "Single Page")
    res_mon_task = asyncio.create_task(monitor_resources()) if args.verbose else None
    cancelled = None
    try:
        async with build_session() as session:
            crawler = SiteCrawler(session, transports, batch_size=args.batch_size, request_timeout=args.timeout)
            with Live(progress_table(status), console=console, auto_refresh=False) as live:
                try:
                    async for event in crawler.events(url, args.recursive, args.max_depth, token):
                        status.apply(event)
                        live.update(progress_table(status), refresh=True)
                    status.phase = "Done"
                except CrawlCancelled as e:
                    cancelled = e
                    status.phase = "Cancelled"
                live.update(progress_table(status), refresh=True)
    finally:
        if sigint_installed:
            loop.remove_signal_handler(signal.SIGINT)
        if res_mon_task:
            res_mon_task.cancel()
            await asyncio.gather(res_mon_task, return_exceptions=True)

    for failure in status.pages_failed:
        console.print(f"[PAGE ERROR] {failure.url}: {failure.error}", style="red", markup=False)
    if status.results:
        out.print(results_table(status.results))
    _export(status.results, args.csv)

    if cancelled is not None:
        console.print(f"[CANCELLED] {cancelled.reason}. {len(status.results)} links checked before stopping.",
                      style="bold yellow", markup=False)
        return EXIT_CANCELLED
    if status.pages_checked == 0 and status.pages_failed:
        console.print(f"[ERROR] Failed to fetch {url} through any proxy.", style="bold red", markup=False)
        return EXIT_ERROR
    out.print(status_banner(status.results))
    return EXIT_BROKEN if status.broken else EXIT_OK


async def run_remote(args) -> int:
    url = validate_start_url(ensure_scheme(args.url))
    results = await fetch_remote_results(args.api, url)
    if results:
        out.print(results_table(results))
    out.print(status_banner(results))
    _export(results, args.csv)
    return EXIT_BROKEN if any(not r.is_working for r in results) else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="link-scribe", description="Check a webpage (or its whole site) for broken links.")
    parser.add_argument('--verbose', action='store_true', help='Verbose output.')
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Check the links of a page, optionally crawling its site.")
    check.add_argument('url', help='Page URL (e.g., example.com or https://example.com/page)')
    check.add_argument('--recursive', '-r', action='store_true', help='Follow same-domain links and check their pages too.')
    check.add_argument('--max-depth', type=int, default=config.DEFAULT_MAX_DEPTH,
                       help=f'Max page hops from the start URL when recursive (def: {config.DEFAULT_MAX_DEPTH})')
    check.add_argument('--batch-size', type=int, default=config.BATCH_SIZE,
                       help=f'Concurrent link checks per batch (def: {config.BATCH_SIZE})')
    check.add_argument('--timeout', type=float, default=config.REQUEST_TIMEOUT,
                       help=f'Per-request timeout (def: {config.REQUEST_TIMEOUT}s)')
    route = check.add_mutually_exclusive_group()
    route.add_argument('--direct', action='store_true', help='Fetch targets directly instead of through CORS proxies.')
    route.add_argument('--proxy', action='append', metavar='PREFIX',
                       help='Proxy prefix to try, in order; repeatable (def: built-in public proxies).')
    check.add_argument('--csv', nargs='?', const='', default=None, metavar='PATH',
                       help='Export results as CSV (def file: link-check-YYYY-MM-DD.csv).')

    serve = sub.add_parser("serve", help="Run the /api/check-links HTTP endpoint.")
    serve.add_argument('--host', default=config.DEFAULT_HOST)
    serve.add_argument('--port', type=int, default=config.DEFAULT_PORT)

    remote = sub.add_parser("remote", help="Check a page through a running link-scribe server.")
    remote.add_argument('url')
    remote.add_argument('--api', default=config.DEFAULT_API_BASE, help=f'Server base URL (def: {config.DEFAULT_API_BASE})')
    remote.add_argument('--csv', nargs='?', const='', default=None, metavar='PATH')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "serve":
        run_server(args.host, args.port)
        return EXIT_OK
    if args.command == "check" and args.batch_size < 1:
        console.print("[ERROR] --batch-size must be at least 1.", style="bold red", markup=False)
        return EXIT_ERROR

    runner = run_check if args.command == "check" else run_remote
    try:
        return asyncio.run(runner(args))
    except InvalidUrlError as e:
        console.print(f"[ERROR] {e}", style="bold red", markup=False)
        return EXIT_ERROR
    except ApiError as e:
        console.print(f"[ERROR] Failed to check links: {e}", style="bold red", markup=False)
        return EXIT_ERROR
    except KeyboardInterrupt:
        console.print("\n[INTERRUPTED] Link check shut down by user.", style="bold yellow", markup=False)
        return EXIT_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
