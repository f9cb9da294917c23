import asyncio
import logging

import psutil
from rich.console import Console
from rich.logging import RichHandler

from link_scribe import config

# Logs and live status go to stderr so stdout stays clean for tables and CSV.
console = Console(stderr=True)

log = logging.getLogger("link_scribe")


def configure_logging(verbose: bool = False) -> None:
    handler = RichHandler(console=console, show_path=False, markup=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    log.handlers.clear()
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)
    log.propagate = False
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


async def monitor_resources(interval: float = config.RESOURCE_MONITOR_INTERVAL):
    """Log CPU, memory and open connections until cancelled."""
    p = psutil.Process()
    while True:
        memory_info = psutil.virtual_memory(); cpu_percent = psutil.cpu_percent(interval=None)
        try:
            open_conns = len(p.net_connections(kind='inet')) if hasattr(p, "net_connections") else len(p.connections(kind='inet'))
        except psutil.Error as e:
            log.debug("[RESOURCE] could not read connections: %s", e)
            open_conns = -1
        log.info("[RESOURCE] CPU: %.1f%%, Memory: %.1f%% used, NetConns: %d", cpu_percent, memory_info.percent, open_conns)
        await asyncio.sleep(interval)
