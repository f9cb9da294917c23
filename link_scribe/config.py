"""Tuning constants. The CLI overrides some of them per run."""

# --- Crawl ---
DEFAULT_MAX_DEPTH = 3
SINGLE_PAGE_LINK_LIMIT = 25  # single-page mode only; recursive mode checks every link
BATCH_SIZE = 3
SERVER_BATCH_SIZE = 5

# --- Timeouts (seconds, per request attempt) ---
REQUEST_TIMEOUT = 8
PAGE_TIMEOUT = 10
SERVER_TIMEOUT = 10

# --- Connection pool ---
TCP_CONNECTIONS_LIMIT = 100
LIMIT_PER_HOST = 10
CONNECTION_KEEPALIVE = 20

# Query parameter appended to verified links so intermediate caches can't answer for the target
CACHE_BUST_PARAM = "_lsc"

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
]
SERVER_USER_AGENT = "Mozilla/5.0 Link Checker (compatible; Link-Scribe/1.0)"

# Tried in order; the target URL is percent-encoded and appended to the prefix.
DEFAULT_PROXY_PREFIXES = [
    "https://api.allorigins.win/raw?url=",
    "https://corsproxy.io/?url=",
    "https://api.codetabs.com/v1/proxy?quest=",
]

# Linked files with these extensions are still verified but never crawled as pages.
EXCLUDED_EXTENSIONS = frozenset((
    # images
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".ico", ".tif", ".tiff", ".avif",
    # archives
    ".zip", ".rar", ".7z", ".tar", ".gz", ".tgz", ".bz2", ".xz",
    # audio / video
    ".mp3", ".mp4", ".wav", ".ogg", ".flac", ".aac", ".m4a", ".avi", ".mov", ".mkv", ".webm", ".wmv",
    # office documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".ods", ".odp", ".rtf",
    # feeds / data
    ".rss", ".atom", ".xml", ".json", ".csv", ".txt",
    # binaries
    ".exe", ".dmg", ".iso", ".apk",
))

# --- Server ---
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_API_BASE = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"

RESOURCE_MONITOR_INTERVAL = 5
