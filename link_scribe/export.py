import csv
import datetime
import io
from pathlib import Path
from typing import Iterable, Optional, Union

from link_scribe.models import LinkCheckResult

CSV_HEADERS = ["URL", "Status", "Status Code", "Error"]


def result_row(result: LinkCheckResult) -> list:
    return [
        result.url,
        "Working" if result.is_working else "Broken",
        "" if result.status_code is None else result.status_code,
        result.error or "",
    ]


def _write(results: Iterable[LinkCheckResult], fh) -> None:
    writer = csv.writer(fh, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(result_row(r) for r in results)


def results_to_csv(results: Iterable[LinkCheckResult]) -> str:
    buf = io.StringIO()
    _write(results, buf)
    return buf.getvalue()


def default_csv_name(today: Optional[datetime.date] = None) -> str:
    today = today or datetime.date.today()
    return f"link-check-{today.isoformat()}.csv"


def write_csv(results: Iterable[LinkCheckResult], path: Union[str, Path, None] = None) -> Path:
    path = Path(path) if path else Path(default_csv_name())
    with open(path, "w", newline='', encoding="utf-8") as csvf:
        _write(results, csvf)
    return path
