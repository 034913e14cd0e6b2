from __future__ import annotations

import datetime as dt
from urllib.parse import urljoin

def absolute_link(href: str, origin: str) -> str:
    href = href.strip()
    if not href or href.startswith("http"):
        return href
    return urljoin(origin.rstrip("/") + "/", href)

def utc_now() -> dt.datetime:
    # Naive UTC, matching what the store writes
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)

def iso_timestamp() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z")

def utc_snapshot_date(moment: dt.datetime | None = None) -> str:
    moment = moment or dt.datetime.now(dt.timezone.utc)
    return moment.date().isoformat()
