"""Paginated retrieval of ``/security/incidents`` with nested alerts."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol
from urllib.parse import quote

import requests

from src.shared.config_loader import GRAPH_BASE_URL
from src.shared.errors import FetchError

log = logging.getLogger(__name__)

FILTER_TS_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
NEXT_LINK_KEY = "@odata.nextLink"


class JsonClient(Protocol):
    def get_json(self, url: str) -> dict[str, Any]: ...


def since_window(days: int, now: datetime | None = None) -> datetime:
    """Return the lower creation-time bound: *now* (UTC) minus *days*."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC) - timedelta(days=days)


def build_first_page_url(
    since: datetime,
    page_size: int = 50,
    expand_alerts: bool = True,
    base_url: str = GRAPH_BASE_URL,
) -> str:
    """Build the first-page URL; later pages come from ``@odata.nextLink``."""
    params: dict[str, str] = {"$top": str(page_size)}
    if expand_alerts:
        params["$expand"] = "alerts"
    params["$filter"] = f"createdDateTime ge {since.astimezone(UTC).strftime(FILTER_TS_FORMAT)}"
    query = "&".join(f"{k}={quote(v, safe=':')}" for k, v in params.items())
    return f"{base_url.rstrip('/')}/security/incidents?{query}"


def fetch_incidents(
    client: JsonClient,
    since: datetime,
    page_size: int = 50,
    expand_alerts: bool = True,
    page_delay_sec: float = 0.1,
    base_url: str = GRAPH_BASE_URL,
    sleep: Callable[[float], None] = time.sleep,
) -> list[dict[str, Any]]:
    """Follow ``@odata.nextLink`` until the server stops returning one.

    Items are returned in page order and, within a page, in server order.
    There is no page cap: termination is up to the server.

    Raises:
        FetchError: On any transport, HTTP or envelope error. Pages read
            so far are discarded.
    """
    url: str | None = build_first_page_url(since, page_size, expand_alerts, base_url)
    items: list[dict[str, Any]] = []
    page = 0

    while url:
        page += 1
        log.debug("GET %s", url)
        try:
            envelope = client.get_json(url)
        except requests.RequestException as exc:
            raise FetchError(f"Request for page {page} failed: {exc}", page=page) from exc
        except FetchError as exc:
            raise FetchError(f"Page {page}: {exc}", page=page) from exc

        page_items = envelope.get("value")
        if page_items is None:
            page_items = []
        if not isinstance(page_items, list):
            raise FetchError(
                f"Page {page}: 'value' must be a list, got {type(page_items).__name__}",
                page=page,
            )
        items.extend(page_items)
        print(f"  Page {page}: +{len(page_items)} incidents (total {len(items)})")

        next_link = envelope.get(NEXT_LINK_KEY)
        if next_link is not None and not isinstance(next_link, str):
            raise FetchError(f"Page {page}: {NEXT_LINK_KEY} must be a string", page=page)
        url = next_link or None
        if url:
            sleep(page_delay_sec)

    log.info("Fetched %d incidents in %d page(s)", len(items), page)
    return items
