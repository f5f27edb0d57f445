"""Pipeline — orchestrator: connect -> fetch -> flatten -> export -> summary.

The Graph session is opened once and closed in ``finally`` on every path
that reached it, including fetch failures and unexpected errors while
flattening or exporting.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from src.catalog.exporter import export_catalog, load_catalog, records_from_frame
from src.catalog.summary import print_summary, summarize
from src.catalog.transform import flatten_all
from src.collector.fetch import fetch_incidents, since_window
from src.collector.session import close_session, connect
from src.shared.config_loader import CatalogConfig
from src.shared.errors import AuthenticationError, FetchError

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def run_catalog(
    config: CatalogConfig,
    out_dir: str | Path = ".",
    connect_fn: Callable[[CatalogConfig], Any] = connect,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Execute the full export and return the process exit code."""
    print(f"Connecting to Microsoft Graph (scope: {config.scope}) ...")
    try:
        session = connect_fn(config)
    except AuthenticationError as exc:
        log.error("%s", exc)
        print(f"ERROR: {exc}")
        return EXIT_FAILURE

    try:
        print(f"Connected as {session.account} (tenant {session.tenant_id})")
        since = since_window(config.days, now)
        print(f"Fetching incidents created since {since:%Y-%m-%d %H:%M:%S} UTC ...")
        try:
            payloads = fetch_incidents(
                session,
                since,
                page_size=config.page_size,
                expand_alerts=config.expand_alerts,
                page_delay_sec=config.page_delay_sec,
                base_url=config.base_url,
                sleep=sleep,
            )
        except FetchError as exc:
            log.error("Incident fetch failed: %s", exc)
            print(f"ERROR: failed to retrieve incidents: {exc}")
            return EXIT_FAILURE
        print(f"Retrieved {len(payloads)} incidents")

        result = flatten_all(payloads, progress_every=config.progress_every)
        if result.skipped:
            print(f"WARNING: skipped {len(result.skipped)} incident(s):")
            for s in result.skipped:
                print(f"  {s.incident_id}: {s.reason}")

        export_catalog(result.records, out_dir=out_dir, now=now)
        print_summary(summarize(result.records))
        return EXIT_OK
    finally:
        close_session(session)


def summarize_existing(path: str | Path) -> int:
    """Print the summary of a previously exported catalog without network access."""
    try:
        df = load_catalog(path)
    except (OSError, ValueError) as exc:
        log.error("Cannot read catalog %s: %s", path, exc)
        print(f"ERROR: cannot read catalog {path}: {exc}")
        return EXIT_FAILURE
    print_summary(summarize(records_from_frame(df)))
    return EXIT_OK
