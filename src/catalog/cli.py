"""CLI entry-point for the Incident Catalog exporter.

Usage examples
--------------
# Last 30 days, interactive browser sign-in, CSV in the current directory:
python -m src.catalog

# Device-code sign-in, 7-day window, custom output directory:
python -m src.catalog --auth-mode device_code --days 7 --out-dir out

# Re-print the summary of an existing export (no sign-in):
python -m src.catalog --from-csv IncidentCatalog_WithActions_20261019_101500.csv
"""

from __future__ import annotations

import argparse
import sys

from src.catalog.pipeline import run_catalog, summarize_existing
from src.shared.config_loader import AUTH_MODES, load_config
from src.shared.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="incident-catalog",
        description="Export Microsoft Graph security incidents with alert details to CSV",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Optional YAML file with a 'catalog:' section overriding defaults.",
    )
    p.add_argument(
        "--days",
        type=int,
        default=None,
        help="Trailing window in days for createdDateTime. Default: 30",
    )
    p.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Incidents per page ($top, 1..50). Default: 50",
    )
    p.add_argument(
        "--page-delay-ms",
        type=int,
        default=None,
        help="Fixed pause between page requests, ms. Default: 100",
    )
    p.add_argument(
        "--auth-mode",
        default=None,
        choices=list(AUTH_MODES),
        help="Sign-in flow. Default: interactive",
    )
    p.add_argument("--tenant-id", default=None, help="Entra ID tenant to sign in to.")
    p.add_argument("--client-id", default=None, help="Public client (app) ID to sign in with.")
    p.add_argument(
        "--out-dir",
        default=".",
        help="Directory for the CSV export. Default: current directory",
    )
    p.add_argument(
        "--from-csv",
        default=None,
        help="Summarise an existing catalog CSV instead of querying Graph.",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )
    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.from_csv:
        sys.exit(summarize_existing(args.from_csv))

    try:
        config = load_config(
            args.config,
            overrides={
                "days": args.days,
                "page_size": args.page_size,
                "page_delay_ms": args.page_delay_ms,
                "auth_mode": args.auth_mode,
                "tenant_id": args.tenant_id,
                "client_id": args.client_id,
            },
        )
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))
    sys.exit(run_catalog(config, out_dir=args.out_dir))


if __name__ == "__main__":
    main()
