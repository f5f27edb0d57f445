"""Export: запис каталогу інцидентів у CSV та зворотне читання."""

from __future__ import annotations

import csv
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

import pandas as pd

from src.contracts.flat_record import FLAT_RECORD_COLUMNS, FlatRecord

log = logging.getLogger(__name__)

CATALOG_PREFIX = "IncidentCatalog_WithActions_"
CATALOG_TS_FORMAT = "%Y%m%d_%H%M%S"


def catalog_filename(now: datetime | None = None) -> str:
    """Return ``IncidentCatalog_WithActions_<YYYYMMDD_HHMMSS>.csv``."""
    now = now or datetime.now()
    return f"{CATALOG_PREFIX}{now.strftime(CATALOG_TS_FORMAT)}.csv"


def _atomic_write_rows(path: Path, rows: list[list[str]]) -> None:
    """Атомарно записує CSV рядки у файл path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        # newline="" keeps embedded newlines of quoted fields untouched;
        # the default \r\n terminator makes the writer quote any field holding \r
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerows(rows)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def write_catalog_csv(records: list[FlatRecord], path: str | Path) -> Path:
    """Write *records* with a FLAT_RECORD_COLUMNS header.

    Raises:
        OSError: If the file cannot be written.
    """
    target = Path(path)
    rows = [list(FLAT_RECORD_COLUMNS)]
    rows.extend(r.to_row() for r in records)
    _atomic_write_rows(target, rows)
    log.info("Wrote catalog → %s (%d rows)", target, len(records))
    return target


def export_catalog(
    records: list[FlatRecord],
    out_dir: str | Path = ".",
    now: datetime | None = None,
) -> Path | None:
    """Write the timestamped catalog into *out_dir*.

    A write failure is reported and ``None`` is returned so the summary
    can still be printed from memory.
    """
    path = Path(out_dir) / catalog_filename(now)
    try:
        write_catalog_csv(records, path)
    except OSError as exc:
        log.error("Failed to write catalog %s: %s", path, exc)
        print(f"Export failed: {exc}")
        return None
    print(f"Exported {len(records)} incidents -> {path}")
    return path


def load_catalog(path: str | Path) -> pd.DataFrame:
    """Read an exported catalog; every cell stays a string, blanks stay ``""``."""
    df = pd.read_csv(
        path,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8",
    )
    missing = [c for c in FLAT_RECORD_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Not an incident catalog, missing columns: {', '.join(missing)}")
    log.info("Loaded catalog %s (%d rows)", path, len(df))
    return df


def records_from_frame(df: pd.DataFrame) -> list[FlatRecord]:
    return [FlatRecord.from_row(row) for row in df.to_dict(orient="records")]
