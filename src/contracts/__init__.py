"""Incident Catalog contracts — data structures shared by all modules."""

from src.contracts.alert import Alert
from src.contracts.flat_record import FLAT_RECORD_COLUMNS, FlatRecord
from src.contracts.incident import Incident

__all__ = ["FLAT_RECORD_COLUMNS", "Alert", "FlatRecord", "Incident"]
