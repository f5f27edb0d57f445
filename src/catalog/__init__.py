"""Incident Catalog — Graph security incidents to a flat CSV.

Modules
───────
  transform — Incident + Alerts → FlatRecord (per-incident isolation)
  exporter  — write / read IncidentCatalog_WithActions_*.csv
  summary   — severity / status / classification breakdowns
  pipeline  — connect → fetch → flatten → export → summary → close
  cli       — argparse entry-point
"""
