"""Flattening transform: Incident + nested Alerts → FlatRecord.

Per-field rules
───────────────
  AlertCount            number of nested alerts
  AlertTypes            distinct non-empty titles, first occurrence first
  MitreTechniques       distinct non-empty technique ids across all alerts
  RecommendedActions    distinct non-empty action texts across all alerts

Empty or missing values are dropped *before* deduplication, so they
never contribute to any count.  Distinct means plain string equality.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from src.contracts.flat_record import (
    ALERT_TYPES_SEPARATOR,
    MITRE_SEPARATOR,
    RECOMMENDED_ACTIONS_SEPARATOR,
    FlatRecord,
)
from src.contracts.incident import Incident

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SkippedIncident:
    incident_id: str
    reason: str


@dataclass
class FlattenResult:
    """Outcome of flattening a batch: kept records plus skipped incidents."""

    records: list[FlatRecord] = field(default_factory=list)
    skipped: list[SkippedIncident] = field(default_factory=list)


def _distinct(values: Iterable[str]) -> list[str]:
    """Non-empty values, deduplicated, in order of first occurrence."""
    return list(dict.fromkeys(v for v in values if v))


def flatten_incident(incident: Incident) -> FlatRecord:
    alerts = incident.alerts
    titles = _distinct(a.title for a in alerts)
    techniques = _distinct(t for a in alerts for t in a.mitre_techniques)
    actions = _distinct(a.recommended_actions for a in alerts)

    return FlatRecord(
        incident_id=incident.incident_id,
        tenant_id=incident.tenant_id,
        display_name=incident.display_name,
        severity=incident.severity,
        status=incident.status,
        classification=incident.classification,
        determination=incident.determination,
        created=incident.created,
        last_updated=incident.last_updated,
        web_url=incident.web_url,
        alert_count=len(alerts),
        alert_types=ALERT_TYPES_SEPARATOR.join(titles),
        mitre_techniques=MITRE_SEPARATOR.join(techniques),
        mitre_technique_count=len(techniques),
        has_recommended_actions=bool(actions),
        recommended_actions_count=len(actions),
        recommended_actions=RECOMMENDED_ACTIONS_SEPARATOR.join(actions),
    )


def flatten_payload(payload: dict[str, Any]) -> FlatRecord:
    """Parse a raw Graph incident object and flatten it."""
    return flatten_incident(Incident.from_graph(payload))


def _payload_id(payload: Any) -> str:
    if isinstance(payload, dict) and payload.get("id"):
        return str(payload["id"])
    return "<unknown>"


def flatten_all(
    payloads: Iterable[dict[str, Any]],
    progress_every: int = 10,
) -> FlattenResult:
    """Flatten every payload; a bad incident is logged and skipped.

    Records keep the order of *payloads*.
    """
    result = FlattenResult()
    seen = 0
    for payload in payloads:
        seen += 1
        try:
            result.records.append(flatten_payload(payload))
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            incident_id = _payload_id(payload)
            log.warning("Skipping incident %s: %s", incident_id, exc)
            result.skipped.append(SkippedIncident(incident_id, str(exc)))
        if progress_every > 0 and seen % progress_every == 0:
            log.info("Processed %d incidents", seen)

    log.info(
        "Flattened %d incidents (%d skipped)", len(result.records), len(result.skipped)
    )
    return result
