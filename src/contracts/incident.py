"""Incident data-class — a Graph security incident with its nested Alerts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.contracts.alert import Alert

# Graph property → Incident attribute
_GRAPH_FIELDS = {
    "tenantId": "tenant_id",
    "displayName": "display_name",
    "severity": "severity",
    "status": "status",
    "classification": "classification",
    "determination": "determination",
    "createdDateTime": "created",
    "lastUpdateDateTime": "last_updated",
    "incidentWebUrl": "web_url",
}


@dataclass(frozen=True, slots=True)
class Incident:
    """A security incident as returned by ``GET /security/incidents``.

    Every scalar is kept as the raw string the API sent; absent or null
    values become ``""``.  Enum-like fields (severity, status,
    classification, determination) are not validated so that values
    added to the API later pass through unchanged.
    """

    incident_id: str
    tenant_id: str = ""
    display_name: str = ""
    severity: str = ""  # informational | low | medium | high | ...
    status: str = ""  # active | resolved | inProgress | ...
    classification: str = ""
    determination: str = ""
    created: str = ""  # ISO-8601, createdDateTime
    last_updated: str = ""  # ISO-8601, lastUpdateDateTime
    web_url: str = ""
    alerts: tuple[Alert, ...] = ()

    @classmethod
    def from_graph(cls, payload: Any) -> Incident:
        """Build an Incident from a Graph ``incident`` object.

        Raises:
            ValueError: If the payload has no ``id`` or a malformed ``alerts`` field.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"incident must be an object, got {type(payload).__name__}")

        incident_id = payload.get("id")
        if incident_id is None or str(incident_id) == "":
            raise ValueError("incident has no id")

        raw_alerts = payload.get("alerts")
        if raw_alerts is None:
            raw_alerts = []
        if not isinstance(raw_alerts, list):
            raise ValueError(f"alerts must be a list, got {type(raw_alerts).__name__}")

        scalars = {
            attr: "" if payload.get(key) is None else str(payload[key])
            for key, attr in _GRAPH_FIELDS.items()
        }
        return cls(
            incident_id=str(incident_id),
            alerts=tuple(Alert.from_graph(a) for a in raw_alerts),
            **scalars,
        )
