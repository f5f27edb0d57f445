"""FlatRecord — one denormalised catalog row per Incident."""

from __future__ import annotations

from dataclasses import dataclass

ALERT_TYPES_SEPARATOR = "; "
MITRE_SEPARATOR = ", "
RECOMMENDED_ACTIONS_SEPARATOR = "\n\n---\n\n"

# CSV column order of IncidentCatalog_WithActions_*.csv
FLAT_RECORD_COLUMNS: list[str] = [
    "IncidentId",
    "TenantId",
    "DisplayName",
    "Severity",
    "Status",
    "Classification",
    "Determination",
    "CreatedDateTime",
    "LastUpdateDateTime",
    "IncidentWebUrl",
    "AlertCount",
    "AlertTypes",
    "MitreTechniques",
    "MitreTechniqueCount",
    "HasRecommendedActions",
    "RecommendedActionsCount",
    "RecommendedActions",
]


@dataclass(frozen=True, slots=True)
class FlatRecord:
    """Denormalised incident row written to the catalog CSV."""

    incident_id: str
    tenant_id: str
    display_name: str
    severity: str
    status: str
    classification: str
    determination: str
    created: str
    last_updated: str
    web_url: str
    alert_count: int = 0
    alert_types: str = ""
    mitre_techniques: str = ""
    mitre_technique_count: int = 0
    has_recommended_actions: bool = False
    recommended_actions_count: int = 0
    recommended_actions: str = ""

    # ── serialisation ────────────────────────────────────────────────────

    def to_row(self) -> list[str]:
        """Return the values in FLAT_RECORD_COLUMNS order, as strings."""
        return [
            self.incident_id,
            self.tenant_id,
            self.display_name,
            self.severity,
            self.status,
            self.classification,
            self.determination,
            self.created,
            self.last_updated,
            self.web_url,
            str(self.alert_count),
            self.alert_types,
            self.mitre_techniques,
            str(self.mitre_technique_count),
            str(self.has_recommended_actions),
            str(self.recommended_actions_count),
            self.recommended_actions,
        ]

    @classmethod
    def from_row(cls, row: dict[str, str]) -> FlatRecord:
        """Rebuild a record from a catalog row keyed by column name."""
        return cls(
            incident_id=row["IncidentId"],
            tenant_id=row.get("TenantId", ""),
            display_name=row.get("DisplayName", ""),
            severity=row.get("Severity", ""),
            status=row.get("Status", ""),
            classification=row.get("Classification", ""),
            determination=row.get("Determination", ""),
            created=row.get("CreatedDateTime", ""),
            last_updated=row.get("LastUpdateDateTime", ""),
            web_url=row.get("IncidentWebUrl", ""),
            alert_count=int(row.get("AlertCount") or 0),
            alert_types=row.get("AlertTypes", ""),
            mitre_techniques=row.get("MitreTechniques", ""),
            mitre_technique_count=int(row.get("MitreTechniqueCount") or 0),
            has_recommended_actions=row.get("HasRecommendedActions", "") == "True",
            recommended_actions_count=int(row.get("RecommendedActionsCount") or 0),
            recommended_actions=row.get("RecommendedActions", ""),
        )
