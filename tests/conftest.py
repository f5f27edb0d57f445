"""Shared fixtures for Incident Catalog tests."""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest

from src.contracts.flat_record import FlatRecord

# ── Helper: Graph payloads with sensible defaults ───────────────────────


def make_alert_payload(
    *,
    title: str | None = "Suspicious PowerShell",
    recommended_actions: str | None = "Isolate host",
    mitre_techniques: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "id": "da637-alert",
        "title": title,
        "recommendedActions": recommended_actions,
        "mitreTechniques": mitre_techniques if mitre_techniques is not None else ["T1059"],
    }


def make_incident_payload(
    *,
    incident_id: str = "1001",
    severity: str = "high",
    status: str = "active",
    classification: str | None = "truePositive",
    determination: str | None = "malware",
    alerts: Any = None,
) -> dict[str, Any]:
    return {
        "id": incident_id,
        "tenantId": "b3c1b5fc-828c-45fa-a1e1-10d74f6d6e9c",
        "displayName": f"Multi-stage incident {incident_id}",
        "severity": severity,
        "status": status,
        "classification": classification,
        "determination": determination,
        "createdDateTime": "2026-10-01T08:15:30.1234567Z",
        "lastUpdateDateTime": "2026-10-02T11:00:00Z",
        "incidentWebUrl": f"https://security.microsoft.com/incidents/{incident_id}",
        "alerts": [] if alerts is None else alerts,
    }


def make_flat_record(
    *,
    incident_id: str = "1001",
    severity: str = "high",
    status: str = "active",
    classification: str = "truePositive",
    alert_count: int = 1,
    alert_types: str = "Suspicious PowerShell",
    mitre_techniques: str = "T1059",
    mitre_technique_count: int = 1,
    has_recommended_actions: bool = True,
    recommended_actions_count: int = 1,
    recommended_actions: str = "Isolate host",
) -> FlatRecord:
    return FlatRecord(
        incident_id=incident_id,
        tenant_id="b3c1b5fc-828c-45fa-a1e1-10d74f6d6e9c",
        display_name=f"Multi-stage incident {incident_id}",
        severity=severity,
        status=status,
        classification=classification,
        determination="malware",
        created="2026-10-01T08:15:30Z",
        last_updated="2026-10-02T11:00:00Z",
        web_url=f"https://security.microsoft.com/incidents/{incident_id}",
        alert_count=alert_count,
        alert_types=alert_types,
        mitre_techniques=mitre_techniques,
        mitre_technique_count=mitre_technique_count,
        has_recommended_actions=has_recommended_actions,
        recommended_actions_count=recommended_actions_count,
        recommended_actions=recommended_actions,
    )


def make_token(claims: dict[str, Any]) -> str:
    """Unsigned JWT carrying *claims* (header.payload.signature)."""

    def _b64(obj: dict[str, Any]) -> str:
        raw = base64.urlsafe_b64encode(json.dumps(obj).encode()).decode()
        return raw.rstrip("=")

    return f"{_b64({'alg': 'none'})}.{_b64(claims)}.sig"


# ── Fakes for the Graph collaborators ───────────────────────────────────


class FakeClient:
    """Serves canned envelopes in order and records every requested URL."""

    def __init__(self, envelopes: list[Any]) -> None:
        self.envelopes = list(envelopes)
        self.urls: list[str] = []

    def get_json(self, url: str) -> dict[str, Any]:
        self.urls.append(url)
        item = self.envelopes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeSession(FakeClient):
    account = "analyst@contoso.com"
    tenant_id = "b3c1b5fc-828c-45fa-a1e1-10d74f6d6e9c"

    def __init__(self, envelopes: list[Any]) -> None:
        super().__init__(envelopes)
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeAccessToken:
    def __init__(self, token: str) -> None:
        self.token = token
        self.expires_on = 0


class FakeCredential:
    def __init__(self, token: str = "", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.scopes: list[str] = []
        self.closed = False

    def get_token(self, *scopes: str) -> FakeAccessToken:
        self.scopes.extend(scopes)
        if self.error is not None:
            raise self.error
        return FakeAccessToken(self.token)

    def close(self) -> None:
        self.closed = True


def paged(pages: list[list[dict[str, Any]]]) -> list[dict[str, Any]]:
    """Wrap item lists as Graph envelopes chained with @odata.nextLink."""
    envelopes = []
    for i, items in enumerate(pages):
        env: dict[str, Any] = {"value": items}
        if i < len(pages) - 1:
            env["@odata.nextLink"] = f"https://graph.microsoft.com/v1.0/security/incidents?$skiptoken=p{i + 2}"
        envelopes.append(env)
    return envelopes


@pytest.fixture
def scenario_payloads() -> list[dict[str, Any]]:
    """(a) high/active with one alert; (b) low/resolved with no alerts."""
    return [
        make_incident_payload(
            incident_id="a",
            severity="high",
            status="active",
            alerts=[
                make_alert_payload(
                    title="Suspicious PowerShell",
                    recommended_actions="Isolate host",
                    mitre_techniques=["T1059"],
                )
            ],
        ),
        make_incident_payload(
            incident_id="b",
            severity="low",
            status="resolved",
            classification=None,
            determination=None,
            alerts=[],
        ),
    ]
