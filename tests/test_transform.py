"""Tests for src.catalog.transform — Incident → FlatRecord flattening."""

from __future__ import annotations

import logging

import pytest

from src.catalog.transform import flatten_all, flatten_incident, flatten_payload
from src.contracts.alert import Alert
from src.contracts.flat_record import MITRE_SEPARATOR, RECOMMENDED_ACTIONS_SEPARATOR
from src.contracts.incident import Incident
from tests.conftest import make_alert_payload, make_incident_payload

# ═══════════════════════════════════════════════════════════════════════════
#  flatten_incident
# ═══════════════════════════════════════════════════════════════════════════


class TestFlattenIncident:
    def test_zero_alerts(self):
        rec = flatten_incident(Incident(incident_id="1"))
        assert rec.alert_count == 0
        assert rec.alert_types == ""
        assert rec.mitre_techniques == ""
        assert rec.mitre_technique_count == 0
        assert rec.has_recommended_actions is False
        assert rec.recommended_actions_count == 0
        assert rec.recommended_actions == ""

    def test_scalar_fields_copied(self):
        rec = flatten_payload(make_incident_payload(incident_id="77", severity="medium"))
        assert rec.incident_id == "77"
        assert rec.severity == "medium"
        assert rec.classification == "truePositive"
        assert rec.web_url == "https://security.microsoft.com/incidents/77"

    def test_alert_types_first_occurrence_order(self):
        inc = Incident(
            incident_id="1",
            alerts=(Alert(title="B"), Alert(title="A"), Alert(title="B"), Alert(title="")),
        )
        rec = flatten_incident(inc)
        assert rec.alert_types == "B; A"
        assert rec.alert_count == 4

    def test_mitre_union_across_alerts(self):
        inc = Incident(
            incident_id="1",
            alerts=(
                Alert(mitre_techniques=("T1059", "T1105")),
                Alert(mitre_techniques=("T1105", "T1003")),
                Alert(),
            ),
        )
        rec = flatten_incident(inc)
        assert rec.mitre_techniques == "T1059, T1105, T1003"
        assert rec.mitre_technique_count == 3

    def test_mitre_count_matches_joined_value(self):
        inc = Incident(
            incident_id="1",
            alerts=(Alert(mitre_techniques=("T1", "T2", "T1", "", "T3")),),
        )
        rec = flatten_incident(inc)
        parts = rec.mitre_techniques.split(MITRE_SEPARATOR)
        assert rec.mitre_technique_count == len(set(parts)) == len(parts)

    def test_recommended_actions_dedup_and_join(self):
        inc = Incident(
            incident_id="1",
            alerts=(
                Alert(recommended_actions="Isolate host"),
                Alert(recommended_actions=""),
                Alert(recommended_actions="Reset password\nfor the user"),
                Alert(recommended_actions="Isolate host"),
            ),
        )
        rec = flatten_incident(inc)
        assert rec.has_recommended_actions is True
        assert rec.recommended_actions_count == 2
        assert rec.recommended_actions == (
            "Isolate host" + RECOMMENDED_ACTIONS_SEPARATOR + "Reset password\nfor the user"
        )

    def test_only_empty_actions(self):
        inc = Incident(incident_id="1", alerts=(Alert(title="x"), Alert(title="y")))
        rec = flatten_incident(inc)
        assert rec.has_recommended_actions is False
        assert rec.recommended_actions_count == 0

    def test_duplicate_alert_is_idempotent(self):
        alert = Alert(title="Ransomware", recommended_actions="Wipe", mitre_techniques=("T1486",))
        once = flatten_incident(Incident(incident_id="1", alerts=(alert,)))
        twice = flatten_incident(Incident(incident_id="1", alerts=(alert, alert)))
        assert twice.alert_types == once.alert_types
        assert twice.mitre_techniques == once.mitre_techniques
        assert twice.mitre_technique_count == once.mitre_technique_count
        assert twice.recommended_actions == once.recommended_actions
        assert twice.recommended_actions_count == once.recommended_actions_count

    def test_unicode_preserved(self):
        inc = Incident(
            incident_id="1",
            alerts=(Alert(title="Підозрілий вхід", recommended_actions="Заблокуйте обліковий запис ✓"),),
        )
        rec = flatten_incident(inc)
        assert rec.alert_types == "Підозрілий вхід"
        assert rec.recommended_actions == "Заблокуйте обліковий запис ✓"


# ═══════════════════════════════════════════════════════════════════════════
#  flatten_all
# ═══════════════════════════════════════════════════════════════════════════


class TestFlattenAll:
    def test_preserves_order(self):
        payloads = [make_incident_payload(incident_id=str(i)) for i in range(25)]
        result = flatten_all(payloads)
        assert [r.incident_id for r in result.records] == [str(i) for i in range(25)]
        assert result.skipped == []

    def test_malformed_incident_is_skipped(self, caplog):
        payloads = [
            make_incident_payload(incident_id="1", alerts=[make_alert_payload()]),
            make_incident_payload(incident_id="bad", alerts="not-a-list"),
            make_incident_payload(incident_id="3"),
        ]
        with caplog.at_level(logging.WARNING, logger="src.catalog.transform"):
            result = flatten_all(payloads)

        assert [r.incident_id for r in result.records] == ["1", "3"]
        assert len(result.skipped) == 1
        assert result.skipped[0].incident_id == "bad"
        assert "alerts must be a list" in result.skipped[0].reason
        assert any("bad" in rec.getMessage() for rec in caplog.records)

    def test_malformed_alert_inside_incident(self):
        payloads = [make_incident_payload(incident_id="x", alerts=[42])]
        result = flatten_all(payloads)
        assert result.records == []
        assert result.skipped[0].incident_id == "x"

    def test_payload_without_id(self):
        result = flatten_all([{"severity": "high"}, "garbage"])
        assert [s.incident_id for s in result.skipped] == ["<unknown>", "<unknown>"]

    def test_progress_logged(self, caplog):
        payloads = [make_incident_payload(incident_id=str(i)) for i in range(20)]
        with caplog.at_level(logging.INFO, logger="src.catalog.transform"):
            flatten_all(payloads, progress_every=10)
        progress = [r for r in caplog.records if r.getMessage().startswith("Processed")]
        assert len(progress) == 2

    @pytest.mark.parametrize("k", [1, 5, 12])
    def test_k_minus_one(self, k):
        payloads = [make_incident_payload(incident_id=str(i)) for i in range(k)]
        payloads[k // 2]["alerts"] = 7
        result = flatten_all(payloads)
        assert len(result.records) == k - 1
        assert len(result.skipped) == 1
