"""Підсумкова статистика по каталогу інцидентів (лише читання)."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from src.contracts.flat_record import FlatRecord


@dataclass
class CatalogSummary:
    """Агреговані лічильники по списку FlatRecord."""

    total: int = 0
    with_actions: int = 0
    without_actions: int = 0
    by_severity: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)
    by_classification: dict[str, int] = field(default_factory=dict)
    total_alerts: int = 0
    avg_alerts: float = 0.0
    with_mitre: int = 0


def summarize(records: list[FlatRecord]) -> CatalogSummary:
    """Compute the summary.

    Severity and status are ordered by key; classification (empty values
    excluded) by descending count, then key.
    """
    total = len(records)
    with_actions = sum(1 for r in records if r.has_recommended_actions)
    severity = Counter(r.severity for r in records)
    status = Counter(r.status for r in records)
    classification = Counter(r.classification for r in records if r.classification)
    total_alerts = sum(r.alert_count for r in records)

    return CatalogSummary(
        total=total,
        with_actions=with_actions,
        without_actions=total - with_actions,
        by_severity=dict(sorted(severity.items())),
        by_status=dict(sorted(status.items())),
        by_classification=dict(
            sorted(classification.items(), key=lambda kv: (-kv[1], kv[0]))
        ),
        total_alerts=total_alerts,
        avg_alerts=round(total_alerts / total, 2) if total else 0.0,
        with_mitre=sum(1 for r in records if r.mitre_technique_count > 0),
    )


def _breakdown(title: str, counts: dict[str, int]) -> list[str]:
    lines = [f"{title}:"]
    if not counts:
        lines.append("  (none)")
    for key, n in counts.items():
        lines.append(f"  {key or '(empty)'}: {n}")
    return lines


def format_summary(s: CatalogSummary) -> list[str]:
    lines: list[str] = []
    lines.append("=" * 60)
    lines.append("  Incident Catalog Summary")
    lines.append("=" * 60)
    lines.append(f"Total Incidents: {s.total}")
    lines.append(f"Incidents with Recommended Actions: {s.with_actions}")
    lines.append(f"Incidents without Recommended Actions: {s.without_actions}")
    lines.append("")
    lines.extend(_breakdown("By Severity", s.by_severity))
    lines.extend(_breakdown("By Status", s.by_status))
    lines.extend(_breakdown("By Classification", s.by_classification))
    lines.append("")
    lines.append(f"Total Alerts: {s.total_alerts}")
    lines.append(f"Average Alerts per Incident: {s.avg_alerts:.2f}")
    lines.append(f"Incidents with MITRE Techniques: {s.with_mitre}")
    lines.append("=" * 60)
    return lines


def print_summary(s: CatalogSummary) -> None:
    print("\n".join(format_summary(s)))
