"""Модель оповіщення (Alert), вкладеного в інцидент."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _optional_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"alert field {key!r} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class Alert:
    """Оповіщення Graph API, як воно приходить у ``$expand=alerts``."""

    title: str = ""  # alert type shown in AlertTypes
    recommended_actions: str = ""  # free text, may span many lines
    mitre_techniques: tuple[str, ...] = ()  # e.g. ("T1059", "T1059.001")

    @classmethod
    def from_graph(cls, payload: Any) -> Alert:
        """Build an Alert from a Graph ``alert`` object.

        Raises:
            ValueError: If the payload or one of its fields has the wrong shape.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"alert must be an object, got {type(payload).__name__}")

        techniques = payload.get("mitreTechniques")
        if techniques is None:
            techniques = []
        if not isinstance(techniques, list):
            raise ValueError(
                f"mitreTechniques must be a list, got {type(techniques).__name__}"
            )
        for t in techniques:
            if t is not None and not isinstance(t, str):
                raise ValueError(f"MITRE technique must be a string, got {t!r}")

        return cls(
            title=_optional_str(payload, "title"),
            recommended_actions=_optional_str(payload, "recommendedActions"),
            mitre_techniques=tuple(t for t in techniques if t is not None),
        )
