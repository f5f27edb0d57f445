"""Завантаження YAML конфігурацій та параметрів запуску."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
INCIDENT_READ_SCOPE = "https://graph.microsoft.com/SecurityIncident.Read.All"

AUTH_MODES = ("interactive", "device_code")


@dataclass(frozen=True)
class CatalogConfig:
    """Run parameters. Defaults reproduce the fixed-constant behaviour."""

    days: int = 30
    page_size: int = 50
    page_delay_ms: int = 100
    expand_alerts: bool = True
    base_url: str = GRAPH_BASE_URL
    scope: str = INCIDENT_READ_SCOPE
    auth_mode: str = "interactive"  # interactive | device_code
    tenant_id: str | None = None
    client_id: str | None = None
    request_timeout_sec: float = 60.0
    progress_every: int = 10

    @property
    def page_delay_sec(self) -> float:
        return self.page_delay_ms / 1000.0


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Зчитує YAML файл та повертає його вміст як dict.

    Args:
        path: Шлях до файлу.

    Returns:
        Вміст файлу як словник.

    Raises:
        FileNotFoundError: Якщо файл не знайдено.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    log.debug("Loaded config %s (%d top-level keys)", p.name, len(data or {}))
    return data or {}


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> CatalogConfig:
    """Будує CatalogConfig: значення за замовчуванням → YAML → overrides.

    The YAML file keeps its settings under a top-level ``catalog:`` key.
    ``None`` values in *overrides* (unset CLI flags) are ignored.

    Raises:
        FileNotFoundError: Якщо *path* задано, але файл відсутній.
        ValueError: Якщо значення параметра некоректне.
    """
    known = {f.name for f in fields(CatalogConfig)}
    values: dict[str, Any] = {}

    if path is not None:
        section = load_yaml(path).get("catalog") or {}
        for key, value in section.items():
            if key not in known:
                log.warning("Ignoring unknown config key: catalog.%s", key)
                continue
            values[key] = value

    for key, value in (overrides or {}).items():
        if value is not None and key in known:
            values[key] = value

    cfg = replace(CatalogConfig(), **values)
    _validate(cfg)
    return cfg


def _validate(cfg: CatalogConfig) -> None:
    if cfg.days <= 0:
        raise ValueError(f"days must be positive, got {cfg.days}")
    if not 1 <= cfg.page_size <= 50:
        # Graph caps $top for security/incidents at 50
        raise ValueError(f"page_size must be in 1..50, got {cfg.page_size}")
    if cfg.page_delay_ms < 0:
        raise ValueError(f"page_delay_ms must be >= 0, got {cfg.page_delay_ms}")
    if cfg.auth_mode not in AUTH_MODES:
        raise ValueError(
            f"auth_mode must be one of {', '.join(AUTH_MODES)}, got {cfg.auth_mode!r}"
        )
