# housingguard/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

log = logging.getLogger("housingguard.config")

HERE = Path(__file__).resolve().parent
REPO = HERE.parent
_CONFIG_CANDIDATES = [Path("configs/compliance.yaml"), REPO / "configs" / "compliance.yaml"]


@dataclass
class Settings:
    log_path: str = "artifacts/ops/compliance_log.csv"
    audit_enabled: bool = True
    stats_window_hours: int = 24
    top_issues_limit: int = 5
    risk_bands: Dict[str, int] = field(default_factory=lambda: {"high": 60, "medium": 30})
    debug: bool = False


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning("config %s unreadable, using defaults: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("config %s is not a mapping, using defaults", path)
        return {}
    return data


_TRUTHY = ("1", "true", "yes", "on")


def _as_bool(value: Any, default: bool) -> bool:
    # quoted YAML values ("false", "0") arrive as strings
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def _flag(name: str, default: bool) -> bool:
    return _as_bool(os.getenv(name), default)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Settings from YAML (explicit path, $HOUSINGGUARD_CONFIG, then configs/compliance.yaml),
    then env overrides:
      HOUSINGGUARD_LOG_PATH, HOUSINGGUARD_AUDIT, HOUSINGGUARD_DEBUG
    """
    s = Settings()
    explicit = path or os.getenv("HOUSINGGUARD_CONFIG")
    candidates = [Path(explicit)] if explicit else _CONFIG_CANDIDATES
    data: Dict[str, Any] = {}
    for p in candidates:
        if p.exists():
            data = _load_yaml(p)
            break
    else:
        if explicit:
            log.warning("config %s not found, using defaults", explicit)

    try:
        s.log_path = str(data.get("log_path", s.log_path))
        s.audit_enabled = _as_bool(data.get("audit_enabled"), s.audit_enabled)
        s.stats_window_hours = int(data.get("stats_window_hours", s.stats_window_hours))
        s.top_issues_limit = int(data.get("top_issues_limit", s.top_issues_limit))
        bands = data.get("risk_bands") or {}
        if isinstance(bands, dict):
            s.risk_bands = {
                "high": int(bands.get("high", s.risk_bands["high"])),
                "medium": int(bands.get("medium", s.risk_bands["medium"])),
            }
        s.debug = _as_bool(data.get("debug"), s.debug)
    except (TypeError, ValueError) as e:
        log.warning("config values invalid, using defaults: %s", e)
        s = Settings()

    s.log_path = os.getenv("HOUSINGGUARD_LOG_PATH", s.log_path)
    s.audit_enabled = _flag("HOUSINGGUARD_AUDIT", s.audit_enabled)
    s.debug = _flag("HOUSINGGUARD_DEBUG", s.debug)
    return s
