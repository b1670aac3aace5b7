"""
codequest.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for **infrastructure-only** settings (service
identity, API port, cache tuning, logging).  Points rules live per company
in the ``points_configs`` table and are edited through the API, and the
database URL comes from ``DATABASE_URL`` in ``.env``.

Usage::

    from codequest.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.service_name)      # "CodeQuest"
    print(cfg.api_port)          # 8000
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object — infrastructure only.
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CodeQuestConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    service_name: str

    # API
    api_port: int

    # Resolved-config cache
    resolved_config_ttl_seconds: float = 60.0
    resolved_config_max_entries: int = 1000

    # Logging
    log_level: str = "INFO"

    # Optional
    default_company_id: str | None = None  # Seeded with default points rules on startup


DEFAULT_CONFIG = CodeQuestConfig(service_name="CodeQuest", api_port=8000)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> CodeQuestConfig:
    """Parse the infrastructure settings in *path*.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    KeyError
        If ``service_name`` or ``api_port`` is missing.
    ValueError
        If ``log_level`` is not a standard logging level name.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"No CodeQuest settings at {config_path.resolve()}; "
            "start from config.yaml.example."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"Invalid log_level in {config_path}: {log_level}")

    return CodeQuestConfig(
        service_name=raw["service_name"],
        api_port=int(raw["api_port"]),
        resolved_config_ttl_seconds=float(raw.get("resolved_config_ttl_seconds", 60.0)),
        resolved_config_max_entries=int(raw.get("resolved_config_max_entries", 1000)),
        log_level=log_level,
        default_company_id=(
            str(raw["default_company_id"]) if raw.get("default_company_id") else None
        ),
    )
