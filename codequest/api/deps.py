"""
codequest.api.deps — FastAPI dependency injection
==================================================
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from sqlalchemy import Engine

from codequest.config import DEFAULT_CONFIG, CodeQuestConfig, load_config
from codequest.database.engine import create_db_engine
from codequest.engine.cache import ResolvedConfigCache

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> CodeQuestConfig:
    """Load ``CODEQUEST_CONFIG`` (default ``config.yaml``), or built-in defaults."""
    path = Path(os.getenv("CODEQUEST_CONFIG", "config.yaml"))
    if not path.exists():
        logger.warning("%s not found — using built-in defaults", path)
        return DEFAULT_CONFIG
    return load_config(path)


@lru_cache(maxsize=1)
def get_resolved_cache() -> ResolvedConfigCache:
    cfg = get_config()
    return ResolvedConfigCache(
        ttl_seconds=cfg.resolved_config_ttl_seconds,
        max_entries=cfg.resolved_config_max_entries,
    )
