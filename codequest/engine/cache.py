"""
codequest.engine.cache — Short-TTL Resolved Config Cache
=========================================================

The engine itself holds no state; callers pass configuration explicitly.
Services that resolve the same tenant over and over keep the resolved
:class:`EffectiveConfig` here, keyed by
``(company_id, config_version, organization_id)``.

The version is part of the key, so a reader still holding an older config
can only ever fill the entry for that older version; callers that loaded
the current config never see it.  Entries expire after ``ttl_seconds``.
When the cache reaches ``max_entries`` it is cleared wholesale rather than
evicting one by one.  The config service calls
:meth:`ResolvedConfigCache.invalidate` after every accepted update to drop
the superseded versions early.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from codequest.engine.resolver import EffectiveConfig

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_MAX_ENTRIES = 1000

CacheKey = tuple[str, int, str]


class ResolvedConfigCache:
    """Thread-safe in-memory cache of effective configurations.

    Usage:
        cache = ResolvedConfigCache(ttl_seconds=60)
        effective = cache.get_or_resolve(
            company_id, config.version, organization_id,
            lambda: resolve_effective_config(config, organization_id),
        )
        cache.invalidate(company_id)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # (company_id, version, organization_id) → (expires_at, EffectiveConfig)
        self._entries: dict[CacheKey, tuple[float, EffectiveConfig]] = {}

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(
        self, company_id: str, version: int, organization_id: str
    ) -> EffectiveConfig | None:
        key = (company_id, version, organization_id)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, effective = entry
            if expires_at <= now:
                del self._entries[key]
                return None
            return effective

    def get_or_resolve(
        self,
        company_id: str,
        version: int,
        organization_id: str,
        loader: Callable[[], EffectiveConfig],
    ) -> EffectiveConfig:
        """Return the cached entry, or call *loader* and cache its result.

        *loader* runs outside the lock; two threads missing at once may both
        resolve, which is harmless for a pure resolution.
        """
        effective = self.get(company_id, version, organization_id)
        if effective is not None:
            return effective

        effective = loader()
        self.put(company_id, version, organization_id, effective)
        return effective

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def put(
        self,
        company_id: str,
        version: int,
        organization_id: str,
        effective: EffectiveConfig,
    ) -> None:
        expires_at = self._clock() + self._ttl
        with self._lock:
            if len(self._entries) >= self._max_entries:
                logger.info(
                    "Resolved config cache full (%d entries) — clearing",
                    len(self._entries),
                )
                self._entries.clear()
            self._entries[(company_id, version, organization_id)] = (expires_at, effective)

    def invalidate(self, company_id: str | None = None) -> int:
        """Drop every entry for *company_id* (or everything when ``None``).

        Returns the number of entries removed.
        """
        with self._lock:
            if company_id is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                stale = [k for k in self._entries if k[0] == company_id]
                for k in stale:
                    del self._entries[k]
                removed = len(stale)
        logger.debug("Resolved config cache invalidated: company=%s removed=%d", company_id, removed)
        return removed
