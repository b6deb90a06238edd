"""TTL cache of template match results, keyed by device and connection."""

from __future__ import annotations

import logging
from typing import Callable

from qrstickers.core.protocols import ICacheBackend
from qrstickers.models.device import Device
from qrstickers.models.match import MatchResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 1800  # 30 minutes


class MatchResultCache:
    """Cache-aside wrapper storing ``MatchResult`` JSON in an ICacheBackend.

    Only successful resolutions are stored; exceptions from ``resolve``
    propagate and leave the key empty. Entries are not invalidated when
    templates or mappings change, so a cached match may be stale for up to
    ``ttl_seconds``. Concurrent misses on one key each run ``resolve``.
    """

    KEY_PREFIX = "template_match"

    def __init__(self, backend: ICacheBackend, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._backend = backend
        self._ttl = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    @classmethod
    def cache_key(cls, device_id: int, connection_id: int) -> str:
        return f"{cls.KEY_PREFIX}:{device_id}:{connection_id}"

    def get(self, device_id: int, connection_id: int) -> MatchResult | None:
        cached = self._backend.get(self.cache_key(device_id, connection_id))
        if cached is None:
            return None
        return MatchResult.model_validate_json(cached)

    def put(self, device_id: int, connection_id: int, result: MatchResult) -> None:
        self._backend.setex(
            self.cache_key(device_id, connection_id), self._ttl, result.model_dump_json()
        )

    def get_or_resolve(
        self,
        device: Device,
        connection_id: int,
        resolve: Callable[[Device, int], MatchResult],
    ) -> MatchResult:
        cached = self.get(device.id, connection_id)
        if cached is not None:
            logger.debug("Template match cache hit for device %s", device.id)
            return cached

        result = resolve(device, connection_id)
        self.put(device.id, connection_id, result)
        return result
