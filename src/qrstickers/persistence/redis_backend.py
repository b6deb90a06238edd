"""Redis cache backend implementing ICacheBackend."""

from __future__ import annotations

import redis

from qrstickers.core.exceptions import CacheError


class RedisCacheBackend:
    """Shared ICacheBackend backed by Redis; expiry is delegated to SETEX."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except Exception as exc:
            raise CacheError(f"Redis GET failed for key={key!r}: {exc}") from exc

    def setex(self, key: str, ttl: int, value: str) -> None:
        try:
            self._client.setex(key, ttl, value)
        except Exception as exc:
            raise CacheError(f"Redis SETEX failed for key={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except Exception as exc:
            raise CacheError(f"Redis DELETE failed for key={key!r}: {exc}") from exc

    def ttl(self, key: str) -> int:
        """Seconds until ``key`` expires (-2 when missing, -1 when persistent).

        Diagnostic helper for operators and tests; the matching path only
        needs get/setex.
        """
        try:
            return int(self._client.ttl(key))
        except Exception as exc:
            raise CacheError(f"Redis TTL failed for key={key!r}: {exc}") from exc
