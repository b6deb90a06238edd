"""Unit tests for RedisCacheBackend using fakeredis."""

from __future__ import annotations

from unittest.mock import patch

import fakeredis
import pytest

from qrstickers.core.exceptions import CacheError
from qrstickers.matching.cache import MatchResultCache
from qrstickers.matching.resolver import TemplateMatchingService
from qrstickers.persistence.redis_backend import RedisCacheBackend
from tests.fakes import MemoryTemplateCatalog, make_device, make_template


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def backend(fake_server):
    with patch("redis.Redis", return_value=fakeredis.FakeRedis(server=fake_server, decode_responses=True)):
        return RedisCacheBackend(host="localhost", port=6379, db=0)


class TestGet:
    def test_returns_none_on_miss(self, backend):
        assert backend.get("nonexistent") is None

    def test_returns_stored_string(self, backend):
        backend.setex("key1", 300, '{"a": 1}')
        assert backend.get("key1") == '{"a": 1}'


class TestSetex:
    def test_sets_expiry(self, backend):
        backend.setex("mykey", 60, "v")
        assert 0 < backend.ttl("mykey") <= 60

    def test_overwrites_existing_value(self, backend):
        backend.setex("k", 60, "old")
        backend.setex("k", 60, "new")
        assert backend.get("k") == "new"


class TestDelete:
    def test_removes_existing_key(self, backend):
        backend.setex("del_me", 60, "val")
        backend.delete("del_me")
        assert backend.get("del_me") is None

    def test_noop_on_missing_key(self, backend):
        backend.delete("never_existed")  # should not raise


class TestMatchResultsInRedis:
    def test_cached_match_uses_configured_ttl(self, backend):
        catalog = MemoryTemplateCatalog()
        catalog.add_template(make_template("System", is_default=True))
        cache = MatchResultCache(backend, ttl_seconds=1800)
        service = TemplateMatchingService(catalog, cache)

        result = service.find_template_for_device(make_device(device_id=8), 3)

        key = MatchResultCache.cache_key(8, 3)
        assert 1790 <= backend.ttl(key) <= 1800
        assert cache.get(8, 3) == result


class TestErrorWrapping:
    def test_get_wraps_redis_error(self):
        b = RedisCacheBackend.__new__(RedisCacheBackend)
        b._client = None  # will cause AttributeError -> CacheError
        with pytest.raises(CacheError):
            b.get("k")

    def test_setex_wraps_redis_error(self):
        b = RedisCacheBackend.__new__(RedisCacheBackend)
        b._client = None
        with pytest.raises(CacheError):
            b.setex("k", 10, "v")
