"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from qrstickers.core.config import AppSettings
from qrstickers.persistence.dynamodb_backend import DynamoDBDeviceInventory, DynamoDBTemplateCatalog
from qrstickers.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryDeviceInventory,
    MemoryTemplateCatalog,
)
from qrstickers.persistence.redis_backend import RedisCacheBackend


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (catalog, device_inventory, cache).
    """
    if settings is None:
        settings = AppSettings()

    if settings.matching.cache_backend == "redis":
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )
    else:
        cache = MemoryCacheBackend()

    if settings.catalog_backend == "dynamodb":
        catalog = DynamoDBTemplateCatalog(
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
        )
        devices = DynamoDBDeviceInventory(
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
        )
    else:
        catalog = MemoryTemplateCatalog()
        devices = MemoryDeviceInventory()

    return catalog, devices, cache
