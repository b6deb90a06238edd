"""Shared test doubles: memory backends, a call-counting catalog and builders."""

from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from qrstickers.models.device import Device
from qrstickers.models.mapping import ModelMapping, TypeMapping
from qrstickers.models.template import StickerTemplate, TemplateScope
from qrstickers.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryDeviceInventory,
    MemoryTemplateCatalog,
)

__all__ = [
    "CountingCatalog",
    "FakeClock",
    "MemoryCacheBackend",
    "MemoryDeviceInventory",
    "MemoryTemplateCatalog",
    "make_device",
    "make_template",
]


class CountingCatalog:
    """Wraps a catalog and counts read calls per method."""

    def __init__(self, inner: MemoryTemplateCatalog) -> None:
        self._inner = inner
        self.calls: Counter[str] = Counter()

    @property
    def total_reads(self) -> int:
        return sum(self.calls.values())

    def get_template(self, template_id: int) -> Optional[StickerTemplate]:
        self.calls["get_template"] += 1
        return self._inner.get_template(template_id)

    def list_templates(
        self, scope: Optional[TemplateScope] = None, *, is_default: Optional[bool] = None
    ) -> list[StickerTemplate]:
        self.calls["list_templates"] += 1
        return self._inner.list_templates(scope, is_default=is_default)

    def list_visible_templates(self, connection_id: int) -> list[StickerTemplate]:
        self.calls["list_visible_templates"] += 1
        return self._inner.list_visible_templates(connection_id)

    def get_model_mappings(self, device_model: str, connection_id: int) -> list[ModelMapping]:
        self.calls["get_model_mappings"] += 1
        return self._inner.get_model_mappings(device_model, connection_id)

    def get_type_mappings(self, device_type: str, connection_id: int) -> list[TypeMapping]:
        self.calls["get_type_mappings"] += 1
        return self._inner.get_type_mappings(device_type, connection_id)

    def add_template(self, template: StickerTemplate) -> StickerTemplate:
        return self._inner.add_template(template)

    def update_template(self, template: StickerTemplate) -> StickerTemplate:
        return self._inner.update_template(template)

    def add_model_mapping(self, mapping: ModelMapping) -> ModelMapping:
        return self._inner.add_model_mapping(mapping)

    def add_type_mapping(self, mapping: TypeMapping) -> TypeMapping:
        return self._inner.add_type_mapping(mapping)


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_template(
    name: str = "Template",
    connection_id: Optional[int] = None,
    **overrides: Any,
) -> StickerTemplate:
    scope = TemplateScope.global_() if connection_id is None else TemplateScope.tenant(connection_id)
    return StickerTemplate(name=name, scope=scope, **overrides)


def make_device(
    device_id: int = 1,
    connection_id: int = 1,
    model: Optional[str] = "MS225-48FP",
    product_type: Optional[str] = "switch",
    **overrides: Any,
) -> Device:
    return Device(
        id=device_id,
        connection_id=connection_id,
        serial=overrides.pop("serial", "Q2XX-AAAA-0001"),
        name=overrides.pop("name", f"device-{device_id}"),
        model=model,
        product_type=product_type,
        **overrides,
    )
