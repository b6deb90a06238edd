"""Protocol interfaces for QRStickers abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from qrstickers.models.device import Device
from qrstickers.models.mapping import ModelMapping, TypeMapping
from qrstickers.models.template import StickerTemplate, TemplateScope


# ---------------------------------------------------------------------------
# Persistence: Template Catalog
# ---------------------------------------------------------------------------

@runtime_checkable
class ITemplateCatalog(Protocol):
    """Templates plus model/type mapping tables.

    List queries return templates in ascending id order. Mapping queries
    return only rows visible to the connection (global or owned by it) in
    ascending (priority, id) order.
    """

    def get_template(self, template_id: int) -> Optional[StickerTemplate]: ...

    def list_templates(
        self, scope: Optional[TemplateScope] = None, *, is_default: Optional[bool] = None
    ) -> list[StickerTemplate]: ...

    def list_visible_templates(self, connection_id: int) -> list[StickerTemplate]: ...

    def get_model_mappings(self, device_model: str, connection_id: int) -> list[ModelMapping]: ...

    def get_type_mappings(self, device_type: str, connection_id: int) -> list[TypeMapping]: ...

    def add_template(self, template: StickerTemplate) -> StickerTemplate: ...

    def update_template(self, template: StickerTemplate) -> StickerTemplate: ...

    def add_model_mapping(self, mapping: ModelMapping) -> ModelMapping: ...

    def add_type_mapping(self, mapping: TypeMapping) -> TypeMapping: ...


# ---------------------------------------------------------------------------
# Persistence: Device Inventory
# ---------------------------------------------------------------------------

@runtime_checkable
class IDeviceInventory(Protocol):
    """Cached Meraki devices per connection."""

    def get_device(self, device_id: int, connection_id: int) -> Optional[Device]: ...

    def put_device(self, device: Device) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...
