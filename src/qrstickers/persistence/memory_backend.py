"""In-memory backends: dict-backed catalog, inventory and TTL cache.

Used by unit tests and by single-process deployments
(``QRSTICKERS_CATALOG_BACKEND=memory``).
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from qrstickers.core.exceptions import TemplateNotFoundError
from qrstickers.models.device import Device
from qrstickers.models.mapping import ModelMapping, TypeMapping
from qrstickers.models.template import StickerTemplate, TemplateScope, ensure_single_default


class MemoryTemplateCatalog:
    """Dict-backed ITemplateCatalog."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._templates: dict[int, StickerTemplate] = {}
        self._model_mappings: dict[int, ModelMapping] = {}
        self._type_mappings: dict[int, TypeMapping] = {}

    @staticmethod
    def _next_id(rows: dict[int, object]) -> int:
        return max(rows, default=0) + 1

    def get_template(self, template_id: int) -> Optional[StickerTemplate]:
        with self._lock:
            return self._templates.get(template_id)

    def list_templates(
        self, scope: Optional[TemplateScope] = None, *, is_default: Optional[bool] = None
    ) -> list[StickerTemplate]:
        with self._lock:
            rows = sorted(self._templates.values(), key=lambda t: t.id)
        if scope is not None:
            rows = [t for t in rows if t.scope == scope]
        if is_default is not None:
            rows = [t for t in rows if t.is_default == is_default]
        return rows

    def list_visible_templates(self, connection_id: int) -> list[StickerTemplate]:
        return [t for t in self.list_templates() if t.scope.is_visible_to(connection_id)]

    def get_model_mappings(self, device_model: str, connection_id: int) -> list[ModelMapping]:
        with self._lock:
            rows = [
                m for m in self._model_mappings.values()
                if m.device_model == device_model and m.scope.is_visible_to(connection_id)
            ]
        return sorted(rows, key=lambda m: m.sort_key)

    def get_type_mappings(self, device_type: str, connection_id: int) -> list[TypeMapping]:
        with self._lock:
            rows = [
                m for m in self._type_mappings.values()
                if m.device_type == device_type and m.scope.is_visible_to(connection_id)
            ]
        return sorted(rows, key=lambda m: m.sort_key)

    def add_template(self, template: StickerTemplate) -> StickerTemplate:
        with self._lock:
            ensure_single_default(self.list_templates(template.scope), template)
            new_id = template.id if template.id is not None else self._next_id(self._templates)
            stored = template.model_copy(update={"id": new_id})
            self._templates[new_id] = stored
            return stored

    def update_template(self, template: StickerTemplate) -> StickerTemplate:
        with self._lock:
            if template.id is None or template.id not in self._templates:
                raise TemplateNotFoundError(template.id if template.id is not None else -1)
            ensure_single_default(self.list_templates(template.scope), template)
            previous = self._templates[template.id]
            self._templates[template.id] = template
            if previous.scope != template.scope:
                for rows in (self._model_mappings, self._type_mappings):
                    for mapping_id, mapping in list(rows.items()):
                        if mapping.template_id == template.id:
                            rows[mapping_id] = mapping.model_copy(update={"scope": template.scope})
            return template

    def add_model_mapping(self, mapping: ModelMapping) -> ModelMapping:
        with self._lock:
            stored = self._stamp(mapping, self._model_mappings)
            self._model_mappings[stored.id] = stored
            return stored

    def add_type_mapping(self, mapping: TypeMapping) -> TypeMapping:
        with self._lock:
            stored = self._stamp(mapping, self._type_mappings)
            self._type_mappings[stored.id] = stored
            return stored

    def _stamp(self, mapping, rows: dict):
        """Assign an id and copy the scope of the referenced template."""
        template = self._templates.get(mapping.template_id)
        if template is None:
            raise TemplateNotFoundError(mapping.template_id)
        new_id = mapping.id if mapping.id is not None else self._next_id(rows)
        return mapping.model_copy(update={"id": new_id, "scope": template.scope})


class MemoryDeviceInventory:
    """Dict-backed IDeviceInventory."""

    def __init__(self) -> None:
        self._devices: dict[tuple[int, int], Device] = {}

    def get_device(self, device_id: int, connection_id: int) -> Optional[Device]:
        return self._devices.get((connection_id, device_id))

    def put_device(self, device: Device) -> None:
        self._devices[(device.connection_id, device.id)] = device


class MemoryCacheBackend:
    """Process-wide ICacheBackend with per-entry expiry.

    Entries expire ``ttl`` seconds after insertion; reads never extend the
    deadline. Expired entries are dropped lazily on read or in bulk by
    ``purge_expired``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._store: dict[str, tuple[float, str]] = {}

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._store[key]
                return None
            return value

    def setex(self, key: str, ttl: int, value: str) -> None:
        with self._lock:
            self._store[key] = (self._clock() + ttl, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (expires_at, _) in self._store.items() if now >= expires_at]
            for key in expired:
                del self._store[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
