"""Unit tests for the in-memory catalog, inventory and TTL cache."""

from __future__ import annotations

import pytest

from qrstickers.core.exceptions import DuplicateDefaultTemplateError, TemplateNotFoundError
from qrstickers.core.protocols import ICacheBackend, IDeviceInventory, ITemplateCatalog
from qrstickers.models.mapping import ModelMapping, TypeMapping
from qrstickers.models.template import TemplateScope
from tests.fakes import (
    FakeClock,
    MemoryCacheBackend,
    MemoryDeviceInventory,
    MemoryTemplateCatalog,
    make_device,
    make_template,
)


def test_backends_satisfy_protocols():
    assert isinstance(MemoryTemplateCatalog(), ITemplateCatalog)
    assert isinstance(MemoryDeviceInventory(), IDeviceInventory)
    assert isinstance(MemoryCacheBackend(), ICacheBackend)


class TestTemplates:
    def test_add_assigns_sequential_ids(self):
        catalog = MemoryTemplateCatalog()
        a = catalog.add_template(make_template("A"))
        b = catalog.add_template(make_template("B"))
        assert (a.id, b.id) == (1, 2)

    def test_list_filters_by_scope_and_default(self):
        catalog = MemoryTemplateCatalog()
        catalog.add_template(make_template("Global default", is_default=True))
        catalog.add_template(make_template("Global"))
        tenant = catalog.add_template(make_template("Tenant", connection_id=5))

        assert [t.name for t in catalog.list_templates(TemplateScope.global_(), is_default=True)] == [
            "Global default"
        ]
        assert catalog.list_templates(TemplateScope.tenant(5)) == [tenant]
        assert len(catalog.list_templates()) == 3

    def test_visible_templates_exclude_other_connections(self):
        catalog = MemoryTemplateCatalog()
        catalog.add_template(make_template("Global"))
        catalog.add_template(make_template("Mine", connection_id=1))
        catalog.add_template(make_template("Theirs", connection_id=2))

        assert [t.name for t in catalog.list_visible_templates(1)] == ["Global", "Mine"]

    def test_second_default_in_scope_is_rejected(self):
        catalog = MemoryTemplateCatalog()
        catalog.add_template(make_template("First", connection_id=1, is_default=True))

        with pytest.raises(DuplicateDefaultTemplateError):
            catalog.add_template(make_template("Second", connection_id=1, is_default=True))

    def test_defaults_in_different_scopes_coexist(self):
        catalog = MemoryTemplateCatalog()
        catalog.add_template(make_template("Global", is_default=True))
        catalog.add_template(make_template("Tenant 1", connection_id=1, is_default=True))
        catalog.add_template(make_template("Tenant 2", connection_id=2, is_default=True))

        assert len(catalog.list_templates(is_default=True)) == 3

    def test_update_missing_template_raises(self):
        with pytest.raises(TemplateNotFoundError):
            MemoryTemplateCatalog().update_template(make_template("Ghost", id=77))

    def test_update_replaces_stored_template(self):
        catalog = MemoryTemplateCatalog()
        stored = catalog.add_template(make_template("Before"))
        catalog.update_template(stored.model_copy(update={"name": "After"}))
        assert catalog.get_template(stored.id).name == "After"


class TestMappings:
    def test_mapping_inherits_template_scope(self):
        catalog = MemoryTemplateCatalog()
        template = catalog.add_template(make_template("Tenant", connection_id=3))

        mapping = catalog.add_model_mapping(ModelMapping(device_model="MR32", template_id=template.id))

        assert mapping.scope == TemplateScope.tenant(3)
        assert catalog.get_model_mappings("MR32", 3) == [mapping]
        assert catalog.get_model_mappings("MR32", 4) == []

    def test_mappings_sorted_by_priority(self):
        catalog = MemoryTemplateCatalog()
        template = catalog.add_template(make_template("T"))
        catalog.add_type_mapping(TypeMapping(device_type="switch", template_id=template.id, priority=7))
        catalog.add_type_mapping(TypeMapping(device_type="switch", template_id=template.id, priority=2))

        assert [m.priority for m in catalog.get_type_mappings("switch", 1)] == [2, 7]

    def test_moving_template_moves_its_mappings(self):
        catalog = MemoryTemplateCatalog()
        template = catalog.add_template(make_template("Tenant", connection_id=3))
        catalog.add_model_mapping(ModelMapping(device_model="MR32", template_id=template.id))
        catalog.add_type_mapping(TypeMapping(device_type="accessPoint", template_id=template.id))

        catalog.update_template(template.model_copy(update={"scope": TemplateScope.tenant(4)}))

        assert catalog.get_model_mappings("MR32", 3) == []
        assert catalog.get_type_mappings("accessPoint", 3) == []
        assert [m.scope for m in catalog.get_model_mappings("MR32", 4)] == [TemplateScope.tenant(4)]
        assert [m.scope for m in catalog.get_type_mappings("accessPoint", 4)] == [TemplateScope.tenant(4)]

    def test_mapping_to_unknown_template_raises(self):
        with pytest.raises(TemplateNotFoundError):
            MemoryTemplateCatalog().add_model_mapping(ModelMapping(device_model="MR32", template_id=9))


class TestDeviceInventory:
    def test_get_is_scoped_by_connection(self):
        inventory = MemoryDeviceInventory()
        device = make_device(device_id=10, connection_id=1)
        inventory.put_device(device)

        assert inventory.get_device(10, 1) == device
        assert inventory.get_device(10, 2) is None


class TestMemoryCacheBackend:
    def test_returns_value_before_expiry(self):
        clock = FakeClock()
        cache = MemoryCacheBackend(clock=clock)
        cache.setex("k", 60, "v")
        clock.advance(59)
        assert cache.get("k") == "v"

    def test_expires_at_deadline(self):
        clock = FakeClock()
        cache = MemoryCacheBackend(clock=clock)
        cache.setex("k", 60, "v")
        clock.advance(60)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_delete_and_missing_key(self):
        cache = MemoryCacheBackend()
        cache.setex("k", 60, "v")
        cache.delete("k")
        cache.delete("never_existed")
        assert cache.get("k") is None

    def test_purge_expired(self):
        clock = FakeClock()
        cache = MemoryCacheBackend(clock=clock)
        cache.setex("short", 10, "a")
        cache.setex("long", 100, "b")
        clock.advance(50)

        assert cache.purge_expired() == 1
        assert cache.get("long") == "b"
