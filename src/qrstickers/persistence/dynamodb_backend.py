"""DynamoDB backends implementing ITemplateCatalog and IDeviceInventory."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from qrstickers.core.exceptions import CatalogError, TemplateNotFoundError
from qrstickers.models.device import Device
from qrstickers.models.mapping import ModelMapping, TypeMapping
from qrstickers.models.template import StickerTemplate, TemplateScope, ensure_single_default

logger = logging.getLogger(__name__)

TEMPLATES_TABLE = "qrstickers-sticker-templates"
MODEL_MAPPINGS_TABLE = "qrstickers-template-device-models"
TYPE_MAPPINGS_TABLE = "qrstickers-template-device-types"
DEVICES_TABLE = "qrstickers-cached-devices"

SEQUENCE_PK = "SEQUENCE"


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, Decimal):
            out[k] = int(v) if v == int(v) else float(v)
        elif isinstance(v, dict):
            out[k] = _decode_decimals(v)
        else:
            out[k] = v
    return out


def _encode_floats(item: dict[str, Any]) -> dict[str, Any]:
    """Convert floats to Decimal; boto3 rejects float attributes."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, float):
            out[k] = Decimal(str(v))
        elif isinstance(v, dict):
            out[k] = _encode_floats(v)
        else:
            out[k] = v
    return out


def _scope_pk(scope: TemplateScope) -> str:
    return f"SCOPE#{scope.label}"


def _template_sk(template_id: int) -> str:
    return f"TEMPLATE#{template_id:010d}"


def _pointer_pk(template_id: int) -> str:
    return f"ID#{template_id:010d}"


def _mapping_sk(priority: int, mapping_id: int) -> str:
    return f"PRIORITY#{priority:06d}#MAPPING#{mapping_id:010d}"


class _DynamoDBBase:
    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    def _query_pk(self, table_base: str, pk: str) -> list[dict[str, Any]]:
        """Query all items with a given partition key, following pagination."""
        tbl = self._table(table_base)
        kwargs: dict[str, Any] = {"KeyConditionExpression": Key("PK").eq(pk)}
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = tbl.query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise CatalogError(f"DynamoDB query failed on {table_base} pk={pk!r}: {exc}") from exc
        return [_decode_decimals(item) for item in items]

    def _scan(self, table_base: str, filter_expression: Any) -> list[dict[str, Any]]:
        tbl = self._table(table_base)
        kwargs: dict[str, Any] = {"FilterExpression": filter_expression}
        items: list[dict[str, Any]] = []
        try:
            while True:
                resp = tbl.scan(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise CatalogError(f"DynamoDB scan failed on {table_base}: {exc}") from exc
        return [_decode_decimals(item) for item in items]

    def _get_item(self, table_base: str, pk: str, sk: str) -> dict[str, Any] | None:
        """Get a single item by PK + SK. Returns None if not found."""
        try:
            resp = self._table(table_base).get_item(Key={"PK": pk, "SK": sk})
        except ClientError as exc:
            raise CatalogError(f"DynamoDB get failed on {table_base} pk={pk!r}: {exc}") from exc
        item = resp.get("Item")
        return _decode_decimals(item) if item else None

    def _put(self, table_base: str, item: dict[str, Any]) -> None:
        try:
            self._table(table_base).put_item(Item=_encode_floats(item))
        except ClientError as exc:
            raise CatalogError(f"DynamoDB put failed on {table_base}: {exc}") from exc

    def _next_id(self, table_base: str, sequence: str) -> int:
        """Atomically increment a per-table counter item."""
        try:
            resp = self._table(table_base).update_item(
                Key={"PK": SEQUENCE_PK, "SK": sequence},
                UpdateExpression="ADD seq :one",
                ExpressionAttributeValues={":one": 1},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as exc:
            raise CatalogError(f"DynamoDB sequence update failed on {table_base}: {exc}") from exc
        return int(resp["Attributes"]["seq"])


class DynamoDBTemplateCatalog(_DynamoDBBase):
    """Production ITemplateCatalog backed by DynamoDB.

    Templates are partitioned by scope (``SCOPE#GLOBAL`` or
    ``SCOPE#CONNECTION#<id>``); mapping rows are partitioned by model or
    type, sorted by zero-padded priority. Each template also has an
    ``ID#<id>`` / ``POINTER`` item naming its current scope partition, so a
    lookup by id is two keyed reads.
    """

    @staticmethod
    def _to_template(item: dict[str, Any]) -> StickerTemplate:
        return StickerTemplate.model_validate(item)

    def get_template(self, template_id: int) -> Optional[StickerTemplate]:
        pointer = self._get_item(TEMPLATES_TABLE, _pointer_pk(template_id), "POINTER")
        if pointer is None:
            return None
        item = self._get_item(TEMPLATES_TABLE, pointer["scope_pk"], _template_sk(template_id))
        return self._to_template(item) if item else None

    def list_templates(
        self, scope: Optional[TemplateScope] = None, *, is_default: Optional[bool] = None
    ) -> list[StickerTemplate]:
        if scope is not None:
            items = self._query_pk(TEMPLATES_TABLE, _scope_pk(scope))
        else:
            items = self._scan(TEMPLATES_TABLE, Attr("SK").begins_with("TEMPLATE#"))
        templates = sorted((self._to_template(i) for i in items), key=lambda t: t.id)
        if is_default is not None:
            templates = [t for t in templates if t.is_default == is_default]
        return templates

    def list_visible_templates(self, connection_id: int) -> list[StickerTemplate]:
        visible = {
            t.id: t
            for scope in (TemplateScope.global_(), TemplateScope.tenant(connection_id))
            for t in self.list_templates(scope)
        }
        return [visible[k] for k in sorted(visible)]

    def get_model_mappings(self, device_model: str, connection_id: int) -> list[ModelMapping]:
        items = self._query_pk(MODEL_MAPPINGS_TABLE, f"MODEL#{device_model}")
        rows = [ModelMapping.model_validate(i) for i in items]
        return sorted(
            (m for m in rows if m.scope.is_visible_to(connection_id)),
            key=lambda m: m.sort_key,
        )

    def get_type_mappings(self, device_type: str, connection_id: int) -> list[TypeMapping]:
        items = self._query_pk(TYPE_MAPPINGS_TABLE, f"TYPE#{device_type}")
        rows = [TypeMapping.model_validate(i) for i in items]
        return sorted(
            (m for m in rows if m.scope.is_visible_to(connection_id)),
            key=lambda m: m.sort_key,
        )

    def add_template(self, template: StickerTemplate) -> StickerTemplate:
        ensure_single_default(self.list_templates(template.scope), template)
        new_id = template.id if template.id is not None else self._next_id(TEMPLATES_TABLE, "TEMPLATE")
        stored = template.model_copy(update={"id": new_id})
        self._put_template(stored)
        logger.info("Added template %s (%s) to %s", new_id, stored.name, stored.scope.label)
        return stored

    def update_template(self, template: StickerTemplate) -> StickerTemplate:
        existing = self.get_template(template.id) if template.id is not None else None
        if existing is None:
            raise TemplateNotFoundError(template.id if template.id is not None else -1)
        ensure_single_default(self.list_templates(template.scope), template)
        if existing.scope != template.scope:
            try:
                self._table(TEMPLATES_TABLE).delete_item(
                    Key={"PK": _scope_pk(existing.scope), "SK": _template_sk(existing.id)}
                )
            except ClientError as exc:
                raise CatalogError(f"DynamoDB delete failed for template {existing.id}: {exc}") from exc
        self._put_template(template)
        if existing.scope != template.scope:
            self._restamp_mappings(template)
        return template

    def _put_template(self, template: StickerTemplate) -> None:
        item = template.model_dump(mode="json")
        item.update({"PK": _scope_pk(template.scope), "SK": _template_sk(template.id)})
        self._put(TEMPLATES_TABLE, item)
        self._put(
            TEMPLATES_TABLE,
            {"PK": _pointer_pk(template.id), "SK": "POINTER", "scope_pk": _scope_pk(template.scope)},
        )

    def _restamp_mappings(self, template: StickerTemplate) -> None:
        """Copy a template's new scope onto every mapping row that references it."""
        scope = template.scope.model_dump(mode="json")
        for table_base in (MODEL_MAPPINGS_TABLE, TYPE_MAPPINGS_TABLE):
            for item in self._scan(table_base, Attr("template_id").eq(template.id)):
                item["scope"] = scope
                self._put(table_base, item)
        logger.info("Moved mappings of template %s to %s", template.id, template.scope.label)

    def add_model_mapping(self, mapping: ModelMapping) -> ModelMapping:
        stored = self._stamp(mapping, MODEL_MAPPINGS_TABLE)
        item = stored.model_dump(mode="json")
        item.update({"PK": f"MODEL#{stored.device_model}", "SK": _mapping_sk(stored.priority, stored.id)})
        self._put(MODEL_MAPPINGS_TABLE, item)
        return stored

    def add_type_mapping(self, mapping: TypeMapping) -> TypeMapping:
        stored = self._stamp(mapping, TYPE_MAPPINGS_TABLE)
        item = stored.model_dump(mode="json")
        item.update({"PK": f"TYPE#{stored.device_type}", "SK": _mapping_sk(stored.priority, stored.id)})
        self._put(TYPE_MAPPINGS_TABLE, item)
        return stored

    def _stamp(self, mapping, table_base: str):
        """Assign an id and copy the scope of the referenced template."""
        template = self.get_template(mapping.template_id)
        if template is None:
            raise TemplateNotFoundError(mapping.template_id)
        new_id = mapping.id if mapping.id is not None else self._next_id(table_base, "MAPPING")
        return mapping.model_copy(update={"id": new_id, "scope": template.scope})


class DynamoDBDeviceInventory(_DynamoDBBase):
    """Production IDeviceInventory over the cached-devices table."""

    def get_device(self, device_id: int, connection_id: int) -> Optional[Device]:
        try:
            resp = self._table(DEVICES_TABLE).get_item(
                Key={"PK": f"CONNECTION#{connection_id}", "SK": f"DEVICE#{device_id}"}
            )
        except ClientError as exc:
            raise CatalogError(f"DynamoDB get failed for device {device_id}: {exc}") from exc
        item = resp.get("Item")
        return Device.model_validate(_decode_decimals(item)) if item else None

    def put_device(self, device: Device) -> None:
        item = device.model_dump(mode="json")
        item.update({"PK": f"CONNECTION#{device.connection_id}", "SK": f"DEVICE#{device.id}"})
        self._put(DEVICES_TABLE, item)
