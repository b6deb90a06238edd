"""Template matching and template management endpoints."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from qrstickers.api.dependencies import (
    get_device_inventory,
    get_matching_service,
    get_template_service,
)
from qrstickers.core.exceptions import DeviceNotFoundError
from qrstickers.core.protocols import IDeviceInventory
from qrstickers.matching.resolver import TemplateMatchingService
from qrstickers.models.template import StickerTemplate
from qrstickers.services.template_service import TemplateService

router = APIRouter(tags=["templates"])


class CloneTemplateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    connection_id: int = Field(alias="connectionId")
    name: Optional[str] = None


def _summary(template: StickerTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "pageWidth": template.page_width,
        "pageHeight": template.page_height,
        "isSystemTemplate": template.is_system_template,
        "isDefault": template.is_default,
    }


@router.get("/match")
def match_template(
    device_id: int = Query(alias="deviceId"),
    connection_id: int = Query(alias="connectionId"),
    devices: IDeviceInventory = Depends(get_device_inventory),
    matcher: TemplateMatchingService = Depends(get_matching_service),
) -> dict[str, Any]:
    """Auto-matched template for a device plus the alternates a user may pick."""
    device = devices.get_device(device_id, connection_id)
    if device is None:
        raise DeviceNotFoundError(device_id, connection_id)

    result = matcher.find_template_for_device(device, connection_id)
    alternates = matcher.get_alternate_templates(device, connection_id, result.template.id)
    return {
        "success": True,
        "data": {
            "matchedTemplate": {
                "id": result.template.id,
                "name": result.template.name,
                "matchReason": result.match_reason.value,
                "confidence": result.confidence,
                "matchedBy": result.matched_by,
            },
            "alternateTemplates": [{"id": t.id, "name": t.name} for t in alternates],
        },
    }


@router.get("")
def list_templates(
    connection_id: int = Query(alias="connectionId"),
    service: TemplateService = Depends(get_template_service),
) -> dict[str, Any]:
    templates = service.list_templates_for_connection(connection_id)
    return {"success": True, "data": [_summary(t) for t in templates]}


@router.post("/{template_id}/clone", status_code=201)
def clone_template(
    template_id: int,
    body: CloneTemplateRequest,
    service: TemplateService = Depends(get_template_service),
) -> dict[str, Any]:
    clone = service.clone_template(template_id, body.connection_id, body.name)
    return {"success": True, "data": _summary(clone)}
