"""Request-scoped accessors for services wired in the app lifespan."""

from __future__ import annotations

from fastapi import Request

from qrstickers.core.protocols import IDeviceInventory
from qrstickers.matching.resolver import TemplateMatchingService
from qrstickers.services.template_service import TemplateService


def get_matching_service(request: Request) -> TemplateMatchingService:
    return request.app.state.matching_service


def get_template_service(request: Request) -> TemplateService:
    return request.app.state.template_service


def get_device_inventory(request: Request) -> IDeviceInventory:
    return request.app.state.device_inventory
