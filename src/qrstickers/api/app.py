"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from qrstickers.api.routes import health, templates
from qrstickers.core.config import AppSettings
from qrstickers.core.exceptions import (
    DeviceNotFoundError,
    NoTemplatesAvailable,
    SystemTemplateImmutableError,
    TemplateNotFoundError,
)
from qrstickers.core.logging import configure_logging
from qrstickers.matching.cache import MatchResultCache
from qrstickers.matching.resolver import TemplateMatchingService
from qrstickers.persistence import create_persistence
from qrstickers.services.template_service import TemplateService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings = AppSettings()
    configure_logging(settings)
    catalog, devices, cache_backend = create_persistence(settings)

    app.state.settings = settings
    app.state.device_inventory = devices
    app.state.template_service = TemplateService(catalog)
    # One cache per process, shared by every request.
    app.state.matching_service = TemplateMatchingService(
        catalog, MatchResultCache(cache_backend, ttl_seconds=settings.matching.cache_ttl_seconds)
    )
    yield


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _no_templates(request: Request, exc: Exception) -> JSONResponse:
    # Operator-facing: system templates were never seeded.
    return JSONResponse(status_code=503, content={"error": "No templates configured"})


async def _forbidden(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=403, content={"error": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="QRStickers Template Matching",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(templates.router, prefix="/api/templates")
    app.add_exception_handler(DeviceNotFoundError, _not_found)
    app.add_exception_handler(TemplateNotFoundError, _not_found)
    app.add_exception_handler(NoTemplatesAvailable, _no_templates)
    app.add_exception_handler(SystemTemplateImmutableError, _forbidden)
    return app
