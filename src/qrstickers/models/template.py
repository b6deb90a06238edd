"""Sticker template models and the global/tenant scope tag."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from qrstickers.core.exceptions import DuplicateDefaultTemplateError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TemplateScope(BaseModel):
    """Who owns a template or mapping row: everyone (global) or one connection."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["global", "tenant"] = "global"
    connection_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_owner(self) -> "TemplateScope":
        if self.kind == "tenant" and self.connection_id is None:
            raise ValueError("tenant scope requires a connection_id")
        if self.kind == "global" and self.connection_id is not None:
            raise ValueError("global scope cannot carry a connection_id")
        return self

    @classmethod
    def global_(cls) -> "TemplateScope":
        return cls(kind="global")

    @classmethod
    def tenant(cls, connection_id: int) -> "TemplateScope":
        return cls(kind="tenant", connection_id=connection_id)

    @property
    def is_global(self) -> bool:
        return self.kind == "global"

    def is_visible_to(self, connection_id: int) -> bool:
        return self.is_global or self.connection_id == connection_id

    @property
    def label(self) -> str:
        return "GLOBAL" if self.is_global else f"CONNECTION#{self.connection_id}"


class StickerTemplate(BaseModel):
    """A sized label design, owned by one connection or shared system-wide.

    The design document (``template_json``) is opaque here: matching only
    reads identity, scope, ``is_default`` and ``product_type_filter``.
    """

    id: Optional[int] = None  # assigned by the catalog on insert
    scope: TemplateScope = Field(default_factory=TemplateScope.global_)
    name: str
    description: Optional[str] = None
    product_type_filter: Optional[str] = None  # e.g. "switch", "wireless"
    is_default: bool = False
    is_rack_mount: bool = False
    page_width: float = 100.0  # mm
    page_height: float = 50.0  # mm
    template_json: str = "{}"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_system_template(self) -> bool:
        return self.scope.is_global

    def matches_product_type(self, product_type: str) -> bool:
        """Case-insensitive comparison against ``product_type_filter``."""
        if not self.product_type_filter or not product_type:
            return False
        return self.product_type_filter.lower() == product_type.lower()


def ensure_single_default(
    scope_templates: list[StickerTemplate], candidate: StickerTemplate
) -> None:
    """Raise if ``candidate`` would become a second default in its scope.

    ``scope_templates`` are the templates already stored under the
    candidate's scope; a stored copy of the candidate itself is ignored.
    """
    if not candidate.is_default:
        return
    for existing in scope_templates:
        if existing.is_default and existing.id != candidate.id:
            raise DuplicateDefaultTemplateError(candidate.scope.label, existing.id)
