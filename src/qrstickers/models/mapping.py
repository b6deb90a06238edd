"""Model- and type-to-template mapping rows used by the matching cascade."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from qrstickers.models.template import TemplateScope


class _TemplateMappingRow(BaseModel):
    id: Optional[int] = None
    template_id: int
    priority: int = Field(default=0, ge=0)  # lower value wins
    scope: TemplateScope = Field(default_factory=TemplateScope.global_)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority, self.id if self.id is not None else 0)


class ModelMapping(_TemplateMappingRow):
    """Exact device model (e.g. "MS225-48FP") to template."""

    device_model: str


class TypeMapping(_TemplateMappingRow):
    """Heuristic device category (e.g. "switch") to template."""

    device_type: str
