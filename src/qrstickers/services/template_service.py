"""Template management operations used by the template pages and API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from qrstickers.core.exceptions import (
    QRStickersError,
    SystemTemplateImmutableError,
    TemplateNotFoundError,
)
from qrstickers.core.protocols import ITemplateCatalog
from qrstickers.models.template import StickerTemplate, TemplateScope

logger = logging.getLogger(__name__)


class TemplateService:

    def __init__(self, catalog: ITemplateCatalog) -> None:
        self._catalog = catalog

    def list_templates_for_connection(self, connection_id: int) -> list[StickerTemplate]:
        """Connection-owned and system templates, ordered by name."""
        return sorted(
            self._catalog.list_visible_templates(connection_id),
            key=lambda t: (t.name.lower(), t.id),
        )

    def get_template(self, template_id: int) -> StickerTemplate:
        template = self._catalog.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def clone_template(
        self, template_id: int, target_connection_id: int, new_name: Optional[str] = None
    ) -> StickerTemplate:
        """Copy a template into a connection as an editable, non-default template."""
        source = self.get_template(template_id)
        now = datetime.now(timezone.utc)
        clone = StickerTemplate(
            scope=TemplateScope.tenant(target_connection_id),
            name=new_name or f"{source.name} (Copy)",
            description=source.description,
            product_type_filter=source.product_type_filter,
            is_default=False,
            is_rack_mount=source.is_rack_mount,
            page_width=source.page_width,
            page_height=source.page_height,
            template_json=source.template_json,
            created_at=now,
            updated_at=now,
        )
        stored = self._catalog.add_template(clone)
        logger.info(
            "Cloned template %s into connection %s as %s", template_id, target_connection_id, stored.id
        )
        return stored

    def set_default_template(self, template_id: int) -> StickerTemplate:
        """Make ``template_id`` the only default within its scope."""
        template = self.get_template(template_id)
        if template.is_system_template:
            raise SystemTemplateImmutableError(
                f"System template {template_id} cannot be changed; clone it first"
            )

        now = datetime.now(timezone.utc)
        cleared: list[StickerTemplate] = []
        try:
            for other in self._catalog.list_templates(template.scope, is_default=True):
                if other.id != template.id:
                    self._catalog.update_template(
                        other.model_copy(update={"is_default": False, "updated_at": now})
                    )
                    cleared.append(other)
            updated = self._catalog.update_template(
                template.model_copy(update={"is_default": True, "updated_at": now})
            )
        except QRStickersError:
            # Put the previous default back so the scope is never left without one.
            for previous in cleared:
                self._catalog.update_template(previous)
            raise
        logger.info("Template %s is now the default for %s", template_id, template.scope.label)
        return updated
