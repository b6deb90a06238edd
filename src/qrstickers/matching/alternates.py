"""Candidate templates a user may pick instead of the automatic match."""

from __future__ import annotations

from typing import Optional

from qrstickers.core.protocols import ITemplateCatalog
from qrstickers.models.device import Device
from qrstickers.models.template import StickerTemplate


def find_alternate_templates(
    catalog: ITemplateCatalog,
    device: Device,
    connection_id: int,
    exclude_template_id: Optional[int] = None,
) -> list[StickerTemplate]:
    """Every template visible to the connection, minus ``exclude_template_id``.

    Unranked and unpaged: connections keep few templates. Each id appears
    once even if the catalog returns it twice.
    """
    seen: set[int] = set()
    alternates: list[StickerTemplate] = []
    for template in catalog.list_visible_templates(connection_id):
        if template.id == exclude_template_id or template.id in seen:
            continue
        seen.add(template.id)
        alternates.append(template)
    return alternates
