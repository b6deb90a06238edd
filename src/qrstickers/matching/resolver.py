"""TemplateMatchingService: picks the sticker template for a device.

Strategies run in a fixed order and the first hit wins:

1. exact model mapping           (model_match,    1.0)
2. derived device-type mapping   (type_match,     0.8)
3. connection product-type filter (type_match,    0.75)
4. connection default template   (user_default,   0.5)
5. system default template       (system_default, 0.3)
6. any template                  (fallback,       0.1)

Step 3 carries a lower confidence than step 2 yet only runs after it; the
order decides, the confidence is informational.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from qrstickers.core.exceptions import NoTemplatesAvailable
from qrstickers.core.protocols import ITemplateCatalog
from qrstickers.matching.alternates import find_alternate_templates
from qrstickers.matching.cache import MatchResultCache
from qrstickers.matching.classifier import classify_device_type
from qrstickers.models.device import Device
from qrstickers.models.mapping import ModelMapping, TypeMapping
from qrstickers.models.match import (
    FALLBACK_CONFIDENCE,
    MODEL_MATCH_CONFIDENCE,
    PRODUCT_TYPE_MATCH_CONFIDENCE,
    SYSTEM_DEFAULT_CONFIDENCE,
    TYPE_MATCH_CONFIDENCE,
    USER_DEFAULT_CONFIDENCE,
    MatchReason,
    MatchResult,
)
from qrstickers.models.template import StickerTemplate, TemplateScope

logger = logging.getLogger(__name__)


class TemplateMatchingService:
    """Matches devices to sticker templates with priority-based fallbacks.

    The cache is optional; without one every call runs the full cascade.
    """

    def __init__(self, catalog: ITemplateCatalog, cache: Optional[MatchResultCache] = None) -> None:
        self._catalog = catalog
        self._cache = cache

    def find_template_for_device(self, device: Device, connection_id: int) -> MatchResult:
        """Best template for ``device`` as seen by ``connection_id``, cached.

        Raises:
            NoTemplatesAvailable: the catalog holds no templates at all.
        """
        logger.info(
            "Matching template for device %s (model: %s)", device.name or device.id, device.model
        )
        if self._cache is None:
            return self.match(device, connection_id)
        return self._cache.get_or_resolve(device, connection_id, self.match)

    resolve = find_template_for_device

    def match(self, device: Device, connection_id: int) -> MatchResult:
        """Run the cascade without consulting the cache."""
        return (
            self._match_by_model(device, connection_id)
            or self._match_by_device_type(device, connection_id)
            or self._match_by_product_type(device, connection_id)
            or self._match_connection_default(connection_id)
            or self._match_system_default()
            or self._match_any(connection_id)
        )

    def get_alternate_templates(
        self, device: Device, connection_id: int, exclude_template_id: Optional[int] = None
    ) -> list[StickerTemplate]:
        return find_alternate_templates(self._catalog, device, connection_id, exclude_template_id)

    # ---- strategies ----

    def _match_by_model(self, device: Device, connection_id: int) -> Optional[MatchResult]:
        if not device.model:
            return None
        mappings = self._catalog.get_model_mappings(device.model, connection_id)
        template = self._first_mapped_template(mappings, connection_id)
        if template is None:
            return None
        logger.info("Found model match: %s", template.name)
        return MatchResult(
            template=template,
            match_reason=MatchReason.MODEL_MATCH,
            confidence=MODEL_MATCH_CONFIDENCE,
            matched_by=device.model,
        )

    def _match_by_device_type(self, device: Device, connection_id: int) -> Optional[MatchResult]:
        category = classify_device_type(device.model)
        mappings = self._catalog.get_type_mappings(category.value, connection_id)
        template = self._first_mapped_template(mappings, connection_id)
        if template is None:
            return None
        logger.info("Found type match: %s (type: %s)", template.name, category.value)
        return MatchResult(
            template=template,
            match_reason=MatchReason.TYPE_MATCH,
            confidence=TYPE_MATCH_CONFIDENCE,
            matched_by=category.value,
        )

    def _match_by_product_type(self, device: Device, connection_id: int) -> Optional[MatchResult]:
        product_type = (device.product_type or "").lower()
        if not product_type:
            return None
        candidates = [
            t for t in self._catalog.list_templates(TemplateScope.tenant(connection_id))
            if t.matches_product_type(product_type)
        ]
        if not candidates:
            return None
        template = min(candidates, key=lambda t: (not t.is_default, t.id))
        logger.info("Found product type filter match: %s (productType: %s)", template.name, product_type)
        return MatchResult(
            template=template,
            match_reason=MatchReason.TYPE_MATCH,
            confidence=PRODUCT_TYPE_MATCH_CONFIDENCE,
            matched_by=product_type,
        )

    def _match_connection_default(self, connection_id: int) -> Optional[MatchResult]:
        defaults = self._catalog.list_templates(TemplateScope.tenant(connection_id), is_default=True)
        if not defaults:
            return None
        template = defaults[0]
        logger.info("Using connection default template: %s", template.name)
        return MatchResult(
            template=template,
            match_reason=MatchReason.USER_DEFAULT,
            confidence=USER_DEFAULT_CONFIDENCE,
            matched_by=MatchReason.USER_DEFAULT.value,
        )

    def _match_system_default(self) -> Optional[MatchResult]:
        defaults = self._catalog.list_templates(TemplateScope.global_(), is_default=True)
        if not defaults:
            return None
        template = defaults[0]
        logger.info("Using system default template: %s", template.name)
        return MatchResult(
            template=template,
            match_reason=MatchReason.SYSTEM_DEFAULT,
            confidence=SYSTEM_DEFAULT_CONFIDENCE,
            matched_by=MatchReason.SYSTEM_DEFAULT.value,
        )

    def _match_any(self, connection_id: int) -> MatchResult:
        # Prefer a template the connection can see; only an otherwise empty
        # view falls through to the whole catalog.
        candidates = self._catalog.list_visible_templates(connection_id) or self._catalog.list_templates()
        if not candidates:
            logger.error("No templates available at all")
            raise NoTemplatesAvailable()
        template = candidates[0]
        logger.warning("No matching template found, using first available: %s", template.name)
        return MatchResult(
            template=template,
            match_reason=MatchReason.FALLBACK,
            confidence=FALLBACK_CONFIDENCE,
            matched_by=MatchReason.FALLBACK.value,
        )

    def _first_mapped_template(
        self, mappings: Sequence[ModelMapping | TypeMapping], connection_id: int
    ) -> Optional[StickerTemplate]:
        """Template of the best-priority row whose template exists and is visible.

        Visibility is checked against the template's current scope, not the
        scope copied onto the row, so a template moved to another connection
        stops matching for its previous owner.
        """
        for mapping in sorted(mappings, key=lambda m: m.sort_key):
            template = self._catalog.get_template(mapping.template_id)
            if template is None:
                logger.warning(
                    "Mapping %s points at missing template %s, skipping",
                    mapping.id, mapping.template_id,
                )
                continue
            if not template.scope.is_visible_to(connection_id):
                logger.warning(
                    "Mapping %s points at template %s owned by %s, skipping",
                    mapping.id, template.id, template.scope.label,
                )
                continue
            return template
        return None
