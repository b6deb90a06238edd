"""Template match result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from qrstickers.models.template import StickerTemplate


class MatchReason(str, Enum):
    MODEL_MATCH = "model_match"
    TYPE_MATCH = "type_match"
    USER_DEFAULT = "user_default"
    SYSTEM_DEFAULT = "system_default"
    FALLBACK = "fallback"


# Display-only annotations; cascade order decides precedence, not these numbers.
MODEL_MATCH_CONFIDENCE = 1.0
TYPE_MATCH_CONFIDENCE = 0.8
PRODUCT_TYPE_MATCH_CONFIDENCE = 0.75
USER_DEFAULT_CONFIDENCE = 0.5
SYSTEM_DEFAULT_CONFIDENCE = 0.3
FALLBACK_CONFIDENCE = 0.1


class MatchResult(BaseModel):
    """Outcome of one template resolution. Ephemeral; cached but never persisted."""

    model_config = ConfigDict(frozen=True)

    template: StickerTemplate
    match_reason: MatchReason
    confidence: float
    matched_by: str
