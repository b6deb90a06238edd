"""Heuristic device category from a Meraki model string.

Examples: MS225-48FP -> switch, MR32 -> accessPoint, MX64W -> gateway.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class DeviceCategory(str, Enum):
    SWITCH = "switch"
    ACCESS_POINT = "accessPoint"
    GATEWAY = "gateway"
    APPLIANCE = "appliance"
    CAMERA = "camera"
    SENSOR = "sensor"
    CELLULAR = "cellular"
    UNKNOWN = "unknown"


# Ordered; first matching prefix wins.
PREFIX_RULES: tuple[tuple[str, DeviceCategory], ...] = (
    ("MS", DeviceCategory.SWITCH),
    ("C9", DeviceCategory.SWITCH),  # Catalyst switches managed by Meraki
    ("MR", DeviceCategory.ACCESS_POINT),
    ("MX", DeviceCategory.GATEWAY),
    ("Z", DeviceCategory.APPLIANCE),  # Z-series teleworker gateways
    ("MV", DeviceCategory.CAMERA),
    ("MT", DeviceCategory.SENSOR),
    ("MC", DeviceCategory.CELLULAR),
)

CAPTIVE_MARKER = "CAPTIVE"


def classify_device_type(model: Optional[str]) -> DeviceCategory:
    if not model:
        return DeviceCategory.UNKNOWN

    model = model.upper()
    for prefix, category in PREFIX_RULES:
        if model.startswith(prefix):
            return category
        # Captive-portal appliances sit at the same precedence as Z-series.
        if category is DeviceCategory.APPLIANCE and CAPTIVE_MARKER in model:
            return category

    return DeviceCategory.UNKNOWN
