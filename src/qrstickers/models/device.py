"""Cached Meraki device record as supplied by the export pipeline."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Device(BaseModel):
    """Single inventory device. The matching core only reads it."""

    id: int
    connection_id: int
    serial: str = ""
    name: str = ""
    model: Optional[str] = None  # vendor model, e.g. "MR32"
    product_type: Optional[str] = None  # vendor product type, e.g. "wireless"
    network_id: Optional[str] = None
