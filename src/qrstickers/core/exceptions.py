"""QRStickers exception hierarchy."""

from __future__ import annotations


class QRStickersError(Exception):
    """Base exception for all QRStickers errors."""


class NoTemplatesAvailable(QRStickersError):
    """The template catalog is empty; no label can be produced.

    This is an operator-facing configuration error (system templates were
    never seeded), not a per-user mistake.
    """

    def __init__(self, message: str = "No templates configured") -> None:
        super().__init__(message)


class TemplateNotFoundError(QRStickersError):
    """No template with the requested id."""

    def __init__(self, template_id: int) -> None:
        self.template_id = template_id
        super().__init__(f"Template {template_id} not found")


class DeviceNotFoundError(QRStickersError):
    """Device is not in the inventory of the given connection."""

    def __init__(self, device_id: int, connection_id: int) -> None:
        self.device_id = device_id
        self.connection_id = connection_id
        super().__init__(f"Device {device_id} not found for connection {connection_id}")


class DuplicateDefaultTemplateError(QRStickersError):
    """A second template was flagged as default within one scope."""

    def __init__(self, scope_label: str, existing_id: int) -> None:
        self.scope_label = scope_label
        self.existing_id = existing_id
        super().__init__(
            f"Scope {scope_label} already has default template {existing_id}"
        )


class SystemTemplateImmutableError(QRStickersError):
    """System templates cannot be modified by tenant actions."""


class CatalogError(QRStickersError):
    """Template catalog query failed."""


class CacheError(QRStickersError):
    """Redis cache operation failed."""
