"""Episode error taxonomy."""

from __future__ import annotations


class WSafeError(Exception):
    """Base class for episode errors."""


class LocationUnavailable(WSafeError):
    """No fix could be obtained within the bounded wait."""


class NotificationDeliveryFailed(WSafeError):
    """A message could not be delivered to a contact."""

    def __init__(self, phone: str, reason: str = "") -> None:
        self.phone = phone
        self.reason = reason
        super().__init__(f"Delivery to {phone} failed" + (f": {reason}" if reason else ""))


class AuxiliaryControlFailed(WSafeError):
    """Recording, illumination or vibration could not be switched."""


class NoContactsConfigured(WSafeError):
    """An episode cannot start without at least one emergency contact."""

    def __init__(self) -> None:
        super().__init__("Please add emergency contacts first!")
