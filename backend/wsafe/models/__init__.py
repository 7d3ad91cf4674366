"""SQLAlchemy models."""

from __future__ import annotations

from wsafe.models.app_preferences import AppPreferences
from wsafe.models.contact import Contact

__all__ = [
    "AppPreferences",
    "Contact",
]
