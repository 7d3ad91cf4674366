"""Emergency contact store and persisted preferences."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from wsafe.models.app_preferences import AppPreferences
from wsafe.models.contact import Contact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactEntry:
    """Read-only contact snapshot handed to the episode engine."""

    id: int
    name: str
    phone: str


def _entry(contact: Contact) -> ContactEntry:
    return ContactEntry(id=contact.id, name=contact.name, phone=contact.phone)


def _get_or_create_preferences(db: Session) -> AppPreferences:
    prefs = db.execute(select(AppPreferences).order_by(AppPreferences.id).limit(1)).scalar_one_or_none()
    if not prefs:
        prefs = AppPreferences(auto_call_enabled=True, primary_contact_id=None)
        db.add(prefs)
        db.flush()
    return prefs


def list_contacts(db: Session) -> list[ContactEntry]:
    """All contacts in store order."""
    result = db.execute(select(Contact).order_by(Contact.position, Contact.id))
    return [_entry(c) for c in result.scalars().all()]


def add_contact(db: Session, name: str, phone: str) -> ContactEntry:
    """Append a contact to the end of the store."""
    name = name.strip()
    phone = phone.strip()
    if not name or not phone:
        raise ValueError("Contact needs both a name and a phone number")

    last = db.execute(select(func.max(Contact.position))).scalar()
    contact = Contact(name=name, phone=phone, position=(last or 0) + 1)
    db.add(contact)
    db.commit()
    db.refresh(contact)
    logger.info("Contact added: id=%s", contact.id)
    return _entry(contact)


def remove_contact(db: Session, contact_id: int) -> None:
    """Remove a contact. A removed primary falls back to the first remaining contact."""
    contact = db.get(Contact, contact_id)
    if not contact:
        raise ValueError("Contact not found")

    prefs = _get_or_create_preferences(db)
    was_primary = prefs.primary_contact_id == contact_id
    db.delete(contact)
    db.flush()

    if was_primary:
        first = db.execute(select(Contact).order_by(Contact.position, Contact.id).limit(1)).scalar_one_or_none()
        prefs.primary_contact_id = first.id if first else None
        logger.info("Primary contact reassigned to %s", prefs.primary_contact_id)

    db.commit()


def set_primary(db: Session, contact_id: int) -> ContactEntry:
    """Designate the contact called first when an episode starts."""
    contact = db.get(Contact, contact_id)
    if not contact:
        raise ValueError("Contact not found")
    prefs = _get_or_create_preferences(db)
    prefs.primary_contact_id = contact.id
    db.commit()
    return _entry(contact)


def get_primary(db: Session) -> ContactEntry | None:
    """Primary contact, or None when unset or dangling."""
    prefs = _get_or_create_preferences(db)
    if prefs.primary_contact_id is None:
        return None
    contact = db.get(Contact, prefs.primary_contact_id)
    return _entry(contact) if contact else None


def get_auto_call_enabled(db: Session) -> bool:
    return _get_or_create_preferences(db).auto_call_enabled


def set_auto_call_enabled(db: Session, enabled: bool) -> bool:
    prefs = _get_or_create_preferences(db)
    prefs.auto_call_enabled = enabled
    db.commit()
    return prefs.auto_call_enabled


@dataclass
class Preferences:
    """Process-wide preferences: loaded at startup, saved on change."""

    auto_call_enabled: bool = True

    @classmethod
    def load(cls, session_factory: sessionmaker) -> Preferences:
        with session_factory() as db:
            enabled = get_auto_call_enabled(db)
            db.commit()
        return cls(auto_call_enabled=enabled)

    def save(self, session_factory: sessionmaker) -> None:
        with session_factory() as db:
            set_auto_call_enabled(db, self.auto_call_enabled)


class ContactStore:
    """Session-per-call view of the contact tables used by the episode engine.

    Every read opens a fresh session, so changes made through the API are
    visible on the engine's next fan-out.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def list(self) -> list[ContactEntry]:
        with self._session_factory() as db:
            return list_contacts(db)

    def primary(self) -> ContactEntry | None:
        with self._session_factory() as db:
            entry = get_primary(db)
            db.commit()
            return entry

    def add(self, name: str, phone: str) -> ContactEntry:
        with self._session_factory() as db:
            return add_contact(db, name, phone)

    def remove(self, contact_id: int) -> None:
        with self._session_factory() as db:
            remove_contact(db, contact_id)

    def set_primary(self, contact_id: int) -> ContactEntry:
        with self._session_factory() as db:
            return set_primary(db, contact_id)
