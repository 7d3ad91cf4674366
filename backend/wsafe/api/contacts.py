"""Emergency contacts API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from wsafe.db.session import get_db
from wsafe.schemas.contact import ContactCreate, ContactResponse
from wsafe.services.contact_service import (
    ContactEntry,
    add_contact,
    get_primary,
    list_contacts,
    remove_contact,
    set_primary,
)

router = APIRouter(prefix="/contacts", tags=["contacts"])


def _response(entry: ContactEntry, primary_id: int | None) -> ContactResponse:
    return ContactResponse(id=entry.id, name=entry.name, phone=entry.phone, is_primary=entry.id == primary_id)


def _primary_id(db: Session) -> int | None:
    primary = get_primary(db)
    db.commit()
    return primary.id if primary else None


@router.get("", response_model=list[ContactResponse])
def list_my_contacts(db: Session = Depends(get_db)):
    """Contacts in store order; this is also the call escalation order."""
    primary_id = _primary_id(db)
    return [_response(c, primary_id) for c in list_contacts(db)]


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def create_contact(data: ContactCreate, db: Session = Depends(get_db)):
    """Append an emergency contact."""
    try:
        entry = add_contact(db, data.name, data.phone)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _response(entry, _primary_id(db))


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(contact_id: int, db: Session = Depends(get_db)):
    """Remove a contact. Removing the primary promotes the first remaining contact."""
    try:
        remove_contact(db, contact_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{contact_id}/primary", response_model=ContactResponse)
def make_primary(contact_id: int, db: Session = Depends(get_db)):
    """Designate the contact called first when an SOS starts."""
    try:
        entry = set_primary(db, contact_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _response(entry, entry.id)
