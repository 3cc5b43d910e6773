"""
Contact Directory endpoints used by the review client.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from boomerang.db.session import get_db
from boomerang.schemas.contact import ContactCreate, ContactOut
from boomerang.services.auth_service import require_owner
from boomerang.services.contact_directory import ContactDirectory
from boomerang.services.errors import PersistenceError

router = APIRouter()


@router.get("", response_model=list[ContactOut])
async def list_contacts(owner_id: str = Depends(require_owner), db: Session = Depends(get_db)):
    try:
        contacts = ContactDirectory(db).list_contacts(owner_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    return [ContactOut.from_contact(c) for c in contacts]


@router.post("", response_model=ContactOut, status_code=201)
async def create_contact(
    body: ContactCreate,
    owner_id: str = Depends(require_owner),
    db: Session = Depends(get_db),
):
    try:
        contact = ContactDirectory(db).create_contact(
            owner_id,
            name=body.name.strip(),
            phone=body.phone,
            email=body.email,
            relationship=body.relationship,
            notes=body.notes,
        )
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    return ContactOut.from_contact(contact)
