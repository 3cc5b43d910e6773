from datetime import datetime
from typing import Optional

from pydantic import Field

from boomerang.schemas.common import CamelModel
from boomerang.services.scheduling import from_storage


class ContactOut(CamelModel):
    id: str
    user_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    relationship: Optional[str] = None
    notes: Optional[str] = None
    last_contact_at: Optional[datetime] = None

    @classmethod
    def from_contact(cls, contact) -> "ContactOut":
        return cls(
            id=contact.id,
            user_id=contact.user_id,
            name=contact.name,
            phone=contact.phone,
            email=contact.email,
            relationship=contact.relationship,
            notes=contact.notes,
            last_contact_at=from_storage(contact.last_contact_at),
        )


class ContactCreate(CamelModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    relationship: str = "client"
    notes: Optional[str] = None
