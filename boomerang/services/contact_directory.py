"""Contact Directory boundary: owner-scoped lookup and creation of contacts."""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from boomerang.models.contact import Contact
from boomerang.services.errors import PersistenceError

logger = logging.getLogger(__name__)


class ContactDirectory:
    def __init__(self, db: Session):
        self.db = db

    def list_contacts(self, owner_id: str) -> list[Contact]:
        try:
            return (
                self.db.query(Contact)
                .filter(Contact.user_id == owner_id)
                .order_by(Contact.name)
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list contacts", owner_id=owner_id) from e

    def create_contact(
        self,
        owner_id: str,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        relationship: str = "client",
        notes: Optional[str] = None,
    ) -> Contact:
        contact = Contact(
            user_id=owner_id,
            name=name,
            phone=phone,
            email=email,
            relationship=relationship,
            notes=notes,
        )
        self.db.add(contact)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create contact for owner {owner_id}: {e}")
            raise PersistenceError("Failed to create contact", owner_id=owner_id) from e
        self.db.refresh(contact)
        return contact
