from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime

from boomerang.models.base import Base, new_id


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    relationship = Column(String, default="client")  # client, prospect, vendor, employee
    notes = Column(Text, nullable=True)
    last_contact_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
