from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime

from boomerang.models.base import Base


class OwnerProfile(Base):
    """Business details the assistant writes on behalf of. One row per owner."""
    __tablename__ = "owner_profiles"

    user_id = Column(String, primary_key=True)
    business_name = Column(String, nullable=True)
    business_type = Column(String, nullable=True)
    business_description = Column(Text, nullable=True)
    phone_number = Column(String, nullable=True)
    timezone = Column(String, nullable=True)  # IANA name, e.g. America/New_York
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
