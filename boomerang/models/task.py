from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from boomerang.models.base import Base, new_id
from boomerang.models.enums import TaskStatus


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String, index=True, nullable=False)
    capture_id = Column(String(36), ForeignKey("captures.id"), nullable=False, index=True)
    task_type = Column(String, nullable=False)
    status = Column(String, default=TaskStatus.PENDING.value, index=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    contact_name = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    delivery_method = Column(String, nullable=False)
    timing = Column(String, nullable=True)
    scheduled_for = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    approved_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    archived_at = Column(DateTime, nullable=True)
    dismissed_at = Column(DateTime, nullable=True)

    capture = relationship("Capture", back_populates="tasks")

    @property
    def original_transcription(self) -> str:
        return self.capture.transcription if self.capture else ""
