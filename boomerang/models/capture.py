from sqlalchemy import Column, String, DateTime, JSON, Text, Float
from sqlalchemy.orm import relationship
from datetime import datetime

from boomerang.models.base import Base, new_id
from boomerang.models.enums import ProcessingStatus


class Capture(Base):
    __tablename__ = "captures"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String, index=True, nullable=False)
    transcription = Column(Text, nullable=False)
    duration_seconds = Column(Float, nullable=True)
    intent_data = Column(JSON, nullable=True)  # Raw function calls returned by the model
    captured_at = Column(DateTime, default=datetime.utcnow)
    processed_at = Column(DateTime, nullable=True)
    processing_status = Column(String, default=ProcessingStatus.PROCESSING.value)
    error_kind = Column(String, nullable=True)

    tasks = relationship("Task", back_populates="capture")
